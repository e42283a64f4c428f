import json
import logging

from translance.core.logging import get_logger, setup_logging


def test_json_lines_carry_service_and_env(capsys):
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    try:
        setup_logging("info", service="translance-backend", env="test")
        get_logger("translance.tests").info("Escrow released", extra={"escrow_id": 7})
        line = capsys.readouterr().err.strip().splitlines()[-1]
    finally:
        for handler in list(root.handlers):
            root.removeHandler(handler)
        for handler in saved_handlers:
            root.addHandler(handler)
        root.setLevel(saved_level)

    record = json.loads(line)
    assert record["message"] == "Escrow released"
    assert record["level"] == "INFO"
    assert record["logger"] == "translance.tests"
    assert record["service"] == "translance-backend"
    assert record["env"] == "test"
    assert record["escrow_id"] == 7
    assert logging.getLogger("uvicorn.access").level == logging.WARNING
