import io
from decimal import Decimal
from pathlib import Path

import pytest
from fastapi import UploadFile

from translance.models import AccountRole
from translance.services import accounts as accounts_service


@pytest.mark.anyio("asyncio")
async def test_public_profile_hides_email(client, freelancer_account):
    account, _ = freelancer_account
    response = await client.get(f"/users/{account.id}")
    assert response.status_code == 200
    body = response.json()
    assert body["name"] == "Maria Translator"
    assert "email" not in body

    missing = await client.get("/users/999999")
    assert missing.status_code == 404
    assert missing.json()["code"] == "ACCOUNT_NOT_FOUND"


@pytest.mark.anyio("asyncio")
async def test_update_profile_with_picture(client, freelancer_account):
    account, headers = freelancer_account
    response = await client.put(
        "/users/profile",
        data={"name": "Maria T.", "languages": '["Italian", "Portuguese"]'},
        files={"profilePicture": ("me.png", b"\x89PNG\r\n\x1a\nfake", "image/png")},
        headers=headers,
    )
    assert response.status_code == 200, response.text
    body = response.json()
    assert body["name"] == "Maria T."
    assert sorted(body["languages"]) == ["Italian", "Portuguese"]
    assert body["profile_picture"].endswith(".png")
    assert Path(body["profile_picture"]).exists()


@pytest.mark.anyio("asyncio")
async def test_new_picture_replaces_old_file(client, freelancer_account):
    _, headers = freelancer_account
    first = await client.put(
        "/users/profile",
        files={"profilePicture": ("first.png", b"\x89PNG\r\n\x1a\nfirst", "image/png")},
        headers=headers,
    )
    old_path = Path(first.json()["profile_picture"])
    assert old_path.exists()

    second = await client.put(
        "/users/profile",
        files={"profilePicture": ("second.jpg", b"\xff\xd8\xffsecond", "image/jpeg")},
        headers=headers,
    )
    assert second.status_code == 200
    new_path = Path(second.json()["profile_picture"])
    assert new_path.exists()
    assert not old_path.exists()


def test_failed_profile_update_keeps_old_picture(db_session, monkeypatch, make_account):
    account, _ = make_account(AccountRole.FREELANCER)
    accounts_service.update_profile(
        db_session, account, picture=UploadFile(file=io.BytesIO(b"old"), filename="old.png")
    )
    old_path = Path(account.profile_picture)
    stored_before = set(old_path.parent.iterdir())

    def _boom(*args, **kwargs):
        raise RuntimeError("audit store unavailable")

    monkeypatch.setattr(accounts_service, "log_audit", _boom)
    with pytest.raises(RuntimeError):
        accounts_service.update_profile(
            db_session, account, picture=UploadFile(file=io.BytesIO(b"new"), filename="new.png")
        )

    assert old_path.exists()
    assert set(old_path.parent.iterdir()) == stored_before
    db_session.refresh(account)
    assert account.profile_picture == old_path.as_posix()


@pytest.mark.anyio("asyncio")
async def test_update_profile_rejects_bad_input(client, make_account):
    _, headers = make_account(AccountRole.FREELANCER)

    bad_languages = await client.put("/users/profile", data={"languages": "Spanish"}, headers=headers)
    assert bad_languages.status_code == 400
    assert bad_languages.json()["code"] == "INVALID_LANGUAGES"

    bad_picture = await client.put(
        "/users/profile",
        files={"profilePicture": ("script.exe", b"MZ", "application/octet-stream")},
        headers=headers,
    )
    assert bad_picture.status_code == 400
    assert bad_picture.json()["code"] == "UNSUPPORTED_FILE_TYPE"


@pytest.mark.anyio("asyncio")
async def test_client_profile_ignores_languages(client, client_account):
    _, headers = client_account
    response = await client.put("/users/profile", data={"languages": '["German"]'}, headers=headers)
    assert response.status_code == 200
    assert response.json()["languages"] == []


@pytest.mark.anyio("asyncio")
async def test_freelancer_search_filters_and_orders(client, db_session, make_account):
    top, _ = make_account(AccountRole.FREELANCER, languages=["Spanish", "French"])
    mid, _ = make_account(AccountRole.FREELANCER, languages=["Spanish"])
    low, _ = make_account(AccountRole.FREELANCER, languages=["Spanish"])
    other, _ = make_account(AccountRole.FREELANCER, languages=["Japanese"])
    make_account(AccountRole.CLIENT)
    top.rating = Decimal("4.8")
    mid.rating = Decimal("4.5")
    low.rating = Decimal("3.0")
    other.rating = Decimal("5.0")
    db_session.commit()

    response = await client.get("/users/freelancers/search", params={"language": "Spanish", "minRating": "4.5"})
    assert response.status_code == 200
    ids = [item["id"] for item in response.json()]
    assert ids == [top.id, mid.id]

    everyone = await client.get("/users/freelancers/search")
    roles = {item["role"] for item in everyone.json()}
    assert roles == {"FREELANCER"}
