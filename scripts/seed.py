"""Seed a sample client, translator, project and bid."""
from __future__ import annotations

from decimal import Decimal

from dotenv import load_dotenv

load_dotenv()

from translance import db, models  # noqa: E402
from translance.config import get_settings  # noqa: E402
from translance.utils.tokens import hash_password  # noqa: E402


def main() -> None:
    settings = get_settings()
    print(f"Using database: {settings.database_url}")

    db.create_all()
    session = db.get_sessionmaker()()

    try:
        client = models.Account(
            name="John Client",
            email="client@example.com",
            password_hash=hash_password("password123"),
            role=models.AccountRole.CLIENT,
            rating=Decimal("0.0"),
        )
        translator = models.Account(
            name="Maria Translator",
            email="translator@example.com",
            password_hash=hash_password("password123"),
            role=models.AccountRole.FREELANCER,
            rating=Decimal("4.8"),
        )
        translator.languages = ["Spanish", "French", "German"]
        session.add_all([client, translator])
        session.flush()

        project = models.Project(
            owner_id=client.id,
            title="Website Translation - English to Spanish",
            description="Translate our company website content from English to Spanish. "
            "About 5000 words of marketing copy.",
            source_language="English",
            target_language="Spanish",
            budget=Decimal("500.00"),
            status=models.ProjectStatus.POSTED,
            attached_files=[],
        )
        session.add(project)
        session.flush()

        session.add(
            models.Bid(
                project_id=project.id,
                bidder_id=translator.id,
                amount=Decimal("450.00"),
                estimated_time="5 days",
                status=models.BidStatus.PENDING,
            )
        )
        session.commit()
        print("Seed data inserted.")
    finally:
        session.close()


if __name__ == "__main__":
    main()
