from decimal import Decimal

import pytest

from conftest import post_project
from translance.models import Account, AccountRole, Bid, BidStatus, Project, ProjectStatus


def _finished_project(db_session, owner, freelancer, status=ProjectStatus.COMPLETED) -> Project:
    project = Project(
        owner_id=owner.id,
        title="Finished translation",
        description="A translation job that has already been delivered.",
        source_language="English",
        target_language="Spanish",
        budget=Decimal("500.00"),
        status=status,
        attached_files=[],
    )
    db_session.add(project)
    db_session.flush()
    db_session.add(
        Bid(
            project_id=project.id,
            bidder_id=freelancer.id,
            amount=Decimal("450.00"),
            estimated_time="5 days",
            status=BidStatus.ACCEPTED,
        )
    )
    db_session.commit()
    return project


@pytest.mark.anyio("asyncio")
async def test_aggregate_rating_is_rounded_mean(client, db_session, make_account, freelancer_account):
    freelancer, _ = freelancer_account
    for rating in (5, 4, 5):
        owner, owner_headers = make_account(AccountRole.CLIENT)
        project = _finished_project(db_session, owner, freelancer)
        response = await client.post(
            "/reviews",
            json={
                "project_id": project.id,
                "reviewee_id": freelancer.id,
                "rating": rating,
                "comment": "Great work",
            },
            headers=owner_headers,
        )
        assert response.status_code == 201, response.text

    assert db_session.get(Account, freelancer.id).rating == Decimal("4.7")

    summary = await client.get(f"/reviews/user/{freelancer.id}")
    assert summary.status_code == 200
    body = summary.json()
    assert body["total_reviews"] == 3
    assert Decimal(body["average_rating"]) == Decimal("4.7")
    assert {review["rating"] for review in body["reviews"]} == {4, 5}

    profile = await client.get(f"/users/{freelancer.id}")
    assert Decimal(profile.json()["rating"]) == Decimal("4.7")


@pytest.mark.anyio("asyncio")
async def test_review_requires_completed_project(client, client_account, freelancer_account):
    _, owner_headers = client_account
    freelancer, _ = freelancer_account
    project = await post_project(client, owner_headers)

    response = await client.post(
        "/reviews",
        json={"project_id": project["id"], "reviewee_id": freelancer.id, "rating": 5},
        headers=owner_headers,
    )
    assert response.status_code == 400
    assert response.json()["code"] == "PROJECT_NOT_COMPLETED"


@pytest.mark.anyio("asyncio")
async def test_review_participants_and_duplicates(
    client, db_session, client_account, freelancer_account, make_account
):
    owner, owner_headers = client_account
    freelancer, freelancer_headers = freelancer_account
    _, stranger_headers = make_account(AccountRole.FREELANCER)
    project = _finished_project(db_session, owner, freelancer, status=ProjectStatus.PAID)

    outsider = await client.post(
        "/reviews",
        json={"project_id": project.id, "reviewee_id": freelancer.id, "rating": 1},
        headers=stranger_headers,
    )
    assert outsider.status_code == 403

    self_review = await client.post(
        "/reviews",
        json={"project_id": project.id, "reviewee_id": owner.id, "rating": 5},
        headers=owner_headers,
    )
    assert self_review.status_code == 400
    assert self_review.json()["code"] == "INVALID_REVIEWEE"

    first = await client.post(
        "/reviews",
        json={"project_id": project.id, "reviewee_id": owner.id, "rating": 4},
        headers=freelancer_headers,
    )
    assert first.status_code == 201
    assert first.json()["reviewer"]["id"] == freelancer.id

    duplicate = await client.post(
        "/reviews",
        json={"project_id": project.id, "reviewee_id": owner.id, "rating": 2},
        headers=freelancer_headers,
    )
    assert duplicate.status_code == 400
    assert duplicate.json()["code"] == "DUPLICATE_REVIEW"

    out_of_range = await client.post(
        "/reviews",
        json={"project_id": project.id, "reviewee_id": freelancer.id, "rating": 6},
        headers=owner_headers,
    )
    assert out_of_range.status_code == 400


@pytest.mark.anyio("asyncio")
async def test_update_review_recomputes_rating(client, db_session, client_account, freelancer_account, make_account):
    owner, owner_headers = client_account
    freelancer, _ = freelancer_account
    _, stranger_headers = make_account()
    project = _finished_project(db_session, owner, freelancer)

    created = await client.post(
        "/reviews",
        json={"project_id": project.id, "reviewee_id": freelancer.id, "rating": 2},
        headers=owner_headers,
    )
    review_id = created.json()["id"]
    assert db_session.get(Account, freelancer.id).rating == Decimal("2.0")

    forbidden = await client.put(f"/reviews/{review_id}", json={"rating": 5}, headers=stranger_headers)
    assert forbidden.status_code == 403

    updated = await client.put(
        f"/reviews/{review_id}", json={"rating": 5, "comment": "  Much better after revisions "}, headers=owner_headers
    )
    assert updated.status_code == 200
    assert updated.json()["rating"] == 5
    assert updated.json()["comment"] == "Much better after revisions"
    assert db_session.get(Account, freelancer.id).rating == Decimal("5.0")

    missing = await client.put("/reviews/999999", json={"rating": 3}, headers=owner_headers)
    assert missing.status_code == 404


@pytest.mark.anyio("asyncio")
async def test_reviews_for_account_without_reviews(client, freelancer_account):
    freelancer, _ = freelancer_account
    response = await client.get(f"/reviews/user/{freelancer.id}")
    assert response.status_code == 200
    assert response.json() == {"reviews": [], "average_rating": "0.0", "total_reviews": 0}
