from decimal import Decimal
from pathlib import Path

import pytest
from sqlalchemy import select

from conftest import post_bid, post_project
from translance.models import Bid, Project


@pytest.mark.anyio("asyncio")
async def test_create_project_with_documents(client, client_account):
    owner, headers = client_account
    response = await client.post(
        "/projects",
        data={
            "title": "Legal Contract Translation",
            "description": "Translate a twelve page supply contract into German.",
            "sourceLanguage": "English",
            "targetLanguage": "German",
            "budget": "750.50",
            "deadline": "2030-01-15T12:00:00Z",
        },
        files=[
            ("files", ("contract.pdf", b"%PDF-1.4 fake", "application/pdf")),
            ("files", ("glossary.txt", b"term,translation", "text/plain")),
        ],
        headers=headers,
    )
    assert response.status_code == 201, response.text
    body = response.json()
    assert body["status"] == "POSTED"
    assert body["owner"]["id"] == owner.id
    assert Decimal(body["budget"]) == Decimal("750.50")
    assert body["bid_count"] == 0
    assert len(body["attached_files"]) == 2
    assert all(Path(path).exists() for path in body["attached_files"])


@pytest.mark.anyio("asyncio")
async def test_only_clients_create_projects(client, freelancer_account):
    _, headers = freelancer_account
    response = await client.post(
        "/projects",
        data={
            "title": "Website Translation",
            "description": "Translate the marketing site from English to Spanish.",
            "sourceLanguage": "English",
            "targetLanguage": "Spanish",
            "budget": "500",
        },
        headers=headers,
    )
    assert response.status_code == 403
    assert response.json()["code"] == "INSUFFICIENT_ROLE"


@pytest.mark.anyio("asyncio")
async def test_create_project_validation(client, client_account):
    _, headers = client_account
    base = {
        "title": "Website Translation",
        "description": "Translate the marketing site from English to Spanish.",
        "sourceLanguage": "English",
        "targetLanguage": "Spanish",
        "budget": "500",
    }

    short_title = await client.post("/projects", data={**base, "title": "Hi"}, headers=headers)
    assert short_title.status_code == 400
    assert short_title.json()["code"] == "VALIDATION_ERROR"

    low_budget = await client.post("/projects", data={**base, "budget": "0.5"}, headers=headers)
    assert low_budget.status_code == 400

    bad_file = await client.post(
        "/projects",
        data=base,
        files=[("files", ("virus.exe", b"MZ", "application/octet-stream"))],
        headers=headers,
    )
    assert bad_file.status_code == 400
    assert bad_file.json()["code"] == "UNSUPPORTED_FILE_TYPE"

    too_many = await client.post(
        "/projects",
        data=base,
        files=[("files", (f"doc{i}.txt", b"text", "text/plain")) for i in range(6)],
        headers=headers,
    )
    assert too_many.status_code == 400
    assert too_many.json()["code"] == "TOO_MANY_FILES"


@pytest.mark.anyio("asyncio")
async def test_list_projects_filters_and_paginates(client, client_account):
    _, headers = client_account
    await post_project(client, headers, title="Spanish project one")
    await post_project(client, headers, title="Spanish project two")
    german = await post_project(client, headers, title="German project", targetLanguage="German")

    page = await client.get("/projects", params={"limit": 2, "page": 1})
    assert page.status_code == 200
    body = page.json()
    assert body["pagination"] == {"page": 1, "limit": 2, "total": 3, "pages": 2}
    assert len(body["projects"]) == 2

    filtered = await client.get("/projects", params={"targetLanguage": "German"})
    assert [item["id"] for item in filtered.json()["projects"]] == [german["id"]]

    by_status = await client.get("/projects", params={"status": "IN_PROGRESS"})
    assert by_status.json()["pagination"]["total"] == 0

    too_large = await client.get("/projects", params={"limit": 51})
    assert too_large.status_code == 400


@pytest.mark.anyio("asyncio")
async def test_project_detail_includes_bids(client, client_account, freelancer_account):
    _, owner_headers = client_account
    freelancer, freelancer_headers = freelancer_account
    project = await post_project(client, owner_headers)
    await post_bid(client, freelancer_headers, project["id"], "450")

    response = await client.get(f"/projects/{project['id']}")
    assert response.status_code == 200
    body = response.json()
    assert body["bid_count"] == 1
    assert body["bids"][0]["bidder"]["id"] == freelancer.id

    missing = await client.get("/projects/999999")
    assert missing.status_code == 404
    assert missing.json()["code"] == "PROJECT_NOT_FOUND"


@pytest.mark.anyio("asyncio")
async def test_update_project_and_status_transitions(client, client_account, make_account):
    _, headers = client_account
    _, stranger_headers = make_account()
    project = await post_project(client, headers)

    forbidden = await client.put(
        f"/projects/{project['id']}", json={"title": "Hijacked title"}, headers=stranger_headers
    )
    assert forbidden.status_code == 403

    renamed = await client.put(
        f"/projects/{project['id']}", json={"title": "Updated website job", "budget": "650"}, headers=headers
    )
    assert renamed.status_code == 200
    assert renamed.json()["title"] == "Updated website job"
    assert Decimal(renamed.json()["budget"]) == Decimal("650")

    skip_ahead = await client.put(f"/projects/{project['id']}", json={"status": "COMPLETED"}, headers=headers)
    assert skip_ahead.status_code == 400
    assert skip_ahead.json()["code"] == "INVALID_STATUS_TRANSITION"

    cancelled = await client.put(f"/projects/{project['id']}", json={"status": "CANCELLED"}, headers=headers)
    assert cancelled.status_code == 200
    assert cancelled.json()["status"] == "CANCELLED"

    reopen = await client.put(f"/projects/{project['id']}", json={"status": "POSTED"}, headers=headers)
    assert reopen.status_code == 400


@pytest.mark.anyio("asyncio")
async def test_delete_project_removes_bids(client, db_session, client_account, freelancer_account):
    _, headers = client_account
    _, freelancer_headers = freelancer_account
    project = await post_project(client, headers)
    await post_bid(client, freelancer_headers, project["id"], "450")

    response = await client.delete(f"/projects/{project['id']}", headers=headers)
    assert response.status_code == 204

    assert db_session.get(Project, project["id"]) is None
    assert db_session.scalars(select(Bid).where(Bid.project_id == project["id"])).all() == []
    gone = await client.get(f"/projects/{project['id']}")
    assert gone.status_code == 404
