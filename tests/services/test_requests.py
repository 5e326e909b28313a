"""Request routes - solver bids, duplicates, per-project listing."""

import uuid


async def _project(client, users, as_user, buyer=None):
    res = await client.post(
        "/api/v1/projects",
        json={"title": "Mobile app", "description": "iOS and Android"},
        headers=as_user(buyer or users.buyer),
    )
    return res.json()


async def _bid(client, headers, project_id, message=None):
    body = {"project_id": project_id}
    if message is not None:
        body["message"] = message
    return await client.post("/api/v1/requests", json=body, headers=headers)


async def test_solver_requests_open_project(client, users, as_user):
    project = await _project(client, users, as_user)
    res = await _bid(client, as_user(users.solver), project["id"], "Five years of Swift")
    assert res.status_code == 201
    assert res.json()["status"] == "pending"
    assert res.json()["solver_id"] == str(users.solver.id)
    assert res.json()["message"] == "Five years of Swift"


async def test_duplicate_request_conflicts(client, users, as_user):
    project = await _project(client, users, as_user)
    await _bid(client, as_user(users.solver), project["id"])
    res = await _bid(client, as_user(users.solver), project["id"])
    assert res.status_code == 409
    assert res.json()["error"]["code"] == "DUPLICATE_REQUEST"


async def test_buyer_cannot_request(client, users, as_user):
    project = await _project(client, users, as_user)
    res = await _bid(client, as_user(users.other_buyer), project["id"])
    assert res.status_code == 403


async def test_request_on_missing_project_is_404(client, users, as_user):
    res = await _bid(client, as_user(users.solver), str(uuid.uuid4()))
    assert res.status_code == 404


async def test_request_on_assigned_project_is_invalid(client, users, as_user):
    project = await _project(client, users, as_user)
    await _bid(client, as_user(users.solver), project["id"])
    await client.put(
        f"/api/v1/projects/{project['id']}/assign",
        json={"solver_id": str(users.solver.id)}, headers=as_user(users.buyer),
    )
    res = await _bid(client, as_user(users.other_solver), project["id"])
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "PROJECT_NOT_OPEN"


async def test_list_scoped_by_role(client, users, as_user):
    mine = await _project(client, users, as_user)
    theirs = await _project(client, users, as_user, buyer=users.other_buyer)
    await _bid(client, as_user(users.solver), mine["id"])
    await _bid(client, as_user(users.other_solver), mine["id"])
    await _bid(client, as_user(users.solver), theirs["id"])

    solver_view = await client.get("/api/v1/requests", headers=as_user(users.solver))
    assert len(solver_view.json()) == 2
    assert {r["solver_id"] for r in solver_view.json()} == {str(users.solver.id)}

    buyer_view = await client.get("/api/v1/requests", headers=as_user(users.buyer))
    assert {r["project_id"] for r in buyer_view.json()} == {mine["id"]}
    assert len(buyer_view.json()) == 2

    admin_view = await client.get("/api/v1/requests", headers=as_user(users.admin))
    assert len(admin_view.json()) == 3


async def test_project_listing_owner_sees_all_solver_sees_own(client, users, as_user):
    project = await _project(client, users, as_user)
    await _bid(client, as_user(users.solver), project["id"])
    await _bid(client, as_user(users.other_solver), project["id"])
    url = f"/api/v1/requests/project/{project['id']}"

    owner = await client.get(url, headers=as_user(users.buyer))
    assert len(owner.json()) == 2

    solver = await client.get(url, headers=as_user(users.other_solver))
    assert [r["solver_id"] for r in solver.json()] == [str(users.other_solver.id)]

    stranger = await client.get(url, headers=as_user(users.other_buyer))
    assert stranger.status_code == 403
