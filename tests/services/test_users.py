"""User routes - registration, caller identity, profiles, role promotion."""

import uuid


async def test_register_creates_problem_solver(client):
    res = await client.post(
        "/api/v1/users", json={"name": "  Nina  ", "email": "Nina@Example.com"},
    )
    assert res.status_code == 201
    body = res.json()
    assert body["name"] == "Nina"
    assert body["email"] == "nina@example.com"
    assert body["role"] == "problem_solver"
    assert body["skills"] == []


async def test_register_duplicate_email_conflicts(client, users):
    res = await client.post(
        "/api/v1/users", json={"name": "Copy", "email": "SAM@example.com"},
    )
    assert res.status_code == 409
    assert res.json()["error"]["code"] == "EMAIL_TAKEN"


async def test_register_rejects_malformed_email(client):
    res = await client.post("/api/v1/users", json={"name": "X", "email": "not-an-email"})
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "VALIDATION_ERROR"


async def test_missing_header_is_unauthenticated(client, users):
    res = await client.get("/api/v1/users/me")
    assert res.status_code == 401
    assert res.json()["error"]["code"] == "UNAUTHENTICATED"


async def test_malformed_header_is_unauthenticated(client, users):
    res = await client.get("/api/v1/users/me", headers={"X-User-Id": "sam"})
    assert res.status_code == 401


async def test_unknown_user_is_unauthenticated(client, users):
    res = await client.get("/api/v1/users/me", headers={"X-User-Id": str(uuid.uuid4())})
    assert res.status_code == 401


async def test_me_returns_caller(client, users, as_user):
    res = await client.get("/api/v1/users/me", headers=as_user(users.buyer))
    assert res.status_code == 200
    assert res.json()["id"] == str(users.buyer.id)
    assert res.json()["role"] == "buyer"


async def test_any_user_can_read_a_profile(client, users, as_user):
    res = await client.get(f"/api/v1/users/{users.buyer.id}", headers=as_user(users.solver))
    assert res.status_code == 200
    assert res.json()["name"] == "Bea Buyer"


async def test_read_missing_user_is_404(client, users, as_user):
    res = await client.get(f"/api/v1/users/{uuid.uuid4()}", headers=as_user(users.solver))
    assert res.status_code == 404


async def test_list_users_admin_only(client, users, as_user):
    res = await client.get("/api/v1/users", headers=as_user(users.admin))
    assert res.status_code == 200
    assert len(res.json()) == 6

    denied = await client.get("/api/v1/users", headers=as_user(users.buyer))
    assert denied.status_code == 403


async def test_update_own_profile(client, users, as_user):
    res = await client.put(
        "/api/v1/users/me/profile",
        json={"bio": "Backend dev", "skills": ["python", "sql"]},
        headers=as_user(users.solver),
    )
    assert res.status_code == 200
    assert res.json()["bio"] == "Backend dev"
    assert res.json()["skills"] == ["python", "sql"]

    again = await client.get("/api/v1/users/me", headers=as_user(users.solver))
    assert again.json()["skills"] == ["python", "sql"]


async def test_empty_profile_update_changes_nothing(client, users, as_user):
    res = await client.put(
        "/api/v1/users/me/profile", json={}, headers=as_user(users.solver),
    )
    assert res.status_code == 200
    assert res.json()["bio"] is None


async def test_admin_promotes_solver_to_buyer(client, users, as_user):
    res = await client.put(
        f"/api/v1/users/{users.solver.id}/assign-buyer", headers=as_user(users.admin),
    )
    assert res.status_code == 200
    assert res.json()["role"] == "buyer"


async def test_promoting_a_buyer_is_invalid(client, users, as_user):
    res = await client.put(
        f"/api/v1/users/{users.buyer.id}/assign-buyer", headers=as_user(users.admin),
    )
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "ILLEGAL_ROLE_TRANSITION"


async def test_admin_cannot_promote_self(client, users, as_user):
    res = await client.put(
        f"/api/v1/users/{users.admin.id}/assign-buyer", headers=as_user(users.admin),
    )
    assert res.status_code == 403
    assert res.json()["error"]["code"] == "SELF_ROLE_CHANGE"


async def test_non_admin_cannot_promote(client, users, as_user):
    res = await client.put(
        f"/api/v1/users/{users.other_solver.id}/assign-buyer",
        headers=as_user(users.buyer),
    )
    assert res.status_code == 403


async def test_promote_missing_user_is_404(client, users, as_user):
    res = await client.put(
        f"/api/v1/users/{uuid.uuid4()}/assign-buyer", headers=as_user(users.admin),
    )
    assert res.status_code == 404
