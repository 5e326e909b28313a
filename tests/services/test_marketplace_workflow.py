"""Marketplace Workflow - end-to-end request -> assignment -> task -> submission -> review.

Invariants:
    - assignment accepts exactly one request and rejects every sibling
    - the first task moves an assigned project to in_progress
    - a task holds one submission; resubmission replaces file and resets review
    - accepting the only task completes the project
    - an unassigned solver cannot create tasks

Design Decisions:
    - Every step goes through the HTTP API and state is read back through it too,
      so assertions never depend on a stale session identity map
"""

from datetime import datetime, timedelta, timezone

DEADLINE = (datetime.now(timezone.utc) + timedelta(days=30)).isoformat()


# ─── helpers ─────────────────────────────────────────────────────

async def _create_project(client, headers, title="Landing page"):
    res = await client.post(
        "/api/v1/projects",
        json={"title": title, "description": "Build a landing page", "budget": 300},
        headers=headers,
    )
    assert res.status_code == 201, res.text
    return res.json()


async def _request(client, headers, project_id, message="I can do it"):
    return await client.post(
        "/api/v1/requests",
        json={"project_id": project_id, "message": message},
        headers=headers,
    )


async def _assign(client, headers, project_id, solver_id):
    return await client.put(
        f"/api/v1/projects/{project_id}/assign",
        json={"solver_id": str(solver_id)},
        headers=headers,
    )


async def _create_task(client, headers, project_id, title="Hero section"):
    return await client.post(
        "/api/v1/tasks",
        json={
            "project_id": project_id, "title": title,
            "description": "Design and build", "deadline": DEADLINE,
        },
        headers=headers,
    )


async def _submit(client, headers, task_id, files, message=None):
    data = {"task_id": task_id}
    if message is not None:
        data["message"] = message
    return await client.post(
        "/api/v1/submissions", data=data, files=files, headers=headers,
    )


async def _project(client, headers, project_id):
    res = await client.get(f"/api/v1/projects/{project_id}", headers=headers)
    assert res.status_code == 200, res.text
    return res.json()


async def _assigned_project(client, users, as_user):
    """Project owned by `buyer`, assigned to `solver`."""
    project = await _create_project(client, as_user(users.buyer))
    await _request(client, as_user(users.solver), project["id"])
    res = await _assign(client, as_user(users.buyer), project["id"], users.solver.id)
    assert res.status_code == 200, res.text
    return project


# ─── Scenario A: assignment ─────────────────────────────────────

async def test_assign_accepts_chosen_request_and_rejects_siblings(client, users, as_user):
    project = await _create_project(client, as_user(users.buyer))
    for solver in (users.solver, users.other_solver, users.third_solver):
        res = await _request(client, as_user(solver), project["id"])
        assert res.status_code == 201

    res = await _assign(client, as_user(users.buyer), project["id"], users.solver.id)

    assert res.status_code == 200
    assert res.json()["status"] == "assigned"
    assert res.json()["assigned_solver_id"] == str(users.solver.id)

    detail = await _project(client, as_user(users.buyer), project["id"])
    statuses = {r["solver_id"]: r["status"] for r in detail["requests"]}
    assert statuses == {
        str(users.solver.id): "accepted",
        str(users.other_solver.id): "rejected",
        str(users.third_solver.id): "rejected",
    }


async def test_assign_twice_is_invalid_state(client, users, as_user):
    project = await _assigned_project(client, users, as_user)
    res = await _assign(client, as_user(users.buyer), project["id"], users.solver.id)
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "PROJECT_NOT_OPEN"


async def test_assign_solver_without_request_is_404(client, users, as_user):
    project = await _create_project(client, as_user(users.buyer))
    res = await _assign(client, as_user(users.buyer), project["id"], users.solver.id)
    assert res.status_code == 404
    assert res.json()["error"]["code"] == "REQUEST_NOT_FOUND"


async def test_assign_by_other_buyer_is_forbidden(client, users, as_user):
    project = await _create_project(client, as_user(users.buyer))
    await _request(client, as_user(users.solver), project["id"])
    res = await _assign(client, as_user(users.other_buyer), project["id"], users.solver.id)
    assert res.status_code == 403

    detail = await _project(client, as_user(users.buyer), project["id"])
    assert detail["status"] == "open"
    assert detail["assigned_solver_id"] is None


# ─── Scenario B: first task ─────────────────────────────────────

async def test_first_task_moves_project_in_progress(client, users, as_user):
    project = await _assigned_project(client, users, as_user)

    res = await _create_task(client, as_user(users.solver), project["id"])

    assert res.status_code == 201
    assert res.json()["status"] == "pending"
    detail = await _project(client, as_user(users.buyer), project["id"])
    assert detail["status"] == "in_progress"
    assert [t["id"] for t in detail["tasks"]] == [res.json()["id"]]


async def test_task_on_open_project_is_invalid_state(client, users, as_user):
    project = await _create_project(client, as_user(users.buyer))
    res = await _create_task(client, as_user(users.solver), project["id"])
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "PROJECT_NOT_ASSIGNED"


# ─── Scenario C: submission and resubmission ────────────────────

async def test_submit_then_resubmit_replaces_single_submission(
    client, users, as_user, zip_upload, blob_store,
):
    project = await _assigned_project(client, users, as_user)
    task = (await _create_task(client, as_user(users.solver), project["id"])).json()

    first = await _submit(
        client, as_user(users.solver), task["id"],
        zip_upload("v1.zip"), message="first cut",
    )
    assert first.status_code == 201, first.text
    assert first.json()["status"] == "pending"
    assert sorted(p.name.split("__")[1] for p in blob_store.root.iterdir()) == ["v1.zip"]

    task_now = await client.get(f"/api/v1/tasks/{task['id']}", headers=as_user(users.solver))
    assert task_now.json()["status"] == "submitted"

    second = await _submit(client, as_user(users.solver), task["id"], zip_upload("v2.zip"))
    assert second.status_code == 201, second.text
    assert second.json()["id"] == first.json()["id"]
    assert second.json()["file_name"] == "v2.zip"
    assert second.json()["status"] == "pending"
    assert second.json()["message"] == "first cut"

    listed = await client.get(
        f"/api/v1/submissions/task/{task['id']}", headers=as_user(users.buyer),
    )
    assert len(listed.json()) == 1
    assert sorted(p.name.split("__")[1] for p in blob_store.root.iterdir()) == ["v2.zip"]


async def test_resubmission_after_rejection_resets_review(client, users, as_user, zip_upload):
    project = await _assigned_project(client, users, as_user)
    task = (await _create_task(client, as_user(users.solver), project["id"])).json()
    submission = (await _submit(client, as_user(users.solver), task["id"], zip_upload())).json()

    res = await client.put(
        f"/api/v1/submissions/{submission['id']}/review",
        json={"decision": "rejected"}, headers=as_user(users.buyer),
    )
    assert res.json()["status"] == "rejected"
    assert res.json()["reviewed_at"] is not None

    again = await _submit(client, as_user(users.solver), task["id"], zip_upload("fixed.zip"))
    assert again.json()["status"] == "pending"
    assert again.json()["reviewed_at"] is None
    task_now = await client.get(f"/api/v1/tasks/{task['id']}", headers=as_user(users.solver))
    assert task_now.json()["status"] == "submitted"


# ─── Scenario D: review completes the project ───────────────────

async def test_accepting_only_task_completes_project(client, users, as_user, zip_upload):
    project = await _assigned_project(client, users, as_user)
    task = (await _create_task(client, as_user(users.solver), project["id"])).json()
    submission = (await _submit(client, as_user(users.solver), task["id"], zip_upload())).json()

    res = await client.put(
        f"/api/v1/submissions/{submission['id']}/review",
        json={"decision": "accepted"}, headers=as_user(users.buyer),
    )

    assert res.status_code == 200, res.text
    assert res.json()["status"] == "accepted"
    detail = await _project(client, as_user(users.buyer), project["id"])
    assert detail["status"] == "completed"
    assert detail["tasks"][0]["status"] == "completed"


async def test_accepting_one_of_two_tasks_keeps_project_in_progress(
    client, users, as_user, zip_upload,
):
    project = await _assigned_project(client, users, as_user)
    first = (await _create_task(client, as_user(users.solver), project["id"], "One")).json()
    await _create_task(client, as_user(users.solver), project["id"], "Two")
    submission = (await _submit(client, as_user(users.solver), first["id"], zip_upload())).json()

    await client.put(
        f"/api/v1/submissions/{submission['id']}/review",
        json={"decision": "accepted"}, headers=as_user(users.buyer),
    )

    detail = await _project(client, as_user(users.buyer), project["id"])
    assert detail["status"] == "in_progress"


async def test_rejecting_submission_rejects_task_only(client, users, as_user, zip_upload):
    project = await _assigned_project(client, users, as_user)
    task = (await _create_task(client, as_user(users.solver), project["id"])).json()
    submission = (await _submit(client, as_user(users.solver), task["id"], zip_upload())).json()

    await client.put(
        f"/api/v1/submissions/{submission['id']}/review",
        json={"decision": "rejected"}, headers=as_user(users.buyer),
    )

    detail = await _project(client, as_user(users.buyer), project["id"])
    assert detail["status"] == "in_progress"
    assert detail["tasks"][0]["status"] == "rejected"


async def test_second_review_is_invalid_state(client, users, as_user, zip_upload):
    project = await _assigned_project(client, users, as_user)
    task = (await _create_task(client, as_user(users.solver), project["id"])).json()
    submission = (await _submit(client, as_user(users.solver), task["id"], zip_upload())).json()
    url = f"/api/v1/submissions/{submission['id']}/review"

    await client.put(url, json={"decision": "accepted"}, headers=as_user(users.buyer))
    res = await client.put(url, json={"decision": "rejected"}, headers=as_user(users.buyer))

    assert res.status_code == 400
    assert res.json()["error"]["code"] == "SUBMISSION_ALREADY_REVIEWED"


async def test_unknown_decision_is_rejected(client, users, as_user, zip_upload):
    project = await _assigned_project(client, users, as_user)
    task = (await _create_task(client, as_user(users.solver), project["id"])).json()
    submission = (await _submit(client, as_user(users.solver), task["id"], zip_upload())).json()

    res = await client.put(
        f"/api/v1/submissions/{submission['id']}/review",
        json={"decision": "maybe"}, headers=as_user(users.buyer),
    )
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "INVALID_DECISION"


async def test_solver_cannot_review(client, users, as_user, zip_upload):
    project = await _assigned_project(client, users, as_user)
    task = (await _create_task(client, as_user(users.solver), project["id"])).json()
    submission = (await _submit(client, as_user(users.solver), task["id"], zip_upload())).json()

    res = await client.put(
        f"/api/v1/submissions/{submission['id']}/review",
        json={"decision": "accepted"}, headers=as_user(users.solver),
    )
    assert res.status_code == 403


# ─── Scenario E: unassigned solver ──────────────────────────────

async def test_unassigned_solver_cannot_create_task(client, users, as_user):
    project = await _assigned_project(client, users, as_user)
    res = await _create_task(client, as_user(users.other_solver), project["id"])
    assert res.status_code == 403
    assert res.json()["error"]["code"] == "NOT_ASSIGNED_SOLVER"


async def test_unassigned_solver_cannot_submit(client, users, as_user, zip_upload, blob_store):
    project = await _assigned_project(client, users, as_user)
    task = (await _create_task(client, as_user(users.solver), project["id"])).json()
    res = await _submit(client, as_user(users.other_solver), task["id"], zip_upload())
    assert res.status_code == 403
    assert not blob_store.root.exists() or not any(blob_store.root.iterdir())
