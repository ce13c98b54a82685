from app.core.auth import roles
from tests.factories import make_principal

OWNER = make_principal(roles.PRODUCTION_MANAGER, user_id="pm-1")
OUTSIDER = make_principal(roles.PRODUCTION_MANAGER, user_id="pm-2")


async def create_user(client, user_id: str) -> str:
    response = await client.post(
        "/api/users",
        json={"id": user_id, "name": user_id, "email": f"{user_id}@plant.example.com", "employee_id": user_id},
    )
    assert response.status_code == 201
    return user_id


async def test_project_visibility_and_members(client, login):
    member = await create_user(client, "op-1")
    await create_user(client, "op-2")

    login(OWNER)
    created = await client.post(
        "/api/projects",
        json={"name": "Line 3 changeover", "members": [{"user_id": member, "role": "operator"}]},
    )
    assert created.status_code == 201
    project = created.json()["data"]
    assert project["owner"] == "pm-1"

    unknown = await client.post(
        "/api/projects", json={"name": "Ghost", "members": [{"user_id": "nobody", "role": "operator"}]}
    )
    assert unknown.status_code == 400

    added = await client.post(f"/api/projects/{project['id']}/members", json={"user_id": "op-2", "role": "operator"})
    assert {m["user_id"] for m in added.json()["data"]["members"]} == {"op-1", "op-2"}
    duplicate = await client.post(f"/api/projects/{project['id']}/members", json={"user_id": "op-2", "role": "operator"})
    assert duplicate.status_code == 409

    owner_removal = await client.delete(f"/api/projects/{project['id']}/members/pm-1")
    assert owner_removal.status_code == 400

    login(OUTSIDER)
    listed = await client.get("/api/projects")
    assert listed.json()["data"] == []
    assert listed.json()["pagination"]["total"] == 0
    assert (await client.get(f"/api/projects/{project['id']}")).status_code == 403
    assert (await client.put(f"/api/projects/{project['id']}", json={"name": "Mine"})).status_code == 403

    login(make_principal(roles.PRODUCTION_MANAGER, user_id=member))
    mine = (await client.get("/api/projects/user/me")).json()["data"]
    assert [p["id"] for p in mine] == [project["id"]]


async def test_project_listing_is_paginated(client, login):
    login(OWNER)
    for n in range(3):
        await client.post("/api/projects", json={"name": f"Kaizen {n}"})

    page = await client.get("/api/projects", params={"page": 2, "limit": 2})

    body = page.json()
    assert len(body["data"]) == 1
    assert body["pagination"] == {"page": 2, "limit": 2, "total": 3, "total_pages": 2}


async def test_task_lifecycle(client, login):
    assignee = await create_user(client, "op-1")

    login(OWNER)
    project = (await client.post("/api/projects", json={"name": "5S audit"})).json()["data"]

    missing_project = await client.post(
        "/api/tasks", json={"title": "Label racks", "assigned_to": assignee, "project_id": "nope"}
    )
    assert missing_project.status_code == 400

    created = await client.post(
        "/api/tasks",
        json={"title": "Label racks", "assigned_to": assignee, "project_id": project["id"], "priority": "high"},
    )
    assert created.status_code == 201
    task = created.json()["data"]
    assert task["assigned_by"] == "pm-1"
    assert task["status"] == "todo"

    login(make_principal(roles.PRODUCTION_MANAGER, user_id=assignee))
    updated = await client.put(f"/api/tasks/{task['id']}", json={"status": "in_progress"})
    assert updated.json()["data"]["status"] == "in_progress"

    commented = await client.post(f"/api/tasks/{task['id']}/comments", json={"content": "Half done"})
    comments = commented.json()["data"]["comments"]
    assert [(c["user_id"], c["content"]) for c in comments] == [(assignee, "Half done")]

    mine = (await client.get("/api/tasks/user/me")).json()["data"]
    assert [t["id"] for t in mine] == [task["id"]]

    login(OUTSIDER)
    assert (await client.get("/api/tasks")).json()["data"] == []
    assert (await client.delete(f"/api/tasks/{task['id']}")).status_code == 403

    login(OWNER)
    project_tasks = (await client.get(f"/api/projects/{project['id']}/tasks")).json()["data"]
    assert [t["id"] for t in project_tasks] == [task["id"]]

    assert (await client.delete(f"/api/projects/{project['id']}")).status_code == 200
    assert (await client.get(f"/api/tasks/{task['id']}")).status_code == 404
