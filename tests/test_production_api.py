"""End-to-end production workflow over HTTP, switching callers between roles."""
from app.core.auth import roles
from app.core.setting import config
from tests.factories import make_principal

API = "/api/production"

PM = make_principal(roles.PRODUCTION_MANAGER, user_id="pm-1")
PLANT_HEAD = make_principal(roles.PLANT_HEAD, user_id="ph-1")

MONTHLY_PLAN = {
    "month": 9,
    "year": 2025,
    "items": [{"item_code": "A-100", "item_name": "Bracket", "monthly_quantity": 1000}],
}

ENTRY = {"dept_name": "Press", "operator_name": "Ravi", "h1_plan": 40, "h2_plan": 40, "ot_plan": 20}


async def create_and_cascade(client):
    """Monthly plan -> weekly plans -> daily plans; returns the first daily plan."""
    created = await client.post(f"{API}/monthly", json=MONTHLY_PLAN)
    assert created.status_code == 201
    plan_id = created.json()["data"]["id"]

    submitted = await client.post(f"{API}/monthly/{plan_id}/submit")
    assert submitted.status_code == 200
    weekly_plans = submitted.json()["data"]["weekly_plans"]

    response = await client.post(f"{API}/weekly/{weekly_plans[0]['id']}/submit", json={})
    assert response.status_code == 200
    return response.json()["data"]["daily_plans"][0]


async def test_monthly_plan_lifecycle(client, login):
    login(PM)

    response = await client.post(f"{API}/monthly", json=MONTHLY_PLAN)
    body = response.json()
    assert response.status_code == 201
    assert body["success"] is True
    assert body["data"]["status"] == "pending"
    assert body["data"]["assigned_to"] == "pm-1"
    plan_id = body["data"]["id"]

    duplicate = await client.post(f"{API}/monthly", json=MONTHLY_PLAN)
    assert duplicate.status_code == 409
    assert duplicate.json()["success"] is False

    by_month = await client.get(f"{API}/monthly/month/9/year/2025")
    assert by_month.json()["data"]["id"] == plan_id
    missing = await client.get(f"{API}/monthly/month/10/year/2025")
    assert missing.status_code == 404

    submitted = await client.post(f"{API}/monthly/{plan_id}/submit")
    data = submitted.json()["data"]
    assert data["plan"]["status"] == "completed"
    assert data["weekly_plans"]
    assert all(w["status"] == "pending" for w in data["weekly_plans"])
    assert all(w["monthly_plan_id"] == plan_id for w in data["weekly_plans"])

    again = await client.post(f"{API}/monthly/{plan_id}/submit")
    assert again.status_code == 400


async def test_invalid_body_is_reported_in_envelope(client):
    response = await client.post(f"{API}/monthly", json={"month": 13, "year": 2025})

    assert response.status_code == 422
    body = response.json()
    assert body["success"] is False
    assert "month" in body["error"]


async def test_daily_review_and_report_flow(client, login):
    login(PM)
    daily = await create_and_cascade(client)

    submitted = await client.post(f"{API}/daily/{daily['id']}/submit", json={"entries": [ENTRY]})
    assert submitted.status_code == 200
    assert submitted.json()["data"]["status"] == "inProgress"
    assert submitted.json()["data"]["entries"][0]["target"] == 100

    capabilities = (await client.get(f"{API}/daily/{daily['id']}/capabilities")).json()["data"]
    assert capabilities == {
        "plan_id": daily["id"],
        "status": "inProgress",
        "can_submit": False,
        "can_approve": False,
        "can_reject": False,
    }
    forbidden = await client.post(f"{API}/daily/{daily['id']}/approve")
    assert forbidden.status_code == 403

    login(PLANT_HEAD)
    capabilities = (await client.get(f"{API}/daily/{daily['id']}/capabilities")).json()["data"]
    assert capabilities["can_approve"] and capabilities["can_reject"]

    approved = await client.post(f"{API}/daily/{daily['id']}/approve")
    assert approved.status_code == 200
    report = approved.json()["data"]["daily_report"]
    assert report["status"] == "pending"
    assert report["daily_plan_id"] == daily["id"]

    login(PM)
    short = {**ENTRY, "target": 100, "actual_production": 70}
    rejected = await client.post(f"{API}/reports/{report['id']}/submit", json={"entries": [short]})
    assert rejected.status_code == 400
    assert "Action plan required" in rejected.json()["error"]

    explained = {
        **short,
        "reason": "Die change overran",
        "corrective_actions": "Pre-stage dies before the shift",
        "responsible_person": "Ravi",
        "target_completion_date": "2025-09-15",
    }
    accepted = await client.post(f"{API}/reports/{report['id']}/submit", json={"entries": [explained]})
    assert accepted.status_code == 200
    data = accepted.json()["data"]
    assert data["report"]["status"] == "completed"
    assert data["report"]["entries"][0]["production_percentage"] == 70.0
    assert len(data["action_plans"]) == 1

    listed = await client.get(f"{API}/action-plans/report/{report['id']}")
    assert [a["id"] for a in listed.json()["data"]] == [data["action_plans"][0]["id"]]


async def test_reject_requires_reason(client, login):
    login(PM)
    daily = await create_and_cascade(client)
    await client.post(f"{API}/daily/{daily['id']}/submit", json={"entries": [ENTRY]})

    login(PLANT_HEAD)
    blank = await client.post(f"{API}/daily/{daily['id']}/reject", json={"reason": "   "})
    assert blank.status_code == 422

    response = await client.post(f"{API}/daily/{daily['id']}/reject", json={"reason": "Operator on leave"})
    assert response.status_code == 200
    assert response.json()["data"]["status"] == "rejected"
    assert response.json()["data"]["rejection_reason"] == "Operator on leave"


async def test_permissions_gate_production_routes(client, login):
    login(make_principal("auditor", user_id="aud-1"))

    assert (await client.get(f"{API}/monthly")).status_code == 403
    assert (await client.post(f"{API}/monthly", json=MONTHLY_PLAN)).status_code == 403

    login(PM)
    assert (await client.get(f"{API}/monthly")).status_code == 200
    plan_id = (await client.post(f"{API}/monthly", json=MONTHLY_PLAN)).json()["data"]["id"]
    assert (await client.delete(f"{API}/monthly/{plan_id}")).status_code == 403


async def test_task_list_is_filtered_by_role(client, login):
    login(PM)
    daily = await create_and_cascade(client)
    await client.post(f"{API}/daily/{daily['id']}/submit", json={"entries": [ENTRY]})

    pm_types = {t["type"] for t in (await client.get(f"{API}/tasks")).json()["data"]}
    assert pm_types == {"daily"}

    login(PLANT_HEAD)
    tasks = (await client.get(f"{API}/tasks")).json()["data"]
    assert {t["type"] for t in tasks} == {"monthly", "weekly", "daily"}
    assert [t["plan_id"] for t in tasks if t["type"] == "daily"] == [daily["id"]]


async def test_scheduler_routes(client, login):
    status = await client.get("/api/cron/status")
    assert status.status_code == 200
    assert status.json()["data"]["initialized"] is False

    triggered = await client.post("/api/cron/trigger/monthly")
    assert triggered.json()["data"]["outcome"] == "created"
    repeated = await client.post("/api/cron/trigger/monthly")
    assert repeated.json()["data"]["outcome"] == "skipped"

    login(PM)
    assert (await client.post("/api/cron/trigger/monthly")).status_code == 403


async def test_filtered_task_queries_respect_role_visibility(client, login):
    login(PM)
    await create_and_cascade(client)
    manager = config.identity_for(roles.PRODUCTION_MANAGER)

    assert len((await client.get(f"{API}/tasks/type/daily")).json()["data"]) == 6
    assert len((await client.get(f"{API}/tasks/assigned/{manager}")).json()["data"]) == 6
    assert (await client.get(f"{API}/tasks/type/monthly")).json()["data"] == []

    login(PLANT_HEAD)
    assert (await client.get(f"{API}/tasks/type/daily")).json()["data"] == []
    assert (await client.get(f"{API}/tasks/assigned/{manager}")).json()["data"] == []
    pending = (await client.get(f"{API}/tasks/status/pending")).json()["data"]
    assert pending
    assert "daily" not in {t["type"] for t in pending}
