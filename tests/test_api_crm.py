from datetime import datetime

LEAD = {"name": "Priya Shah", "company": "Acme Corp", "email": "priya@acme.example.com"}


def test_lead_stage_round_trip(login, make_user):
    client = login(make_user())

    created = client.post("/api/leads", json=LEAD)
    assert created.status_code == 201, created.text
    lead = created.json()
    assert lead["stage"] == "lead"

    updated = client.patch(f"/api/leads/{lead['id']}", json={"stage": "negotiation"})
    assert updated.status_code == 200
    assert updated.json()["stage"] == "negotiation"
    assert datetime.fromisoformat(updated.json()["updated_at"]) > datetime.fromisoformat(lead["updated_at"])

    fetched = client.get(f"/api/leads/{lead['id']}").json()
    assert fetched["stage"] == "negotiation"


def test_invalid_lead_is_rejected_wholesale(login, make_user):
    client = login(make_user())

    response = client.post("/api/leads", json={"name": "", "company": "Acme", "email": "not-an-email", "stage": "won"})
    assert response.status_code == 400
    body = response.json()
    assert body["code"] == "validation_error"
    assert {error["field"] for error in body["errors"]} >= {"name", "email", "stage"}
    assert client.get("/api/leads").json() == []


def test_lead_cannot_be_assigned_to_unknown_user(login, make_user):
    client = login(make_user())
    response = client.post("/api/leads", json={**LEAD, "assigned_to": 9999})
    assert response.status_code == 400


def test_clearing_required_field_is_rejected(login, make_user):
    client = login(make_user())
    lead = client.post("/api/leads", json=LEAD).json()
    response = client.patch(f"/api/leads/{lead['id']}", json={"stage": None})
    assert response.status_code == 400


def test_missing_lead_is_404(login, make_user):
    assert login(make_user()).get("/api/leads/424242").status_code == 404


def test_only_admin_and_manager_delete_leads(login, make_user):
    employee = login(make_user())
    manager = login(make_user(role="manager"))
    lead = employee.post("/api/leads", json=LEAD).json()

    assert employee.delete(f"/api/leads/{lead['id']}").status_code == 403
    assert manager.delete(f"/api/leads/{lead['id']}").status_code == 204
    assert manager.get(f"/api/leads/{lead['id']}").status_code == 404


def test_deal_delete_role_gate(login, make_user):
    employee = login(make_user())
    admin = login(make_user(role="admin"))
    deal = employee.post("/api/deals", json={"title": "Licence", "company": "Acme", "value": 1200}).json()

    assert employee.delete(f"/api/deals/{deal['id']}").status_code == 403
    assert admin.delete(f"/api/deals/{deal['id']}").status_code == 204


def test_deal_value_must_be_non_negative(login, make_user):
    client = login(make_user())
    response = client.post("/api/deals", json={"title": "Bad", "company": "Acme", "value": -1})
    assert response.status_code == 400


def test_employee_updates_only_own_tasks(login, make_user):
    alice = make_user()
    bob = make_user()
    alice_client = login(alice)
    bob_client = login(bob)

    task = alice_client.post("/api/tasks", json={"title": "Call Acme", "assigned_to": alice.id}).json()

    assert bob_client.patch(f"/api/tasks/{task['id']}", json={"title": "Hijacked"}).status_code == 403

    done = alice_client.patch(f"/api/tasks/{task['id']}", json={"status": "done"})
    assert done.status_code == 200
    assert done.json()["completed"] is True


def test_completing_task_sets_status_done(login, make_user):
    manager = login(make_user(role="manager"))
    task = manager.post("/api/tasks", json={"title": "Review"}).json()

    body = manager.patch(f"/api/tasks/{task['id']}", json={"completed": True}).json()
    assert body["status"] == "done"


def test_task_delete_role_gate(login, make_user):
    employee = make_user()
    client = login(employee)
    task = client.post("/api/tasks", json={"title": "Mine", "assigned_to": employee.id}).json()

    assert client.delete(f"/api/tasks/{task['id']}").status_code == 403
    assert login(make_user(role="manager")).delete(f"/api/tasks/{task['id']}").status_code == 204


def test_employee_records_are_admin_managed(login, make_user):
    admin = login(make_user(role="admin"))
    manager = login(make_user(role="manager"))
    staff = make_user()

    payload = {"user_id": staff.id, "department": "Sales"}
    assert manager.post("/api/employees", json=payload).status_code == 403

    created = admin.post("/api/employees", json=payload)
    assert created.status_code == 201
    employee = created.json()
    assert employee["performance_score"] == 0

    duplicate = admin.post("/api/employees", json=payload)
    assert duplicate.status_code == 400

    assert manager.patch(f"/api/employees/{employee['id']}", json={"department": "Ops"}).status_code == 403
    assert admin.patch(f"/api/employees/{employee['id']}", json={"performance_score": 90}).json()["performance_score"] == 90
    assert manager.get("/api/employees").status_code == 200
    assert admin.delete(f"/api/employees/{employee['id']}").status_code == 204


def test_dashboard_analytics(login, make_user):
    client = login(make_user(role="admin"))
    client.post("/api/leads", json=LEAD)
    client.post("/api/leads", json={**LEAD, "name": "Second"})
    client.post("/api/deals", json={"title": "Won", "company": "Acme", "value": 500, "stage": "closed"})
    client.post("/api/deals", json={"title": "Open", "company": "Acme", "value": 900})
    client.post("/api/tasks", json={"title": "Done", "completed": True})
    client.post("/api/tasks", json={"title": "Todo"})

    metrics = client.get("/api/analytics/dashboard").json()
    assert metrics == {
        "total_leads": 2,
        "active_deals": 1,
        "total_revenue": 500,
        "conversion_rate": 50,
        "task_completion_rate": 50,
        "active_employees": 0,
    }


def test_activity_feed_records_mutations(login, make_user):
    client = login(make_user(role="admin"))
    lead = client.post("/api/leads", json=LEAD).json()
    client.patch(f"/api/leads/{lead['id']}", json={"stage": "closed"})

    feed = client.get("/api/activities", params={"limit": 5}).json()
    assert [item["activity_type"] for item in feed[:2]] == ["updated", "created"]
    assert feed[0]["entity_type"] == "lead"
    assert feed[0]["details"]["stage"] == {"from": "lead", "to": "closed"}

    assert client.get("/api/activities", params={"limit": 500}).status_code == 400
