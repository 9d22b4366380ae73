from datetime import date

from db.repositories.send_log_repo import SendLogRepository
from services.auth_service import create_user


def _create_reminder(client, **overrides):
    payload = {
        "type": "Gehalt",
        "due_date": "2030-01-15",
        "schedules": [{"label": "1 Woche vorher", "days_before": 7, "time_of_day": "09:00"}],
        "recipients": ["hr@example.com", " "],
    }
    payload.update(overrides)
    return client.post("/api/v1/reminders/", json=payload)


def test_health(client):
    response = client.get("/api/v1/health")
    assert response.status_code == 200
    assert response.json()["database"] == "ok"


def test_requires_login(client):
    assert client.get("/api/v1/employees/").status_code == 401


def test_login_failure(client):
    response = client.post("/api/v1/auth/login", json={"email": "nobody@example.com", "password": "x"})
    assert response.status_code == 401


def test_me_and_logout(admin_client):
    me = admin_client.get("/api/v1/auth/me")
    assert me.status_code == 200
    assert me.json()["role"] == "ADMIN"
    assert admin_client.post("/api/v1/auth/logout").status_code == 200
    assert admin_client.get("/api/v1/auth/me").status_code == 401


def test_role_check(client, session):
    create_user(session, "lead@example.com", "lead-secret", "TEAM_LEAD")
    client.post("/api/v1/auth/login", json={"email": "lead@example.com", "password": "lead-secret"})
    assert client.get("/api/v1/employees/").status_code == 200
    assert client.post("/api/v1/employees/", json={"first_name": "A", "last_name": "B"}).status_code == 403


def test_employee_crud(admin_client):
    created = admin_client.post(
        "/api/v1/employees/",
        json={"first_name": "Anna", "last_name": "Muster", "start_date": "2015-06-10"},
    )
    assert created.status_code == 201
    employee_id = created.json()["id"]

    patched = admin_client.patch(f"/api/v1/employees/{employee_id}", json={"email": "anna@example.com"})
    assert patched.json()["email"] == "anna@example.com"
    assert admin_client.get("/api/v1/employees/?q=Must").json()[0]["id"] == employee_id
    assert admin_client.get("/api/v1/employees/9999").status_code == 404


def test_employee_patch_rejects_null_names(admin_client):
    employee_id = admin_client.post("/api/v1/employees/", json={"first_name": "Anna", "last_name": "Muster"}).json()["id"]
    assert admin_client.patch(f"/api/v1/employees/{employee_id}", json={"first_name": None}).status_code == 422
    assert admin_client.patch(f"/api/v1/employees/{employee_id}", json={"last_name": None}).status_code == 422
    assert admin_client.get(f"/api/v1/employees/{employee_id}").json()["first_name"] == "Anna"


def test_reminder_crud_strips_blank_recipients(admin_client):
    response = _create_reminder(admin_client)
    assert response.status_code == 201
    body = response.json()
    assert [r["email"] for r in body["recipients"]] == ["hr@example.com"]
    assert body["schedules"][0]["time_of_day"] == "09:00"

    updated = admin_client.patch(
        f"/api/v1/reminders/{body['id']}",
        json={"schedules": [{"label": "Am Tag", "days_before": 0}]},
    )
    assert [s["label"] for s in updated.json()["schedules"]] == ["Am Tag"]

    assert admin_client.delete(f"/api/v1/reminders/{body['id']}").json() == {"ok": True}
    assert admin_client.get(f"/api/v1/reminders/{body['id']}").status_code == 404


def test_reminder_patch_rejects_null_for_required_fields(admin_client):
    reminder_id = _create_reminder(admin_client).json()["id"]
    for field in ("due_date", "type", "active"):
        response = admin_client.patch(f"/api/v1/reminders/{reminder_id}", json={field: None})
        assert response.status_code == 422, field

    current = admin_client.get(f"/api/v1/reminders/{reminder_id}").json()
    assert current["due_date"] == "2030-01-15"
    assert current["type"] == "Gehalt"
    assert current["active"] is True
    # nullable fields can still be cleared
    cleared = admin_client.patch(f"/api/v1/reminders/{reminder_id}", json={"description": None})
    assert cleared.status_code == 200


def test_reminder_rejects_bad_time_of_day(admin_client):
    response = _create_reminder(admin_client, schedules=[{"label": "x", "days_before": 1, "time_of_day": "9am"}])
    assert response.status_code == 422


def test_reminder_requires_type(admin_client):
    response = _create_reminder(admin_client, type=None)
    assert response.status_code == 400


def test_reminder_type_fills_label(admin_client):
    created = admin_client.post("/api/v1/reminder-types/", json={"key": "BONUS", "label": "Bonus"})
    assert created.status_code == 201
    type_id = created.json()["id"]
    assert admin_client.post("/api/v1/reminder-types/", json={"key": "BONUS", "label": "Dup"}).status_code == 409

    reminder = _create_reminder(admin_client, type=None, reminder_type_id=type_id)
    assert reminder.json()["type"] == "Bonus"
    # in use, cannot be removed
    assert admin_client.delete(f"/api/v1/reminder-types/{type_id}").status_code == 409


def test_manual_send(admin_client, mailer, session):
    reminder_id = _create_reminder(admin_client).json()["id"]
    response = admin_client.post("/api/v1/reminders/send", json={"reminder_id": reminder_id})
    assert response.status_code == 200
    assert response.json()["sent"] == 1
    assert response.json()["not_configured"] == 0
    assert mailer.sent[0]["to"] == "hr@example.com"
    assert len(SendLogRepository(session).list_by_reminder(reminder_id)) == 1


def test_manual_send_failure_maps_to_500(admin_client, mailer):
    reminder_id = _create_reminder(admin_client).json()["id"]
    mailer.fail_for.add("hr@example.com")
    response = admin_client.post("/api/v1/reminders/send", json={"reminder_id": reminder_id})
    assert response.status_code == 500
    assert "hr@example.com" in response.json()["detail"]


def test_manual_send_without_smtp_maps_to_400(admin_client, mailer, session):
    reminder_id = _create_reminder(admin_client).json()["id"]
    mailer.skip = True
    response = admin_client.post("/api/v1/reminders/send", json={"reminder_id": reminder_id})
    assert response.status_code == 400
    assert response.json()["detail"] == "SMTP is not configured"
    assert SendLogRepository(session).list_by_reminder(reminder_id) == []


def test_manual_send_unknown_and_empty(admin_client):
    assert admin_client.post("/api/v1/reminders/send", json={"reminder_id": 4242}).status_code == 404
    reminder_id = _create_reminder(admin_client, recipients=[]).json()["id"]
    assert admin_client.post("/api/v1/reminders/send", json={"reminder_id": reminder_id}).status_code == 400


def test_scheduled_run_endpoint(admin_client):
    response = admin_client.post("/api/v1/reminders/run")
    assert response.status_code == 200
    assert response.json() == {"ok": True, "sent": 0, "already_sent": 0, "not_configured": 0, "errors": []}


def test_lifecycle_generate_and_patch(admin_client):
    seeded = admin_client.post("/api/v1/lifecycle/seed").json()
    assert seeded["roles"] == 6 and seeded["reminder_types"] == 6

    template = admin_client.post(
        "/api/v1/lifecycle/templates",
        json={"title": "Laptop", "type": "ONBOARDING", "relative_due_days": -2},
    ).json()
    employee = admin_client.post(
        "/api/v1/employees/",
        json={"first_name": "Neu", "last_name": "Kollege", "start_date": "2030-03-01"},
    ).json()

    generated = admin_client.post("/api/v1/lifecycle/generate", json={"employee_id": employee["id"], "type": "ONBOARDING"})
    assert generated.json() == {"generated": 1}
    missing = admin_client.post(
        "/api/v1/lifecycle/generate",
        json={"employee_id": employee["id"], "type": "ONBOARDING", "template_id": 999},
    )
    assert missing.status_code == 404

    tasks = admin_client.get("/api/v1/lifecycle/tasks?type=ONBOARDING").json()
    assert len(tasks) == 1
    assert tasks[0]["template"]["id"] == template["id"]
    assert tasks[0]["due_date"] == "2030-02-27"
    assert tasks[0]["is_overdue"] is False

    done = next(s for s in admin_client.get("/api/v1/lifecycle/statuses").json() if s["key"] == "DONE")
    patched = admin_client.patch(f"/api/v1/lifecycle/tasks/{tasks[0]['id']}", json={"status_id": done["id"], "notes": "ok"})
    assert patched.status_code == 200
    assert patched.json()["completed_at"] is not None
    assert patched.json()["notes"] == "ok"


def test_lifecycle_patch_rejects_null_for_required_fields(admin_client):
    admin_client.post("/api/v1/lifecycle/seed")
    template = admin_client.post("/api/v1/lifecycle/templates", json={"title": "Laptop", "type": "ONBOARDING"}).json()
    assert admin_client.patch(f"/api/v1/lifecycle/templates/{template['id']}", json={"title": None}).status_code == 422
    status = admin_client.get("/api/v1/lifecycle/statuses").json()[0]
    assert admin_client.patch(f"/api/v1/lifecycle/statuses/{status['id']}", json={"is_done": None}).status_code == 422
    assert admin_client.patch(f"/api/v1/lifecycle/statuses/{status['id']}", json={"label": None}).status_code == 422


def test_status_change_generates_tasks(admin_client):
    admin_client.post("/api/v1/lifecycle/templates", json={"title": "Abgabe", "type": "OFFBOARDING"})
    employee = admin_client.post("/api/v1/employees/", json={"first_name": "Alt", "last_name": "Kollege"}).json()
    response = admin_client.post(
        f"/api/v1/employees/{employee['id']}/status",
        json={"status": "OFFBOARDING", "exit_date": "2030-06-30"},
    )
    assert response.status_code == 200
    assert response.json()["generated"] == 1
    assert response.json()["employee"]["status"] == "OFFBOARDING"


def test_settings_hide_password(admin_client):
    current = admin_client.get("/api/v1/settings/").json()
    assert current["smtp_pass_set"] is False
    assert "smtp_pass" not in current

    payload = {k: v for k, v in current.items() if k != "smtp_pass_set"}
    payload.update({"smtp_pass": "secret", "jubilee_years_csv": "5, 10 ,25"})
    saved = admin_client.put("/api/v1/settings/", json=payload).json()
    assert saved["smtp_pass_set"] is True
    assert saved["jubilee_years_csv"] == "5,10,25"

    # omitted password keeps the stored one
    payload.pop("smtp_pass")
    assert admin_client.put("/api/v1/settings/", json=payload).json()["smtp_pass_set"] is True


def test_settings_test_mail(admin_client, mailer):
    response = admin_client.post("/api/v1/settings/test-mail", json={"to": "me@example.com"})
    assert response.status_code == 200
    assert mailer.sent[0]["to"] == "me@example.com"


def test_jubilees_and_daily_run(admin_client, mailer, session):
    admin_client.post(
        "/api/v1/employees/",
        json={"first_name": "Anna", "last_name": "Muster", "start_date": "2015-06-10", "birth_date": "1990-06-10", "email": "anna@example.com"},
    )
    groups = admin_client.get("/api/v1/jubilees?on=2025-06-10").json()
    assert groups == [
        {
            "years": 10,
            "hits": [
                {
                    "employee_id": 1,
                    "first_name": "Anna",
                    "last_name": "Muster",
                    "years": 10,
                    "anniversary_date": "2025-06-10",
                }
            ],
        }
    ]
    assert admin_client.get("/api/v1/jubilees?window_days=1000").status_code == 400

    daily = admin_client.post("/api/v1/daily/run?on=2025-06-10").json()
    assert daily["birthdays"] == 1
    assert daily["jubilee_hits"] == 1
    # no manager addresses configured
    assert daily["managers_notified"] == 0
    assert mailer.sent[0]["to"] == "anna@example.com"
