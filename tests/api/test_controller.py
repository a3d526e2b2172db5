import pytest

from src.attendance_dashboard.attendance_dashboard.main import create_app


@pytest.fixture
def app(monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    return create_app()


@pytest.fixture
def client(app):
    return app.test_client()


def test_app_uses_testing_settings(app):
    assert app.config["TESTING"] is True
    assert "attendance_dashboard" in app.extensions


def test_login_and_logout(client):
    res = client.post("/api/auth/login", json={"username": "admin", "password": "admin123"})

    assert res.status_code == 200
    body = res.get_json()
    assert body["user"]["role"] == "admin"
    assert body["token"]
    with client.session_transaction() as sess:
        assert sess["employee_id"] == "emp_001"

    assert client.post("/api/auth/logout").get_json() == {"ok": True}
    with client.session_transaction() as sess:
        assert "employee_id" not in sess


def test_login_with_bad_password_returns_401(client):
    res = client.post("/api/auth/login", json={"username": "admin", "password": "nope"})

    assert res.status_code == 401
    assert res.get_json()["error"]


def test_inactive_employee_cannot_log_in(client):
    res = client.post("/api/auth/login", json={"username": "finance1", "password": "finance123"})

    assert res.status_code == 401


def test_employees_never_expose_passwords(client):
    employees = client.get("/api/employees").get_json()

    assert len(employees) == 8
    assert all("password" not in e for e in employees)


def test_unknown_employee_returns_404(client):
    assert client.get("/api/employees/emp_nope").status_code == 404
    assert client.delete("/api/employees/emp_nope").status_code == 404


def test_create_update_and_delete_employee(client):
    res = client.post(
        "/api/employees",
        json={"fullName": "Ana Reyes", "username": "ana", "password": "pw", "department": "IT", "hourlyRate": 18},
    )
    assert res.status_code == 201
    employee_id = res.get_json()["id"]

    res = client.patch(f"/api/employees/{employee_id}", json={"position": "Developer"})
    assert res.get_json()["position"] == "Developer"

    res = client.put(f"/api/employees/{employee_id}/wage", json={"hourlyRate": 21, "reason": "Review"})
    assert res.get_json()["oldRate"] == 18.0
    assert res.get_json()["newRate"] == 21.0

    assert client.delete(f"/api/employees/{employee_id}").get_json() == {"deleted": True}
    assert client.get(f"/api/employees/{employee_id}").status_code == 404


def test_create_employee_requires_name(client):
    res = client.post("/api/employees", json={"username": "ghost"})

    assert res.status_code == 400


def test_non_object_body_is_rejected(client):
    res = client.post("/api/employees", data="[]", content_type="application/json")

    assert res.status_code == 400


def test_wage_update_requires_rate(client):
    assert client.put("/api/employees/emp_002/wage", json={}).status_code == 400


def test_departments(client):
    departments = client.get("/api/departments").get_json()

    assert departments[:2] == ["Management", "Operations"]
    hr = client.get("/api/departments/Human%20Resources/employees").get_json()
    assert [e["id"] for e in hr] == ["emp_007"]


def test_attendance_filters(client):
    records = client.get("/api/attendance?employeeId=emp_001&startDate=2026-10-12&endDate=2026-10-16").get_json()

    assert records
    assert all(r["employeeId"] == "emp_001" for r in records)
    assert all("2026-10-12" <= r["date"] <= "2026-10-16" for r in records)


def test_attendance_rejects_bad_query(client):
    assert client.get("/api/attendance?startDate=yesterday").status_code == 400
    assert client.get("/api/attendance?status=sleeping").status_code == 400


def test_today_attendance_covers_active_employees(client):
    records = client.get("/api/attendance/today").get_json()

    assert len({r["employeeId"] for r in records}) == 7


def test_save_and_update_attendance(client):
    res = client.post(
        "/api/attendance",
        json={"employeeId": "emp_003", "date": "2026-09-01", "clockIn": "07:58", "clockOut": "16:58"},
    )
    assert res.status_code == 201
    record = res.get_json()
    assert record["status"] == "present"
    assert record["hours"] == 9.0

    res = client.patch(f"/api/attendance/{record['id']}", json={"notes": "Adjusted"})
    assert res.get_json()["notes"] == "Adjusted"

    assert client.delete(f"/api/attendance/{record['id']}").get_json() == {"deleted": True}
    assert client.patch(f"/api/attendance/{record['id']}", json={}).status_code == 404


def test_attendance_requires_employee_and_date(client):
    assert client.post("/api/attendance", json={"employeeId": "emp_003"}).status_code == 400


def test_analytics_endpoints(client):
    stats = client.get("/api/analytics/attendance").get_json()
    assert stats["today"]["totalEmployees"] == 7
    assert len(stats["weeklyTrend"]) == 7

    performance = client.get("/api/analytics/performance?employeeId=emp_002").get_json()
    assert [m["employeeId"] for m in performance] == ["emp_002"]

    calendar = client.get("/api/analytics/calendar?start=2026-10-12&end=2026-10-16").get_json()
    assert sorted(calendar) == ["2026-10-12", "2026-10-13", "2026-10-14", "2026-10-15", "2026-10-16"]


def test_payroll_calculation_and_history(client):
    res = client.post(
        "/api/payroll/calculate",
        json={"employeeId": "emp_003", "startDate": "2026-10-12", "endDate": "2026-10-16"},
    )
    assert res.status_code == 201
    record = res.get_json()
    assert record["employeeId"] == "emp_003"
    assert record["netPay"] == pytest.approx(record["grossPay"] - record["taxAmount"])

    history = client.get("/api/payroll?employeeId=emp_003").get_json()
    assert [p["id"] for p in history] == [record["id"]]


def test_payroll_calculation_requires_range(client):
    res = client.post("/api/payroll/calculate", json={"employeeId": "emp_003"})

    assert res.status_code == 400


def test_next_payday(client):
    body = client.get("/api/calendar/next-payday").get_json()

    assert body["frequency"] == "biweekly"
    assert body["daysRemaining"] >= 0


def test_settings_round_trip(client):
    res = client.put("/api/settings", json={"company": {"name": "Acme Builders"}})
    assert res.status_code == 200

    settings = client.get("/api/settings").get_json()
    assert settings["company"]["name"] == "Acme Builders"
    assert settings["payroll"]["taxRate"] == 0.2


def test_settings_rejects_bad_values(client):
    assert client.put("/api/settings", json={"payroll": {"frequency": "hourly"}}).status_code == 400
    assert client.put("/api/settings", json={"payroll": {"taxRate": 3}}).status_code == 400


def test_connection_status(client):
    assert client.post("/api/connection", json={"online": False}).get_json() == {"status": "offline"}
    assert client.post("/api/connection", json={"online": True}).get_json() == {"status": "online"}
