from __future__ import annotations

from datetime import date
from typing import Any, Dict, Optional

from flask import Flask, jsonify, request, session

from ..attendance.model import AttendanceFilters, AttendancePatch, NewAttendance
from ..common.datetime_utils import parse_optional_date
from ..container import Container
from ..core.enums import AttendanceStatus
from ..core.exceptions import NotFoundError, ValidationError
from ..employees.auth import AuthSuccess
from ..employees.model import EmployeePatch, NewEmployee
from ..payroll.model import PayrollFilters
from ..settings.model import SettingsPatch


def _json_body() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def _date_arg(name: str, source: Optional[Dict[str, Any]] = None) -> Optional[date]:
    value = (source if source is not None else request.args).get(name)
    try:
        return parse_optional_date(value)
    except ValueError:
        raise ValidationError(f"{name} must be a YYYY-MM-DD date")


def _status_arg() -> Optional[AttendanceStatus]:
    value = request.args.get("status")
    if not value:
        return None
    try:
        return AttendanceStatus(value)
    except ValueError:
        raise ValidationError(f"Unknown attendance status {value!r}")


def register(app: Flask, container: Container) -> None:
    service = container.service

    @app.errorhandler(NotFoundError)
    def handle_not_found(e: NotFoundError):
        return jsonify({"error": str(e)}), 404

    @app.errorhandler(ValidationError)
    def handle_validation(e: ValidationError):
        return jsonify({"error": str(e)}), 400

    # Auth

    @app.post("/api/auth/login")
    async def login():
        data = _json_body()
        result = await service.authenticate(str(data.get("username") or ""), str(data.get("password") or ""))
        if not isinstance(result, AuthSuccess):
            return jsonify({"error": result.message}), 401

        session["employee_id"] = result.user.employee_id
        session["role"] = result.user.role.value
        session["token"] = result.token
        return jsonify({"token": result.token, "user": result.user.to_dict()})

    @app.post("/api/auth/logout")
    async def logout():
        session.clear()
        return jsonify({"ok": True})

    # Employees

    @app.get("/api/employees")
    async def list_employees():
        employees = await service.get_employees()
        return jsonify([e.to_public_dict() for e in employees])

    @app.post("/api/employees")
    async def create_employee():
        employee = await service.add_employee(NewEmployee.from_dict(_json_body()))
        return jsonify(employee.to_public_dict()), 201

    @app.get("/api/employees/<employee_id>")
    async def get_employee(employee_id: str):
        employee = await service.get_employee(employee_id)
        return jsonify(employee.to_public_dict())

    @app.patch("/api/employees/<employee_id>")
    async def update_employee(employee_id: str):
        employee = await service.update_employee(employee_id, EmployeePatch.from_dict(_json_body()))
        return jsonify(employee.to_public_dict())

    @app.delete("/api/employees/<employee_id>")
    async def delete_employee(employee_id: str):
        return jsonify({"deleted": await service.delete_employee(employee_id)})

    @app.put("/api/employees/<employee_id>/wage")
    async def update_wage(employee_id: str):
        data = _json_body()
        if data.get("hourlyRate") is None:
            raise ValidationError("hourlyRate is required")
        change = await service.update_employee_wage(employee_id, data["hourlyRate"], str(data.get("reason") or ""))
        return jsonify(
            {
                "employee": change.employee.to_public_dict(),
                "oldRate": change.old_rate,
                "newRate": change.new_rate,
            }
        )

    @app.get("/api/departments")
    async def list_departments():
        return jsonify(await service.get_departments())

    @app.get("/api/departments/<name>/employees")
    async def department_employees(name: str):
        employees = await service.get_employees_by_department(name)
        return jsonify([e.to_public_dict() for e in employees])

    # Attendance

    @app.get("/api/attendance")
    async def list_attendance():
        filters = AttendanceFilters(
            employee_id=request.args.get("employeeId") or None,
            start_date=_date_arg("startDate"),
            end_date=_date_arg("endDate"),
            status=_status_arg(),
            date=_date_arg("date"),
        )
        records = await service.get_attendance_records(filters)
        return jsonify([r.to_dict() for r in records])

    @app.get("/api/attendance/today")
    async def today_attendance():
        return jsonify([r.to_dict() for r in await service.get_today_attendance()])

    @app.post("/api/attendance")
    async def save_attendance():
        record = await service.add_attendance_record(NewAttendance.from_dict(_json_body()))
        return jsonify(record.to_dict()), 201

    @app.patch("/api/attendance/<record_id>")
    async def update_attendance(record_id: str):
        record = await service.update_attendance_record(record_id, AttendancePatch.from_dict(_json_body()))
        return jsonify(record.to_dict())

    @app.delete("/api/attendance/<record_id>")
    async def delete_attendance(record_id: str):
        return jsonify({"deleted": await service.delete_attendance_record(record_id)})

    # Analytics

    @app.get("/api/analytics/attendance")
    async def attendance_analytics():
        stats = await service.get_attendance_stats(_date_arg("date"))
        return jsonify(stats.to_dict())

    @app.get("/api/analytics/performance")
    async def performance():
        metrics = await service.get_employee_performance(request.args.get("employeeId") or None)
        return jsonify([m.to_dict() for m in metrics])

    @app.get("/api/analytics/calendar")
    async def calendar():
        days = await service.get_calendar_attendance(_date_arg("start"), _date_arg("end"))
        return jsonify({d.isoformat(): info.to_dict() for d, info in days.items()})

    # Payroll

    @app.get("/api/payroll")
    async def payroll_history():
        filters = PayrollFilters(
            employee_id=request.args.get("employeeId") or None,
            start_date=_date_arg("startDate"),
            end_date=_date_arg("endDate"),
        )
        return jsonify([p.to_dict() for p in await service.get_payroll_history(filters)])

    @app.post("/api/payroll/calculate")
    async def calculate_payroll():
        data = _json_body()
        employee_id = data.get("employeeId")
        start, end = _date_arg("startDate", data), _date_arg("endDate", data)
        if not employee_id or start is None or end is None:
            raise ValidationError("employeeId, startDate and endDate are required")
        record = await service.calculate_payroll(str(employee_id), start, end)
        return jsonify(record.to_dict()), 201

    @app.get("/api/calendar/next-payday")
    async def payday():
        schedule = await service.get_next_payday()
        return jsonify(schedule.to_dict())

    # Settings

    @app.get("/api/settings")
    async def get_settings():
        settings = await service.get_settings()
        return jsonify(settings.to_dict())

    @app.put("/api/settings")
    async def save_settings():
        try:
            patch = SettingsPatch.from_dict(_json_body())
        except (AttributeError, TypeError, ValueError) as e:
            raise ValidationError(f"Invalid settings: {e}")
        settings = await service.save_settings(patch)
        return jsonify(settings.to_dict())

    @app.post("/api/connection")
    async def connection():
        data = _json_body()
        service.set_connection_status(bool(data.get("online")))
        return jsonify({"status": "online" if service.is_online else "offline"})
