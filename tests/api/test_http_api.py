ADMIN, DEAN, PROGRAM_HEAD, GUARD, ACCOUNTING, FACULTY_ID = 1, 3, 4, 6, 7, 5


def _as(person_id):
    return {"X-Person-Id": str(person_id)}


def _schedule(**overrides):
    data = {"person_id": FACULTY_ID, "day_of_week": "Monday", "start_time": "08:00", "end_time": "10:00", "subject": "Math 101"}
    data.update(overrides)
    return data


def test_schedule_conflict_is_409_with_conflicts(client):
    created = client.post("/api/schedules", json=_schedule(), headers=_as(ADMIN))
    assert created.status_code == 201
    assert created.get_json()["entry_id"] == 1

    clash = client.post("/api/schedules", json=_schedule(start_time="09:30", end_time="11:00"), headers=_as(ADMIN))

    assert clash.status_code == 409
    body = clash.get_json()
    assert body["error"] == "schedule_conflict"
    assert body["details"]["conflicts"][0]["entry_id"] == 1


def test_missing_identity_is_403(client):
    resp = client.post("/api/schedules", json=_schedule())

    assert resp.status_code == 403
    assert resp.get_json()["error"] == "forbidden"


def test_list_schedules(client):
    client.post("/api/schedules", json=_schedule(), headers=_as(ADMIN))

    resp = client.get(f"/api/schedules?person_id={FACULTY_ID}&day=Monday")

    assert resp.status_code == 200
    assert [e["subject"] for e in resp.get_json()] == ["Math 101"]


def test_attendance_event_and_resolution(client):
    client.post("/api/schedules", json=_schedule(), headers=_as(ADMIN))

    resp = client.post(
        "/api/attendance/events",
        json={"person_id": FACULTY_ID, "date": "2025-01-06", "schedule_entry_id": 1, "time_in": "2025-01-06T08:16:00"},
    )
    assert resp.status_code == 201
    assert resp.get_json()["resolved"]["status"] == "Late"

    again = client.get("/api/attendance/events/1/resolved")
    assert again.get_json()["status"] == "Late"

    summary = client.get(f"/api/attendance/{FACULTY_ID}/summary?start=2025-01-06&end=2025-01-06")
    assert summary.get_json()["counts"]["Late"] == 1


def test_negative_duration_is_422(client):
    resp = client.post(
        "/api/attendance/events",
        json={"person_id": FACULTY_ID, "date": "2025-01-06", "time_in": "2025-01-06T10:00:00", "time_out": "2025-01-06T09:00:00"},
    )

    assert resp.status_code == 422
    assert resp.get_json()["error"] == "data_error"


def test_payroll_lifecycle(client):
    client.post("/api/schedules", json=_schedule(), headers=_as(ADMIN))
    payload = {"person_id": FACULTY_ID, "start": "2025-01-06", "end": "2025-01-12", "base_pay": "5000"}

    line = client.post("/api/payroll/lines", json=payload, headers=_as(ACCOUNTING)).get_json()
    assert line["net"] == "4760.00"

    assert client.post(f"/api/payroll/lines/{line['line_id']}/finalize", headers=_as(ACCOUNTING)).status_code == 200
    duplicate = client.post(f"/api/payroll/lines/{line['line_id']}/finalize", headers=_as(ACCOUNTING))
    assert duplicate.status_code == 409
    assert duplicate.get_json()["retryable"] is True

    locked = client.post("/api/payroll/lines", json=payload, headers=_as(ACCOUNTING))
    assert locked.status_code == 400
    assert locked.get_json()["error"] == "payroll_locked"

    listed = client.get("/api/payroll/lines?period=2025-01-06/2025-01-12").get_json()
    assert [l["status"] for l in listed] == ["Finalized"]


def test_request_flow_over_http(client):
    created = client.post(
        "/api/requests",
        json={"request_type": "GatePass", "reason": "Bank", "destination": "Bank", "time_out": "2025-01-06T13:00:00"},
        headers=_as(PROGRAM_HEAD),
    )
    rid = created.get_json()["request_id"]

    pending = client.get(f"/api/requests/{rid}").get_json()
    assert pending["allowed_actions"] == ["approve", "reject", "withdraw"]

    assert client.post(f"/api/requests/{rid}/approve", json={"notes": "ok"}, headers=_as(DEAN)).status_code == 200
    guard = client.post(f"/api/requests/{rid}/guard_approve", headers=_as(GUARD))
    assert guard.get_json()["status"] == "GuardApproved"

    wrong = client.post(f"/api/requests/{rid}/approve", headers=_as(DEAN))
    assert wrong.status_code == 400
    assert wrong.get_json()["error"] == "invalid_transition"

    assert client.get(f"/api/requests/{rid}").get_json()["allowed_actions"] == ["guard_unapprove"]

    audit = client.get(f"/api/requests/{rid}/audit").get_json()
    assert [a["action"] for a in audit] == ["submit", "approve", "guard_approve"]

    assert client.post(f"/api/requests/{rid}/teleport", headers=_as(DEAN)).status_code == 404


def test_bad_grace_on_create_is_400(client):
    resp = client.post("/api/schedules", json=_schedule(grace_minutes="ten"), headers=_as(ADMIN))

    assert resp.status_code == 400
    assert resp.get_json()["details"]["field"] == "grace_minutes"


def test_offset_timestamp_is_422(client):
    client.post("/api/schedules", json=_schedule(), headers=_as(ADMIN))

    resp = client.post(
        "/api/attendance/events",
        json={"person_id": FACULTY_ID, "date": "2025-01-06", "schedule_entry_id": 1, "time_in": "2025-01-06T08:16:00+08:00"},
    )

    assert resp.status_code == 422
    assert resp.get_json()["error"] == "data_error"
