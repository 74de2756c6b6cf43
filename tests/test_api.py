"""End-to-end tests through the HTTP surface."""

import time

from fastapi.testclient import TestClient
from sqlalchemy import select
from sqlalchemy.exc import OperationalError

import ncc_portal.main as main_module
from conftest import PASSWORD, register
from ncc_portal.core.config import settings
from ncc_portal.main import app
from ncc_portal.models import AuditLog
from ncc_portal.services import students as student_service
from ncc_portal.services.audit import verify_audit

PROFILE = {
    "name": "Asha Rao",
    "email": "asha@example.com",
    "aadhaar_number": "123456789012",
    "account_number": "00011122233",
}


def _profile(**overrides):
    return {**PROFILE, **overrides}


def test_health(client: TestClient) -> None:
    resp = client.get("/api/health")
    assert resp.status_code == 200
    assert resp.json()["ok"] is True
    assert resp.headers["X-Correlation-ID"]


def test_requires_sign_in(client: TestClient) -> None:
    assert client.get("/api/students/me").status_code == 401
    assert client.get("/api/admin/students").status_code == 401


def test_session_lifecycle(client: TestClient) -> None:
    register(client, "asha@example.com")
    me = client.get("/api/me").json()
    assert me["email"] == "asha@example.com"
    assert me["is_admin"] is False

    assert client.post("/api/logout").json() == {"ok": True}
    assert client.get("/api/me").status_code == 401

    resp = client.post("/api/login", data={"email": "asha@example.com", "password": "wrong-password"})
    assert resp.status_code == 401
    resp = client.post("/api/login", data={"email": "ASHA@example.com", "password": PASSWORD})
    assert resp.status_code == 200
    assert client.get("/api/me").status_code == 200


def test_register_rejects_duplicates_and_weak_passwords(client: TestClient) -> None:
    register(client, "asha@example.com")
    resp = client.post("/api/register", data={"email": "asha@example.com", "password": PASSWORD})
    assert resp.status_code == 409
    resp = client.post("/api/register", data={"email": "new@example.com", "password": "short"})
    assert resp.status_code == 422


def test_profile_end_to_end(student_client: TestClient) -> None:
    assert student_client.get("/api/students/me").json() == []

    resp = student_client.post("/api/students/me", json=_profile())
    assert resp.status_code == 201
    student_id = resp.json()["student_id"]

    rows = student_client.get("/api/students/me").json()
    assert len(rows) == 1
    assert rows[0]["student_id"] == student_id
    assert rows[0]["aadhaar_number"] == "123456789012"
    assert rows[0]["account_number"] == "00011122233"
    assert not any(k.endswith("_encrypted") for k in rows[0])


def test_insert_twice_and_update_missing(student_client: TestClient) -> None:
    resp = student_client.put("/api/students/me", json=_profile())
    assert resp.status_code == 404

    assert student_client.post("/api/students/me", json=_profile()).status_code == 201
    resp = student_client.post("/api/students/me", json=_profile())
    assert resp.status_code == 409

    resp = student_client.put("/api/students/me", json=_profile(branch="Mechanical", year=3))
    assert resp.status_code == 204
    row = student_client.get("/api/students/me").json()[0]
    assert row["branch"] == "Mechanical"
    assert row["year"] == 3


def test_validation_message_is_short(student_client: TestClient) -> None:
    resp = student_client.post("/api/students/me", json=_profile(phone_number="12345"))
    assert resp.status_code == 422
    assert resp.json() == {"detail": "Phone number must be exactly 10 digits", "field": "phone_number"}
    assert student_client.get("/api/students/me").json() == []


def test_experiences_end_to_end(student_client: TestClient, admin_client: TestClient) -> None:
    student_client.post("/api/students/me", json=_profile())
    for exp in (
        {"experience": "placement", "company_name": "Infosys", "role": "Engineer"},
        {"experience": "internship", "company_name": "ISRO", "start_date": "2023-05-01",
         "end_date": "2023-07-31"},
    ):
        assert student_client.post("/api/students/me/experiences", json=exp).status_code == 201

    own = student_client.get("/api/students/me/experiences").json()
    assert sorted(e["experience"] for e in own) == ["internship", "placement"]

    agg = admin_client.get("/api/admin/experiences").json()
    assert sorted((e["company_name"], e["experience"]) for e in agg) == [
        ("ISRO", "internship"), ("Infosys", "placement"),
    ]
    assert {e["student_name"] for e in agg} == {"Asha Rao"}


def test_ncc_end_to_end(student_client: TestClient, admin_client: TestClient) -> None:
    resp = student_client.post("/api/students/me/ncc", json={"ncc_wing": "air"})
    assert resp.status_code == 404

    student_client.post("/api/students/me", json=_profile())
    resp = student_client.post("/api/students/me/ncc", json={
        "ncc_wing": "air", "regimental_number": "MH/23/SWA/101", "enrollment_date": "2023-08-15",
    })
    assert resp.status_code == 201
    assert student_client.get("/api/students/me/ncc").json()[0]["ncc_wing"] == "air"

    resp = student_client.post("/api/students/me/ncc", json={"ncc_wing": "marines"})
    assert resp.status_code == 422

    agg = admin_client.get("/api/admin/ncc").json()
    assert [(n["ncc_wing"], n["student_email"]) for n in agg] == [("air", "asha@example.com")]


def test_admin_views_denied_for_students(student_client: TestClient) -> None:
    student_client.post("/api/students/me", json=_profile())
    for path in ("/api/admin/students", "/api/admin/ncc", "/api/admin/experiences", "/api/admin/export.xlsx"):
        resp = student_client.get(path)
        assert resp.status_code == 403
        assert resp.json() == {"detail": "Access denied."}


def test_admin_sees_everyone(student_client: TestClient, admin_client: TestClient) -> None:
    student_client.post("/api/students/me", json=_profile())
    assert admin_client.get("/api/me").json()["is_admin"] is True

    rows = admin_client.get("/api/admin/students").json()
    assert [r["name"] for r in rows] == ["Asha Rao"]
    assert not any(k.endswith("_encrypted") for k in rows[0])

    # admin's own decrypted read only ever covers the admin's identity
    assert admin_client.get("/api/students/me").json() == []


def test_admin_export(student_client: TestClient, admin_client: TestClient, db) -> None:
    student_client.post("/api/students/me", json=_profile())
    resp = admin_client.get("/api/admin/export.xlsx")
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith(
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    )
    assert resp.content[:2] == b"PK"

    rows = db.execute(select(AuditLog).where(AuditLog.action == "ADMIN_EXPORT")).scalars().all()
    assert len(rows) == 1
    assert rows[0].status == "SUCCESS"
    assert verify_audit(rows[0])


def _audit_rows(db, action):
    return db.execute(select(AuditLog).where(AuditLog.action == action)).scalars().all()


def test_health_db(client: TestClient) -> None:
    resp = client.get("/api/health/db")
    assert resp.status_code == 200
    assert resp.json() == {"ok": True, "db": "ok"}
    assert client.get("/api/health").json()["field_key"] == "configured"


def test_health_db_reports_unavailable_store(client: TestClient, monkeypatch) -> None:
    def _down(self, *args, **kwargs):
        raise OperationalError("SELECT 1", {}, Exception("database is locked"))

    monkeypatch.setattr("sqlalchemy.orm.Session.execute", _down)
    resp = client.get("/api/health/db")
    assert resp.status_code == 503
    assert resp.json() == {"ok": False, "db": "unavailable"}


def test_idle_session_expires(student_client: TestClient, monkeypatch) -> None:
    assert student_client.get("/api/students/me").status_code == 200

    later = time.time() + settings.IDLE_TIMEOUT_SEC + 60
    monkeypatch.setattr(main_module, "_now", lambda: later)
    resp = student_client.get("/api/students/me", headers={"X-Correlation-ID": "cid-idle-1"})

    assert resp.status_code == 401
    assert resp.headers["X-Session-Expired"] == "1"
    assert resp.json() == {"detail": "Session expired, please sign in again."}
    assert resp.headers["X-Correlation-ID"] == "cid-idle-1"

    # the session was cleared, not just refused once
    monkeypatch.undo()
    assert student_client.get("/api/me").status_code == 401


def test_unhandled_error_is_generic_500(db, monkeypatch) -> None:
    def _boom(*args, **kwargs):
        raise RuntimeError("secret internals")

    with TestClient(app, raise_server_exceptions=False) as c:
        register(c, "asha@example.com")
        monkeypatch.setattr(student_service, "get_student_decrypted", _boom)
        resp = c.get("/api/students/me")

    assert resp.status_code == 500
    assert resp.json() == {"detail": "Something went wrong. Please try again."}
    assert "secret internals" not in resp.text

    rows = _audit_rows(db, "EXCEPTION")
    assert len(rows) == 1
    assert rows[0].status == "FAILURE"
    assert rows[0].new_values == {"path": "/api/students/me", "error": "RuntimeError"}
    assert verify_audit(rows[0])


def test_admin_denial_is_audited(student_client: TestClient, db) -> None:
    me = student_client.get("/api/me").json()
    assert student_client.get("/api/admin/students").status_code == 403

    rows = _audit_rows(db, "ADMIN_DENIED")
    assert [(r.action, r.status) for r in rows] == [("ADMIN_DENIED", "FAILURE")]
    assert rows[0].actor_id == me["id"]
    assert rows[0].path == "/api/admin/students"


def test_login_is_audited(client: TestClient, db) -> None:
    user = register(client, "asha@example.com")
    client.post("/api/logout")
    assert _audit_rows(db, "LOGIN") == []

    client.post("/api/login", data={"email": "asha@example.com", "password": "wrong-password"})
    assert _audit_rows(db, "LOGIN") == []

    assert client.post("/api/login", data={"email": "asha@example.com", "password": PASSWORD}).status_code == 200
    rows = _audit_rows(db, "LOGIN")
    assert len(rows) == 1
    assert rows[0].target_id == user["id"]
    assert rows[0].actor_id == user["id"]
    assert verify_audit(rows[0])
