"""
Tests for Celery maintenance tasks and the health check.

Task functions are called directly; no broker is needed.
"""

from datetime import timedelta
from sqlalchemy.orm import sessionmaker

from app.core.celery_app import celery_app
from app.core.clock import utcnow
from app.crud import otp_code as otp_crud
from app.crud import session as session_crud
from app.models.otp_code import OTPCode, OTPPurpose
from app.models.session import UserSession
from app.tasks import maintenance_tasks


def test_cleanup_task_removes_expired_rows(db_session, make_user, monkeypatch):
    monkeypatch.setattr(
        maintenance_tasks,
        "SessionLocal",
        sessionmaker(autocommit=False, autoflush=False, bind=db_session.get_bind())
    )
    user = make_user()
    now = utcnow()
    otp_crud.save(db_session, "a@example.com", "111111", OTPPurpose.LOGIN, now - timedelta(minutes=1))
    otp_crud.save(db_session, "a@example.com", "222222", OTPPurpose.REGISTER, now + timedelta(minutes=9))
    session_crud.create(db_session, user.id, user.email, now=now - timedelta(days=7, seconds=1))
    live = session_crud.create(db_session, user.id, user.email)

    result = maintenance_tasks.cleanup_expired_data_task()

    assert result == {"status": "success"}
    db_session.expire_all()
    assert [c.purpose for c in db_session.query(OTPCode).all()] == ["register"]
    assert [s.session_id for s in db_session.query(UserSession).all()] == [live.session_id]


def test_cleanup_is_scheduled_hourly():
    entry = celery_app.conf.beat_schedule["cleanup-expired-auth-data"]

    assert entry["task"] == "cleanup_expired_data_task"
    assert entry["schedule"] == 3600


def test_health_reports_database(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert response.json()["database"] == "healthy"
