import logging
from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest
from sqlalchemy.exc import SQLAlchemyError

from regixo.core.config import settings
from regixo.core.exceptions import (
    BadRequestError, InternalError, NotFoundError, PolicyRejectedError, RateLimitedError,
)
from regixo.models import Registration
from regixo.schemas import RegisterRequest
from regixo.services.policy import check_event_open, deadline_passed, effective_deadline
from regixo.services.registration import RegistrationService
from tests.factories import EventFactory, RegistrationFactory

UTC = timezone.utc


def request_for(event, **fields):
    data = {"event_id": event.id, "name": "Tanvir Hasan", "phone": "01812345678"}
    data.update(fields)
    return RegisterRequest(**data)


class TestEffectiveDeadline:
    def test_midnight_means_end_of_day(self):
        deadline = datetime(2026, 3, 10, 0, 0, tzinfo=UTC)

        result = effective_deadline(deadline, ZoneInfo("UTC"))

        assert result == datetime(2026, 3, 10, 23, 59, 59, 999000, tzinfo=UTC)

    def test_explicit_time_is_kept(self):
        deadline = datetime(2026, 3, 10, 18, 30, tzinfo=UTC)

        assert effective_deadline(deadline, ZoneInfo("UTC")) == deadline

    def test_naive_values_are_read_as_utc(self):
        result = effective_deadline(datetime(2026, 3, 10), ZoneInfo("UTC"))

        assert result.hour == 23 and result.date().day == 10

    def test_midnight_is_judged_in_event_timezone(self, monkeypatch):
        monkeypatch.setattr(settings, "EVENT_TIMEZONE", "Asia/Dhaka")
        dhaka = ZoneInfo("Asia/Dhaka")
        # 00:00 in Dhaka on 10 March
        deadline = datetime(2026, 3, 9, 18, 0, tzinfo=UTC)

        result = effective_deadline(deadline)

        assert result == datetime(2026, 3, 10, 23, 59, 59, 999000, tzinfo=dhaka)


class TestDeadlineRegistration:
    def test_registration_at_22h_on_deadline_day_succeeds(self, db_session):
        event = EventFactory(registration_deadline=datetime(2026, 3, 10, tzinfo=UTC))
        late_evening = datetime(2026, 3, 10, 22, 0, tzinfo=UTC)

        response = RegistrationService(db_session).register(request_for(event), "unknown", now=late_evening)

        assert response.success is True
        assert db_session.get(Registration, response.registration_id).status == "pending"

    def test_next_day_is_too_late(self, db_session):
        event = EventFactory(registration_deadline=datetime(2026, 3, 10, tzinfo=UTC))

        assert deadline_passed(event, datetime(2026, 3, 11, 0, 0, 1, tzinfo=UTC))
        with pytest.raises(PolicyRejectedError, match="deadline"):
            check_event_open(db_session, request_for(event), now=datetime(2026, 3, 11, 8, 0, tzinfo=UTC))


class TestGateOrder:
    def test_missing_fields_reported_before_lookup(self, db_session):
        with pytest.raises(BadRequestError):
            check_event_open(db_session, RegisterRequest(event_id="missing", name=""))

    def test_unknown_event(self, db_session):
        with pytest.raises(NotFoundError):
            check_event_open(db_session, RegisterRequest(event_id="missing", name="Tanvir"))

    def test_closed_event_reported_before_deadline(self, db_session):
        event = EventFactory(
            status="closed",
            registration_deadline=datetime.now(UTC) - timedelta(days=3),
        )

        with pytest.raises(PolicyRejectedError, match="not open"):
            check_event_open(db_session, request_for(event))

    def test_deadline_reported_before_capacity(self, db_session):
        event = EventFactory(
            seat_limit=1,
            registration_deadline=datetime.now(UTC) - timedelta(days=3),
        )
        RegistrationFactory(event=event, status="approved")

        with pytest.raises(PolicyRejectedError, match="deadline"):
            check_event_open(db_session, request_for(event))

    def test_seat_limit_of_zero_means_unlimited(self, db_session):
        event = EventFactory(seat_limit=0)
        RegistrationFactory.create_batch(3, event=event)

        assert check_event_open(db_session, request_for(event)).id == event.id


class TestRegistrationService:
    def test_throttle_counts_prior_rows_only(self, db_session, monkeypatch):
        monkeypatch.setattr(settings, "RATE_LIMIT_MAX_REGISTRATIONS", 2)
        event = EventFactory()
        service = RegistrationService(db_session)

        service.register(request_for(event), "192.0.2.1")
        service.register(request_for(event), "192.0.2.1")

        with pytest.raises(RateLimitedError):
            service.register(request_for(event), "192.0.2.1")

    def test_close_if_full_is_idempotent(self, db_session):
        event = EventFactory(seat_limit=1)
        RegistrationFactory(event=event)
        service = RegistrationService(db_session)

        assert service.close_if_full(event) is True
        assert service.close_if_full(event) is True
        db_session.expire_all()
        assert event.status == "closed"

    def test_insert_failure_raises_internal_error_and_leaves_no_row(self, db_session, monkeypatch):
        event = EventFactory()
        service = RegistrationService(db_session)

        def broken_commit():
            raise SQLAlchemyError("disk I/O error")

        monkeypatch.setattr(db_session, "commit", broken_commit)

        with pytest.raises(InternalError):
            service.register(request_for(event), "192.0.2.1")
        assert db_session.query(Registration).count() == 0

    def test_failed_auto_close_is_logged_and_registration_stands(self, db_session, monkeypatch, caplog):
        event = EventFactory(seat_limit=1)
        service = RegistrationService(db_session)
        real_commit = db_session.commit
        commits = []

        def commit_once_then_fail():
            commits.append(1)
            if len(commits) > 1:
                raise SQLAlchemyError("database is locked")
            real_commit()

        monkeypatch.setattr(db_session, "commit", commit_once_then_fail)

        with caplog.at_level(logging.ERROR, logger="regixo.services.registration"):
            result = service.register(request_for(event), "192.0.2.1")

        assert result.success is True
        assert "Auto-close failed" in caplog.text
        db_session.expire_all()
        assert event.status == "published"
        assert db_session.query(Registration).count() == 1
