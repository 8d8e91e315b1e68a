"""
Till Staff Engine — Tests
============================
Roster management, authentication, session and clock in/out.
"""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from core.commands.errors import (
    Forbidden,
    InvalidCredentials,
    NotAuthenticated,
    NotFound,
    ValidationError,
)
from core.events.dispatcher import EventDispatcher
from core.security.password import BcryptCredentialVerifier
from core.time.clock import FixedClock
from engines.staff.events import (
    STAFF_CLOCK_CLOCKED_OUT_V1,
    STAFF_EMPLOYEE_ADDED_V1,
    STAFF_SESSION_LOGGED_IN_V1,
)
from engines.staff.models import Employee
from engines.staff.services import EmployeeRoster, Session

NOW = datetime(2026, 3, 1, 9, 0, 0, tzinfo=timezone.utc)


def make_roster(clock=None, dispatcher=None) -> EmployeeRoster:
    roster = EmployeeRoster(
        BcryptCredentialVerifier(rounds=4),
        clock=clock or FixedClock(NOW),
        event_dispatcher=dispatcher,
    )
    roster.add("johndoe", "password123", "cashier", employee_id="emp-1",
               social_security="123-45-6789")
    roster.add("janesmith", "password456", "manager", employee_id="emp-2")
    roster.add("bobwilliams", "password000", "owner", employee_id="emp-4")
    return roster


def make_session(dispatcher=None):
    clock = FixedClock(NOW)
    roster = make_roster(clock, dispatcher)
    return Session(roster, clock=clock, event_dispatcher=dispatcher), roster, clock


# ══════════════════════════════════════════════════════════════
# EMPLOYEE MODEL
# ══════════════════════════════════════════════════════════════

class TestEmployeeModel:
    def test_unknown_role(self):
        with pytest.raises(ValidationError, match="role"):
            Employee("emp-9", "x", "$2b$hash", role="janitor")

    def test_unknown_status(self):
        with pytest.raises(ValidationError, match="status"):
            Employee("emp-9", "x", "$2b$hash", status="retired")

    def test_to_dict_hides_secrets(self):
        data = Employee(
            "emp-9", "x", "$2b$hash", social_security_hash="$2b$ssn"
        ).to_dict()
        assert "password_hash" not in data
        assert "social_security_hash" not in data
        assert data["has_social_security"] is True


# ══════════════════════════════════════════════════════════════
# ROSTER
# ══════════════════════════════════════════════════════════════

class TestRoster:
    def test_secrets_are_hashed(self):
        employee = make_roster().get("emp-1")
        assert employee.password_hash.startswith("$2b$")
        assert employee.password_hash != "password123"
        assert employee.social_security_hash.startswith("$2b$")

    def test_add_emits_event(self):
        dispatcher = EventDispatcher()
        make_roster(dispatcher=dispatcher)
        events = dispatcher.events(STAFF_EMPLOYEE_ADDED_V1)
        assert len(events) == 3
        assert "password_hash" not in events[0].payload

    def test_duplicate_username(self):
        with pytest.raises(ValidationError, match="taken"):
            make_roster().add("johndoe", "other", "cashier")

    def test_empty_password(self):
        with pytest.raises(ValidationError, match="password"):
            make_roster().add("newbie", "", "cashier")

    def test_unknown_employee(self):
        with pytest.raises(NotFound):
            make_roster().get("emp-404")

    def test_update_contact_and_password(self):
        roster = make_roster()
        updated = roster.update(
            "emp-1", {"email": "john@example.com", "password": "newpass"}
        )
        assert updated.email == "john@example.com"
        assert roster.authenticate("johndoe", "newpass").employee_id == "emp-1"

    def test_update_username_must_stay_unique(self):
        with pytest.raises(ValidationError, match="taken"):
            make_roster().update("emp-1", {"username": "janesmith"})

    def test_unknown_field(self):
        with pytest.raises(ValidationError, match="not editable"):
            make_roster().update("emp-1", {"status": "fired"})

    def test_social_security_owner_only(self):
        roster = make_roster()
        with pytest.raises(Forbidden):
            roster.update(
                "emp-1", {"social_security": "999-99-9999"}, editor=roster.get("emp-2"),
            )

        updated = roster.update(
            "emp-1", {"social_security": "999-99-9999"}, editor=roster.get("emp-4"),
        )
        assert updated.social_security_hash.startswith("$2b$")

    def test_set_status(self):
        roster = make_roster()
        assert roster.set_status("emp-1", "fired").status == "fired"
        with pytest.raises(ValidationError):
            roster.set_status("emp-1", "retired")


class TestAuthenticate:
    def test_success(self):
        assert make_roster().authenticate("johndoe", "password123").role == "cashier"

    @pytest.mark.parametrize(
        "username,password",
        [("johndoe", "wrong"), ("nobody", "password123"), ("", "")],
    )
    def test_failure_is_uniform(self, username, password):
        with pytest.raises(InvalidCredentials) as exc_info:
            make_roster().authenticate(username, password)
        assert exc_info.value.message == "Invalid username or password."

    def test_inactive_employee_refused(self):
        roster = make_roster()
        roster.set_status("emp-1", "terminated")
        with pytest.raises(InvalidCredentials):
            roster.authenticate("johndoe", "password123")


# ══════════════════════════════════════════════════════════════
# SESSION
# ══════════════════════════════════════════════════════════════

class TestSession:
    def test_login_and_current(self):
        dispatcher = EventDispatcher()
        session, _, _ = make_session(dispatcher)
        session.login("johndoe", "password123")

        assert session.employee_id == "emp-1"
        assert session.current_employee().username == "johndoe"
        assert len(dispatcher.events(STAFF_SESSION_LOGGED_IN_V1)) == 1

    def test_bad_login_keeps_session_empty(self):
        session, _, _ = make_session()
        with pytest.raises(InvalidCredentials):
            session.login("johndoe", "nope")
        assert session.current_employee() is None

    def test_second_login_rejected(self):
        session, _, _ = make_session()
        session.login("johndoe", "password123")
        with pytest.raises(ValidationError, match="already logged in"):
            session.login("janesmith", "password456")
        assert session.employee_id == "emp-1"

    def test_stale_inactive_session_replaced(self):
        session, roster, _ = make_session()
        session.login("johndoe", "password123")
        roster.set_status("emp-1", "fired")
        abandoned = []

        session.login("janesmith", "password456", abandon_order=lambda: abandoned.append(1))

        assert session.employee_id == "emp-2"
        assert abandoned == [1]

    def test_logout_runs_abandon_order(self):
        session, _, _ = make_session()
        session.login("johndoe", "password123")
        abandoned = []

        session.logout(abandon_order=lambda: abandoned.append(1))

        assert abandoned == [1]
        assert session.current_employee() is None

    def test_logout_without_session(self):
        session, _, _ = make_session()
        with pytest.raises(NotAuthenticated):
            session.logout()

    def test_status_change_applies_immediately(self):
        session, roster, _ = make_session()
        session.login("johndoe", "password123")
        roster.set_status("emp-1", "eligible_for_rehire")
        assert session.current_employee().is_active is False
        with pytest.raises(NotAuthenticated):
            session.clock_in()


class TestClock:
    def test_clock_in_and_out_accrues_hours(self):
        dispatcher = EventDispatcher()
        session, roster, clock = make_session(dispatcher)
        session.login("johndoe", "password123")

        session.clock_in()
        clock.advance(hours=7.5)
        employee = session.clock_out()

        assert employee.clocked_in is False
        assert employee.total_hours == Decimal("7.5")
        assert employee.last_clock_out == clock.now_utc()
        [event] = dispatcher.events(STAFF_CLOCK_CLOCKED_OUT_V1)
        assert event.payload["hours_worked"] == Decimal("7.5")

    def test_clock_in_twice_is_noop(self):
        session, _, clock = make_session()
        session.login("johndoe", "password123")
        first = session.clock_in()
        clock.advance(hours=1)
        second = session.clock_in()
        assert second.last_clock_in == first.last_clock_in

    def test_clock_out_when_not_in_is_noop(self):
        session, _, _ = make_session()
        session.login("johndoe", "password123")
        employee = session.clock_out()
        assert employee.total_hours == 0
        assert employee.last_clock_out is None

    def test_logout_clocks_out(self):
        session, roster, clock = make_session()
        session.login("johndoe", "password123")
        session.clock_in()
        clock.advance(hours=2)

        session.logout()

        employee = roster.get("emp-1")
        assert employee.clocked_in is False
        assert employee.total_hours == Decimal("2")

    def test_requires_session(self):
        session, _, _ = make_session()
        with pytest.raises(NotAuthenticated):
            session.clock_in()
