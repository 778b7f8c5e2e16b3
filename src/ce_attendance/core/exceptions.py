from __future__ import annotations

from typing import Optional


class DomainError(Exception):
    """Base exception for business rule violations."""

    code = "domain_error"
    default_message = "Request could not be completed."

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    code = "validation_error"


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""

    code = "authentication_error"
    default_message = "Invalid email or password."


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    code = "authorization_error"
    default_message = "You do not have permission to do that."


class AttendanceError(DomainError):
    """Recoverable check-in/check-out outcome shown to the user."""

    code = "attendance_error"


class InvalidSessionWindow(AttendanceError):
    code = "invalid_session_window"
    default_message = "Session end time must be after its start time."


class SessionNotFound(AttendanceError):
    code = "session_not_found"
    default_message = "That class session could not be found."


class MalformedPayload(AttendanceError):
    code = "malformed_payload"
    default_message = "That QR code is not a class attendance code."


class WrongSession(AttendanceError):
    code = "wrong_session"
    default_message = "That code belongs to a different class session."


class UnknownAction(AttendanceError):
    code = "unknown_action"
    default_message = "That code is neither a check-in nor a check-out code."


class InvalidCode(AttendanceError):
    code = "invalid_code"
    default_message = "That code is not valid for this session."


class WindowClosed(AttendanceError):
    """The action is outside its time window."""

    code = "window_closed"
    default_message = "That action is not available right now."


class TooEarly(WindowClosed):
    code = "too_early"
    default_message = "Check-in is not open yet."


class TooLate(WindowClosed):
    code = "too_late"
    default_message = "Check-in has closed for today."


class CodeExpired(TooLate):
    code = "code_expired"
    default_message = "That code has expired for today."


class NotOnRoster(AttendanceError):
    code = "not_on_roster"
    default_message = "You are not on the roster for this session. Please see the instructor."


class AlreadyCheckedIn(AttendanceError):
    code = "already_checked_in"
    default_message = "You are already checked in for this session."


class AlreadyCheckedOut(AttendanceError):
    code = "already_checked_out"
    default_message = "You are already checked out of this session."


class CheckinRequired(AttendanceError):
    code = "checkin_required"
    default_message = "You must check in before you can check out."


class RecordNotFound(AttendanceError):
    code = "record_not_found"
    default_message = "No attendance record exists for that student."


class ConcurrentUpdate(AttendanceError):
    code = "concurrent_update"
    default_message = "Attendance changed while saving. Please try again."
