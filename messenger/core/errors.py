"""
Closed set of domain errors raised by the services.

Every failure carries an ErrorKind; the HTTP layer maps kinds to status
codes in one place (see messenger.main).
"""
from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    INVALID_INPUT = "invalid_input"
    CONFLICT = "conflict"
    STATE_EXPIRED = "state_expired"
    UNAVAILABLE = "unavailable"


HTTP_STATUS_BY_KIND = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.INVALID_INPUT: 400,
    ErrorKind.CONFLICT: 409,
    ErrorKind.STATE_EXPIRED: 400,
    ErrorKind.UNAVAILABLE: 503,
}


class ServiceError(Exception):
    kind: ErrorKind = ErrorKind.INVALID_INPUT
    default_message: str = "Invalid request"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    @property
    def status_code(self) -> int:
        return HTTP_STATUS_BY_KIND[self.kind]


class NotFound(ServiceError):
    kind = ErrorKind.NOT_FOUND
    default_message = "Not found"


class Forbidden(ServiceError):
    kind = ErrorKind.FORBIDDEN
    default_message = "Forbidden"


class InvalidInput(ServiceError):
    kind = ErrorKind.INVALID_INPUT
    default_message = "Invalid input"


class InvalidTarget(InvalidInput):
    default_message = "Invalid target user"


class InvalidReply(InvalidInput):
    default_message = "Invalid reply_to_message_id"


class InvalidState(InvalidInput):
    default_message = "Operation not allowed in the current state"


class MembersMustBeFriends(InvalidInput):
    default_message = "All members must be your friends"


class Conflict(ServiceError):
    kind = ErrorKind.CONFLICT
    default_message = "Conflict"


class AlreadyFriends(Conflict):
    default_message = "Already friends"


class RequestPending(Conflict):
    default_message = "Friend request already sent"


class Blocked(Conflict):
    default_message = "Cannot send friend request"


class AlreadyMember(Conflict):
    default_message = "User is already a member"


class StateExpired(ServiceError):
    kind = ErrorKind.STATE_EXPIRED
    default_message = "Time window expired"


class EditWindowExpired(StateExpired):
    default_message = "Can only edit messages within 15 minutes of sending"


class DeleteWindowExpired(StateExpired):
    default_message = "Can only delete for everyone within 15 minutes"


class Unavailable(ServiceError):
    kind = ErrorKind.UNAVAILABLE
    default_message = "Storage unavailable"
