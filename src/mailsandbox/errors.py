"""Error hierarchy for the mailsandbox harness."""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum


class ErrorKind(str, Enum):
    """Failure categories, usable as an alternative to matching on class."""

    TRANSPORT = "transport"
    PROTOCOL = "protocol"
    NOT_FOUND = "not_found"
    DECODE = "decode"
    AMBIGUOUS = "ambiguous"
    CONFIGURATION = "configuration"
    TIMEOUT = "timeout"


class MailSandboxError(Exception):
    """Base exception for all mailsandbox errors."""

    kind: ErrorKind


class TransportError(MailSandboxError):
    """The mailbox provider could not be reached or answered with an HTTP error.

    Attributes:
        status_code: The HTTP status code, or None for network-level failures.
        message: The error message.
    """

    kind = ErrorKind.TRANSPORT

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        self.message = message
        if status_code is None:
            super().__init__(message)
        else:
            super().__init__(f"HTTP Error ({status_code}): {message}")


class ProtocolError(MailSandboxError):
    """The provider response does not have the expected shape."""

    kind = ErrorKind.PROTOCOL


class MessageNotFoundError(MailSandboxError):
    """Message vanished between listing and fetch (404)."""

    kind = ErrorKind.NOT_FOUND


class DecodeError(MailSandboxError):
    """Raw message content could not be parsed as a mail message."""

    kind = ErrorKind.DECODE


class AmbiguousMatchError(MailSandboxError, AssertionError):
    """More than one owned message matched a query expected to be unique.

    This signals a test-authoring or SUT bug (e.g. a notification sent twice),
    so it is reported as an assertion failure by test runners.

    Attributes:
        count: Number of owned messages that matched.
        message_ids: Identifiers of the matching messages.
    """

    kind = ErrorKind.AMBIGUOUS

    def __init__(self, count: int, message_ids: Sequence[str] = ()) -> None:
        self.count = count
        self.message_ids = tuple(message_ids)
        detail = f" (ids: {', '.join(self.message_ids)})" if self.message_ids else ""
        super().__init__(f"More than one matching message found: {count}{detail}")


class ConfigurationError(MailSandboxError):
    """Missing or invalid harness configuration."""

    kind = ErrorKind.CONFIGURATION


class TimeoutError(MailSandboxError):
    """Waiting for a message timed out."""

    kind = ErrorKind.TIMEOUT
