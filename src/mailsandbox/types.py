"""Type definitions for the mailsandbox harness."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from re import Pattern
from typing import TypedDict

from .constants import (
    DEFAULT_BASE_URL,
    DEFAULT_MAX_CONCURRENT_FETCHES,
    DEFAULT_MAX_RETRIES,
    DEFAULT_POLL_INTERVAL_MS,
    DEFAULT_POLL_MAX_BACKOFF_MS,
    DEFAULT_RETRY_DELAY_MS,
    DEFAULT_RETRY_STATUS_CODES,
    DEFAULT_SMTP_HOST,
    DEFAULT_SMTP_PORT,
    DEFAULT_TIMEOUT_MS,
    DEFAULT_WAIT_TIMEOUT_MS,
)
from .errors import AmbiguousMatchError

# Type alias for subject matchers: plain text is a substring test, patterns use search()
SubjectMatcher = str | Pattern[str]


@dataclass(frozen=True)
class MailboxConfig:
    """Configuration of the shared sandbox mailbox.

    Instances are immutable; use ``dataclasses.replace`` to derive an
    overridden configuration.

    Attributes:
        api_token: API token for the provider's HTTP API.
        inbox_id: Identifier of the shared inbox.
        mailbox: SMTP username of the shared mailbox. Also the namespace of
            generated identities.
        password: SMTP password of the shared mailbox.
        base_url: Base URL for the provider's HTTP API.
        smtp_host: SMTP host the SUT should deliver to.
        smtp_port: SMTP port the SUT should deliver to.
        timeout: HTTP request timeout in milliseconds.
        max_retries: Transport retry attempts per request (0 = single pass).
        retry_delay: Initial retry delay in milliseconds.
        retry_on_status_codes: HTTP status codes that trigger retries.
        max_concurrent_fetches: Message fetches in flight per query.
    """

    api_token: str
    inbox_id: str
    mailbox: str
    password: str = field(default="", repr=False)
    base_url: str = DEFAULT_BASE_URL
    smtp_host: str = DEFAULT_SMTP_HOST
    smtp_port: int = DEFAULT_SMTP_PORT
    timeout: int = DEFAULT_TIMEOUT_MS
    max_retries: int = DEFAULT_MAX_RETRIES
    retry_delay: int = DEFAULT_RETRY_DELAY_MS
    retry_on_status_codes: tuple[int, ...] = DEFAULT_RETRY_STATUS_CODES
    max_concurrent_fetches: int = DEFAULT_MAX_CONCURRENT_FETCHES

    def __post_init__(self) -> None:
        if self.max_concurrent_fetches < 1:
            raise ValueError("max_concurrent_fetches must be at least 1")
        if self.max_retries < 0:
            raise ValueError("max_retries cannot be negative")


@dataclass(frozen=True)
class MailerConfig:
    """Mail settings the UI automation layer applies to the system under test.

    Attributes:
        smtp_host: SMTP server host.
        use_auth: Whether SMTP authentication is enabled.
        auth_username: SMTP username.
        auth_password: SMTP password.
        smtp_port: SMTP server port.
        reply_to_address: Reply-to address, set to the run's identity.
    """

    smtp_host: str
    use_auth: bool
    auth_username: str
    auth_password: str = field(repr=False)
    smtp_port: int
    reply_to_address: str


class MessageSummaryResponse(TypedDict, total=False):
    """Listing entry as returned by the provider."""

    id: str | int
    subject: str | None


@dataclass(frozen=True)
class MessageSummary:
    """Lightweight listing entry.

    Attributes:
        id: The message ID.
        subject: The message subject.
    """

    id: str
    subject: str


@dataclass(frozen=True)
class DecodedMessage:
    """A fetched and parsed message.

    Attributes:
        id: The message ID assigned by the provider.
        subject: Decoded subject line ("" when absent).
        reply_to: Reply-To addresses in header order.
        body: Preferred text body ("" when the message has no text part).
        html: HTML body, if present.
        from_address: The From header, if present.
        to: Recipient addresses.
        headers: First value of each header.
        raw: The raw message bytes.
    """

    id: str
    subject: str
    reply_to: tuple[str, ...]
    body: str
    html: str | None = None
    from_address: str = ""
    to: tuple[str, ...] = ()
    headers: dict[str, str] = field(default_factory=dict, compare=False)
    raw: bytes = field(default=b"", repr=False, compare=False)


class MatchKind(str, Enum):
    """Result categories of a single-message query."""

    NONE = "none"
    ONE = "one"
    AMBIGUOUS = "ambiguous"


@dataclass(frozen=True)
class MatchOutcome:
    """Outcome of matching owned messages against a subject.

    Attributes:
        kind: Whether nothing, exactly one, or several messages matched.
        matches: The owned messages that matched.
    """

    kind: MatchKind
    matches: tuple[DecodedMessage, ...] = ()

    @classmethod
    def from_matches(cls, matches: list[DecodedMessage]) -> MatchOutcome:
        """Classify a list of owned matches."""
        if not matches:
            return cls(MatchKind.NONE)
        if len(matches) == 1:
            return cls(MatchKind.ONE, (matches[0],))
        return cls(MatchKind.AMBIGUOUS, tuple(matches))

    @property
    def count(self) -> int:
        return len(self.matches)

    def unwrap(self) -> DecodedMessage | None:
        """Return the single match, None for no match.

        Raises:
            AmbiguousMatchError: If more than one message matched.
        """
        if self.kind is MatchKind.AMBIGUOUS:
            raise AmbiguousMatchError(self.count, [m.id for m in self.matches])
        if self.kind is MatchKind.ONE:
            return self.matches[0]
        return None


@dataclass
class WaitOptions:
    """Options for the waiting helpers.

    Attributes:
        timeout: Max wait time in milliseconds.
        poll_interval: Initial delay between queries in milliseconds.
        max_backoff: Maximum delay between queries in milliseconds.
        backoff_multiplier: Delay growth factor.
        jitter_factor: Random jitter (0-30%).
    """

    timeout: int = DEFAULT_WAIT_TIMEOUT_MS
    poll_interval: int = DEFAULT_POLL_INTERVAL_MS
    max_backoff: int = DEFAULT_POLL_MAX_BACKOFF_MS
    backoff_multiplier: float = 1.5
    jitter_factor: float = 0.3

