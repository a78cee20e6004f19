"""Shared fixtures for mailsandbox tests."""

from __future__ import annotations

from collections.abc import Callable
from email.message import EmailMessage

import pytest

from mailsandbox.identity import Identity
from mailsandbox.types import MailboxConfig

RawMessageFactory = Callable[..., bytes]


@pytest.fixture
def config() -> MailboxConfig:
    """Create a test mailbox configuration."""
    return MailboxConfig(
        api_token="test-token",
        inbox_id="23170",
        mailbox="sharedbox",
        password="secret",
        base_url="https://test.example.com",
        timeout=5000,
        retry_delay=100,  # Short delay for testing
        retry_on_status_codes=(429, 503),
    )


@pytest.fixture
def identity() -> Identity:
    """Identity of the run under test."""
    return Identity("run-r@sharedbox.com")


@pytest.fixture
def raw_message() -> RawMessageFactory:
    """Build raw RFC 5322 messages."""

    def build(
        subject: str | None = "Build failed",
        reply_to: str | None = "run-r@sharedbox.com",
        body: str = "The build is broken.",
        *,
        html: str | None = None,
        sender: str = "ci@example.com",
        to: str = "dev@example.com",
    ) -> bytes:
        message = EmailMessage()
        message["From"] = sender
        message["To"] = to
        if subject is not None:
            message["Subject"] = subject
        if reply_to is not None:
            message["Reply-To"] = reply_to
        message.set_content(body)
        if html is not None:
            message.add_alternative(html, subtype="html")
        return message.as_bytes()

    return build
