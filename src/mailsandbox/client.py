"""MailSandbox - Main entry point for the mailsandbox harness."""

from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable
from time import monotonic
from typing import Any

from .decoder import decode_message
from .errors import MessageNotFoundError, TimeoutError
from .http import MailboxApiClient
from .identity import Identity, generate_identity
from .ownership import is_owned
from .types import (
    DecodedMessage,
    MailboxConfig,
    MailerConfig,
    MatchOutcome,
    MessageSummary,
    SubjectMatcher,
    WaitOptions,
)
from .utils import sleep, subject_matches

logger = logging.getLogger("mailsandbox")


class MailSandbox:
    """Query interface over the shared sandbox inbox for one test run.

    One instance is created per test-run scope and passed to whatever needs
    it. It owns the run's Identity, which the system under test must use as
    its reply-to address, and only ever reports messages carrying it.

    Example:
        ```python
        async with MailSandbox(load_config()) as sandbox:
            apply_mail_settings(sandbox.mailer_config())
            trigger_build_failure()
            message = await sandbox.find_one("Build failed")
            assert message is not None
        ```
    """

    def __init__(
        self,
        config: MailboxConfig,
        identity: Identity | None = None,
        *,
        api_client: MailboxApiClient | None = None,
    ) -> None:
        """Initialize the sandbox.

        Args:
            config: Mailbox configuration.
            identity: Identity of this run. Generated from ``config.mailbox``
                when omitted.
            api_client: Mailbox client to use instead of a new one.
        """
        self._config = config
        self._identity = identity or generate_identity(config.mailbox)
        self._api_client = api_client or MailboxApiClient(config)
        logger.debug("Mail sandbox identity for this run: %s", self._identity)

    async def __aenter__(self) -> MailSandbox:
        """Enter async context manager."""
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Exit async context manager."""
        await self.close()

    async def close(self) -> None:
        """Release the HTTP client.

        Note: This does NOT delete anything from the shared inbox.
        """
        await self._api_client.close()

    @property
    def config(self) -> MailboxConfig:
        return self._config

    @property
    def identity(self) -> Identity:
        return self._identity

    def mailer_config(self) -> MailerConfig:
        """Build the mail settings the system under test should use.

        Returns:
            MailerConfig pointing at the sandbox SMTP account, with this run's
            identity as reply-to fingerprint.
        """
        return MailerConfig(
            smtp_host=self._config.smtp_host,
            use_auth=True,
            auth_username=self._config.mailbox,
            auth_password=self._config.password,
            smtp_port=self._config.smtp_port,
            reply_to_address=self._identity.token,
        )

    async def _fetch_owned(self, summaries: list[MessageSummary]) -> list[DecodedMessage]:
        """Fetch, decode and filter summaries, keeping messages of this run.

        Messages that disappeared since listing are skipped. Any other
        failure aborts the query.
        """
        if not summaries:
            return []

        semaphore = asyncio.Semaphore(self._config.max_concurrent_fetches)

        async def fetch(summary: MessageSummary) -> DecodedMessage:
            async with semaphore:
                raw = await self._api_client.fetch_message(self._config.inbox_id, summary.id)
            return decode_message(raw, summary.id)

        results = await asyncio.gather(
            *(fetch(summary) for summary in summaries), return_exceptions=True
        )

        owned: list[DecodedMessage] = []
        for summary, result in zip(summaries, results):
            if isinstance(result, MessageNotFoundError):
                logger.debug("Message %s vanished before fetch, skipping", summary.id)
                continue
            if isinstance(result, BaseException):
                raise result
            if is_owned(result, self._identity):
                owned.append(result)
            else:
                logger.debug("Message %s belongs to another run", summary.id)
        return owned

    async def match(self, subject: SubjectMatcher) -> MatchOutcome:
        """Collect the owned messages whose subject matches.

        Args:
            subject: Substring or regex pattern searched in the subject.

        Returns:
            MatchOutcome describing zero, one or several matches.
        """
        summaries = await self._api_client.list_messages(self._config.inbox_id)
        candidates = [s for s in summaries if subject_matches(s.subject, subject)]
        logger.debug(
            "%d of %d listed messages match subject %r",
            len(candidates),
            len(summaries),
            subject,
        )
        return MatchOutcome.from_matches(await self._fetch_owned(candidates))

    async def find_one(self, subject: SubjectMatcher) -> DecodedMessage | None:
        """Find the single message of this run whose subject matches.

        Args:
            subject: Substring or regex pattern searched in the subject.

        Returns:
            The matching message, or None if there is none.

        Raises:
            AmbiguousMatchError: If more than one owned message matches.
            TransportError: If the provider cannot be reached.
            ProtocolError: If the provider listing is malformed.
            DecodeError: If a candidate message cannot be decoded.
        """
        outcome = await self.match(subject)
        return outcome.unwrap()

    async def list_owned(self) -> list[DecodedMessage]:
        """List every message of this run currently in the inbox.

        Returns:
            Owned messages. Order is not guaranteed.

        Raises:
            TransportError: If the provider cannot be reached.
            ProtocolError: If the provider listing is malformed.
            DecodeError: If a message cannot be decoded.
        """
        summaries = await self._api_client.list_messages(self._config.inbox_id)
        return await self._fetch_owned(summaries)

    async def wait_for_one(
        self,
        subject: SubjectMatcher,
        options: WaitOptions | None = None,
    ) -> DecodedMessage:
        """Repeat find_one until the message arrives.

        Args:
            subject: Substring or regex pattern searched in the subject.
            options: Timeout and backoff settings.

        Returns:
            The matching message.

        Raises:
            TimeoutError: If no matching message arrives within the timeout.
            AmbiguousMatchError: As soon as more than one owned message matches.
        """
        options = options or WaitOptions()
        result = await self._poll(lambda: self.find_one(subject), options)
        if result is None:
            raise TimeoutError(
                f"Timeout waiting for message matching {subject!r} after {options.timeout}ms"
            )
        return result

    async def wait_for_owned_count(
        self,
        count: int,
        options: WaitOptions | None = None,
    ) -> list[DecodedMessage]:
        """Repeat list_owned until at least ``count`` owned messages exist.

        Args:
            count: Minimum number of owned messages.
            options: Timeout and backoff settings.

        Returns:
            All owned messages.

        Raises:
            TimeoutError: If the count is not reached within the timeout.
        """
        options = options or WaitOptions()
        last: list[DecodedMessage] = []

        async def attempt() -> list[DecodedMessage] | None:
            nonlocal last
            last = await self.list_owned()
            return last if len(last) >= count else None

        result = await self._poll(attempt, options)
        if result is None:
            raise TimeoutError(
                f"Timeout waiting for {count} messages after {options.timeout}ms "
                f"(got {len(last)})"
            )
        return result

    async def _poll(
        self,
        attempt: Callable[[], Awaitable[Any]],
        options: WaitOptions,
    ) -> Any:
        """Run ``attempt`` with exponential backoff until it returns a value.

        Returns:
            The first non-None result, or None once the timeout elapsed.
        """
        deadline = monotonic() + options.timeout / 1000
        current_backoff: float = options.poll_interval

        while True:
            result = await attempt()
            if result is not None:
                return result

            remaining = (deadline - monotonic()) * 1000
            if remaining <= 0:
                return None

            jitter = random.random() * options.jitter_factor * current_backoff
            await sleep(min(current_backoff + jitter, remaining))
            current_backoff = min(
                current_backoff * options.backoff_multiplier,
                options.max_backoff,
            )
