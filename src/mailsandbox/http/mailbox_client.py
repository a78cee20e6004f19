"""HTTP client for the sandbox mailbox provider."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any
from urllib.parse import quote

import httpx

from ..constants import DEFAULT_LIST_PAGE
from ..errors import MessageNotFoundError, ProtocolError, TransportError
from ..types import MailboxConfig, MessageSummary, MessageSummaryResponse

logger = logging.getLogger("mailsandbox")


def encode_path_segment(value: str) -> str:
    """URL-encode a path segment for use in API URLs.

    Args:
        value: The value to encode.

    Returns:
        URL-encoded string safe for use in URL paths.
    """
    return quote(value, safe="")


def parse_summary(item: Any) -> MessageSummary:
    """Convert one listing entry into a MessageSummary.

    Args:
        item: A decoded JSON value from the listing array.

    Returns:
        The summary.

    Raises:
        ProtocolError: If the entry lacks a usable id or subject.
    """
    if not isinstance(item, dict):
        raise ProtocolError(f"Expected message object in listing, got {type(item).__name__}")
    entry: MessageSummaryResponse = item  # type: ignore[assignment]
    if "id" not in entry or "subject" not in entry:
        raise ProtocolError(f"Listing entry missing 'id' or 'subject': {sorted(entry)}")

    message_id = entry["id"]
    # bool is an int subclass but never a valid id
    if isinstance(message_id, bool) or not isinstance(message_id, (str, int)):
        raise ProtocolError(f"Invalid message id in listing: {message_id!r}")

    subject = entry["subject"]
    if subject is None:
        subject = ""
    elif not isinstance(subject, str):
        raise ProtocolError(f"Invalid subject for message {message_id}: {subject!r}")

    return MessageSummary(id=str(message_id), subject=subject)


class MailboxApiClient:
    """Read-only client for the mailbox provider's HTTP API.

    Attributes:
        config: Mailbox configuration.
    """

    def __init__(self, config: MailboxConfig) -> None:
        """Initialize the mailbox client.

        Args:
            config: Mailbox configuration with API token and settings.
        """
        self.config = config
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client.

        Returns:
            The HTTP client instance.
        """
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.config.base_url,
                headers={"Accept": "application/json"},
                timeout=httpx.Timeout(self.config.timeout / 1000),
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def _request(
        self,
        path: str,
        *,
        params: dict[str, Any] | None = None,
    ) -> httpx.Response:
        """Make a GET request, retrying when configured to.

        Args:
            path: API path.
            params: Query parameters, merged with the API token.

        Returns:
            The HTTP response.

        Raises:
            TransportError: On network failures and HTTP errors other than 404.
            MessageNotFoundError: If the provider answers 404.
        """
        client = await self._get_client()
        query = {**(params or {}), "api_token": self.config.api_token}

        for attempt in range(self.config.max_retries + 1):
            try:
                response = await client.request("GET", path, params=query)

                if (
                    response.status_code in self.config.retry_on_status_codes
                    and attempt < self.config.max_retries
                ):
                    delay = self.config.retry_delay * (2**attempt) / 1000
                    logger.warning(
                        "Mailbox returned %s for %s, retrying in %.2fs",
                        response.status_code,
                        path,
                        delay,
                    )
                    await asyncio.sleep(delay)
                    continue

                if response.status_code >= 400:
                    self._handle_error_response(response)

                return response

            except (httpx.ConnectError, httpx.TimeoutException, httpx.NetworkError) as e:
                if attempt < self.config.max_retries:
                    delay = self.config.retry_delay * (2**attempt) / 1000
                    logger.warning("Network error for %s, retrying in %.2fs: %s", path, delay, e)
                    await asyncio.sleep(delay)
                    continue
                raise TransportError(f"Network error: {e}") from e
            except httpx.RequestError as e:
                # Protocol, proxy and scheme failures are not retried
                raise TransportError(f"Network error: {e}") from e

        raise TransportError(
            f"Request failed after {self.config.max_retries} retries"
        )  # pragma: no cover

    def _handle_error_response(self, response: httpx.Response) -> None:
        """Handle HTTP error responses.

        Args:
            response: The HTTP response.

        Raises:
            MessageNotFoundError: If the resource is not found.
            TransportError: For other HTTP errors.
        """
        try:
            data = response.json()
            message = data.get("message", data.get("error", response.text))
        except (ValueError, json.JSONDecodeError, AttributeError):
            message = response.text or f"HTTP {response.status_code}"

        if response.status_code == 404:
            raise MessageNotFoundError(str(message))

        raise TransportError(str(message), status_code=response.status_code)

    async def list_messages(self, inbox_id: str) -> list[MessageSummary]:
        """List message summaries of an inbox.

        Args:
            inbox_id: The inbox identifier.

        Returns:
            Summaries in provider order.

        Raises:
            TransportError: If the listing cannot be retrieved.
            ProtocolError: If the listing is not a JSON array of messages.
        """
        encoded = encode_path_segment(inbox_id)
        try:
            response = await self._request(
                f"/api/v1/inboxes/{encoded}/messages",
                params={"page": DEFAULT_LIST_PAGE},
            )
        except MessageNotFoundError as e:
            raise TransportError(f"Inbox {inbox_id} not found: {e}", status_code=404) from e

        try:
            data = response.json()
        except ValueError as e:
            raise ProtocolError(f"Message listing is not valid JSON: {e}") from e
        if not isinstance(data, list):
            raise ProtocolError(f"Expected JSON array of messages, got {type(data).__name__}")

        return [parse_summary(item) for item in data]

    async def fetch_message(self, inbox_id: str, message_id: str) -> bytes:
        """Fetch the raw content of one message.

        Args:
            inbox_id: The inbox identifier.
            message_id: The message ID.

        Returns:
            Raw RFC 5322 message bytes.

        Raises:
            MessageNotFoundError: If the message no longer exists.
            TransportError: If the message cannot be retrieved.
        """
        encoded_inbox = encode_path_segment(inbox_id)
        encoded_id = encode_path_segment(message_id)
        response = await self._request(
            f"/api/v1/inboxes/{encoded_inbox}/messages/{encoded_id}/body.eml"
        )
        return response.content
