"""Raw message decoding.

Turns the RFC 5322 content returned by the mailbox provider into a
DecodedMessage. Parsing uses the standard library ``email`` package with the
modern ``email.policy.default`` policy, which decodes RFC 2047 encoded words
and exposes address headers as structured values.
"""

from __future__ import annotations

import logging
from email import policy
from email.errors import MessageError
from email.message import EmailMessage
from email.parser import BytesParser

from .errors import DecodeError
from .types import DecodedMessage

logger = logging.getLogger("mailsandbox")

# Failures the email package can raise while materialising headers or content
_PARSE_FAILURES = (MessageError, ValueError, LookupError)


def _addresses(message: EmailMessage, name: str) -> tuple[str, ...]:
    """Collect the formatted addresses of every occurrence of a header.

    When a header parses with defects, its unfolded source text is kept as an
    extra entry, since re-serialising a malformed address can requote it.
    """
    result: list[str] = []
    for raw_name, raw_value in message.raw_items():
        if raw_name.lower() != name.lower():
            continue
        header = message.policy.header_fetch_parse(raw_name, raw_value)
        formatted = [str(address) for address in getattr(header, "addresses", ())]
        formatted = [text for text in formatted if text]
        result.extend(formatted)
        if getattr(header, "defects", None):
            source = " ".join(str(raw_value).split())
            if source and source not in formatted:
                result.append(source)
    return tuple(result)


def _text_part(message: EmailMessage, *subtypes: str) -> str | None:
    part = message.get_body(preferencelist=subtypes)
    if part is None:
        return None
    content = part.get_content()
    if isinstance(content, bytes):
        return content.decode("utf-8", errors="replace")
    return str(content)


def decode_message(raw: bytes | str, message_id: str = "") -> DecodedMessage:
    """Decode raw message content.

    Args:
        raw: The raw RFC 5322 message.
        message_id: Provider identifier to attach to the result.

    Returns:
        The decoded message. Missing Subject yields "", missing Reply-To
        yields an empty tuple.

    Raises:
        DecodeError: If the content cannot be parsed as a mail message.
    """
    if isinstance(raw, str):
        raw = raw.encode("utf-8", errors="surrogateescape")
    if not raw.strip():
        raise DecodeError(f"Message {message_id or '<unknown>'} is empty")

    try:
        message = BytesParser(policy=policy.default).parsebytes(raw)
        if not message.keys():
            raise DecodeError(f"Message {message_id or '<unknown>'} has no headers")

        headers: dict[str, str] = {}
        for name, value in message.items():
            headers.setdefault(name, str(value))

        subject = str(message.get("Subject", "") or "")
        reply_to = _addresses(message, "Reply-To")
        to = _addresses(message, "To")
        from_address = str(message.get("From", "") or "")
        body = _text_part(message, "plain", "html") or ""
        html = _text_part(message, "html")
    except DecodeError:
        raise
    except _PARSE_FAILURES as e:
        raise DecodeError(f"Cannot decode message {message_id or '<unknown>'}: {e}") from e

    if message.defects:
        logger.debug("Message %s parsed with defects: %s", message_id, message.defects)

    return DecodedMessage(
        id=message_id,
        subject=subject,
        reply_to=reply_to,
        body=body,
        html=html,
        from_address=from_address,
        to=to,
        headers=headers,
        raw=raw,
    )
