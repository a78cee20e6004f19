"""Tests for raw message decoding."""

from __future__ import annotations

from collections.abc import Callable
from unittest.mock import patch

import pytest

from mailsandbox.decoder import decode_message
from mailsandbox.errors import DecodeError, ErrorKind
from mailsandbox.ownership import is_owned

RawMessageFactory = Callable[..., bytes]


class TestDecodeMessage:
    """Tests for decode_message() on well-formed messages."""

    def test_extracts_subject_reply_to_and_body(self, raw_message: RawMessageFactory) -> None:
        decoded = decode_message(raw_message(), "42")

        assert decoded.id == "42"
        assert decoded.subject == "Build failed"
        assert decoded.reply_to == ("run-r@sharedbox.com",)
        assert decoded.body.strip() == "The build is broken."
        assert decoded.html is None

    def test_extracts_sender_and_recipients(self, raw_message: RawMessageFactory) -> None:
        decoded = decode_message(raw_message(sender="ci@example.com", to="a@x.com, b@y.com"))

        assert decoded.from_address == "ci@example.com"
        assert decoded.to == ("a@x.com", "b@y.com")
        assert decoded.headers["Subject"] == "Build failed"

    def test_missing_subject_is_empty_string(self, raw_message: RawMessageFactory) -> None:
        """Test absence of Subject is not an error."""
        decoded = decode_message(raw_message(subject=None))
        assert decoded.subject == ""

    def test_missing_reply_to_is_empty(self, raw_message: RawMessageFactory) -> None:
        """Test absence of Reply-To yields an empty sequence."""
        decoded = decode_message(raw_message(reply_to=None))
        assert decoded.reply_to == ()

    def test_multiple_reply_to_addresses_keep_order(self, raw_message: RawMessageFactory) -> None:
        decoded = decode_message(raw_message(reply_to="Jenkins <a@x.com>, b@y.com"))
        assert decoded.reply_to == ("Jenkins <a@x.com>", "b@y.com")

    def test_encoded_subject_is_decoded(self) -> None:
        """Test RFC 2047 encoded words in the subject are decoded."""
        raw = (
            b"From: ci@example.com\r\n"
            b"Subject: =?utf-8?q?Build_=C3=A9chou=C3=A9?=\r\n"
            b"Reply-To: run-r@sharedbox.com\r\n"
            b"\r\n"
            b"body\r\n"
        )
        decoded = decode_message(raw)
        assert decoded.subject == "Build échoué"

    def test_malformed_reply_to_keeps_source_text(self) -> None:
        """Test an 8-bit local part still exposes the address as sent."""
        raw = (
            b"From: ci@example.com\r\n"
            b"Subject: Build failed\r\n"
            b"Reply-To: \xff\xfe run-r@sharedbox.com\r\n"
            b"\r\n"
            b"body\r\n"
        )
        decoded = decode_message(raw)

        assert any("run-r@sharedbox.com" in entry for entry in decoded.reply_to)
        assert is_owned(decoded, "run-r@sharedbox.com")

    def test_well_formed_reply_to_has_no_source_duplicate(
        self, raw_message: RawMessageFactory
    ) -> None:
        decoded = decode_message(raw_message(reply_to="Jenkins <a@x.com>"))
        assert decoded.reply_to == ("Jenkins <a@x.com>",)

    def test_prefers_plain_text_body(self, raw_message: RawMessageFactory) -> None:
        decoded = decode_message(raw_message(body="plain version", html="<p>html version</p>"))

        assert decoded.body.strip() == "plain version"
        assert decoded.html is not None
        assert "<p>html version</p>" in decoded.html

    def test_html_only_message_uses_html_as_body(self) -> None:
        raw = (
            b"From: ci@example.com\r\n"
            b"Subject: Report\r\n"
            b"Content-Type: text/html; charset=utf-8\r\n"
            b"\r\n"
            b"<b>report</b>\r\n"
        )
        decoded = decode_message(raw)
        assert "<b>report</b>" in decoded.body
        assert decoded.html == decoded.body

    def test_accepts_text_input(self, raw_message: RawMessageFactory) -> None:
        decoded = decode_message(raw_message().decode("ascii"))
        assert decoded.subject == "Build failed"

    def test_keeps_raw_content(self, raw_message: RawMessageFactory) -> None:
        raw = raw_message()
        assert decode_message(raw).raw == raw


class TestDecodeMessageErrors:
    """Tests for content that cannot be decoded."""

    @pytest.mark.parametrize("raw", [b"", b"  \r\n\r\n", ""])
    def test_empty_content_raises(self, raw: bytes | str) -> None:
        with pytest.raises(DecodeError) as exc_info:
            decode_message(raw, "7")
        assert exc_info.value.kind is ErrorKind.DECODE
        assert "7" in str(exc_info.value)

    def test_content_without_headers_raises(self) -> None:
        """Test plain text that is not a mail message is rejected."""
        with pytest.raises(DecodeError, match="no headers"):
            decode_message(b"just some text without any headers\n")

    def test_programming_errors_are_not_masked(self, raw_message: RawMessageFactory) -> None:
        """Test only parse failures become DecodeError."""
        with (
            patch("mailsandbox.decoder._text_part", side_effect=TypeError("bad call")),
            pytest.raises(TypeError, match="bad call"),
        ):
            decode_message(raw_message())

    def test_parse_failures_become_decode_errors(self, raw_message: RawMessageFactory) -> None:
        with (
            patch("mailsandbox.decoder._text_part", side_effect=LookupError("unknown-8bit")),
            pytest.raises(DecodeError, match="unknown-8bit"),
        ):
            decode_message(raw_message(), "5")
