"""Tests for run identity generation."""

from __future__ import annotations

import dataclasses

import pytest

from mailsandbox.identity import Identity, generate_identity


class TestGenerateIdentity:
    """Tests for generate_identity()."""

    def test_token_is_address_in_namespace(self) -> None:
        """Test the token is an address inside the shared mailbox namespace."""
        identity = generate_identity("sharedbox")

        local, _, domain = identity.token.partition("@")
        assert local
        assert domain == "sharedbox.com"

    def test_tokens_are_unique(self) -> None:
        """Test concurrent runs get distinct tokens."""
        tokens = {generate_identity("sharedbox").token for _ in range(500)}
        assert len(tokens) == 500

    def test_empty_namespace_rejected(self) -> None:
        """Test an empty namespace raises ValueError."""
        with pytest.raises(ValueError, match="namespace"):
            generate_identity("")


class TestIdentity:
    """Tests for the Identity value object."""

    def test_str_is_token(self) -> None:
        assert str(Identity("abc@box.com")) == "abc@box.com"

    def test_is_immutable(self) -> None:
        """Test identities cannot be mutated after creation."""
        identity = Identity("abc@box.com")
        with pytest.raises(dataclasses.FrozenInstanceError):
            identity.token = "other@box.com"  # type: ignore[misc]

    def test_equality_by_token(self) -> None:
        assert Identity("abc@box.com") == Identity("abc@box.com")
        assert Identity("abc@box.com") != Identity("xyz@box.com")
