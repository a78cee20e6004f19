"""Per-run reply-to fingerprint."""

from __future__ import annotations

import uuid
from dataclasses import dataclass


@dataclass(frozen=True)
class Identity:
    """Unique token identifying one test run.

    The token is used as the reply-to address of every message the system
    under test sends during the run.

    Attributes:
        token: The fingerprint, formatted as an email address.
    """

    token: str

    def __str__(self) -> str:
        return self.token


def generate_identity(namespace: str) -> Identity:
    """Generate a fresh identity inside the shared mailbox namespace.

    Args:
        namespace: Identifier of the shared mailbox (its SMTP username).

    Returns:
        A new Identity such as ``3f2a...@<namespace>.com``.

    Raises:
        ValueError: If the namespace is empty.
    """
    if not namespace:
        raise ValueError("Identity namespace cannot be empty")
    return Identity(token=f"{uuid.uuid4().hex}@{namespace}.com")
