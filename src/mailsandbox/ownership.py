"""Attribution of captured messages to the current test run."""

from __future__ import annotations

from .identity import Identity
from .types import DecodedMessage


def is_owned(message: DecodedMessage, identity: Identity | str) -> bool:
    """Check whether a message was produced by the run owning ``identity``.

    A message belongs to the run iff one of its Reply-To addresses contains
    the identity token. The subject plays no part in ownership.

    Args:
        message: The decoded message.
        identity: The run identity or its raw token.

    Returns:
        True if any Reply-To address contains the token. Never raises.
    """
    token = identity.token if isinstance(identity, Identity) else identity
    if not token:
        return False
    return any(token in address for address in message.reply_to or ())
