"""HTTP client for the mailbox provider.

This module provides:
- MailboxApiClient: read-only listing and raw message retrieval
"""

from .mailbox_client import MailboxApiClient, encode_path_segment, parse_summary

__all__ = [
    "MailboxApiClient",
    "encode_path_segment",
    "parse_summary",
]
