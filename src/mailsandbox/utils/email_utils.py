"""Email utility functions for the mailsandbox harness."""

from __future__ import annotations

from re import Pattern

from ..types import SubjectMatcher


def subject_matches(subject: str | None, matcher: SubjectMatcher) -> bool:
    """Check if a subject matches a filter.

    Plain strings match when they occur anywhere in the subject; compiled
    patterns match when ``search`` finds them anywhere in the subject.

    Args:
        subject: The subject to check.
        matcher: Substring or regex pattern.

    Returns:
        True if the subject matches.
    """
    if isinstance(matcher, Pattern):
        return matcher.search(subject or "") is not None
    return matcher in (subject or "")
