"""Utility functions for the mailsandbox harness."""

from .email_utils import subject_matches
from .sleep import sleep

__all__ = ["sleep", "subject_matches"]
