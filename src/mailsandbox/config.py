"""Configuration loading from the environment.

Credentials of the shared mailbox are never compiled in. They come from the
process environment, optionally seeded from a ``.env`` file:

    MAILSANDBOX_API_TOKEN               (required)
    MAILSANDBOX_INBOX_ID                (required)
    MAILSANDBOX_MAILBOX                 (required) SMTP username / identity namespace
    MAILSANDBOX_PASSWORD                (required) SMTP password
    MAILSANDBOX_BASE_URL
    MAILSANDBOX_SMTP_HOST
    MAILSANDBOX_SMTP_PORT
    MAILSANDBOX_TIMEOUT_MS
    MAILSANDBOX_MAX_RETRIES
    MAILSANDBOX_MAX_CONCURRENT_FETCHES
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path

from dotenv import find_dotenv, load_dotenv

from .constants import (
    DEFAULT_BASE_URL,
    DEFAULT_MAX_CONCURRENT_FETCHES,
    DEFAULT_MAX_RETRIES,
    DEFAULT_SMTP_HOST,
    DEFAULT_SMTP_PORT,
    DEFAULT_TIMEOUT_MS,
)
from .errors import ConfigurationError
from .types import MailboxConfig

ENV_PREFIX = "MAILSANDBOX_"


def _required(environ: Mapping[str, str], name: str) -> str:
    value = environ.get(ENV_PREFIX + name, "").strip()
    if not value:
        raise ConfigurationError(f"{ENV_PREFIX}{name} environment variable not set")
    return value


def _integer(environ: Mapping[str, str], name: str, default: int) -> int:
    value = environ.get(ENV_PREFIX + name, "").strip()
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        raise ConfigurationError(
            f"{ENV_PREFIX}{name} must be an integer, got {value!r}"
        ) from None


def load_config(
    env_file: str | Path | None = None,
    *,
    environ: Mapping[str, str] | None = None,
) -> MailboxConfig:
    """Build a MailboxConfig from environment variables.

    Args:
        env_file: Path of a ``.env`` file. When omitted, the nearest ``.env``
            from the working directory upwards is used, if any. Variables
            already set in the environment take precedence over the file.
        environ: Mapping to read instead of ``os.environ``. No ``.env`` file
            is loaded when given.

    Returns:
        The mailbox configuration.

    Raises:
        ConfigurationError: If a required variable is missing or a numeric
            variable is not an integer.
    """
    if environ is None:
        load_dotenv(env_file or find_dotenv(usecwd=True), override=False)
        environ = os.environ

    try:
        return MailboxConfig(
            api_token=_required(environ, "API_TOKEN"),
            inbox_id=_required(environ, "INBOX_ID"),
            mailbox=_required(environ, "MAILBOX"),
            password=_required(environ, "PASSWORD"),
            base_url=environ.get(ENV_PREFIX + "BASE_URL") or DEFAULT_BASE_URL,
            smtp_host=environ.get(ENV_PREFIX + "SMTP_HOST") or DEFAULT_SMTP_HOST,
            smtp_port=_integer(environ, "SMTP_PORT", DEFAULT_SMTP_PORT),
            timeout=_integer(environ, "TIMEOUT_MS", DEFAULT_TIMEOUT_MS),
            max_retries=_integer(environ, "MAX_RETRIES", DEFAULT_MAX_RETRIES),
            max_concurrent_fetches=_integer(
                environ, "MAX_CONCURRENT_FETCHES", DEFAULT_MAX_CONCURRENT_FETCHES
            ),
        )
    except ValueError as e:
        raise ConfigurationError(str(e)) from e
