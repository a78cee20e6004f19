"""mailsandbox - shared sandbox inbox harness for end-to-end tests.

The system under test delivers its notification mail to a shared,
multi-tenant sandbox inbox. Each test run gets a unique reply-to fingerprint
and queries the inbox for the messages carrying it.

Example:
    ```python
    import asyncio
    from mailsandbox import MailSandbox, load_config

    async def main():
        async with MailSandbox(load_config()) as sandbox:
            settings = sandbox.mailer_config()
            print(f"Configure the SUT with reply-to {settings.reply_to_address}")

            # ... trigger a notification ...

            message = await sandbox.find_one("Build failed")
            print(f"Received: {message.subject if message else 'nothing'}")

    asyncio.run(main())
    ```
"""

from .client import MailSandbox
from .config import load_config
from .constants import (
    DEFAULT_BASE_URL,
    DEFAULT_MAX_CONCURRENT_FETCHES,
    DEFAULT_MAX_RETRIES,
    DEFAULT_RETRY_DELAY_MS,
    DEFAULT_RETRY_STATUS_CODES,
    DEFAULT_SMTP_HOST,
    DEFAULT_SMTP_PORT,
    DEFAULT_TIMEOUT_MS,
)
from .decoder import decode_message
from .errors import (
    AmbiguousMatchError,
    ConfigurationError,
    DecodeError,
    ErrorKind,
    MailSandboxError,
    MessageNotFoundError,
    ProtocolError,
    TimeoutError,
    TransportError,
)
from .identity import Identity, generate_identity
from .ownership import is_owned
from .types import (
    DecodedMessage,
    MailboxConfig,
    MailerConfig,
    MatchKind,
    MatchOutcome,
    MessageSummary,
    WaitOptions,
)

__version__ = "0.1.0"

__all__ = [
    # Main classes
    "MailSandbox",
    "Identity",
    # Functions
    "decode_message",
    "generate_identity",
    "is_owned",
    "load_config",
    # Constants
    "DEFAULT_BASE_URL",
    "DEFAULT_SMTP_HOST",
    "DEFAULT_SMTP_PORT",
    "DEFAULT_TIMEOUT_MS",
    "DEFAULT_RETRY_DELAY_MS",
    "DEFAULT_MAX_RETRIES",
    "DEFAULT_RETRY_STATUS_CODES",
    "DEFAULT_MAX_CONCURRENT_FETCHES",
    # Configuration
    "MailboxConfig",
    "MailerConfig",
    "WaitOptions",
    # Data types
    "DecodedMessage",
    "MatchKind",
    "MatchOutcome",
    "MessageSummary",
    # Errors
    "MailSandboxError",
    "ErrorKind",
    "TransportError",
    "ProtocolError",
    "MessageNotFoundError",
    "DecodeError",
    "AmbiguousMatchError",
    "ConfigurationError",
    "TimeoutError",
    # Version
    "__version__",
]
