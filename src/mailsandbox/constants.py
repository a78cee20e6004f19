"""Default configuration constants for the mailsandbox harness."""

# Mailbox provider
DEFAULT_BASE_URL = "https://mailtrap.io"
DEFAULT_SMTP_HOST = "mailtrap.io"
DEFAULT_SMTP_PORT = 2525
DEFAULT_LIST_PAGE = 1

# HTTP settings (milliseconds)
DEFAULT_TIMEOUT_MS = 30_000
DEFAULT_RETRY_DELAY_MS = 1_000
# A query is a single best-effort pass unless the caller opts into retries
DEFAULT_MAX_RETRIES = 0

# Default retry status codes
DEFAULT_RETRY_STATUS_CODES = (408, 429, 500, 502, 503, 504)

# Fetches in flight per query
DEFAULT_MAX_CONCURRENT_FETCHES = 4

# Waiting helpers (milliseconds)
DEFAULT_WAIT_TIMEOUT_MS = 30_000
DEFAULT_POLL_INTERVAL_MS = 2_000
DEFAULT_POLL_MAX_BACKOFF_MS = 10_000
