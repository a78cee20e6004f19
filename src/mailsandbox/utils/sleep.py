"""Sleep utility for the mailsandbox harness."""

import asyncio


async def sleep(ms: float) -> None:
    """Sleep for the specified number of milliseconds.

    Args:
        ms: Number of milliseconds to sleep.
    """
    await asyncio.sleep(ms / 1000)
