#!/usr/bin/env python3
"""Sandboxhelper CLI for inspecting the shared sandbox inbox.

Reads the MAILSANDBOX_* configuration from the environment (or .env).
Set MAILSANDBOX_IDENTITY to query on behalf of an existing run.
"""

import asyncio
import dataclasses
import json
import os
import sys

from mailsandbox import DecodedMessage, Identity, MailSandbox, MailSandboxError, load_config


def message_to_json(message: DecodedMessage) -> dict:
    """Convert a decoded message to a JSON-serializable dict."""
    return {
        "id": message.id,
        "subject": message.subject,
        "from": message.from_address,
        "to": list(message.to),
        "replyTo": list(message.reply_to),
        "text": message.body,
        "html": message.html or "",
    }


async def show_identity(sandbox: MailSandbox) -> None:
    """Print the identity of this run."""
    print(json.dumps({"identity": sandbox.identity.token}))


async def show_mailer_config(sandbox: MailSandbox) -> None:
    """Print the mail settings for the system under test."""
    print(json.dumps(dataclasses.asdict(sandbox.mailer_config())))


async def list_owned(sandbox: MailSandbox) -> None:
    """Print every message owned by the identity."""
    messages = await sandbox.list_owned()
    print(json.dumps({"messages": [message_to_json(m) for m in messages]}))


async def find_one(sandbox: MailSandbox, subject: str) -> None:
    """Print the single owned message whose subject contains ``subject``."""
    message = await sandbox.find_one(subject)
    print(json.dumps({"message": message_to_json(message) if message else None}))


async def main() -> None:
    """Main entry point."""
    if len(sys.argv) < 2:
        print("usage: sandboxhelper.py <command> [args]", file=sys.stderr)
        sys.exit(1)

    command = sys.argv[1]
    token = os.environ.get("MAILSANDBOX_IDENTITY")
    identity = Identity(token) if token else None

    try:
        async with MailSandbox(load_config(), identity) as sandbox:
            if command == "identity":
                await show_identity(sandbox)
            elif command == "mailer-config":
                await show_mailer_config(sandbox)
            elif command == "list":
                await list_owned(sandbox)
            elif command == "find":
                if len(sys.argv) < 3:
                    print("usage: sandboxhelper.py find <subject>", file=sys.stderr)
                    sys.exit(1)
                await find_one(sandbox, sys.argv[2])
            else:
                print(f"unknown command: {command}", file=sys.stderr)
                sys.exit(1)
    except MailSandboxError as e:
        print(json.dumps({"error": e.kind.value, "message": str(e)}), file=sys.stderr)
        sys.exit(2)


if __name__ == "__main__":
    asyncio.run(main())
