"""Helper functions shared by the pull-request actions.

- :func:`encode_content` / :func:`decode_content` -- base64 file payloads
- :func:`apply_suggestion` -- splice suggested lines into a file
- :func:`commit_author` -- commit author block for the signed-in user
- :func:`get_error_message` -- user-facing message for a failure
"""

from __future__ import annotations

import base64
import datetime


def encode_content(text: str) -> str:
    """Encode UTF-8 *text* as base64 for the contents and blob APIs."""
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


def decode_content(encoded: str) -> str:
    """Decode a base64 payload from the contents API (newlines allowed).

    Bytes that are not valid UTF-8 become U+FFFD.  Malformed base64
    raises ``binascii.Error`` (a ``ValueError``).
    """
    return base64.b64decode(encoded or "").decode("utf-8", errors="replace")


def apply_suggestion(
    content: str, start_line: int, end_line: int, suggestion: str
) -> str:
    """Replace lines ``start_line..end_line`` (1-indexed, inclusive).

    An empty *suggestion* deletes the selected lines.
    """
    lines = content.split("\n")
    before = lines[: max(start_line - 1, 0)]
    after = lines[end_line:]
    replacement = suggestion.split("\n") if suggestion else []
    return "\n".join(before + replacement + after)


def commit_author(user: dict, now: datetime.datetime) -> dict:
    """Build a git author block from a GitHub user payload.

    The name falls back to the login, then ``"User"``; the e-mail falls
    back to the login's ``users.noreply.github.com`` address.
    """
    login = user.get("login")
    return {
        "name": user.get("name") or login or "User",
        "email": user.get("email") or f"{login}@users.noreply.github.com",
        "date": now.isoformat(),
    }


def get_error_message(exc: BaseException) -> str:
    """Return a display message for *exc*, or ``""`` when it carries none."""
    message = getattr(exc, "message", None)
    if message:
        return str(message)
    return str(exc) if exc.args else ""
