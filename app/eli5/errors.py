"""
Purpose: One error taxonomy for auth, storage and reply generation.
Every failure that reaches the UI is an Eli5Error whose str() is the
user-facing text, so widgets can render it as-is.
"""

from __future__ import annotations
from typing import Optional


class Eli5Error(Exception):
    code = "unknown"

    def __init__(self, message: str, *, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code

    def __str__(self) -> str:
        return self.message


class ValidationError(Eli5Error):
    code = "validation"


class NotFound(Eli5Error):
    code = "not_found"


class InvalidCredentials(Eli5Error):
    code = "invalid_credentials"


class AlreadyExists(Eli5Error):
    code = "already_exists"


class ConnectivityError(Eli5Error):
    code = "connectivity"

    def __init__(self, message: Optional[str] = None, *, code: Optional[str] = None):
        super().__init__(
            message
            or (
                "Connection Failed: Could not reach the database. "
                "Check that DATABASE_URL in your .env is correct."
            ),
            code=code,
        )


class SchemaError(Eli5Error):
    code = "schema_missing"

    def __init__(self, table: str, *, code: Optional[str] = None):
        super().__init__(
            f"Database Error: The '{table}' table was not found. "
            "Did you run eli5-init-db?",
            code=code,
        )
        self.table = table


class UnknownError(Eli5Error):
    code = "unknown"


# Upstream (reply generation) failure kinds.
INVALID_CREDENTIAL = "invalid_credential"
PERMISSION_DENIED = "permission_denied"
QUOTA_EXCEEDED = "quota_exceeded"
UPSTREAM_UNKNOWN = "unknown"

FALLBACK_REPLY = "Oops! I hit a snag. Could you try sending that again?"

_UPSTREAM_REPLIES = {
    INVALID_CREDENTIAL: (
        "Configuration Error: The Gemini API key is invalid.\n\n"
        "FIX: Set GEMINI_API_KEY (or API_KEY) in your .env file and restart "
        "the proxy server."
    ),
    PERMISSION_DENIED: (
        "Permission Error: Access to Gemini API was denied. "
        "Check your key permissions in Google AI Studio."
    ),
    QUOTA_EXCEEDED: (
        "Quota Error: You've reached the Gemini API limit. "
        "Please try again in a minute."
    ),
}


class UpstreamError(Eli5Error):
    code = "upstream"

    def __init__(self, message: str, *, kind: str = UPSTREAM_UNKNOWN):
        super().__init__(message)
        self.kind = kind


def classify_upstream(detail: str) -> str:
    """Map a raw backend error text onto an upstream failure kind."""
    text = detail or ""
    lowered = text.lower()
    if (
        "API_KEY_INVALID" in text
        or "api key not valid" in lowered
        or "INVALID_ARGUMENT" in text
        or "401" in text
    ):
        return INVALID_CREDENTIAL
    if "403" in text or "permission denied" in lowered:
        return PERMISSION_DENIED
    if "quota" in lowered or "429" in text:
        return QUOTA_EXCEEDED
    return UPSTREAM_UNKNOWN


def reply_for_failure(exc: BaseException) -> str:
    """Substitute assistant text shown in place of a failed reply."""
    if isinstance(exc, UpstreamError):
        kind = exc.kind
    else:
        kind = classify_upstream(f"{exc!r} {exc}")
    return _UPSTREAM_REPLIES.get(kind, FALLBACK_REPLY)


def is_failure_reply(text: str) -> bool:
    return text == FALLBACK_REPLY or text in _UPSTREAM_REPLIES.values()
