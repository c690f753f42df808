"""Keep credentials and forged line breaks out of logs and audit details."""

import re
from typing import Any

REDACTED = "***REDACTED***"

_CONTROL_CHARS = re.compile(r"[\r\n\t\x00-\x1f\x7f]")
_SENSITIVE_KEY_PARTS = ("password", "api_key", "apikey", "token", "secret", "authorization", "bearer")

_STRING_PATTERNS = (
    # Authorization header values
    (re.compile(r"(Bearer\s+)[A-Za-z0-9_\-\.]+", re.IGNORECASE), rf"\1{REDACTED}"),
    # Plaintext registry keys
    (re.compile(r"\bvs_[A-Za-z0-9_\-]{8,}"), f"vs_{REDACTED}"),
    # Credentials passed as query parameters
    (
        re.compile(r"([?&](?:api_key|apikey|token|secret)=)[^&\s]+", re.IGNORECASE),
        rf"\1{REDACTED}",
    ),
)


def _redact_string(text: str) -> str:
    for pattern, replacement in _STRING_PATTERNS:
        text = pattern.sub(replacement, text)
    return text


def sanitize_for_log(value: Any, max_length: int = 200) -> str:
    """
    Make a caller-supplied value safe to embed in a log line.

    Control characters are stripped, credential-looking substrings are
    redacted and the result is truncated to ``max_length``.

    Args:
        value: File name, app key, header or any other untrusted value
        max_length: Maximum length before ``...`` is appended

    Returns:
        Sanitized string
    """
    text = _redact_string(_CONTROL_CHARS.sub("", str(value)))
    if len(text) > max_length:
        text = text[:max_length] + "..."
    return text


def redact_sensitive_data(data: Any) -> Any:
    """
    Return a copy of ``data`` with secrets replaced by ``***REDACTED***``.

    Dict values whose key names a credential are replaced outright; strings
    anywhere in the structure go through the same patterns as log lines.
    """
    if isinstance(data, dict):
        return {
            key: REDACTED
            if any(part in str(key).lower() for part in _SENSITIVE_KEY_PARTS)
            else redact_sensitive_data(value)
            for key, value in data.items()
        }
    if isinstance(data, list):
        return [redact_sensitive_data(item) for item in data]
    if isinstance(data, str):
        return _redact_string(data)
    return data
