"""Input sanitization and validation helpers.

Request schemas call these before data reaches the services; the content
store calls ``sanitize_file_name`` again and never trusts the original
upload name.
"""

import re

from versionstack.exceptions import ValidationError

APP_KEY_PATTERN = re.compile(r"^[a-zA-Z0-9]+(-[a-zA-Z0-9]+)*$")
VERSION_NAME_PATTERN = re.compile(r"^[a-zA-Z0-9._-]*$")

APP_KEY_MAX_LENGTH = 50
DISPLAY_NAME_MAX_LENGTH = 100
VERSION_NAME_MAX_LENGTH = 50
FILE_NAME_MAX_BYTES = 255

_INVALID_FILE_NAME_CHARS = re.compile(r'[<>:"/\\|?*]')


def sanitize_display_name(value: str) -> str:
    """Trim, drop angle brackets and limit to 100 characters."""
    return re.sub(r"[<>]", "", value.strip())[:DISPLAY_NAME_MAX_LENGTH]


def sanitize_app_key(value: str) -> str:
    """Lowercase and strip everything outside ``[a-z0-9-]``."""
    return re.sub(r"[^a-z0-9-]", "", value.strip().lower())[:APP_KEY_MAX_LENGTH]


def sanitize_version_name(value: str) -> str:
    """Trim, drop angle brackets and limit to 50 characters."""
    return re.sub(r"[<>]", "", value.strip())[:VERSION_NAME_MAX_LENGTH]


def sanitize_file_name(value: str) -> str:
    """
    Make an uploaded file name safe to use as a single path component.

    Removes ``<>:"/\\|?*``, strips every ``..`` sequence and truncates the
    result to 255 bytes of UTF-8 without splitting a character.

    Args:
        value: Original (untrusted) file name

    Returns:
        Sanitized file name, possibly empty
    """
    cleaned = _INVALID_FILE_NAME_CHARS.sub("", value.strip())
    while ".." in cleaned:
        cleaned = cleaned.replace("..", "")
    encoded = cleaned.encode("utf-8")
    if len(encoded) > FILE_NAME_MAX_BYTES:
        cleaned = encoded[:FILE_NAME_MAX_BYTES].decode("utf-8", errors="ignore")
    return cleaned


def validate_app_key(value: str) -> str:
    """
    Validate app key format.

    Args:
        value: App key to validate

    Returns:
        Lowercased app key

    Raises:
        ValidationError: If the key is empty, too long or has invalid characters
    """
    if not value or not isinstance(value, str):
        raise ValidationError("App key is required")
    if len(value) > APP_KEY_MAX_LENGTH:
        raise ValidationError(f"App key must be {APP_KEY_MAX_LENGTH} characters or less")
    if not APP_KEY_PATTERN.match(value):
        raise ValidationError(
            "App key must contain only alphanumeric characters, optionally separated by dashes"
        )
    return value.lower()


def validate_version_name(value: str) -> str:
    """
    Validate and sanitize an explicit version name.

    Raises:
        ValidationError: If the name is too long or has invalid characters
    """
    if len(value) > VERSION_NAME_MAX_LENGTH:
        raise ValidationError(
            f"Version name must be {VERSION_NAME_MAX_LENGTH} characters or less"
        )
    if not VERSION_NAME_PATTERN.match(value):
        raise ValidationError(
            "Version name can only contain alphanumeric characters, dots, dashes, and underscores"
        )
    name = sanitize_version_name(value)
    if name in (".", ".."):
        raise ValidationError("Version name cannot be '.' or '..'")
    return name
