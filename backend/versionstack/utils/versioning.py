"""Version name auto-increment."""

FIRST_VERSION = "1.0.0"


def next_version_name(current: str | None) -> str:
    """
    Derive the next version name from the most recent one.

    The last dot-separated segment is incremented when every segment is an
    integer. A leading ``v`` is ignored for parsing and not carried over.
    Anything non-numeric gets ``.1`` appended instead.

    Examples:
        >>> next_version_name(None)
        '1.0.0'
        >>> next_version_name("1.0.0")
        '1.0.1'
        >>> next_version_name("2.3")
        '2.4'
        >>> next_version_name("beta")
        'beta.1'
    """
    if not current:
        return FIRST_VERSION

    clean = current[1:] if current.startswith("v") else current
    parts = clean.split(".")
    # Empty segments ("1.") count as zero
    if not all(part == "" or (part.isascii() and part.isdigit()) for part in parts):
        return f"{current}.1"

    numbers = [int(part) if part else 0 for part in parts]
    numbers[-1] += 1
    return ".".join(str(number) for number in numbers)
