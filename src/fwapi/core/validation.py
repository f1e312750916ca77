"""Input validation utilities.

All validators return the validated value or raise BadRequestError.
Rule text is deliberately not validated; iptables is the authority on
rule syntax.
"""

import re

from fwapi.core.exceptions import BadRequestError


# iptables chain names are limited by XT_EXTENSION_MAXNAMELEN (29 incl. NUL)
MAX_CHAIN_NAME_LENGTH = 28

WHITESPACE_PATTERN = re.compile(r"\s")


def validate_port(value: int) -> int:
    """Validate a port number.

    Args:
        value: Port number to validate

    Returns:
        The validated port number

    Raises:
        BadRequestError: If port is out of valid range
    """
    if not 1 <= value <= 65535:
        raise BadRequestError(
            f"Invalid port number: {value}",
            hint="Port must be between 1 and 65535",
        )
    return value


def validate_chain_name(value: str) -> str:
    """Validate a chain name supplied by a client.

    Args:
        value: Chain name to validate

    Returns:
        The chain name with surrounding whitespace removed

    Raises:
        BadRequestError: If the name is empty, too long or contains whitespace
    """
    value = (value or "").strip()

    if not value:
        raise BadRequestError(
            "Chain name cannot be empty",
            hint='Send a body like {"data": "LOGGING"}',
        )

    if len(value) > MAX_CHAIN_NAME_LENGTH:
        raise BadRequestError(
            f"Chain name exceeds maximum length ({len(value)} > {MAX_CHAIN_NAME_LENGTH})",
            hint=f"Use a name with {MAX_CHAIN_NAME_LENGTH} or fewer characters",
        )

    if WHITESPACE_PATTERN.search(value):
        raise BadRequestError(
            f"Invalid chain name: '{value}'",
            hint="Chain names cannot contain whitespace",
        )

    return value


def validate_position(value: int) -> int:
    """Validate a 0-based rule position.

    Raises:
        BadRequestError: If the position is negative
    """
    if value < 0:
        raise BadRequestError(
            f"Invalid rule position: {value}",
            hint="Positions are 0-based and cannot be negative",
        )
    return value
