"""
Validation and data processing utilities for adoption operations.

This module provides data sanitization for user-submitted free text and
the card-detail checks applied before a paid promotion is charged.
"""

import re
import unicodedata
from datetime import date
from html import unescape
from typing import Optional

# Tags are removed but their text content is kept
HTML_TAG_PATTERN = re.compile(r"<[^>]*>")
SCRIPT_BLOCK_PATTERN = re.compile(
    r"<(script|style)[^>]*>.*?</\1\s*>", re.IGNORECASE | re.DOTALL
)
CARD_EXPIRY_PATTERN = re.compile(r"^(0[1-9]|1[0-2])/(\d{2})$")
CVV_PATTERN = re.compile(r"^\d{3,4}$")
USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9_.-]{3,50}$")


def sanitize_string(value: str, max_length: Optional[int] = None) -> str:
    """
    Sanitize a string by normalizing unicode and trimming whitespace.

    Args:
        value: The string to sanitize
        max_length: Maximum allowed length

    Returns:
        Sanitized string
    """
    normalized = unicodedata.normalize("NFKC", value)
    sanitized = re.sub(r"[ \t]+", " ", normalized.strip())

    if max_length and len(sanitized) > max_length:
        sanitized = sanitized[:max_length].rstrip()

    return sanitized


def strip_html(value: str) -> str:
    """
    Remove all HTML markup from user text, keeping the text content.

    Script and style blocks are dropped entirely.

    Example:
        >>> strip_html("<b>Gentle</b> and calm<script>x()</script>")
        'Gentle and calm'
    """
    without_blocks = SCRIPT_BLOCK_PATTERN.sub("", value)
    without_tags = HTML_TAG_PATTERN.sub("", without_blocks)
    # Entities are decoded once; anything that decodes into a tag goes too
    return HTML_TAG_PATTERN.sub("", unescape(without_tags))


def sanitize_text(value: Optional[str], max_length: Optional[int] = None) -> Optional[str]:
    """Strip HTML and normalize whitespace in free text. ``None`` passes through."""
    if value is None:
        return None
    return sanitize_string(strip_html(value), max_length=max_length)


def is_valid_username(username: str) -> bool:
    """Check a username: 3-50 letters, digits, dot, dash or underscore."""
    return bool(USERNAME_PATTERN.match(username))


def digits_only(value: str) -> str:
    """Drop every non-digit character (spaces and dashes in card numbers)."""
    return re.sub(r"\D", "", value)


def luhn_checksum_valid(card_number: str) -> bool:
    """
    Validate a card number with the Luhn algorithm.

    Args:
        card_number: Card number, separators allowed

    Returns:
        True if the number has 12-19 digits and a valid check digit
    """
    digits = digits_only(card_number)
    if not 12 <= len(digits) <= 19:
        return False

    total = 0
    for index, char in enumerate(reversed(digits)):
        digit = int(char)
        if index % 2 == 1:
            digit *= 2
            if digit > 9:
                digit -= 9
        total += digit
    return total % 10 == 0


def card_expiry_valid(expiry: str, today: Optional[date] = None) -> bool:
    """
    Validate an ``MM/YY`` card expiry that is not in the past.

    A card is valid through the last day of its expiry month.
    """
    match = CARD_EXPIRY_PATTERN.match(expiry.strip())
    if not match:
        return False

    month, year = int(match.group(1)), 2000 + int(match.group(2))
    today = today or date.today()
    return (year, month) >= (today.year, today.month)


def cvv_valid(cvv: str) -> bool:
    """Validate a 3 or 4 digit card security code."""
    return bool(CVV_PATTERN.match(cvv.strip()))
