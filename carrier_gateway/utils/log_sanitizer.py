"""
Log sanitization helpers

Carrier error bodies echo back addresses, phone numbers and occasionally
credentials. Everything that goes to a log line from a carrier payload passes
through here first.
"""
import json
import re
from typing import Any

MAX_LOG_LENGTH = 500

_PATTERNS = [
    # Credentials
    (r'(?i)\b(bearer|basic)\s+[A-Za-z0-9\-._~+/]+=*', r'\1 [REDACTED]'),
    (r'(?i)("?(?:access_token|client_secret|refresh_token)"?\s*[:=]\s*)"[^"]*"', r'\1"[REDACTED]"'),
    # Emails
    (r'\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b', '[EMAIL]'),
    # Phone numbers
    (r'\b\d{3}[-.\s]?\d{3}[-.\s]?\d{4}\b', '[PHONE]'),
    (r'\b\(\d{3}\)\s*\d{3}[-.\s]?\d{4}\b', '[PHONE]'),
    # Postal codes (various formats)
    (r'\b\d{5}-\d{4}\b', '[ZIP]'),
    (r'\b\d{5}\b', '[ZIP]'),
    (r'\b[A-Z]\d[A-Z]\s*\d[A-Z]\d\b', '[POSTAL]'),  # Canada
]


def sanitize_for_logging(value: Any, max_length: int = MAX_LOG_LENGTH) -> str:
    """
    Render ``value`` as a log-safe string.

    Args:
        value: str, bytes or any JSON-serializable payload
        max_length: Maximum length of result

    Returns:
        Sanitized text safe for logging
    """
    if value is None:
        return ""

    if isinstance(value, bytes):
        text = value.decode("utf-8", errors="replace")
    elif isinstance(value, str):
        text = value
    else:
        try:
            text = json.dumps(value, default=str)
        except (TypeError, ValueError):
            text = repr(value)

    # Redact the full text; truncation comes last
    sanitized = text
    for pattern, replacement in _PATTERNS:
        sanitized = re.sub(pattern, replacement, sanitized)

    return sanitized[:max_length]


def mask_token(token: str) -> str:
    """Keep only the last four characters of a secret."""
    if not token:
        return ""
    if len(token) <= 4:
        return "****"
    return f"****{token[-4:]}"
