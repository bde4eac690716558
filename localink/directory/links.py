from __future__ import annotations

import re
from urllib.parse import quote, urlparse


def sanitize_website(url: str | None) -> str | None:
    """Normalise a website URL, or return ``None`` if it is not a usable http(s) link."""
    if not url or not url.strip():
        return None

    normalized = url.strip()
    if not re.match(r"^https?://", normalized, re.IGNORECASE):
        normalized = f"https://{normalized}"

    try:
        parsed = urlparse(normalized)
    except ValueError:
        return None

    if parsed.scheme.lower() not in ("http", "https"):
        return None
    if not parsed.hostname or len(parsed.hostname) < 3:
        return None
    return normalized


def sanitize_phone(phone: str | None) -> str | None:
    """Return a ``tel:`` link for phone numbers with 10-15 digits."""
    if not phone:
        return None

    cleaned = re.sub(r"[^\d+]", "", phone)
    digits = cleaned.replace("+", "")
    if len(digits) < 10 or len(digits) > 15:
        return None
    return f"tel:{cleaned}"


def directions_link(lat: float, lng: float, address: str | None = None) -> str:
    if address:
        return f"https://www.google.com/maps/dir/?api=1&destination={quote(address, safe='')}"
    return f"https://www.google.com/maps/dir/?api=1&destination={lat},{lng}"
