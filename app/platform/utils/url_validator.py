from urllib.parse import urlparse
from typing import Tuple


def validate_url(url: str) -> Tuple[bool, str, str]:
    """
    Check that `url` is an absolute http(s) URL.

    Unlike a browser address bar nothing is guessed: a missing scheme is an
    error, not an implicit https://.

    Returns (is_valid, cleaned_url, error_message).
    """
    if not url or not url.strip():
        return False, "", "URL cannot be empty"

    cleaned = url.strip()

    if any(ch.isspace() for ch in cleaned):
        return False, cleaned, "Invalid URL format: contains whitespace"

    try:
        parsed = urlparse(cleaned)

        if not parsed.scheme:
            return False, cleaned, "Invalid URL format: missing scheme"

        if parsed.scheme not in ['http', 'https']:
            return False, cleaned, f"Invalid URL scheme: {parsed.scheme} (must be http or https)"

        if not parsed.netloc or not parsed.hostname:
            return False, cleaned, "Invalid URL format: missing domain"

        # Raises ValueError on a malformed port
        parsed.port

        return True, cleaned, ""

    except ValueError as e:
        return False, cleaned, f"URL parsing error: {str(e)}"
