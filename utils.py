import re
from urllib.parse import quote

import markupsafe

ALLOWED_SCHEMES = ("http", "https")

# Characters that may appear in a cleaned URL; everything else is dropped.
_URL_UNSAFE = re.compile(r"[^a-zA-Z0-9\-~+_.?#=!&;,/:%@$|*'()\[\]]")
_ENCODED_NEWLINES = re.compile(r"%0[ad]|%00", re.IGNORECASE)
_SCHEME = re.compile(r"^([a-zA-Z][a-zA-Z0-9+.\-]*):")


def esc_html(text) -> str:
    """Escapes & < > " ' for HTML text nodes."""
    if text is None:
        return ""
    return str(markupsafe.escape(str(text)))


def esc_attr(text) -> str:
    return esc_html(text)


def _percent_encode_non_ascii(url: str) -> str:
    return "".join(ch if ord(ch) < 128 else quote(ch, safe="") for ch in url)


def clean_url(url) -> str:
    """
    Normalizes an untrusted URL for use in markup.

    Spaces become %20, non-ASCII characters are percent-encoded, characters
    outside the URL-safe set are removed and encoded CR/LF/NUL sequences are
    stripped. Absolute URLs with a scheme other than http or https yield "".
    Relative references are returned cleaned but otherwise untouched.
    """
    if not url:
        return ""

    url = str(url).strip().replace(" ", "%20")
    url = _percent_encode_non_ascii(url)
    url = _URL_UNSAFE.sub("", url)

    # Repeat until stable so "%0%0ad" style nesting cannot reassemble
    while True:
        stripped = _ENCODED_NEWLINES.sub("", url)
        if stripped == url:
            break
        url = stripped

    match = _SCHEME.match(url)
    if match and match.group(1).lower() not in ALLOWED_SCHEMES:
        return ""

    return url


def esc_url(url) -> str:
    """Cleans a URL and escapes it for an HTML attribute value."""
    return esc_attr(clean_url(url))
