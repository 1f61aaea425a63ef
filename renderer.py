import logging
from typing import Any, Iterable, Mapping, Optional, Union
from urllib.parse import urlsplit

from models import FrameAttributes
from security import is_allowed
from utils import ALLOWED_SCHEMES, clean_url, esc_attr, esc_html, esc_url

logger = logging.getLogger(__name__)

ERROR_MESSAGE = "Domain not allowed for iframe embedding."

ERROR_TEMPLATE = '<div class="iframe-error">{message}</div>'

FRAME_TEMPLATE = (
    '<iframe src="{src}" width="{width}" height="{height}" class="{class_}" '
    'title="{title}" frameborder="0" loading="lazy" allowfullscreen></iframe>'
)

# Fixed 16:9 box; the iframe's own width/height attributes do not change it.
CONTAINER_TEMPLATE = (
    '<div class="iframe-container" style="position: relative; overflow: hidden; '
    'width: 100%; padding-top: 56.25%;">'
    '<div style="position: absolute; top: 0; left: 0; bottom: 0; right: 0;">'
    "{frame}</div></div>"
)


def extract_hostname(url: str) -> Optional[str]:
    """Returns the case-preserved host of an http(s) URL, or None."""
    if not url:
        return None

    try:
        parts = urlsplit(url)
    except ValueError as e:
        logger.debug(f"Could not parse URL: {e}")
        return None

    if parts.scheme.lower() not in ALLOWED_SCHEMES:
        return None

    host = parts.netloc.rpartition("@")[2]
    if host.startswith("["):
        # IPv6 literal, keep the brackets
        end = host.find("]")
        host = host[: end + 1] if end != -1 else ""
    else:
        host = host.partition(":")[0]

    return host or None


def render_error() -> str:
    return ERROR_TEMPLATE.format(message=esc_html(ERROR_MESSAGE))


def render_frame(
    attrs: Union[FrameAttributes, Mapping[str, Any], None],
    domains: Iterable[str],
) -> str:
    """
    Renders the iframe markup for an attribute bag, or the error fragment
    when the src host is not on the allow-list.
    """
    if not isinstance(attrs, FrameAttributes):
        attrs = FrameAttributes.from_raw(attrs)

    url = clean_url(attrs.src)
    hostname = extract_hostname(url)

    if not is_allowed(list(domains), hostname):
        logger.info(f"Rejected iframe source host {hostname!r}")
        return render_error()

    frame = FRAME_TEMPLATE.format(
        src=esc_url(url),
        width=esc_attr(attrs.width),
        height=esc_attr(attrs.height),
        class_=esc_attr(attrs.class_),
        title=esc_attr(attrs.title),
    )
    logger.debug(f"Rendered iframe for host {hostname}")
    return CONTAINER_TEMPLATE.format(frame=frame)
