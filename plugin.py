import logging
from typing import Dict, Optional

from models import FrameAttributes
from renderer import render_frame
from sanitizer import AllowedTags, ContentSanitizer
from security import DomainAllowList
from shortcodes import ShortcodeRegistry, shortcode_atts
from store import OptionStore

logger = logging.getLogger(__name__)

DEFAULT_ATTS = FrameAttributes().model_dump(by_alias=True)

IFRAME_ATTRIBUTES = {
    "src": True,
    "height": True,
    "width": True,
    "frameborder": True,
    "allowfullscreen": True,
    "loading": True,
    "title": True,
    "style": True,
    "class": True,
}


def allow_iframe_tags(tags: AllowedTags, context: str) -> AllowedTags:
    """Lets the rendered iframe survive post-content sanitizing."""
    if context == "post":
        tags["iframe"] = dict(IFRAME_ATTRIBUTES)
    return tags


class SafeIframePlugin:
    def __init__(
        self, store: OptionStore, option_key: str, tag: str = "safe_iframe"
    ):
        self.store = store
        self.option_key = option_key
        self.tag = tag
        self.allow_list = DomainAllowList(store, option_key)

    def register(self, shortcodes: ShortcodeRegistry, sanitizer: ContentSanitizer):
        """One-time startup wiring of the shortcode and the iframe tag filter."""
        shortcodes.add_shortcode(self.tag, self.iframe_shortcode)
        sanitizer.add_filter(allow_iframe_tags)
        logger.info(f"Registered [{self.tag}] shortcode and iframe tag allowance")

    def iframe_shortcode(
        self, atts: Dict[str, str], content: Optional[str] = None, tag: str = ""
    ) -> str:
        atts = shortcode_atts(DEFAULT_ATTS, atts)
        return render_frame(atts, self.allow_list.domains())

    def allowed_domains_text(self) -> str:
        return self.store.get_option(self.option_key, "")

    def update_allowed_domains(self, raw: str):
        self.store.set_option(self.option_key, raw)
        logger.info(f"Updated allowed domains option '{self.option_key}'")
