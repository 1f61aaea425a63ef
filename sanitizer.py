import copy
import logging
from typing import Callable, Dict, List

import bleach
from bleach.css_sanitizer import CSSSanitizer

logger = logging.getLogger(__name__)

AllowedTags = Dict[str, Dict[str, bool]]
TagFilter = Callable[[AllowedTags, str], AllowedTags]

# Rich-text markup permitted in authored post content.
POST_TAGS: AllowedTags = {
    "a": {"href": True, "title": True, "rel": True, "target": True},
    "abbr": {"title": True},
    "b": {},
    "blockquote": {"cite": True},
    "br": {},
    "code": {},
    "div": {"class": True, "style": True},
    "em": {},
    "h1": {}, "h2": {}, "h3": {}, "h4": {}, "h5": {}, "h6": {},
    "i": {},
    "img": {"src": True, "alt": True, "width": True, "height": True},
    "li": {},
    "ol": {},
    "p": {"class": True},
    "pre": {},
    "span": {"class": True, "style": True},
    "strong": {},
    "ul": {},
}

CONTEXT_TAGS: Dict[str, AllowedTags] = {
    "post": POST_TAGS,
    "strip": {},
}

ALLOWED_CSS_PROPERTIES = [
    "position",
    "overflow",
    "width",
    "height",
    "padding-top",
    "top",
    "left",
    "bottom",
    "right",
]


class ContentSanitizer:
    """Strips markup down to the tags and attributes allowed for a context."""

    def __init__(self):
        self.filters: List[TagFilter] = []
        self.css_sanitizer = CSSSanitizer(allowed_css_properties=ALLOWED_CSS_PROPERTIES)

    def add_filter(self, callback: TagFilter):
        self.filters.append(callback)

    def allowed_html(self, context: str = "post") -> AllowedTags:
        tags = copy.deepcopy(CONTEXT_TAGS.get(context, {}))
        for callback in self.filters:
            tags = callback(tags, context)
        return tags

    def sanitize(self, html: str, context: str = "post") -> str:
        if not html:
            return ""

        tags = self.allowed_html(context)
        attributes = {
            tag: [name for name, allowed in attrs.items() if allowed]
            for tag, attrs in tags.items()
        }
        logger.debug(f"Sanitizing {len(html)} chars in '{context}' context")
        return bleach.clean(
            html,
            tags=set(tags),
            attributes=attributes,
            css_sanitizer=self.css_sanitizer,
            strip=True,
        )
