import logging
import re
from typing import Callable, Dict, Mapping, Optional, Pattern

logger = logging.getLogger(__name__)

ShortcodeHandler = Callable[[Dict[str, str], Optional[str], str], str]

_ATTR_PATTERN = re.compile(
    r"""([\w-]+)\s*=\s*"([^"]*)"(?:\s|$)"""
    r"""|([\w-]+)\s*=\s*'([^']*)'(?:\s|$)"""
    r"""|([\w-]+)\s*=\s*([^\s'"]+)(?:\s|$)"""
    r"""|"([^"]*)"(?:\s|$)"""
    r"""|'([^']*)'(?:\s|$)"""
    r"""|(\S+)(?:\s|$)"""
)
_SPACE_LIKE = re.compile("[\u00a0\u200b]+")


def parse_shortcode_atts(text: str) -> Dict[str, str]:
    """
    Parses name="value", name='value' and name=value pairs.
    Names are lower-cased; bare positional values are dropped.
    """
    atts: Dict[str, str] = {}
    text = _SPACE_LIKE.sub(" ", text or "")
    for m in _ATTR_PATTERN.finditer(text):
        if m.group(1):
            atts[m.group(1).lower()] = m.group(2)
        elif m.group(3):
            atts[m.group(3).lower()] = m.group(4)
        elif m.group(5):
            atts[m.group(5).lower()] = m.group(6)
    return atts


def shortcode_atts(
    defaults: Mapping[str, str], atts: Optional[Mapping[str, str]]
) -> Dict[str, str]:
    """Merges user attributes over defaults, keeping only known keys."""
    atts = atts or {}
    return {name: atts.get(name, default) for name, default in defaults.items()}


class ShortcodeRegistry:
    def __init__(self):
        self.handlers: Dict[str, ShortcodeHandler] = {}
        self._pattern: Optional[Pattern[str]] = None

    def add_shortcode(self, tag: str, handler: ShortcodeHandler):
        if not re.fullmatch(r"[\w-]+", tag):
            raise ValueError(f"Invalid shortcode tag: {tag!r}")
        self.handlers[tag] = handler
        self._pattern = None
        logger.debug(f"Registered shortcode [{tag}]")

    def remove_shortcode(self, tag: str):
        self.handlers.pop(tag, None)
        self._pattern = None

    def has_shortcode(self, tag: str) -> bool:
        return tag in self.handlers

    def _compile(self) -> Pattern[str]:
        if self._pattern is None:
            # Longest first so "tag-long" is not swallowed by "tag"
            names = "|".join(
                re.escape(t) for t in sorted(self.handlers, key=len, reverse=True)
            )
            self._pattern = re.compile(
                r"\[(\[?)"  # 1: escaping open bracket
                r"(" + names + r")(?![\w-])"  # 2: tag
                r"([^\]/]*(?:/(?!\])[^\]/]*)*?)"  # 3: attributes
                r"(?:(/)\]"  # 4: self-closing
                r"|\](?:(.*?)\[/\2\])?)"  # 5: enclosed content
                r"(\]?)",  # 6: escaping close bracket
                re.DOTALL,
            )
        return self._pattern

    def do_shortcode(self, content: str) -> str:
        """Expands every registered shortcode found in content."""
        if not content or "[" not in content or not self.handlers:
            return content

        return self._compile().sub(self._expand, content)

    def _expand(self, m) -> str:
        # [[tag]] is rendered literally as [tag]
        if m.group(1) == "[" and m.group(6) == "]":
            return m.group(0)[1:-1]

        tag = m.group(2)
        atts = parse_shortcode_atts(m.group(3))
        output = self.handlers[tag](atts, m.group(5), tag)
        return m.group(1) + output + m.group(6)
