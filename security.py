import logging
from typing import Iterable, List, Optional

from store import OptionStore

logger = logging.getLogger(__name__)


def parse_allow_list(raw: Optional[str]) -> List[str]:
    """Splits newline separated domain text into trimmed, non-empty entries."""
    if not raw:
        return []

    domains = [line.strip() for line in raw.split("\n")]
    return [d for d in domains if d]


def is_allowed(domains: Iterable[str], hostname: Optional[str]) -> bool:
    """
    Exact, case-sensitive membership check.
    Subdomains are not implied by a parent entry and wildcards are not expanded.
    """
    if not hostname:
        return False

    return hostname in domains


class DomainAllowList:
    def __init__(self, store: OptionStore, option_key: str):
        self.store = store
        self.option_key = option_key

    def domains(self) -> List[str]:
        """Re-reads the option on every call so admin edits apply immediately."""
        raw = self.store.get_option(self.option_key, "")
        domains = parse_allow_list(raw)
        logger.debug(f"Loaded {len(domains)} allowed domains from '{self.option_key}'")
        return domains
