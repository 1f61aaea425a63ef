import json
import logging
import os
import tempfile
from typing import Dict, Optional, Protocol

logger = logging.getLogger(__name__)


class OptionStore(Protocol):
    def get_option(self, key: str, default: str = "") -> str: ...

    def set_option(self, key: str, value: str) -> None: ...


class MemoryOptionStore:
    def __init__(self, options: Optional[Dict[str, str]] = None):
        self.options: Dict[str, str] = dict(options or {})

    def get_option(self, key: str, default: str = "") -> str:
        return self.options.get(key, default)

    def set_option(self, key: str, value: str) -> None:
        self.options[key] = value


class JsonOptionStore:
    """
    Options persisted as a flat JSON object of string values.
    The file is re-read whenever its mtime changes.
    """

    def __init__(self, path: str):
        self.path = path
        self.options: Dict[str, str] = {}
        self._last_mtime = 0.0
        self.load()

    def load(self):
        """Loads or reloads the options if the file has changed."""
        try:
            if not os.path.exists(self.path):
                if self.options or self._last_mtime == 0.0:
                    logger.warning(
                        f"Options file not found at {self.path}. Defaulting to no options."
                    )
                self.options = {}
                self._last_mtime = -1.0
                return

            mtime = os.path.getmtime(self.path)
            if mtime != self._last_mtime:
                logger.info(f"Loading options from {self.path}")
                with open(self.path, "r", encoding="utf-8") as f:
                    data = json.load(f)
                if not isinstance(data, dict):
                    raise ValueError("options file must contain a JSON object")
                self.options = {
                    str(k): v for k, v in data.items() if isinstance(v, str)
                }
                self._last_mtime = mtime
                logger.debug(f"Loaded option keys: {sorted(self.options)}")
        except (OSError, ValueError) as e:
            # Unreadable options behave as unset, so nothing gets allowed
            logger.error(f"Failed to load options from {self.path}: {e}")
            self.options = {}
            self._last_mtime = 0.0

    def get_option(self, key: str, default: str = "") -> str:
        self.load()
        return self.options.get(key, default)

    def set_option(self, key: str, value: str) -> None:
        self.load()
        options = dict(self.options)
        options[key] = value

        directory = os.path.dirname(os.path.abspath(self.path))
        fd, tmp_path = tempfile.mkstemp(dir=directory, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(options, f, indent=2)
            os.replace(tmp_path, self.path)
        except OSError:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

        logger.info(f"Saved option '{key}' to {self.path}")
        self.options = options
        self._last_mtime = os.path.getmtime(self.path)
