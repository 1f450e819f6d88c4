# colorblind_theme/core/i18n/message_bundle.py
"""
Localized message bundles.

A bundle is a family of JSON files mapping keys to templates:

    messages/ThemeBundle.json         base (required)
    messages/ThemeBundle_de.json      language
    messages/ThemeBundle_de_AT.json   language + country

Candidates are merged from general to specific, so a country file only
needs the keys it changes. Templates use numbered placeholders, `{0}`,
`{1}`..., with MessageFormat quoting: `''` is a literal quote and text
between single quotes is not interpreted.
"""

import json
import logging
import re
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ..error_handling import ConfigError, MissingMessageError

logger = logging.getLogger("MessageBundle")

MISSING_KEY_POLICIES = ("error", "marker")

_PLACEHOLDER = re.compile(r"\{(\d+)\}")


def format_message(template: str, params: tuple) -> str:
    """Substitute `{n}` placeholders, honouring MessageFormat single-quote escaping."""
    out: List[str] = []
    i = 0
    length = len(template)
    while i < length:
        ch = template[i]
        if ch == "'":
            if i + 1 < length and template[i + 1] == "'":
                out.append("'")
                i += 2
                continue
            end = template.find("'", i + 1)
            if end == -1:
                out.append(template[i + 1:])
                break
            quoted = template[i + 1:end]
            out.append(quoted if quoted else "'")
            i = end + 1
            continue
        if ch == "{":
            match = _PLACEHOLDER.match(template, i)
            if match:
                index = int(match.group(1))
                out.append(str(params[index]) if index < len(params) else match.group(0))
                i = match.end()
                continue
        out.append(ch)
        i += 1
    return "".join(out)


class MessageBundle:
    """
    Key to template lookup for one bundle name in one locale.

    Resources are read once per locale, on first use.
    """

    def __init__(
        self,
        bundle_name: str,
        directory: Union[str, Path],
        locale: str = "en",
        fallback_locale: str = "en",
        missing_key_policy: str = "error",
    ):
        if missing_key_policy not in MISSING_KEY_POLICIES:
            raise ValueError(f"missing_key_policy must be one of {MISSING_KEY_POLICIES}")
        self.bundle_name = bundle_name
        self.directory = Path(directory)
        self._locale = locale
        self.fallback_locale = fallback_locale
        self.missing_key_policy = missing_key_policy
        self._messages: Optional[Dict[str, str]] = None
        self._lock = threading.RLock()

    @property
    def locale(self) -> str:
        return self._locale

    def set_locale(self, locale: str) -> None:
        with self._lock:
            if locale == self._locale:
                return
            self._locale = locale
            self._messages = None
        logger.debug(f"Bundle '{self.bundle_name}' switched to locale {locale}")

    def configure(self, locale: Optional[str] = None, fallback_locale: Optional[str] = None,
                  missing_key_policy: Optional[str] = None) -> None:
        """Apply i18n settings in one call; unset arguments are left alone."""
        with self._lock:
            if missing_key_policy is not None:
                if missing_key_policy not in MISSING_KEY_POLICIES:
                    raise ValueError(f"missing_key_policy must be one of {MISSING_KEY_POLICIES}")
                self.missing_key_policy = missing_key_policy
            if fallback_locale is not None and fallback_locale != self.fallback_locale:
                self.fallback_locale = fallback_locale
                self._messages = None
            if locale is not None:
                self.set_locale(locale)

    def settings(self) -> Dict[str, str]:
        """Current i18n settings, in the keyword form `configure` accepts."""
        with self._lock:
            return {
                "locale": self._locale,
                "fallback_locale": self.fallback_locale,
                "missing_key_policy": self.missing_key_policy,
            }

    def candidate_files(self) -> List[Path]:
        """Resource files for the current locale, most general first."""
        names = [self.bundle_name]
        for locale in self._locale_chain():
            parts = locale.split("_")
            for n in range(1, len(parts) + 1):
                name = f"{self.bundle_name}_{'_'.join(parts[:n])}"
                if name not in names:
                    names.append(name)
        return [self.directory / f"{name}.json" for name in names]

    def _locale_chain(self) -> List[str]:
        # fallback first so the requested locale wins the merge
        chain = []
        for locale in (self.fallback_locale, self._locale):
            if locale and locale not in chain:
                chain.append(locale)
        return chain

    def _load(self) -> Dict[str, str]:
        with self._lock:
            if self._messages is not None:
                return self._messages

            files = self.candidate_files()
            base = files[0]
            if not base.exists():
                raise FileNotFoundError(f"Base bundle file not found: {base}")

            messages: Dict[str, str] = {}
            for path in files:
                if not path.exists():
                    continue
                messages.update(self._read_file(path))

            self._messages = messages
            logger.debug(f"Loaded {len(messages)} message(s) for '{self.bundle_name}' ({self._locale})")
            return messages

    @staticmethod
    def _read_file(path: Path) -> Dict[str, str]:
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in message bundle {path}: {e}") from e
        if not isinstance(data, dict) or not all(isinstance(v, str) for v in data.values()):
            raise ConfigError(f"Message bundle {path} must map keys to strings")
        return data

    def message(self, key: str, *params: Any) -> str:
        """Resolve key in the current locale and substitute params."""
        template = self._load().get(key)
        if template is None:
            if self.missing_key_policy == "marker":
                logger.warning(f"Missing message key '{key}' in bundle '{self.bundle_name}'")
                return f"!{key}!"
            raise MissingMessageError(self.bundle_name, key)
        return format_message(template, params)

    def has_key(self, key: str) -> bool:
        return key in self._load()

    def keys(self) -> List[str]:
        return sorted(self._load())

    def reload(self) -> None:
        with self._lock:
            self._messages = None
