"""
Key pool resolution.

A credential family is identified by a prefix (e.g. GEMINI_API_KEY). Keys
are discovered from a configuration snapshot in a fixed scan order:

    PREFIX, PREFIX1, PREFIX_1, PREFIX2, PREFIX_2, ..., PREFIX10, PREFIX_10

Empty values are dropped and duplicates removed (first occurrence wins).
"""
import os
from dataclasses import dataclass
from typing import Iterator, List, Mapping, Optional, Tuple


@dataclass(frozen=True)
class KeySlot:
    """A discovered credential as shown in diagnostics (never the raw key)."""
    name: str
    prefix: str
    masked_key: str


def mask_key(key: str) -> str:
    """Reveal only the first 6 and last 4 characters of a credential."""
    if not key:
        return ""
    if len(key) <= 10:
        return "***"
    return f"{key[:6]}...{key[-4:]}"


class KeyPoolResolver:
    """
    Resolves the ordered list of credentials for a provider family.

    The configuration is snapshotted at construction time, so a resolver is
    a pure function of its input and never observes later environment changes.
    """

    def __init__(self, config: Optional[Mapping[str, str]] = None, max_index: int = 10):
        self._config = dict(os.environ if config is None else config)
        self.max_index = max_index

    def _candidate_names(self, prefix: str) -> Iterator[str]:
        yield prefix
        for i in range(1, self.max_index + 1):
            yield f"{prefix}{i}"
            yield f"{prefix}_{i}"

    def _scan(self, prefix: str) -> List[Tuple[str, str]]:
        if not prefix:
            raise ValueError("Key prefix must be a non-empty string")

        seen = set()
        found = []
        for name in self._candidate_names(prefix):
            value = self._config.get(name) or ""
            if not value.strip() or value in seen:
                continue
            seen.add(value)
            found.append((name, value))
        return found

    def resolve(self, prefix: str) -> List[str]:
        """
        Return all distinct credentials configured for `prefix`.

        Args:
            prefix: Credential family prefix (e.g. "RAPID_API_KEY")

        Returns:
            Credentials in discovery order; may be empty.

        Raises:
            ValueError: If prefix is empty
        """
        return [value for _, value in self._scan(prefix)]

    def describe(self, prefix: str) -> List[KeySlot]:
        """List the variable each credential was found under, masked."""
        return [
            KeySlot(name=name, prefix=prefix, masked_key=mask_key(value))
            for name, value in self._scan(prefix)
        ]

    def count(self, prefix: str) -> int:
        return len(self._scan(prefix))
