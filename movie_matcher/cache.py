"""In-memory cache for catalog API responses."""
from typing import Any, Dict, Iterator, Optional
from loguru import logger


class QueryCache:
    """
    Caches raw catalog responses keyed by the full request URL.

    Entries never expire on their own; they are removed only through
    invalidate(). Share one instance between clients to get a process-wide
    cache, or give each test its own.
    """

    def __init__(self):
        self._entries: Dict[str, Any] = {}

    def get(self, key: str) -> Optional[Any]:
        return self._entries.get(key)

    def set(self, key: str, value: Any) -> None:
        self._entries[key] = value

    def invalidate(self, prefix: Optional[str] = None) -> int:
        """
        Drop cached responses.

        Args:
            prefix (Optional[str]): Only drop keys starting with this string.
                                    Clears everything when omitted.

        Returns:
            int: Number of entries removed.
        """
        if prefix is None:
            removed = len(self._entries)
            self._entries.clear()
        else:
            stale = [key for key in self._entries if key.startswith(prefix)]
            for key in stale:
                del self._entries[key]
            removed = len(stale)
        logger.debug(f"🧹 Invalidated {removed} cached catalog responses")
        return removed

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)
