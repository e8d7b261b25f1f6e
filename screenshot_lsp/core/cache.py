"""
Per-document pattern cache.

Pattern detection results are stored per document identity together with
the document version they were computed for, so that hover, code lens and
diagnostics consumers querying the same version share one scan.
"""

import logging
import time
from typing import Callable, Dict, List, Optional

from .patterns import analyze
from .types import CacheEntry, Pattern

logger = logging.getLogger(__name__)


class PatternCache:
    """
    Version-keyed cache of pattern analysis results.

    An entry is only ever served for the exact version it was computed for;
    any other version is a miss and triggers a fresh scan that overwrites
    the entry.
    """

    def __init__(
        self,
        analyzer: Callable[[str], List[Pattern]] = analyze,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize the pattern cache.

        Args:
            analyzer: Function turning document text into patterns
            clock: Timestamp source for entry creation times
        """
        self._analyzer = analyzer
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}

        self.stats = {
            'hits': 0,
            'misses': 0,
            'evictions': 0,
        }

    def get_patterns(self, doc_id: str, version: int, text: str) -> List[Pattern]:
        """
        Get patterns for a document version, scanning only on a miss.

        Args:
            doc_id: Document identity (URI)
            version: Current document version
            text: Document text at that version

        Returns:
            Patterns detected in the text
        """
        entry = self._entries.get(doc_id)
        if entry is not None and entry.version == version:
            self.stats['hits'] += 1
            logger.debug(f"Using cached patterns for {doc_id} (version {version})")
            return list(entry.patterns)

        self.stats['misses'] += 1
        patterns = self._analyzer(text)
        self._entries[doc_id] = CacheEntry(
            version=version,
            patterns=tuple(patterns),
            created_at=self._clock(),
        )
        return list(patterns)

    def peek(self, doc_id: str, version: int) -> Optional[List[Pattern]]:
        """Return cached patterns for exactly this version without scanning."""
        entry = self._entries.get(doc_id)
        if entry is None or entry.version != version:
            return None
        return list(entry.patterns)

    def get_entry(self, doc_id: str) -> Optional[CacheEntry]:
        return self._entries.get(doc_id)

    def evict(self, doc_id: str) -> bool:
        """Drop the entry for a document. Returns True if one existed."""
        removed = self._entries.pop(doc_id, None) is not None
        if removed:
            self.stats['evictions'] += 1
            logger.debug(f"Evicted pattern cache entry for {doc_id}")
        return removed

    def clear(self) -> None:
        """Drop every entry."""
        self.stats['evictions'] += len(self._entries)
        self._entries.clear()

    def __contains__(self, doc_id: object) -> bool:
        return doc_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)
