"""
Analysis engine owning all per-session state.

One ``AnalysisEngine`` holds the latest snapshot of every open document,
the pattern cache, the debounce timers and the diagnostics pipeline. The
editor adapter drives it with open/change/close notifications and receives
findings through the ``publish`` callback.
"""

import logging
from typing import Any, Callable, Dict, Iterator, List, Optional, Sequence

from ..analyzers.base import Validator
from ..analyzers.pipeline import DiagnosticsPipeline
from .cache import PatternCache
from .findings import Finding
from .scheduler import DEFAULT_DEBOUNCE_DELAY, Debouncer, RevalidationScheduler
from .types import DocumentSnapshot, Pattern

logger = logging.getLogger(__name__)

PublishCallback = Callable[[str, int, List[Finding]], None]


class DocumentStore:
    """Latest known snapshot per document URI."""

    def __init__(self):
        self._documents: Dict[str, DocumentSnapshot] = {}

    def put(self, snapshot: DocumentSnapshot) -> bool:
        """Store a snapshot unless a newer version is already held.

        Returns:
            True if the snapshot became the current one
        """
        current = self._documents.get(snapshot.uri)
        if current is not None and current.version > snapshot.version:
            logger.debug(
                f"Ignoring out-of-order snapshot {snapshot.uri} v{snapshot.version} "
                f"(have v{current.version})"
            )
            return False
        self._documents[snapshot.uri] = snapshot
        return True

    def get(self, uri: str) -> Optional[DocumentSnapshot]:
        return self._documents.get(uri)

    def remove(self, uri: str) -> Optional[DocumentSnapshot]:
        return self._documents.pop(uri, None)

    def clear(self) -> None:
        self._documents.clear()

    def __contains__(self, uri: object) -> bool:
        return uri in self._documents

    def __len__(self) -> int:
        return len(self._documents)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._documents))


class AnalysisEngine:
    """
    Session-scoped owner of documents, cache, timers and validators.

    Edits are debounced; the debounced revalidation reads the store's
    latest snapshot when it fires, so findings for an older version are
    never published once a newer version has been seen.
    """

    def __init__(
        self,
        publish: Optional[PublishCallback] = None,
        debounce_delay: float = DEFAULT_DEBOUNCE_DELAY,
        valid_formats: Optional[Sequence[str]] = None,
        disabled_validators: Optional[Sequence[str]] = None,
        validators: Optional[Sequence[Validator]] = None,
        debouncer: Optional[Debouncer] = None,
    ):
        """
        Initialize the engine.

        Args:
            publish: Called with (uri, version, findings) after each validation
            debounce_delay: Quiet period before an edited document is revalidated
            valid_formats: Accepted image format values
            disabled_validators: Validator names to skip
            validators: Explicit validator list, overriding the defaults
            debouncer: Timer table, injectable for tests
        """
        self.publish = publish

        pipeline_config: Dict[str, Any] = {
            "disabled_validators": list(disabled_validators or []),
        }
        if valid_formats is not None:
            pipeline_config["valid_formats"] = list(valid_formats)

        self.documents = DocumentStore()
        self.cache = PatternCache()
        self.pipeline = DiagnosticsPipeline(self.cache, validators, pipeline_config)
        self.scheduler = RevalidationScheduler(
            self.revalidate,
            on_evict=self._evict,
            delay=debounce_delay,
            debouncer=debouncer,
        )

    # -- document lifecycle -------------------------------------------------

    def open_document(self, snapshot: DocumentSnapshot) -> None:
        """Track a newly opened document and validate it immediately."""
        self.documents.put(snapshot)
        self.scheduler.on_open(snapshot.uri)

    def change_document(self, snapshot: DocumentSnapshot) -> None:
        """Record an edit; validation runs after the debounce delay."""
        if self.documents.put(snapshot):
            self.scheduler.on_edit(snapshot.uri)

    def close_document(self, uri: str) -> None:
        """Forget a document and cancel any pending validation."""
        self.scheduler.on_close(uri)

    def _evict(self, uri: str) -> None:
        self.cache.evict(uri)
        self.documents.remove(uri)

    # -- analysis -------------------------------------------------------------

    def get_patterns(self, uri: str) -> List[Pattern]:
        """Patterns for the current snapshot of a document (cached per version)."""
        snapshot = self.documents.get(uri)
        if snapshot is None or not snapshot.file_type.supports_full_features:
            return []
        return self.cache.get_patterns(uri, snapshot.version, snapshot.text)

    def validate(self, snapshot: DocumentSnapshot) -> List[Finding]:
        """Run the pipeline over one snapshot without publishing."""
        return self.pipeline.validate(
            snapshot.uri, snapshot.version, snapshot.text, snapshot.file_type
        )

    def revalidate(self, uri: str) -> List[Finding]:
        """Validate the current snapshot of ``uri`` and publish the findings."""
        snapshot = self.documents.get(uri)
        if snapshot is None:
            logger.debug(f"Skipping revalidation of closed document {uri}")
            return []

        findings = self.validate(snapshot)
        if self.publish is not None:
            self.publish(uri, snapshot.version, findings)
        return findings

    def close(self) -> None:
        """Cancel every timer and drop all cached state."""
        self.scheduler.close()
        self.cache.clear()
        self.documents.clear()
        logger.debug("Analysis engine closed")
