"""Validator registry and the diagnostics pipeline."""

import logging
from typing import Any, Dict, List, Optional, Sequence

from .base import ValidationContext, Validator
from .deprecated import DeprecatedApiValidator
from .format_values import FormatValidator
from .json_config import JsonConfigValidator
from .missing_parameters import MissingParametersValidator
from .quality import QualityRangeValidator
from .region_parameters import RegionParametersValidator
from ..core.cache import PatternCache
from ..core.findings import Finding
from ..core.types import FileType

logger = logging.getLogger(__name__)


# Findings are reported in this order
DEFAULT_VALIDATORS = [
    FormatValidator(),
    QualityRangeValidator(),
    MissingParametersValidator(),
    RegionParametersValidator(),
    DeprecatedApiValidator(),
    JsonConfigValidator(),
]


def load_validators(config: Dict[str, Any]) -> List[Validator]:
    """Load validators based on configuration.

    Args:
        config: The ``analysis`` section of the configuration

    Returns:
        List of validator instances, minus any named in ``disabled_validators``
    """
    validators = DEFAULT_VALIDATORS.copy()
    disabled = config.get("disabled_validators", [])
    return [v for v in validators if v.name not in disabled]


class DiagnosticsPipeline:
    """
    Runs every applicable validator over one document snapshot.

    Each validator is isolated: an exception inside one is logged and the
    remaining validators still run.
    """

    def __init__(
        self,
        cache: Optional[PatternCache] = None,
        validators: Optional[Sequence[Validator]] = None,
        config: Optional[Dict[str, Any]] = None,
    ):
        self.cache = cache if cache is not None else PatternCache()
        self.config = dict(config or {})
        self.validators = list(validators) if validators is not None else load_validators(self.config)

    def validate(
        self,
        doc_id: str,
        version: int,
        text: str,
        file_type: FileType = FileType.JAVASCRIPT,
    ) -> List[Finding]:
        """
        Produce findings for a document version.

        Args:
            doc_id: Document identity (URI)
            version: Document version the findings belong to
            text: Document text at that version
            file_type: Support level of the document

        Returns:
            Findings in validator order, then source position
        """
        active = [v for v in self.validators if v.applies_to(file_type)]
        if not active:
            logger.debug(f"No validators apply to {doc_id} ({file_type.value})")
            return []

        patterns = []
        if file_type.supports_full_features:
            patterns = self.cache.get_patterns(doc_id, version, text)

        ctx = ValidationContext(
            uri=doc_id,
            version=version,
            text=text,
            file_type=file_type,
            patterns=patterns,
            config=self.config,
        )

        findings: List[Finding] = []
        for validator in active:
            try:
                results = list(validator.run(ctx))
            except Exception:
                logger.exception(f"Validator {validator.name} failed on {doc_id}")
                continue
            findings.extend(results)

        logger.debug(f"{doc_id} v{version}: {len(findings)} finding(s)")
        return findings
