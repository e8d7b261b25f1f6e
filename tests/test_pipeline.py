"""
Tests for the diagnostics pipeline.
"""

from screenshot_lsp.analyzers.base import BaseValidator
from screenshot_lsp.analyzers.pipeline import DEFAULT_VALIDATORS, DiagnosticsPipeline, load_validators
from screenshot_lsp.core.cache import PatternCache
from screenshot_lsp.core.findings import Finding, FindingSeverity, Range
from screenshot_lsp.core.types import FileType

URI = "file:///project/app.ts"


class ExplodingValidator(BaseValidator):
    """Yields one finding and then fails."""

    name = "exploding"

    def run(self, ctx):
        yield Finding(FindingSeverity.INFO, Range.on_line(0, 0, 1), "partial", "partial")
        raise RuntimeError("validator crashed")


class MarkerValidator(BaseValidator):
    name = "marker"

    def run(self, ctx):
        yield Finding(FindingSeverity.INFO, Range.on_line(0, 0, 1), "marker", "marker")


class TestLoadValidators:
    """Tests for validator selection."""

    def test_default_order(self):
        names = [v.name for v in load_validators({})]
        assert names == [
            "format",
            "quality",
            "missing_parameters",
            "region_parameters",
            "deprecated",
            "json_config",
        ]

    def test_disabled_validators(self):
        names = [v.name for v in load_validators({"disabled_validators": ["deprecated", "quality"]})]
        assert "deprecated" not in names
        assert "quality" not in names
        assert len(names) == len(DEFAULT_VALIDATORS) - 2


class TestDiagnosticsPipeline:
    """Tests for DiagnosticsPipeline.validate."""

    def test_clean_document(self, pipeline):
        text = 'await captureFullScreen({ format: "png", quality: 90 });'
        assert pipeline.validate(URI, 1, text, FileType.TYPESCRIPT) == []

    def test_findings_in_validator_order(self, pipeline):
        text = "\n".join([
            "takeScreenshot();",
            "captureFullScreen();",
            'captureWindow({ format: "gif", quality: 101 });',
        ])
        findings = pipeline.validate(URI, 1, text, FileType.TYPESCRIPT)

        assert [f.code for f in findings] == [
            "invalid-format",
            "quality-out-of-range",
            "missing-parameters",
            "deprecated-api",
        ]

    def test_edit_scenario(self, pipeline):
        first = pipeline.validate(URI, 1, "captureFullScreen();", FileType.TYPESCRIPT)
        assert [f.code for f in first] == ["missing-parameters"]

        second = pipeline.validate(URI, 2, 'captureFullScreen({format:"gif"});', FileType.TYPESCRIPT)
        assert [f.code for f in second] == ["invalid-format"]
        assert second[0].severity == FindingSeverity.WARNING

        third = pipeline.validate(URI, 3, 'captureFullScreen({format:"png"});', FileType.TYPESCRIPT)
        assert third == []

    def test_region_findings(self, pipeline):
        text = "captureRegion({ x: 0, y: 0, width: -1, height: 10 })"
        findings = pipeline.validate(URI, 1, text, FileType.TYPESCRIPT)
        assert [f.code for f in findings] == ["invalid-region-width"]

    def test_failing_validator_is_isolated(self):
        pipeline = DiagnosticsPipeline(
            PatternCache(),
            [MarkerValidator(), ExplodingValidator(), MarkerValidator()],
        )
        findings = pipeline.validate(URI, 1, "", FileType.TYPESCRIPT)

        # The crashed validator contributes nothing, not even its partial output
        assert [f.code for f in findings] == ["marker", "marker"]

    def test_json_documents_only_run_json_validator(self, pipeline):
        text = '{"format": "gif", "note": "captureFullScreen()"}'
        findings = pipeline.validate("file:///project/settings.json", 1, text, FileType.JSON)
        assert [f.code for f in findings] == ["invalid-format"]

    def test_json_does_not_touch_cache(self):
        cache = PatternCache()
        pipeline = DiagnosticsPipeline(cache)
        pipeline.validate("file:///project/settings.json", 1, "{}", FileType.JSON)
        assert len(cache) == 0

    def test_unsupported_documents(self, pipeline):
        text = "captureFullScreen(); takeScreenshot();"
        assert pipeline.validate("file:///notes.md", 1, text, FileType.UNSUPPORTED) == []

    def test_patterns_cached_per_version(self):
        cache = PatternCache()
        pipeline = DiagnosticsPipeline(cache)
        pipeline.validate(URI, 4, "captureRegion({ x: 1 })", FileType.TYPESCRIPT)
        pipeline.validate(URI, 4, "captureRegion({ x: 1 })", FileType.TYPESCRIPT)

        assert cache.stats == {"hits": 1, "misses": 1, "evictions": 0}

    def test_valid_formats_config(self):
        pipeline = DiagnosticsPipeline(config={"valid_formats": ["png", "gif"]})
        findings = pipeline.validate(URI, 1, 'x({ format: "gif" })', FileType.TYPESCRIPT)
        assert findings == []

    def test_disabled_validator_config(self):
        pipeline = DiagnosticsPipeline(config={"disabled_validators": ["deprecated"]})
        assert pipeline.validate(URI, 1, "takeScreenshot({ format: 'png' })", FileType.TYPESCRIPT) == []

    def test_deterministic(self, pipeline):
        text = 'captureFullScreen();\ncaptureRegion({ width: 0 })\ngetWindowList()'
        first = pipeline.validate(URI, 1, text, FileType.TYPESCRIPT)
        second = DiagnosticsPipeline().validate(URI, 1, text, FileType.TYPESCRIPT)
        assert first == second
