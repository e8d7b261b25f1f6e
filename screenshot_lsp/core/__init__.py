"""Core analysis engine: pattern detection, caching, scheduling and findings."""
