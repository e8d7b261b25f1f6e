"""Validators that turn screenshot API usage into findings."""

from .base import BaseValidator, ValidationContext, Validator
from .pipeline import DEFAULT_VALIDATORS, DiagnosticsPipeline, load_validators

__all__ = [
    "BaseValidator",
    "ValidationContext",
    "Validator",
    "DEFAULT_VALIDATORS",
    "DiagnosticsPipeline",
    "load_validators",
]
