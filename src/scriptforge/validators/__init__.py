"""Fountain formatting validation."""

from scriptforge.validators.document_validator import (
    DocumentValidator,
    Issue,
    Severity,
    validate,
)

__all__ = ["DocumentValidator", "Issue", "Severity", "validate"]
