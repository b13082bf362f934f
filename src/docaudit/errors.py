"""Exception hierarchy for DocAudit."""

from __future__ import annotations


class DocAuditError(Exception):
    """Base class for DocAudit errors."""


class SchemaExtractionError(DocAuditError):
    """Raised when a tabular file cannot be read far enough to get its header."""
