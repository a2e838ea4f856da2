"""Exception taxonomy for the lineage explorer.

``ValidationError`` and ``BackendUnavailable`` propagate to the HTTP and CLI
front ends.  ``EnrichmentDegraded`` is raised by the process resolver and is
always recovered inside :class:`~lineage_explorer.service.LineageQueryService`.
"""

from __future__ import annotations

from typing import Any, Optional


class LineageExplorerError(Exception):
    """Base exception for all lineage explorer errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}

    def __str__(self) -> str:
        if self.error_code:
            return f"[{self.error_code}] {self.message}"
        return self.message


class ValidationError(LineageExplorerError):
    """A required request field is missing or blank."""

    def __init__(self, message: str, field: Optional[str] = None, **kwargs: Any):
        super().__init__(message, error_code="VALIDATION", **kwargs)
        self.field = field
        self.details.update({"field": field})


class BackendUnavailable(LineageExplorerError):
    """A structural call to the lineage backend failed."""

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        resource: Optional[str] = None,
        **kwargs: Any,
    ):
        super().__init__(message, error_code="BACKEND_UNAVAILABLE", **kwargs)
        self.operation = operation
        self.resource = resource
        self.details.update({"operation": operation, "resource": resource})


class EnrichmentDegraded(LineageExplorerError):
    """Process resolution failed after the links themselves were fetched."""

    def __init__(self, message: str, link_count: int = 0, **kwargs: Any):
        super().__init__(message, error_code="ENRICHMENT_DEGRADED", **kwargs)
        self.link_count = link_count
        self.details.update({"link_count": link_count})


def require_fields(**fields: Optional[str]) -> None:
    """Raise :class:`ValidationError` for the first blank keyword argument.

    Example::

        require_fields(parent=body.parent, fqn=body.fqn)
    """
    for name, value in fields.items():
        if value is None or not str(value).strip():
            raise ValidationError(
                f'Bad Request: A "{name}" field is required.', field=name
            )
