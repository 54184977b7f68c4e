"""Core exceptions for exhibit curation and request context."""

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any
from uuid import UUID

from pydantic import ValidationError

from vitrine.utils.exceptions import VitrineError


class ContextNotSetError(VitrineError):
    """Raised when attempting to access request context that is not set.

    This error indicates a programming error - operations requiring context
    are being called outside of a request_context() context manager.
    """

    def __init__(self, message: str = "Request context is not set"):
        super().__init__(message)


@dataclass(frozen=True)
class FieldError:
    """A single field-level validation problem.

    Attributes:
        field: Dotted path of the offending field (e.g. "12.title")
        message: Human-readable description of the problem
    """

    field: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"field": self.field, "message": self.message}


class ValidationFailedError(VitrineError):
    """Raised when submitted data is rejected.

    The operation is not applied at all; every problem found is reported.

    Attributes:
        errors: Field-level problems, in the order they were found
    """

    def __init__(self, errors: Iterable[FieldError], message: str = "Validation failed"):
        super().__init__(message)
        self.errors = list(errors)

    def details(self) -> dict[str, Any]:
        return {"errors": [e.to_dict() for e in self.errors]}

    def __str__(self) -> str:
        fields = ", ".join(e.field for e in self.errors)
        return f"ValidationFailedError: {self.args[0]} ({fields})"


class NotFoundError(VitrineError):
    """Raised when a referenced resource does not exist for the caller."""

    resource: str = "resource"

    def details(self) -> dict[str, Any]:
        return {"resource": self.resource}


class ExhibitNotFoundError(NotFoundError):
    """Raised when an exhibit does not exist.

    Attributes:
        exhibit_ref: The id or slug that was looked up
    """

    resource = "exhibit"

    def __init__(self, exhibit_ref: UUID | str):
        super().__init__(f"Exhibit not found: {exhibit_ref}")
        self.exhibit_ref = exhibit_ref

    def details(self) -> dict[str, Any]:
        return {"resource": self.resource, "exhibit": str(self.exhibit_ref)}

    def __str__(self) -> str:
        return f"ExhibitNotFoundError: {self.args[0]}"


class SavedSearchNotFoundError(NotFoundError):
    """Raised when one or more saved searches are missing from an exhibit.

    A saved search owned by a different exhibit counts as missing.

    Attributes:
        search_ids: The ids that could not be resolved
        exhibit_id: The exhibit the lookup was scoped to
    """

    resource = "saved_search"

    def __init__(self, search_ids: Iterable[int], exhibit_id: UUID):
        self.search_ids = sorted(set(search_ids))
        self.exhibit_id = exhibit_id
        joined = ", ".join(str(i) for i in self.search_ids)
        super().__init__(f"Saved search not found: {joined}")

    def details(self) -> dict[str, Any]:
        return {
            "resource": self.resource,
            "search_ids": self.search_ids,
            "exhibit_id": str(self.exhibit_id),
        }

    def __str__(self) -> str:
        return f"SavedSearchNotFoundError: {self.args[0]}"


class ConflictError(VitrineError):
    """Raised when a record was modified concurrently.

    Attributes:
        search_id: The record whose version did not match
        expected_version: Version supplied by the caller, if any
        actual_version: Version currently stored, if known
    """

    def __init__(
        self,
        search_id: int | None = None,
        expected_version: int | None = None,
        actual_version: int | None = None,
    ):
        if search_id is None:
            message = "Concurrent modification detected"
        else:
            message = f"Saved search {search_id} was modified concurrently"
        super().__init__(message)
        self.search_id = search_id
        self.expected_version = expected_version
        self.actual_version = actual_version

    def details(self) -> dict[str, Any]:
        return {
            "search_id": self.search_id,
            "expected_version": self.expected_version,
            "actual_version": self.actual_version,
        }

    def __str__(self) -> str:
        return f"ConflictError: {self.args[0]}"


class UpstreamUnavailableError(VitrineError):
    """Raised when the external document index cannot answer.

    Distinct from an empty result: callers should offer a retry rather than
    an empty state.

    Attributes:
        service: Name of the upstream service
        timed_out: Whether the failure was a transport timeout
        status_code: HTTP status returned by the upstream, if any
    """

    def __init__(
        self,
        reason: str,
        service: str = "document_index",
        timed_out: bool = False,
        status_code: int | None = None,
    ):
        super().__init__(f"{service} unavailable: {reason}")
        self.reason = reason
        self.service = service
        self.timed_out = timed_out
        self.status_code = status_code

    def details(self) -> dict[str, Any]:
        return {
            "service": self.service,
            "timed_out": self.timed_out,
            "status_code": self.status_code,
        }

    def __str__(self) -> str:
        return f"UpstreamUnavailableError: {self.args[0]}"


def field_errors_from_pydantic(exc: ValidationError, prefix: str = "") -> list[FieldError]:
    """Flatten a pydantic ValidationError into FieldErrors.

    Args:
        exc: The pydantic error
        prefix: Prepended to each field path (e.g. a record id)
    """
    errors = []
    for err in exc.errors():
        path = ".".join(str(part) for part in err["loc"])
        if prefix:
            path = f"{prefix}.{path}" if path else prefix
        errors.append(FieldError(field=path or "__root__", message=err["msg"]))
    return errors
