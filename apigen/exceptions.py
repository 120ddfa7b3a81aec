"""
Custom exceptions for the apigen pipeline.

Error philosophy:
  - FetchError                → FAIL HARD: the documentation page could not be retrieved.
  - SanitizationError         → FAIL HARD: a volatile-content marker is missing, so the
                                page cannot be checksummed safely.
  - StructuralExtractionError → FAIL HARD: a heading, parameter or marker is missing or
                                malformed; no partial catalog is ever returned.
  - GenerationIOError         → FAIL HARD: the artifact cannot be read, normalized or written.

None of these are retried or swallowed. Documentation-format drift needs a human
to look at it. "No change since the last run" is not an error at all; it is the
NO_CHANGE status of PipelineOutcome.
"""

from typing import Optional


class ApiGenError(Exception):
    """Base exception for all apigen errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_response(self) -> dict:
        """Convert to a JSON-friendly error payload."""
        return {
            "error": type(self).__name__,
            "message": str(self),
            "details": self.details
        }


class FetchError(ApiGenError):
    """Raised when the documentation page cannot be fetched."""

    def __init__(self, message: str, url: str, details: Optional[dict] = None):
        super().__init__(message, details)
        self.url = url
        self.details.setdefault("url", url)


class SanitizationError(ApiGenError):
    """
    Raised when an expected volatile-content marker is absent.

    The page changed shape in a way the sanitizer does not understand, so any
    checksum computed over it would be meaningless.
    """

    def __init__(self, message: str, marker: str, details: Optional[dict] = None):
        super().__init__(message, details)
        self.marker = marker
        self.details.setdefault("marker", marker)


class StructuralExtractionError(ApiGenError):
    """
    Raised when the Extractor cannot find an expected heading, parameter or marker.

    Carries the category and endpoint link ids so the offending spot in the
    documentation page can be located.
    """

    def __init__(
        self,
        message: str,
        category: Optional[str] = None,
        link_id: Optional[str] = None,
        details: Optional[dict] = None
    ):
        super().__init__(message, details)
        self.category = category
        self.link_id = link_id
        if category:
            self.details.setdefault("category", category)
        if link_id:
            self.details.setdefault("link_id", link_id)

    @property
    def location(self) -> str:
        parts = []
        if self.category:
            parts.append(f"category #{self.category}")
        if self.link_id:
            parts.append(f"endpoint #{self.link_id}")
        return ", ".join(parts)

    def __str__(self) -> str:
        if self.location:
            return f"{self.message} ({self.location})"
        return self.message


class GenerationIOError(ApiGenError):
    """Raised when the generated artifact cannot be read, normalized or written."""

    def __init__(self, message: str, path: Optional[str] = None, details: Optional[dict] = None):
        super().__init__(message, details)
        self.path = path
        if path:
            self.details.setdefault("path", path)
