"""Errors raised while building a thinned tree.

Every error records the traversal stack depth and the open element path at
the moment the build stopped, which is usually enough to locate the
malformed region of the input.
"""

from typing import Any, Dict, Optional


class ThinningError(Exception):
    """Base class for failures that abort a thinning build."""

    error_type = "thinning_error"

    def __init__(self, message: str, depth: int = 0, path: str = "/") -> None:
        super().__init__(message)
        self.depth = depth
        self.path = path

    def to_details(self) -> Dict[str, Any]:
        """Context for diagnostics and log records."""
        return {
            "error_type": self.error_type,
            "depth": self.depth,
            "path": self.path,
        }


class StructuralUnderflowError(ThinningError):
    """An end event arrived while only the root frame was open."""

    error_type = "structural_underflow"


class UnterminatedDocumentError(ThinningError):
    """The event stream ended with elements still open."""

    error_type = "unterminated_document"


class MalformedInputError(ThinningError):
    """The event source reported malformed input."""

    error_type = "malformed_input"

    def __init__(
        self,
        message: str,
        depth: int = 0,
        path: str = "/",
        line: Optional[int] = None,
        column: Optional[int] = None
    ) -> None:
        super().__init__(message, depth, path)
        self.line = line
        self.column = column

    def to_details(self) -> Dict[str, Any]:
        details = super().to_details()
        if self.line is not None:
            details["line"] = self.line
            details["column"] = self.column
        return details


class DepthLimitExceededError(ThinningError):
    """Nesting went deeper than the configured maximum."""

    error_type = "depth_limit_exceeded"


class InvalidEventError(ThinningError):
    """Something other than a structural event was fed to the builder."""

    error_type = "invalid_event"
