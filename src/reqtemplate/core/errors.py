"""
Error types for request template compilation and evaluation.
"""

from dataclasses import dataclass
from typing import Optional


class ReqTemplateError(Exception):
    """Base exception for all reqtemplate errors."""

    def __init__(self, message: str, context: Optional["ErrorContext"] = None):
        self.message = message
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format error message with context if available."""
        if self.context:
            return f"{self.context.format()}\n{self.message}"
        return self.message


class TemplateSyntaxError(ReqTemplateError):
    """
    Raised when a template spec cannot be compiled.

    Examples:
    - Unbalanced curly braces in a field
    - Malformed placeholder expression
    - Spec root that is not a mapping
    """

    pass


class IllegalSpecError(ReqTemplateError, TypeError):
    """
    Raised at evaluation time when a helper receives operands that can
    only come from a broken spec (e.g. ``merge`` on a string).

    Never swallowed like an unresolved reference.
    """

    pass


class MissingParameterError(ReqTemplateError, KeyError):
    """Raised when a required path template parameter has no value."""

    def __str__(self) -> str:
        # KeyError would repr() the message
        return self._format_message()


class SpecLoadError(ReqTemplateError):
    """
    Raised when a template document cannot be read or has the wrong shape.

    Examples:
    - Invalid YAML
    - ``templates`` that is not a mapping
    - A request handler step without a mapping ``request``
    """

    pass


@dataclass
class ErrorContext:
    """
    Context information for an error, including the template source location.

    Attributes:
        source: The template string being compiled
        position: Offset of the error within ``source`` (0-indexed)
        field: Optional dotted field path the template belongs to
    """

    source: str
    position: int
    field: str | None = None

    def format(self) -> str:
        """
        Format error context as a human-readable string.

        Returns:
            Formatted string like: "body.title at offset 5" followed by the
            template with a caret under the offending character
        """
        location = f"offset {self.position}"
        if self.field:
            location = f"{self.field} at {location}"
        return f"{location}\n{self._format_snippet()}"

    def _format_snippet(self) -> str:
        """Show the template source with an error marker."""
        prefix = "    | "
        marker_pos = len(prefix) + max(0, min(self.position, len(self.source)))
        return f"{prefix}{self.source}\n" + " " * marker_pos + "^"


def make_syntax_error(
    message: str,
    source: str,
    position: int,
    field: str | None = None,
) -> TemplateSyntaxError:
    """
    Helper to create a TemplateSyntaxError with context.

    Args:
        message: Error description
        source: Template source string
        position: Offset of the error (0-indexed)
        field: Optional dotted field path

    Returns:
        TemplateSyntaxError with context attached
    """
    context = ErrorContext(source=source, position=position, field=field)
    return TemplateSyntaxError(message, context)
