"""Errors raised while parsing templates and applying selections."""

from typing import Optional


class TemplateError(Exception):
    """Base class for template errors."""

    def __init__(self, message: str, source: Optional[str] = None) -> None:
        self.message = message
        self.source = source
        super().__init__(f"{source}: {message}" if source else message)


class MissingFieldError(TemplateError):
    """A required top-level field is absent."""

    def __init__(self, field: str, source: Optional[str] = None, detail: str = "") -> None:
        self.field = field
        message = f"Template is missing '{field}' field."
        if detail:
            message = f"{message} {detail}"
        super().__init__(message, source)


class MalformedNodeError(TemplateError):
    """A node has a shape the parser cannot interpret."""


class TemplateSyntaxError(TemplateError):
    """The YAML foundation rejected the document text."""

    def __init__(self, message: str, source: Optional[str] = None, line: Optional[int] = None, column: Optional[int] = None) -> None:
        self.line = line
        self.column = column
        super().__init__(message, source)


class TemplateConsistencyError(TemplateError):
    """raw_yaml no longer matches the options parsed from it."""


class SelectionError(TemplateError, ValueError):
    """A caller selection does not fit the option it targets."""
