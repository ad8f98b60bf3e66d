"""Core exception hierarchy.

This module defines base error and warning types used across the runner
to report expectation mismatches, configuration problems and reporter
plugin loading issues in a structured and extensible way.

It also defines the formatter used to render captured faults, both in
the diagnostic written for load-time faults and in reporter output.
"""

from os import linesep
from traceback import format_exception
from typing import TYPE_CHECKING, TypedDict

from yaml.error import MarkedYAMLError

if TYPE_CHECKING:
    from importlib.metadata import EntryPoint
    from typing import Self

if TYPE_CHECKING:
    from pydantic import ValidationError

FORMAT_INDENT = 4
FORMAT_FILENAME = '<unknown file>'
NO_MESSAGE = '<No message>'


class ErrorContext(TypedDict, total=False):
    """Container describing contextual information for error formatting.

    All fields are optional; the formatter adapts output based on
    provided values.
    """

    #: Name of the spec or configuration file where the error occurred.
    filename: str | None

    #: Line number in the source file.
    line_num: int | None

    #: Underlying exception that triggered formatting.
    error: BaseException | None


class ErrorFormatter:
    """Utility class for formatting runner-related errors.

    This formatter is responsible for producing human-readable
    error messages with optional location and traceback details.
    """

    @classmethod
    def format(cls, message: str, context: ErrorContext | None = None) -> str:
        """Format an error message using contextual information.

        Args:
            message: Base human-readable error message.
            context: Optional error context with location and data.

        Returns:
            A fully formatted error message suitable for display.
        """
        if not context:
            return message

        message += linesep
        message += cls.get_location_string(context, indent=FORMAT_INDENT)

        return message

    @classmethod
    def get_location_string(cls, context: ErrorContext, *,
                            indent: str | int | None = None) -> str:
        """Format source location information.

        Args:
            context: Error context containing location metadata.
            indent: Optional indentation (string or number of spaces).

        Returns:
            A formatted location string including the filename and,
            when available, the line.
        """
        indent = cls._ensure_indent(indent)

        filename = context.get('filename')
        if not filename:
            filename = FORMAT_FILENAME

        message = f'{indent}in "{filename}"'
        if (line_num := context.get('line_num')) is not None:
            message += f', line {line_num + 1}'
        message += linesep

        return message

    @staticmethod
    def describe_fault(error: BaseException) -> str:
        """Render the message part of a captured fault.

        Expectation mismatches are shown with their bare message, other
        faults are prefixed with the exception class name.

        Args:
            error: Captured exception.

        Returns:
            Human-readable fault message.
        """
        text = str(error)
        if not text:
            return NO_MESSAGE

        if isinstance(error, AssertionError):
            return text

        return f'{type(error).__name__}: {text}'

    @staticmethod
    def format_traceback(error: BaseException) -> str:
        """Render the traceback of a captured fault.

        Args:
            error: Captured exception.

        Returns:
            The traceback lines without the trailing exception line,
            or an empty string if the exception was never raised.
        """
        if error.__traceback__ is None:
            return ''

        lines = format_exception(type(error), error, error.__traceback__)

        return ''.join(lines[:-1]).rstrip()

    @classmethod
    def format_diagnostic(cls, label: str, error: BaseException) -> str:
        """Format a diagnostic for a fault outside any describe scope.

        Args:
            label: Label of the protected block, e.g. `loading <file>`.
            error: Captured exception.

        Returns:
            Multi-line diagnostic with the label, the fault class and
            message, and the stack trace.
        """
        message = f'{linesep}An exception occurred in {label}:{linesep}'
        message += f'{type(error).__name__}: {str(error)!r}{linesep}'

        if trace := cls.format_traceback(error):
            message += f'{trace}{linesep}'

        return message

    @staticmethod
    def _ensure_indent(indent: str | int | None = None) -> str:
        """Normalize indentation input.

        Args:
            indent: Indentation as string or number of spaces.

        Returns:
            A string consisting of spaces or the provided string.
        """
        if isinstance(indent, int) and indent > 0:
            return ' ' * indent

        if isinstance(indent, str):
            return indent

        return ''


class PluginWarning(UserWarning):
    """Warning emitted for non-fatal reporter plugin issues.

    This warning is used when a formatter plugin cannot be loaded,
    but the error does not prevent the run (non-strict mode).
    """


class SpecError(Exception, ErrorFormatter):
    """Base exception for all specrun errors.

    All custom exceptions raised by the runner should inherit from
    this class to allow unified error handling by callers.
    """

    def __init__(self, message: str, *,
                 context: ErrorContext | None = None) -> None:
        """Initialize an error.

        Args:
            message: Human-readable error description.
            context: Error context containing optional location values.
        """
        self.message = message
        self.context = context

        super().__init__(message)

    def __str__(self) -> str:
        """String represenatation."""
        return self.format(self.message, self.context)


class ExpectationNotMetError(SpecError, AssertionError):
    """Error raised when an expectation of an example is not met.

    Faults of this kind (and any other `AssertionError`) classify an
    example as a failure; every other fault classifies it as an error.
    """

    def __str__(self) -> str:
        """String represenatation."""
        return self.message


class ConfigError(SpecError):
    """Error raised when runner configuration is invalid.

    This exception wraps YAML parsing failures and settings validation
    errors raised while reading a configuration file.
    """

    @classmethod
    def from_yaml_error(cls, error: MarkedYAMLError) -> 'Self':
        """Create a configuration error from a YAML parsing failure.

        Args:
            error: Exception raised by the YAML parser.

        Returns:
            ConfigError with the position of the YAML problem.
        """
        error_context = ErrorContext(error=error)
        if mark := error.problem_mark:
            error_context['filename'] = mark.name
            error_context['line_num'] = mark.line

        message = 'Invalid YAML'
        if error.problem:
            message += f'{linesep}{' ' * FORMAT_INDENT}{error.problem}'

        return cls(message, context=error_context)

    @classmethod
    def from_pydantic_error(cls, error: 'ValidationError', *,
                            filename: str | None = None) -> 'Self':
        """Create a configuration error from a settings validation failure.

        The first validation issue is used as the message, prefixed with
        the dotted location of the offending field.

        Args:
            error: ValidationError raised by Pydantic.
            filename: Name of the configuration file, if any.

        Returns:
            ConfigError describing the first validation issue.
        """
        error_context = ErrorContext(filename=filename, error=error)

        for item in error.errors(include_url=False, include_input=False):
            location = '.'.join(str(key) for key in item['loc'])
            if location:
                return cls(f'{location}: {item['msg']}', context=error_context)
            return cls(item['msg'], context=error_context)

        return cls('Validation error', context=error_context)


class PluginError(SpecError):
    """Error raised for fatal reporter plugin failures.

    This exception is raised when a formatter entry point is invalid
    or fails to load in strict mode, or a formatter name is unknown.
    """

    def __init__(self, message: str, *,
                 entrypoint: 'EntryPoint | None' = None) -> None:
        """Initialize a plugin error.

        Args:
            message: Human-readable error description.
            entrypoint: Optional entry point associated with the error.
        """
        self.entrypoint = entrypoint

        super().__init__(message)
