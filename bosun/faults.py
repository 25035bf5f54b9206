"""
Bosun faults (errors and warnings) and reporting.

Scope
- CommandException: user-facing, recoverable failure. It carries an optional
  message and the exit code the process should end with. Parse-time faults are
  instances of its subclasses too, but the parser collects them instead of raising.
- CommandWarning: non-fatal notice (e.g., a tolerated invalid choice).
- Failure: explicit result value; a command callback may return one instead of
  raising, and every CommandException converts into one via __failure__().
- trigger(): central entry point to surface a fault on a message stream.

Propagation
- parse time: faults accumulate in ParseResult.faults / ParseResult.warnings and are
  reported once after both scanning phases complete.
- access time: CommandContext accessors raise FormatError / MissingArgumentError at
  the call site, deep inside command logic; the runner turns them into a Failure.
"""
from types import MappingProxyType
from typing import NamedTuple

from .utils import Unset

EXIT_SUCCESS = 0
EXIT_FAILURE = -1
EXIT_CANCELED = -1


class Failure(NamedTuple):
    """
    Outcome of a command that did not succeed.

    - message: text shown to the user, or None to exit silently.
    - exit_code: process exit code to return.
    """
    message: str | None = None
    exit_code: int = EXIT_FAILURE


class CommandException(Exception):
    """
    Recoverable, user-facing failure.

    Parameters
    - message: optional text; when omitted nothing is printed, but exit_code still applies.
    - exit_code: process exit code the runner returns for this failure.
    - options: free-form context (option, token, value...) kept read-only.
    """

    def __init__(self, message=Unset, /, exit_code=EXIT_FAILURE, **options):
        assert isinstance(message, str | Unset)
        super().__init__(*([message] if message else []))
        self.message = message
        self.exit_code = exit_code
        self.options = MappingProxyType(options)

    @property
    def has_message(self):
        return self.message is not Unset

    def __str__(self):
        return self.message if self.message else ""

    def __failure__(self):
        return Failure(self.message if self.has_message else None, self.exit_code)


class DuplicatedOptionError(CommandException): ...


class UnexpectedArgumentError(CommandException): ...


class MissingArgumentError(CommandException): ...


class InvalidValueError(CommandException): ...


class FormatError(CommandException): ...


class CommandCanceled(CommandException):
    """
    Raised inside a command (usually through CancellationToken.raise_if_cancelled())
    when the user interrupted the run.
    """

    def __init__(self, message="Operation canceled.", /, exit_code=EXIT_CANCELED, **options):
        super().__init__(message, exit_code, **options)


class CommandWarning(Warning):
    """
    Non-fatal notice collected during parsing and shown before the command runs.
    """

    def __init__(self, message, /, **options):
        assert isinstance(message, str)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return self.message


class InvalidValueWarning(CommandWarning): ...


def trigger(fault, stream, /):
    """
    surface a fault on a message stream.

    contract
    - exceptions are written through stream.error(); a message-less exception
      writes nothing.
    - warnings are written through stream.warning().
    """
    if isinstance(fault, CommandException):
        if fault.has_message:
            stream.error(fault.message)
    elif isinstance(fault, CommandWarning):
        stream.warning(fault.message)
    else:
        raise TypeError("trigger() argument must be a command exception or warning")


__all__ = (
    "EXIT_SUCCESS",
    "EXIT_FAILURE",
    "EXIT_CANCELED",
    "Failure",
    "CommandException",
    "DuplicatedOptionError",
    "UnexpectedArgumentError",
    "MissingArgumentError",
    "InvalidValueError",
    "FormatError",
    "CommandCanceled",
    "CommandWarning",
    "InvalidValueWarning",
    "trigger",
)
