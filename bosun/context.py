"""
Bosun command context: what the parser resolved, with typed accessors.

A CommandContext is built once per invocation. It holds the command chain from the
root to the invoked command, the parsed options keyed by descriptor identity, and
the leftover tokens of commands that accept additional arguments.

Accessors convert lazily. Value-set validation already happened at parse time;
type conversion happens here, at the call site, and raises immediately:
- FormatError when a value cannot be converted.
- MissingArgumentError when get_option() finds nothing.
"""
from typing import NamedTuple

from .faults import FormatError, MissingArgumentError
from .streams import ConsoleStream, Stream
from .tree import OptionNode
from .rendering import usage
from .utils import *


class ParsedOption(NamedTuple):
    option: OptionNode
    value: str | None


def _identity(option):
    # option nodes resolve to the descriptor they were attached from
    return option.descriptor if isinstance(option, OptionNode) else option


class CommandContext:
    """
    Resolved command invocation.

    Attributes
    - commands: CommandNode tuple, root first.
    - command: the invoked (leaf) command.
    - options: ParsedOption tuple in parse order (defaults last).
    - additional: leftover tokens, only filled for commands declared with
      additional=True.
    """

    def __init__(self, options, commands, additional=(), /):
        if not commands:
            raise ValueError("command context requires at least one command")
        self._options = {parsed.option.descriptor: parsed for parsed in options}
        self._commands = tuple(commands)
        self._additional = tuple(additional)

    @property
    def command(self):
        return self._commands[-1]

    @property
    def commands(self):
        return self._commands

    @property
    def additional(self):
        return self._additional

    @property
    def options(self):
        return tuple(self._options.values())

    def __contains__(self, option):
        return _identity(option) in self._options

    def _name(self, option):
        if (parsed := self._options.get(identity := _identity(option))) is not None:
            return parsed.option.name
        return identity.name

    def try_get_option(self, option, /, type=Unset):
        """
        Return the option value, or None when absent or given without a value.

        With 'type' (any converter callable such as int or pathlib.Path) the raw
        string is converted first; a converter raising ValueError or TypeError
        becomes a FormatError naming the option.
        """
        parsed = self._options.get(_identity(option))
        if parsed is None or parsed.value is None:
            return None
        if type is Unset:
            return parsed.value
        try:
            return type(parsed.value)
        except (ValueError, TypeError):
            raise FormatError(
                f"{parsed.option.name} error: value is not in a valid format",
                option=parsed.option,
                value=parsed.value,
            ) from None

    def get_option(self, option, /, type=Unset):
        """
        Like try_get_option(), but a missing value raises MissingArgumentError.
        """
        if (value := self.try_get_option(option, type)) is None:
            raise MissingArgumentError(f"missing required argument: {self._name(option)}", option=_identity(option))
        return value

    def get_option_or_default(self, option, /, default=None):
        if (value := self.try_get_option(option)) is None:
            return default
        return value

    def try_get_enum(self, option, /, enum=Unset):
        """
        Return the enum member named by the option value, or None when absent.

        'enum' defaults to the enum a Choice descriptor was declared with. Member
        names are matched case-insensitively; anything else raises FormatError
        listing the lower-cased member names.
        """
        enum = coalesce(enum, getattr(_identity(option), "enum", None))
        if enum is None:
            raise TypeError(f"option {self._name(option)!r} has no enum; pass one explicitly")
        if (value := self.try_get_option(option)) is None:
            return None
        for name, member in enum.__members__.items():
            if name.casefold() == value.casefold():
                return member
        raise FormatError(
            f"{self._name(option)} error: invalid value. Valid values are: {', '.join(name.lower() for name in enum.__members__)}",
            option=_identity(option),
            value=value,
        )

    def get_enum(self, option, /, enum=Unset):
        if (member := self.try_get_enum(option, enum)) is None:
            raise MissingArgumentError(f"missing required argument: {self._name(option)}", option=_identity(option))
        return member

    def has_flag(self, option, /):
        return option in self

    def try_set_option(self, option, value, /):
        """
        Inject a value for an option the command line did not provide.

        No-op when the option is already present. Returns True when the value was set.
        """
        if (identity := _identity(option)) in self._options:
            return False
        node = option if isinstance(option, OptionNode) else OptionNode(identity)
        self._options[identity] = ParsedOption(node, value)
        return True

    def write_usage(self, stream=Unset):
        """
        Render usage for the invoked command (defaults to a fresh ConsoleStream).
        """
        stream = ConsoleStream() if stream is Unset else stream
        if not isinstance(stream, Stream):
            raise TypeError(f"write_usage() stream must be a message stream, not {type(stream).__name__}")
        usage(self, stream)

    def __repr__(self):
        path = " ".join(command.name for command in self._commands)
        values = {parsed.option.name: parsed.value for parsed in self._options.values()}
        return f"command-context(path={path!r}, options={values!r})"


__all__ = (
    "ParsedOption",
    "CommandContext",
)
