"""
Bosun command layer: declare commands and run them.

What this module provides
- Command: an immutable command descriptor. It names the command, documents it, and
  holds the callback that runs once the arguments parsed cleanly.
  • options: static option declarations (descriptor or (descriptor, Overrides)).
  • commands: static subcommand descriptors.
  • configure(hook): one-time hook receiving the tree Builder for imperative setup.
  • additional: accept unrecognized tokens instead of failing on them.
  • a command without callback is a container: running it shows its usage.
- command(...): create a Command, or a decorator that produces one.

Quick start
    from bosun import Command, command, Option, Flag, invoke

    mode = Option("--mode", "build flavor", required=True, choices=("debug", "release"))
    verbose = Flag("--verbose", "chatty output")

    @command(descr="compile the project", options=[mode])
    def build(context, token):
        print(context.get_option(mode))

    tool = Command(name="tool", descr="project helper", commands=[build], options=[verbose])

    if __name__ == "__main__":
        raise SystemExit(invoke(tool))

Design notes
- Descriptors are identity tokens: the tree, the parser and the context key every
  lookup by the descriptor object, never by its name string.
- Building the tree (Command.tree()) is separate from declaring commands, so one
  descriptor can be mounted under several parents.
"""
import functools
import inspect
import operator
import re
from collections.abc import Iterable

from rich.text import Text

from .arguments import Overrides
from .runner import invoke
from .tree import Builder
from .utils import *


class CommandType(type):
    """
    Metaclass that turns the command descriptor class into an introspectable record.

    Responsibilities
    - Expose selected fields as read-only properties using mirror() for all names
      listed in __introspectable__.
    - Provide stable, readable __repr__/__rich_repr__ for diagnostics and rich UI.
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            """
            Return a concise, stable representation with key metadata.

            Example
            - command(name='build', descr='compile the project', ...)
            """
            return f"{type(self).__typename__}({', '.join(map(functools.partial(operator.mod, '%s=%r'), self.__rich_repr__()))})"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _process_strings(cls, metadata):
    """
    Normalize scalar string/Text metadata fields.

    - name: required string without whitespace (it is matched as a whole token).
    - descr: trimmed string or Text; Unset becomes an empty string.
    - examples: free text shown verbatim under "Examples:"; Unset becomes None.

    Errors
    - TypeError: when a value is not str | Text | Unset.
    - ValueError: when the name is empty or contains whitespace.
    """
    if not isinstance(name := metadata["name"], str):
        raise TypeError(f"{cls.__typename__} 'name' must be a string")
    elif not name or re.search(r"\s", name):
        raise ValueError(f"{cls.__typename__} 'name' must be a non-empty string without whitespace")

    if not isinstance(descr := metadata["descr"], str | Text | Unset):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    metadata["descr"] = descr.strip() if isinstance(descr, str) else coalesce(descr, "")

    if not isinstance(examples := metadata["examples"], str | Text | Unset):
        raise TypeError(f"{cls.__typename__} 'examples' must be a string")
    metadata["examples"] = coalesce(examples) or None


def _process_declarations(cls, metadata):
    """
    Validate the static option and subcommand declarations.

    - options: each item is an option descriptor or a (descriptor, Overrides) pair;
      normalized to a tuple of 1- or 2-tuples ready for Builder.with_option(*item).
    - commands: each item must be a Command.
    """
    if not isinstance(metadata["options"], Iterable):
        raise TypeError(f"{cls.__typename__} 'options' must be iterable")

    options = []
    for declaration in metadata["options"]:
        if callable(getattr(declaration, "__option__", None)):
            options.append((declaration,))
        elif (
                isinstance(declaration, tuple) and
                len(declaration) == 2 and
                callable(getattr(declaration[0], "__option__", None)) and
                isinstance(declaration[1], Overrides)
        ):
            options.append(declaration)
        else:
            raise TypeError(f"{cls.__typename__} 'options' items must be options or (option, overrides) pairs")
    metadata["options"] = tuple(options)

    if not isinstance(metadata["commands"], Iterable):
        raise TypeError(f"{cls.__typename__} 'commands' must be iterable")
    commands = tuple(metadata["commands"])
    for child in commands:
        if not isinstance(child, Command):
            raise TypeError(f"{cls.__typename__} 'commands' items must be commands")
    metadata["commands"] = commands


class Command(metaclass=CommandType):
    """
    Immutable command descriptor.

    Invocation modes
    - Callback mode: Command(func, ...) binds 'func' as the code to run; the name
      defaults to func.__name__ and the description to its docstring.
    - Container mode: Command(name=...) without callback groups subcommands; running
      it renders its usage and exits with 1. The name is mandatory here (TypeError
      otherwise), as it is for callbacks without __name__.

    Callback contract
    - callback(context, token) where 'context' is the CommandContext and 'token' the
      CancellationToken of the run. Coroutine functions are supported.
    - return an int exit code, None (success), or a Failure.
    - raise CommandException (or a subclass) for recoverable, user-facing failures.
    """

    __introspectable__ = (
        "name",
        "descr",
        "examples",
        "hidden",
        "additional",
        "options",
        "commands",
        "callback",
        "hook",
    )

    __displayable__ = (
        "name",
        "descr",
        "hidden",
        "additional",
        "commands",
    )

    def __new__(
            cls,
            callback=Unset,
            /,
            name=Unset,
            descr=Unset,
            examples=Unset,
            *,
            options=(),
            commands=(),
            additional=False,
            hidden=False,
    ):
        if callback is not Unset and not callable(callback):
            raise TypeError(f"{cls.__typename__} 'callback' must be callable")
        if (name := coalesce(name, getattr(callback, "__name__", Unset))) is Unset:
            raise TypeError(f"{cls.__typename__} without a named callback requires a 'name'")

        metadata = {
            "name": name,
            "descr": coalesce(descr, callback and inspect.getdoc(callback) or Unset),
            "examples": examples,
            "hidden": bool(hidden),
            "additional": bool(additional),
            "options": options,
            "commands": commands,
            "callback": coalesce(callback),
            "hook": None,
        }
        _process_strings(cls, metadata)
        _process_declarations(cls, metadata)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self

    @property
    def container(self):
        """
        True when the command has no callback of its own.
        """
        return self._callback is None

    def configure(self, hook, /):
        """
        Register a one-time hook that receives the Builder for this command.

        The hook runs after the static declarations, so it may add more options or
        subcommands (with_option / with_command). Decorator-friendly:

            @build.configure
            def _(builder):
                builder.with_option(mode, required=False)
        """
        if not callable(hook):
            raise TypeError(f"{type(self).__typename__} configure hook must be callable")
        if self._hook is not None:
            raise TypeError(f"{type(self).__typename__} configure hook cannot be overridden")
        self._hook = hook
        return hook

    def tree(self):
        """
        Build the immutable command tree rooted at this command.
        """
        return Builder(self).build()

    def __command__(self):
        """
        Introspection hook: identify this descriptor as a command.
        """
        return self

    def __invoke__(self, prompt=Unset, /, **options):
        return invoke(self, prompt, **options)


def command(source=Unset, /, **kwargs):
    """
    Create a Command or return a decorator to build it later.

    Invocation modes
    - Direct callback:
        cmd = command(func, name="x", ...)
    - Decorator:
        @command(descr="...", options=[...])
        def func(context, token): ...
    - Containers have no callback; declare them with Command directly:
        group = Command(name="tool", commands=[...])

    Returns
    - Command | Callable[[Callable], Command]
    """
    @rename("command")
    def wrapper(source, /):
        if not callable(source):
            raise TypeError("@command() must be applied to a callable")
        return Command(source, **kwargs)

    if source is not Unset:
        return wrapper(source)
    return wrapper


__all__ = (
    "Command",
    "command",
)

# Remove the internal metaclass from the module namespace to avoid accidental
# exposure in docs, autocompletion, or star-imports. Not part of the public API.
del CommandType
