r"""
Bosun option descriptors.

Overview
- Descriptors
  • Option: named, value-bearing option matched as NAME or NAME=VALUE.
  • Flag: named, presence-only option matched as NAME.
  • Choice: an Option whose allowed values come from an enum.Enum subclass.
- Overrides
  • Per-attachment replacements for required/descr/choices/default/hidden, so one
    descriptor can be reused with different requiredness in different commands.

Identity
- A descriptor object is its own identity token. Two descriptors that share a name
  are still two distinct options; parsed values are keyed by the descriptor object.
- Descriptors are immutable after construction; metadata is exposed through
  read-only properties declared in __introspectable__.

Metadata (sanitized on construction)
- name: non-empty string without whitespace or '='. This is narrower than "any
  string": '=' separates NAME from VALUE in a token, and a name with whitespace
  could never be one token. No prefix convention is enforced, so "-x",
  "--long-name" and "/x" are all valid.
- descr: Unset | str | Text, trimmed; empty strings are rejected; Unset becomes None.
- choices: iterable of strings, duplicates rejected, order preserved. Empty means any
  value is accepted.
- default: Unset | str; Unset becomes None.
- required / warn_on_invalid / hidden: booleans.

Quick example:
    >>> from bosun.arguments import Option, Flag
    >>> mode = Option("--mode", "build flavor", required=True, choices=("debug", "release"))
    >>> verbose = Flag("--verbose", "chatty output")
"""
import functools
import operator
import re
from collections.abc import Iterable
from enum import Enum

from rich.text import Text

from .utils import *


class ArgumentType(type):
    """
    Metaclass that turns descriptor classes into introspectable, read-only records.

    Responsibilities
    - Expose selected fields as read-only properties using mirror() for all
      names listed in __introspectable__.
    - Provide stable, readable __repr__/__rich_repr__ implementations for
      diagnostics.

    Conventions
    - __typename__ is derived from the class name (camel-case split with hyphens)
      and used in messages.
    - __displayable__ (if set) narrows which properties are shown by __rich_repr__;
      otherwise __introspectable__ is used.
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
            - option(name='--mode', descr='build flavor', ...)
            """
            return f"{type(self).__typename__}({', '.join(map(functools.partial(operator.mod, '%s=%r'), self.__rich_repr__()))})"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: normalize and validate metadata shared by every descriptor.

    - name: must be a non-empty string without whitespace or '='; the parser matches
      it as an exact token prefix, so '=' would make NAME=VALUE ambiguous.
    - descr: optional; trimmed, non-empty when provided, None when Unset.

    Raises
    - TypeError: when a field has the wrong type.
    - ValueError: when a string is empty or malformed.
    """
    if not isinstance(name := metadata["name"], str):
        raise TypeError(f"{cls.__typename__} 'name' must be a string")
    elif not name:
        raise ValueError(f"{cls.__typename__} 'name' cannot be empty")
    elif re.search(r"[\s=]", name):
        raise ValueError(f"{cls.__typename__} 'name' cannot contain whitespace or '='")

    if not isinstance(descr := metadata["descr"], str | Text | Unset):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")
    metadata["descr"] = coalesce(descr)


def _sanitize_valued_metadata(cls, metadata, /):
    """
    Internal: validate and normalize metadata for value-bearing descriptors.

    Scope
    - Applies to Option (and Choice) and to Overrides, where every field may also be
      Unset (meaning "fall back to the descriptor").

    Responsibilities
    - choices: iterable of strings (a bare string is rejected); duplicates are
      rejected and the collection is normalized to a tuple, keeping declaration order
      for help and error messages.
    - default: string or Unset.

    Side effects
    - Mutates the provided metadata dict in place.
    """
    if (choices := metadata["choices"]) is not Unset:
        if isinstance(choices, str) or not isinstance(choices, Iterable):
            raise TypeError(f"{cls.__typename__} 'choices' must be an iterable of strings")
        sanitized = []
        for choice in choices:
            if not isinstance(choice, str):
                raise TypeError(f"{cls.__typename__} 'choices' must be an iterable of strings")
            if choice in sanitized:
                raise ValueError(f"{cls.__typename__} 'choices' cannot contain duplicates")
            sanitized.append(choice)
        metadata["choices"] = tuple(sanitized)

    if not isinstance(metadata["default"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'default' must be a string")


class Option(metaclass=ArgumentType):
    """
    Named, value-bearing option descriptor.

    Option declares an option the parser matches either as NAME (no value) or as
    NAME=VALUE. The value stays a raw string in the parse result; typed conversion
    happens lazily through CommandContext accessors.

    Highlights
    - required: a missing option without a default fails the parse.
    - default: synthesized when the option is absent from the command line.
    - choices: restricts values (case-insensitive); violating values fail the parse
      unless warn_on_invalid is set, in which case a warning is emitted and the
      value is kept as given.
    - hidden: suppresses the option from usage output.
    """

    __introspectable__ = (
        "name",
        "descr",
        "required",
        "valued",
        "choices",
        "default",
        "warn_on_invalid",
        "hidden",
    )

    __displayable__ = (
        "name",
        "descr",
        "required",
        "choices",
        "default",
    )

    def __new__(
            cls,
            name,
            /,
            descr=Unset,
            *,
            required=False,
            choices=(),
            default=Unset,
            warn_on_invalid=False,
            hidden=False,
    ):
        metadata = {
            "name": name,
            "descr": descr,
            "required": bool(required),
            "valued": True,
            "choices": choices,
            "default": default,
            "warn_on_invalid": bool(warn_on_invalid),
            "hidden": bool(hidden),
        }
        _sanitize_metadata(cls, metadata)
        _sanitize_valued_metadata(cls, metadata)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, coalesce(object))
        return self

    def __option__(self):
        """
        Introspection hook: identify this descriptor as an option.
        """
        return self


class Choice(Option):
    """
    Option whose allowed values are the lower-cased member names of an enum.

    The enum is kept on the descriptor so CommandContext.get_enum() can map the
    raw value back to a member without repeating the type at the call site.
    """

    __introspectable__ = Option.__introspectable__ + ("enum",)

    def __new__(cls, name, enum, /, descr=Unset, **kwargs):
        if not isinstance(enum, type) or not issubclass(enum, Enum):
            raise TypeError(f"{cls.__typename__} 'enum' must be an enum type")
        if "choices" in kwargs:
            raise TypeError(f"{cls.__typename__} choices are derived from the enum")
        self = super().__new__(cls, name, descr, choices=[member.lower() for member in enum.__members__], **kwargs)
        self._enum = enum
        return self


class Flag(metaclass=ArgumentType):
    """
    Named, presence-only option descriptor.

    A flag carries no payload; its presence is the signal. Flags are never required
    and have no default or choices. The value-related fields are still exposed (as
    constants) so the tree and parser can treat every option uniformly.
    """

    __introspectable__ = Option.__introspectable__
    __displayable__ = (
        "name",
        "descr",
        "hidden",
    )

    def __new__(cls, name, /, descr=Unset, *, hidden=False):
        metadata = {
            "name": name,
            "descr": descr,
            "required": False,
            "valued": False,
            "choices": (),
            "default": None,
            "warn_on_invalid": False,
            "hidden": bool(hidden),
        }
        _sanitize_metadata(cls, metadata)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self

    def __option__(self):
        return self


class Overrides(metaclass=ArgumentType):
    """
    Per-attachment overrides for an option descriptor.

    Every field defaults to Unset, meaning "use the descriptor's value". Overrides
    are applied when an option is attached to a command (see bosun.tree.Builder),
    never to the shared descriptor itself.
    """

    __introspectable__ = (
        "required",
        "descr",
        "choices",
        "default",
        "hidden",
    )

    def __new__(cls, *, required=Unset, descr=Unset, choices=Unset, default=Unset, hidden=Unset):
        metadata = {
            "required": required,
            "descr": descr,
            "choices": choices,
            "default": default,
            "hidden": hidden,
        }
        if not isinstance(descr, str | Text | Unset):
            raise TypeError(f"{cls.__typename__} 'descr' must be a string")
        elif isinstance(descr, str) and not (descr := descr.strip()):
            raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")
        metadata["descr"] = descr
        _sanitize_valued_metadata(cls, metadata)

        for field in ("required", "hidden"):
            if not isinstance(metadata[field], bool | Unset):
                raise TypeError(f"{cls.__typename__} {field!r} must be a boolean")

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self

    def apply(self, descriptor, /):
        """
        Return a mapping of effective metadata for 'descriptor' with overrides applied.

        Flags accept only 'descr' and 'hidden' overrides; requiredness, choices and
        defaults make no sense for a presence-only option.
        """
        if not descriptor.valued and any(
                getattr(self, field) is not Unset for field in ("required", "choices", "default")
        ):
            raise TypeError(f"{type(self).__typename__} cannot make flag {descriptor.name!r} required, restricted or defaulted")

        effective = {name: getattr(descriptor, name) for name in Option.__introspectable__}
        for name in type(self).__introspectable__:
            effective[name] = coalesce(getattr(self, name), effective[name])
        return effective


__all__ = (
    "Option",
    "Choice",
    "Flag",
    "Overrides",
)

# Remove the internal metaclass from the module namespace to avoid accidental
# exposure in docs, autocompletion, or star-imports. Not part of the public API.
del ArgumentType
