"""
Bosun argument parser.

parse(root, tokens) resolves a raw token vector against a command tree in three
phases and returns a ParseResult. The parser is pure: it writes nothing and raises
nothing for bad user input. Faults and warnings are collected so a single run
reports every violation it finds; the runner decides how to surface them.

Phases
1. descent: every token naming a child of the current command extends the command
   chain, wherever it appears in the vector. Options may precede the subcommand
   they belong to, and a later token equal to a deeper command name is always read
   as a path segment, never as an option value.
2. scanning: the remaining tokens are matched against the options in scope at the
   leaf (nearest scope first). '-?' and '--help' stop scanning and request help.
3. validation (skipped on help): defaults are synthesized, required options are
   checked and values are checked against their choices.
"""
from typing import NamedTuple

from .context import CommandContext, ParsedOption
from .faults import (
    DuplicatedOptionError,
    InvalidValueError,
    InvalidValueWarning,
    MissingArgumentError,
    UnexpectedArgumentError,
)
from .tree import scope
from .utils import *

HELP_TOKENS = ("-?", "--help")


class ParseResult(NamedTuple):
    """
    Outcome of parse().

    - context: the resolved CommandContext; always assembled so usage can be
      rendered for the right command even when parsing failed.
    - faults: CommandException instances in discovery order.
    - warnings: CommandWarning instances in discovery order.
    - help: True when '-?' or '--help' was found.
    """
    context: CommandContext
    faults: tuple = ()
    warnings: tuple = ()
    help: bool = False

    @property
    def ok(self):
        return not self.faults and not self.help


def descend(root, tokens, /):
    """
    Resolve the command chain named by 'tokens'.

    Returns (chain, consumed): the CommandNode list from the root to the deepest
    command reached, and the set of token indexes used as path segments.
    """
    chain, consumed = [root], set()
    for index, token in enumerate(tokens):
        if (child := chain[-1].child(token)) is not None:
            chain.append(child)
            consumed.add(index)
    return chain, consumed


def _visible(leaf):
    # an identity attached at several levels is represented by its nearest attachment
    options = {}
    for scoped in scope(leaf):
        options.setdefault(scoped.option.descriptor, scoped.option)
    return tuple(options.values())


def _accepts(option, value):
    if not option.choices:
        return True
    value = (value or "").casefold()
    return any(choice.casefold() == value for choice in option.choices)


def parse(root, tokens, /):
    """
    Parse 'tokens' against the tree rooted at 'root'.

    Example
        >>> result = parse(tool.tree(), ["build", "--mode=release"])
        >>> result.ok, result.context.command.name
        (True, 'build')
    """
    tokens = tuple(tokens)
    chain, consumed = descend(root, tokens)
    leaf = chain[-1]
    options = _visible(leaf)

    parsed = {}
    faults, warnings, additional = [], [], []
    help = False

    for index, token in enumerate(tokens):
        if index in consumed:
            continue
        if token in HELP_TOKENS:
            help = True
            break

        for option in options:
            if (value := option.match(token)) is not Unset:
                break
        else:
            if leaf.additional:
                additional.append(token)
            else:
                faults.append(UnexpectedArgumentError(f"unexpected argument: {token}", token=token))
            continue

        if option.descriptor in parsed:
            faults.append(DuplicatedOptionError(f"option specified more than once: {option.name}", option=option))
        else:
            parsed[option.descriptor] = ParsedOption(option, value)

    if not help:
        for option in options:
            if option.descriptor in parsed:
                continue
            if option.default is not None:
                parsed[option.descriptor] = ParsedOption(option, option.default)
            elif option.required:
                faults.append(MissingArgumentError(f"missing required argument: {option.name}", option=option))

        for option, value in parsed.values():
            if _accepts(option, value):
                continue
            message = f"{option.name}={value or ''} is invalid. Valid values are: {', '.join(option.choices)}"
            if option.warn_on_invalid:
                warnings.append(InvalidValueWarning(message, option=option, value=value))
            else:
                faults.append(InvalidValueError(message, option=option, value=value))

    return ParseResult(
        CommandContext(parsed.values(), chain, additional),
        tuple(faults),
        tuple(warnings),
        help,
    )


__all__ = (
    "HELP_TOKENS",
    "ParseResult",
    "descend",
    "parse",
)
