"""
Bosun usage renderer.

usage(context, stream) writes the help screen of the invoked command:

    Description:
      compile the project

    Usage:
      tool build [options]

    Options:
      --mode=<mode> (REQUIRED)  build flavor
                                Valid values: debug, release
      -?, --help                Show help and usage information

    Common Options (tool):
      --verbose                 chatty output

A command with visible subcommands lists them under "Commands:" instead of its
options. Option groups follow scope order (own options first); within a group
required options come first, then names in order. Column layout and wrapping are
left to rich.
"""
import itertools

from rich.padding import Padding
from rich.table import Table

from .streams import Span, render
from .tree import scope

HELP_ROW = ("-?, --help", "Show help and usage information")


def _grid(width):
    grid = Table.grid(padding=(0, 2))
    grid.add_column(no_wrap=True, min_width=width)
    grid.add_column()
    return grid


def _name(option):
    spans = [Span("  "), Span(option.name, "name")]
    if option.valued:
        spans.append(Span(f"=<{option.name.lstrip('-/')}>"))
    if option.required:
        spans.append(Span(" (REQUIRED)", "required"))
    return spans


def _descr(option):
    spans = [Span(option.descr or "")]
    if option.choices:
        spans.append(Span("\nValid values: "))
        spans.append(Span(", ".join(option.choices), "choice"))
    return spans


def usage(context, stream, /):
    """
    Render the usage of context.command on 'stream'.
    """
    colorful = getattr(stream, "colorful", True)
    command = context.command
    children = [child for child in command.children if not child.hidden]
    visible = [scoped for scoped in scope(command) if not scoped.option.hidden]

    stream.line(Span("Description:", "heading"))
    stream.print(Padding(render(command.descr or "", colorful=colorful), (0, 0, 0, 2)))
    stream.line()

    stream.line(Span("Usage:", "heading"))
    stream.line(
        "  ",
        " ".join(node.name for node in context.commands),
        " [command]" if children else "",
        " [options]",
    )
    stream.line()

    if children:
        stream.line(Span("Commands:", "heading"))
        grid = _grid(0)
        for child in children:
            grid.add_row(render("  ", Span(child.name, "name"), colorful=colorful), render(child.descr, colorful=colorful))
        stream.print(grid)
    elif visible:
        width = max(len(render(*_name(scoped.option), colorful=False)) for scoped in visible)
        groups = itertools.groupby(visible, lambda scoped: (scoped.depth, scoped.scope))
        for (depth, name), group in groups:
            if depth == 0:
                stream.line(Span("Options:", "heading"))
            else:
                stream.line()
                stream.line(Span(f"Common Options ({name}):", "heading"))

            grid = _grid(width)
            for scoped in sorted(group, key=lambda scoped: (not scoped.option.required, scoped.option.name)):
                grid.add_row(
                    render(*_name(scoped.option), colorful=colorful),
                    render(*_descr(scoped.option), colorful=colorful),
                )
            stream.print(grid)

        grid = _grid(width)
        grid.add_row(render("  ", Span(HELP_ROW[0], "name"), colorful=colorful), HELP_ROW[1])
        stream.print(grid)

    if command.examples and str(command.examples).strip():
        stream.line()
        stream.line(Span("Examples:", "heading"))
        stream.line(Span(str(command.examples), "example"))
        stream.line()


__all__ = (
    "usage",
)
