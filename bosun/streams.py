"""
Bosun message streams: the output boundary of the package.

The parser never writes anything. Reports (errors, warnings, plain lines, colored
spans, usage tables) are handed to a Stream, and the concrete binding to a terminal
lives in ConsoleStream, which wraps two rich consoles (stdout for regular output,
stderr for errors).

Spans
- Span(text, style) is a piece of text with an optional palette key ("error",
  "warning", "heading", ...) or a literal rich style.
- render(*spans, colorful=True) is a pure function returning a rich Text; no global
  color state is touched.

Palette
- Define a mapping named __styles__ in __main__ to override any palette entry.
"""
from collections import defaultdict
from typing import NamedTuple, Protocol, runtime_checkable

from rich.console import Console
from rich.text import Text

_palette = {
    "error": "bold red",
    "warning": "dark_orange",
    "heading": "bold",
    "name": "bold cyan",
    "required": "bold magenta",
    "choice": "magenta",
    "example": "green",
    "canceled": "bold red",
}


def palette():
    """
    Return the active palette: defaults merged with __main__.__styles__ (if any).

    Unknown keys resolve to an empty style, so a span can carry a literal rich
    style string (e.g. "italic blue") as well as a palette key.
    """
    return defaultdict(str, _palette | getattr(__import__("__main__"), "__styles__", {}))


class Span(NamedTuple):
    text: str | None
    style: str | None = None


def render(*spans, colorful=True):
    """
    Assemble spans into a single rich Text.

    - str items are accepted as unstyled spans.
    - a span's style is looked up in the palette first and otherwise used verbatim.
    - colorful=False drops every style.
    """
    styles = palette()
    text = Text()
    for span in spans:
        if not isinstance(span, Span):
            span = Span(span)
        if not span.text:
            continue
        if colorful and span.style:
            text.append(span.text, styles[span.style] or span.style)
        else:
            text.append(span.text)
    return text


@runtime_checkable
class Stream(Protocol):
    """
    Structured message stream consumed by the runner and the usage renderer.
    """

    def error(self, message): ...

    def warning(self, message): ...

    def line(self, *spans): ...

    def print(self, renderable): ...


class ConsoleStream:
    """
    Stream bound to rich consoles.

    Parameters
    - stdout / stderr: rich Console instances; default to new consoles on the process
      streams.
    - colorful: when False, palette styles are not applied.
    """

    def __init__(self, stdout=None, stderr=None, *, colorful=True):
        self.stdout = stdout or Console(highlight=False)
        self.stderr = stderr or Console(stderr=True, highlight=False)
        self.colorful = colorful

    def error(self, message):
        self.stderr.print(render(Span(str(message), "error"), colorful=self.colorful))

    def warning(self, message):
        self.stdout.print(render(Span(str(message), "warning"), colorful=self.colorful))

    def line(self, *spans):
        self.stdout.print(render(*spans, colorful=self.colorful))

    def print(self, renderable):
        self.stdout.print(renderable)


__all__ = (
    "Span",
    "palette",
    "render",
    "Stream",
    "ConsoleStream",
)
