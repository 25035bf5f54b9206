"""
Bosun runner: parse a command line and execute the resolved command.

invoke(command, prompt) is the invocation surface of the package. It returns the
process exit code and never exits by itself:

    raise SystemExit(invoke(tool))

Outcomes
- malformed prompt string (unbalanced quotes): an error, EXIT_FAILURE.
- help requested: usage of the resolved command, EXIT_FAILURE.
- parse faults: every fault as an error, then a blank line and the usage,
  EXIT_FAILURE.
- container command (no callback): usage, exit code 1.
- callback result: int as is, None as EXIT_SUCCESS, Failure mapped to its exit code
  (its message, when present, written as an error).
- CommandException from the callback: converted with __failure__().
- cancellation (Ctrl-C, CommandCanceled): a blank line, "Operation canceled.",
  EXIT_CANCELED.
- any other exception propagates.
"""
import asyncio
import contextlib
import inspect
import shlex
import signal
import sys
import threading

from .faults import *
from .parser import parse
from .streams import ConsoleStream, Stream
from .tree import CommandNode
from .rendering import usage
from .utils import *

EXIT_CONTAINER = 1


class CancellationToken:
    """
    Cooperative cancellation signal handed to every command callback.

    The runner cancels the token on Ctrl-C; long-running callbacks poll
    'cancelled', block on wait(), or call raise_if_cancelled().
    """

    def __init__(self):
        self._event = threading.Event()

    @property
    def cancelled(self):
        return self._event.is_set()

    def cancel(self):
        self._event.set()

    def wait(self, timeout=None):
        """
        Block until cancelled or until 'timeout' seconds passed; return cancelled.
        """
        return self._event.wait(timeout)

    def raise_if_cancelled(self):
        if self._event.is_set():
            raise CommandCanceled()

    def __repr__(self):
        return f"cancellation-token(cancelled={self.cancelled!r})"


@contextlib.contextmanager
def _interrupts(token):
    """
    Route SIGINT to 'token' while the block runs.

    The first interrupt cancels the token; a second one raises KeyboardInterrupt so
    a callback ignoring the token can still be stopped. Signal handlers can only be
    installed from the main thread; elsewhere the block runs unchanged.
    """
    if threading.current_thread() is not threading.main_thread():
        yield token
        return

    def handler(signum, frame):
        if token.cancelled:
            raise KeyboardInterrupt
        token.cancel()

    previous = signal.signal(signal.SIGINT, handler)
    try:
        yield token
    finally:
        signal.signal(signal.SIGINT, previous)


def _tokens(prompt):
    match prompt:
        case UnsetType():
            return sys.argv[1:]
        case str():
            return shlex.split(prompt)
        case _:
            tokens = list(prompt)
            if not all(isinstance(token, str) for token in tokens):
                raise TypeError("invoke() prompt must be a string or an iterable of strings")
            return tokens


def _exit_code(outcome, stream):
    match outcome:
        case None:
            return EXIT_SUCCESS
        case Failure(message=message, exit_code=exit_code):
            if message:
                stream.error(message)
            return exit_code
        case int():
            return outcome
        case _:
            raise TypeError(f"command returned {type(outcome).__name__}; expected int, None or Failure")


def invoke(command, prompt=Unset, /, *, stream=Unset):
    """
    Run 'command' (a Command descriptor or an already built CommandNode) against
    'prompt' and return the exit code.

    Parameters
    - prompt: Unset for sys.argv[1:], a string split with shlex, or an iterable of
      string tokens.
    - stream: where reports go; defaults to a ConsoleStream.
    """
    stream = ConsoleStream() if stream is Unset else stream
    if not isinstance(stream, Stream):
        raise TypeError(f"invoke() stream must be a message stream, not {type(stream).__name__}")
    root = command if isinstance(command, CommandNode) else command.tree()

    try:
        tokens = _tokens(prompt)
    except ValueError as error:
        trigger(UnexpectedArgumentError(f"malformed command line: {error}", prompt=prompt), stream)
        return EXIT_FAILURE

    result = parse(root, tokens)
    if not result.ok:
        if not result.help:
            for fault in result.faults:
                trigger(fault, stream)
            for warning in result.warnings:
                trigger(warning, stream)
        stream.line()
        usage(result.context, stream)
        return EXIT_FAILURE

    for warning in result.warnings:
        trigger(warning, stream)

    context = result.context
    if (callback := context.command.descriptor.callback) is None:
        usage(context, stream)
        return EXIT_CONTAINER

    try:
        with _interrupts(CancellationToken()) as token:
            outcome = callback(context, token)
            if inspect.iscoroutine(outcome):
                outcome = asyncio.run(outcome)
    except (CommandCanceled, KeyboardInterrupt) as exception:
        canceled = exception if isinstance(exception, CommandCanceled) else CommandCanceled()
        stream.line()
        trigger(canceled, stream)
        return canceled.exit_code
    except CommandException as exception:
        outcome = exception.__failure__()

    return _exit_code(outcome, stream)


__all__ = (
    "EXIT_CONTAINER",
    "CancellationToken",
    "invoke",
)
