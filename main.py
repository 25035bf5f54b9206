import enum
import sys
import time

from rich.pretty import pprint

from bosun import *


class Level(enum.Enum):
    QUIET = 0
    NORMAL = 1
    LOUD = 2


verbose = Flag("--verbose", "chatty output")
level = Choice("--level", Level, "logging level", default="normal")
mode = Option("--mode", "build flavor", required=True, choices=("debug", "release"))
jobs = Option("--jobs", "parallel jobs", default="1")


@command(options=[mode, jobs], examples="  tool build --mode=release --jobs=4")
def build(context, token):
    """Compile the project."""
    for _ in range(context.get_option(jobs, int)):
        token.raise_if_cancelled()
        time.sleep(0.1)
    if context.has_flag(verbose):
        pprint(context)
    return EXIT_SUCCESS


@command(options=[(mode, Overrides(required=False, default="debug"))], additional=True)
async def run(context, token):
    """Build and run the project, forwarding extra arguments."""
    if context.get_enum(level) is Level.LOUD:
        pprint(context.additional)
    if not context.additional:
        return Failure("nothing to run", exit_code=2)


tool = Command(name="tool", descr="Project helper.", commands=[build, run], options=[verbose, level])


if __name__ == '__main__':
    sys.exit(invoke(tool))
