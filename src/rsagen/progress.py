"""Progress rendering for the key engine's callback events.

The engine calls back into the reporter from inside its prime search, possibly thousands of times per key. Each
event becomes one character on the diagnostic stream, flushed immediately so the progress shows in real time.
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import logging
import typing

log = logging.getLogger(__name__)

SYMBOLS = {
    0: ".",
    1: "+",
    2: "*",
    3: "\n",
}
DEFAULT_SYMBOL = "*"


class ProgressReporter:
    """Callable progress sink for the key engine.

    Always answers "continue". Returning anything else could make the engine abandon the generation, so even a
    silent (non-verbose) reporter reports success.

    Attributes:
        stream: Text stream the characters are written to.
        verbose: Whether anything is rendered at all.
    """

    def __init__(self, stream: typing.TextIO, verbose: bool = False) -> None:
        self.stream = stream
        self.verbose = verbose

    def __call__(self, event: int) -> bool:
        if not self.verbose:
            return True
        try:
            self.stream.write(SYMBOLS.get(event, DEFAULT_SYMBOL))
            self.stream.flush()
        except (OSError, ValueError) as exc:
            # A broken diagnostic stream must not end the generation.
            log.debug("Progress output failed: %s", exc)
        return True
