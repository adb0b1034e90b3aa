"""The key generation orchestrator.

Sequences one run through validation, passphrase resolution, sink creation, generation (with progress reporting)
and writing. Every failure is terminal: the diagnostic trail is printed and the run returns exit status 1. The
passphrase is wiped, the sink closed and the key released on every path.

Typical usage example:

    status = GenRSA().run("4096", exponent=RSA_F4, cipher="aes256", passout="env:KEYPASS", out="key.pem")
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import enum
import logging
import os
import sys
import typing

from rsagen import config
from rsagen import engine as engines
from rsagen import params as parameters
from rsagen import passphrase
from rsagen import writer
from rsagen.errors import PassphraseError
from rsagen.errors import RSAGenError
from rsagen.progress import ProgressReporter

log = logging.getLogger(__name__)


class State(enum.Enum):
    CONFIGURING = "configuring"
    VALIDATED = "validated"
    GENERATING = "generating"
    WRITING = "writing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


def format_exponent(e: int) -> str:
    """Renders the exponent the way it is echoed in verbose mode, e.g. ``65537 (0x010001)``."""
    width = 2 * max(1, (e.bit_length() + 7) // 8)
    return f"{e} (0x{e:0{width}X})"


def _trail(exc: BaseException) -> list[str]:
    lines = []
    current: BaseException | None = exc
    while current is not None:
        message = str(current) or type(current).__name__
        lines.append(message)
        current = current.__cause__
    return lines


class GenRSA:
    """Runs key generations.

    Attributes:
        engine_factory: Callable returning a fresh `rsagen.engine.KeyEngine` per run.
        err: Text stream for diagnostics and progress.
        stdout: Binary stream used when no output file is given.
        state: The state of the latest run.
    """

    def __init__(self,
                 engine_factory: typing.Callable[[], engines.KeyEngine] = engines.LocalKeyEngine,
                 err: typing.TextIO | None = None,
                 stdout: typing.BinaryIO | None = None) -> None:
        self.engine_factory = engine_factory
        self.err = err if err is not None else sys.stderr
        self.stdout = stdout
        self.state = State.CONFIGURING

    def _say(self, text: str) -> None:
        try:
            self.err.write(text + "\n")
            self.err.flush()
        except (OSError, ValueError) as exc:
            log.debug("Diagnostic output failed: %s", exc)

    def _resolve_passphrase(self, params: parameters.ParameterSet) -> passphrase.Passphrase | None:
        descriptor = params.passout
        if descriptor is None and params.encrypted:
            descriptor = "prompt"
        try:
            return passphrase.resolve(descriptor, verify=params.encrypted)
        except PassphraseError:
            self._say("Error getting password")
            raise

    def run(self,
            numbits: int | str | None = None,
            *,
            primes: int | str = config.DEFAULT_PRIMES,
            exponent: int = config.RSA_F4,
            cipher: str | None = None,
            passout: str | None = None,
            verbose: bool = False,
            out: str | os.PathLike | None = None) -> int:
        """Runs one key generation.

        Args:
            numbits: Modulus size. Defaults to 2048.
            primes: Number of primes.
            exponent: Public exponent, 3 or 65537.
            cipher: Optional cipher protecting the output.
            passout: Optional passphrase source descriptor. Prompted for when a cipher is set without one.
            verbose: Whether to render progress and echo the exponent.
            out: Output file, None or ``"-"`` for standard output.

        Returns:
            The exit status, 0 on success and 1 on failure.
        """
        self.state = State.CONFIGURING
        secret: passphrase.Passphrase | None = None
        key: engines.GeneratedKey | None = None
        try:
            params = parameters.build(numbits, primes, exponent, cipher, passout, verbose, out)
            self.state = State.VALIDATED
            if params.oversized:
                self._say(parameters.advisory(params.bits))
            secret = self._resolve_passphrase(params)
            with writer.open_owner(params.out, self.stdout) as sink:
                self.state = State.GENERATING
                engine = self.engine_factory()
                engines.configure(params, engine)
                if params.verbose:
                    self._say(f"Generating RSA private key, {params.bits} bit long modulus ({params.primes} primes)")
                key = engines.run(params, engine, ProgressReporter(self.err, params.verbose))
                if params.verbose:
                    self._say(f"e is {format_exponent(key.public_exponent)}")
                self.state = State.WRITING
                writer.write(sink, key, params.cipher, secret)
        except RSAGenError as exc:
            self.state = State.FAILED
            log.debug("Run failed", exc_info=True)
            for line in _trail(exc):
                self._say(line)
            return 1
        finally:
            if secret is not None:
                secret.wipe()
            if key is not None:
                key.release()
        self.state = State.SUCCEEDED
        return 0
