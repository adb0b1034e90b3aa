"""Passphrase sources and the wipeable buffer holding the resolved secret.

A passphrase is resolved exactly once per run from a source descriptor, in the same forms the classic tooling
accepts:

    pass:<secret>   the secret itself
    env:<VAR>       the value of an environment variable
    file:<path>     the first line of a file
    fd:<n>          the first line read from an open file descriptor
    stdin           the first line of standard input
    prompt          ask interactively on the terminal

The secret lives in a `Passphrase`, whose owner must call `Passphrase.wipe` (or use it as a context manager) once
it has been consumed. Python strings cannot be scrubbed, so intermediate copies made while reading a source are
kept as short-lived as possible; the buffer handed to the encoder is the one that gets zeroed.
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import getpass
import logging
import os
import sys
import typing

from rsagen.errors import PassphraseError

log = logging.getLogger(__name__)

PROMPT = "Enter PEM pass phrase:"
VERIFY_PROMPT = "Verifying - Enter PEM pass phrase:"
MIN_PROMPT_LENGTH = 4


class Passphrase:
    """Mutable secret buffer that can be zeroed in place.

    Attributes:
        source: The kind of source the secret came from (never the secret itself).
    """
    __slots__ = ("_buf", "_wiped", "source")

    def __init__(self, data: bytes | bytearray | str, source: str = "pass") -> None:
        if isinstance(data, str):
            data = data.encode("utf-8")
        self._buf = data if isinstance(data, bytearray) else bytearray(data)
        self._wiped = False
        self.source = source

    def __enter__(self) -> "Passphrase":
        return self

    def __exit__(self, *exc_info) -> None:
        self.wipe()

    def __len__(self) -> int:
        return len(self._buf)

    def __repr__(self) -> str:
        return f"<Passphrase source={self.source} len={len(self._buf)} wiped={self.wiped}>"

    def view(self) -> memoryview:
        """Returns a view onto the secret, valid until `wipe` is called."""
        return memoryview(self._buf)

    def wipe(self) -> None:
        """Overwrites the secret with zeroes."""
        for i in range(len(self._buf)):
            self._buf[i] = 0
        self._wiped = True

    @property
    def wiped(self) -> bool:
        return self._wiped


def _first_line(stream: typing.TextIO) -> str:
    return stream.readline().rstrip("\r\n")


def _from_prompt(verify: bool) -> str:
    secret = getpass.getpass(PROMPT)
    if len(secret) < MIN_PROMPT_LENGTH:
        raise PassphraseError(f"Passphrase too short, needs to be at least {MIN_PROMPT_LENGTH} chars")
    if verify and getpass.getpass(VERIFY_PROMPT) != secret:
        raise PassphraseError("Verify failure")
    return secret


def resolve(descriptor: str | None, verify: bool = False, stdin: typing.TextIO | None = None) -> Passphrase | None:
    """Resolves a passphrase source descriptor into a `Passphrase`.

    Args:
        descriptor: The source descriptor, see the module documentation. None resolves to None.
        verify: Whether an interactive prompt should ask twice.
        stdin: Stream used for the ``stdin`` source. Defaults to `sys.stdin`.

    Returns:
        The resolved passphrase, or None if no descriptor was given.

    Raises:
        PassphraseError: If the descriptor is malformed or its source cannot be read.
    """
    if descriptor is None:
        return None
    kind, sep, arg = descriptor.partition(":")
    try:
        match kind:
            case "pass" if sep:
                secret = arg
            case "env" if sep:
                secret = os.environ.get(arg)
                if secret is None:
                    raise PassphraseError(f"No environment variable {arg}")
            case "file" if sep:
                with open(arg, "r", encoding="utf-8") as f:
                    secret = _first_line(f)
            case "fd" if sep:
                with os.fdopen(int(arg), "r", encoding="utf-8", closefd=False) as f:
                    secret = _first_line(f)
            case "stdin" if not sep:
                secret = _first_line(stdin or sys.stdin)
            case "prompt" if not sep:
                secret = _from_prompt(verify)
            case _:
                raise PassphraseError(f"Invalid password argument, missing ':' or unknown source in {kind!r}")
    except (OSError, ValueError, EOFError) as exc:
        raise PassphraseError(f"Can't read password from {kind}") from exc
    log.debug("Resolved passphrase from %s source", kind)
    return Passphrase(secret, kind)
