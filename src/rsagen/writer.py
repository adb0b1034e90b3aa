"""Output Writer: owner-only output sinks and key serialization.

Private key material is written to a file created with mode 0o600, or to standard output. The file is opened
before the key is generated, so a run that is going to fail on its output never gets as far as generating.

Typical usage example:

    with open_owner("key.pem") as sink:
        write(sink, key, "aes256", passphrase)
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import contextlib
import logging
import os
import stat
import sys
import typing

from rsagen import pbes
from rsagen.errors import EncodeError
from rsagen.errors import SinkOpenError
from rsagen.passphrase import Passphrase

log = logging.getLogger(__name__)

OWNER_ONLY = 0o600


def _is_stdout(path) -> bool:
    return path is None or os.fspath(path) == "-"


@contextlib.contextmanager
def open_owner(path: str | os.PathLike | None,
               stdout: typing.BinaryIO | None = None) -> typing.Iterator[typing.BinaryIO]:
    """Opens the output sink for private material.

    Args:
        path: Output file, or None / ``"-"`` for standard output.
        stdout: Binary stream used for standard output. Defaults to `sys.stdout.buffer`.

    Yields:
        A writable binary stream. Files are closed on exit, standard output is only flushed.

    Raises:
        SinkOpenError: If the file cannot be created or restricted to its owner.
    """
    if _is_stdout(path):
        sink = stdout if stdout is not None else sys.stdout.buffer
        try:
            yield sink
        finally:
            sink.flush()
        return
    try:
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, OWNER_ONLY)
    except OSError as exc:
        raise SinkOpenError(f"Can't open \"{os.fspath(path)}\" for writing, {exc.strerror}") from exc
    try:
        # An existing file keeps its old mode on open, tighten it as well.
        if stat.S_ISREG(os.fstat(fd).st_mode) and hasattr(os, "fchmod"):
            os.fchmod(fd, OWNER_ONLY)
        sink = os.fdopen(fd, "wb")
    except OSError as exc:
        os.close(fd)
        raise SinkOpenError(f"Can't restrict \"{os.fspath(path)}\" to its owner, {exc.strerror}") from exc
    log.debug("Opened %s for private key output", os.fspath(path))
    with sink:
        yield sink


def write(sink: typing.BinaryIO, key, cipher: str | None = None, passphrase: Passphrase | None = None) -> None:
    """Serializes the key onto the sink as a PEM block.

    With a cipher the key is encrypted using a key derived from the passphrase. Without one the key is written in
    the clear, which is the caller's explicit choice and not a safe default.

    Partial output may remain on the sink if writing fails; no rollback is attempted.

    Args:
        sink: Writable binary stream.
        key: A `rsagen.engine.GeneratedKey` (or anything with a compatible `to_pem`).
        cipher: Optional cipher name.
        passphrase: The passphrase, required with a cipher.

    Raises:
        EncodeError: If the cipher is unsupported, the passphrase is missing or the sink fails.
    """
    if cipher is not None:
        try:
            cipher = pbes.cipher_name(cipher)
        except ValueError as exc:
            raise EncodeError(str(exc)) from exc
        if passphrase is None:
            raise EncodeError("A passphrase is required to encrypt the private key.")
    secret = passphrase.view() if passphrase is not None else None
    try:
        pem = key.to_pem(cipher, secret)
        sink.write(pem)
        sink.flush()
    except (ValueError, OSError) as exc:
        raise EncodeError(f"Error writing private key: {exc}") from exc
    finally:
        if secret is not None:
            secret.release()
    log.debug("Wrote %d byte %s private key", len(pem), "encrypted" if cipher else "clear")
