"""Parameter Set construction and validation.

Turns raw option values (as produced by the command line, or passed by an API caller) into an immutable
`ParameterSet`. Only the checks that belong to the user-input layer happen here: the prime count is parsed but its
range is left for the key engine to judge, and oversized moduli are flagged rather than rejected.

Typical usage example:

    params = build("4096", primes=3, exponent=RSA_F4, verbose=True)
    if params.oversized:
        print(advisory(params.bits))
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import os
import typing

from rsagen import config
from rsagen import pbes
from rsagen.errors import InvalidParameter

EXPONENTS = (config.RSA_3, config.RSA_F4)


class ParameterSet(typing.NamedTuple):
    """Validated configuration for a single key generation run.

    Attributes:
        bits: Modulus length in bits.
        primes: Number of primes making up the modulus.
        exponent: Public exponent.
        cipher: Name of the cipher protecting the output, or None for a clear key.
        passout: Passphrase source descriptor, or None.
        verbose: Whether to render progress and echo the exponent.
        out: Output path, or None for standard output.
    """
    bits: int = config.DEFAULT_BITS
    primes: int = config.DEFAULT_PRIMES
    exponent: int = config.RSA_F4
    cipher: str | None = None
    passout: str | None = None
    verbose: bool = False
    out: str | os.PathLike | None = None

    @property
    def oversized(self) -> bool:
        return self.bits > config.MAX_MODULUS_BITS

    @property
    def encrypted(self) -> bool:
        return self.cipher is not None


def _parse_int(field: str, value: typing.Any) -> int:
    if isinstance(value, bool):
        raise InvalidParameter(field, f"Invalid {field} value: {value!r}")
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip(), 10)
    except ValueError as exc:
        raise InvalidParameter(field, f"Invalid {field} value: {value!r}") from exc


def build(numbits: int | str | None = None,
          primes: int | str = config.DEFAULT_PRIMES,
          exponent: int = config.RSA_F4,
          cipher: str | None = None,
          passout: str | None = None,
          verbose: bool = False,
          out: str | os.PathLike | None = None) -> ParameterSet:
    """Builds a validated Parameter Set from raw option values.

    Args:
        numbits: Modulus size, as an int or a decimal string. Defaults to 2048 when None.
        primes: Prime count, as an int or decimal string. Only parsed, the engine checks the range.
        exponent: Public exponent, either 3 or 65537.
        cipher: Optional cipher name enabling encryption, normalized to its canonical name.
        passout: Optional passphrase source descriptor.
        verbose: Verbosity flag.
        out: Output path or None for standard output.

    Returns:
        The immutable Parameter Set.

    Raises:
        InvalidParameter: If numbits is not a positive integer, primes is not an integer, the exponent is not 3 or
            65537, or the cipher is not supported.
    """
    bits = config.DEFAULT_BITS if numbits is None else _parse_int("numbits", numbits)
    if bits <= 0:
        raise InvalidParameter("numbits", f"Invalid numbits value: {numbits!r}, must be positive")
    prime_count = _parse_int("primes", primes)
    if exponent not in EXPONENTS:
        raise InvalidParameter("exponent", f"Unsupported public exponent {exponent}, use 3 or 65537")
    if cipher is not None:
        try:
            cipher = pbes.cipher_name(cipher)
        except ValueError as exc:
            raise InvalidParameter("cipher", str(exc)) from exc
    return ParameterSet(bits, prime_count, exponent, cipher, passout, bool(verbose), out)


def advisory(bits: int) -> str:
    """Returns the warning printed for moduli above the recommended maximum."""
    return (f"Warning: It is not recommended to use more than {config.MAX_MODULUS_BITS} bit for RSA keys.\n"
            f"         Your key size is {bits}! Larger key size may behave not as expected.")
