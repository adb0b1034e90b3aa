"""Key Engine Adapter: the call boundary between the orchestrator and a key generation engine.

An engine is anything implementing `KeyEngine`. It is configured with one call per setting, so a rejection can be
attributed to the length, the exponent or the prime count, and then asked to generate with a progress callback.
`LocalKeyEngine` is the default, backed by this package's own prime search.

Typical usage example:

    key = generate(params, LocalKeyEngine(), ProgressReporter(sys.stderr, params.verbose))
    print(key.public_exponent)
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import logging
import typing

from rsagen import config
from rsagen import keygen
from rsagen import rsa
from rsagen.errors import EngineConfigurationError
from rsagen.errors import KeyGenerationFailed
from rsagen.params import ParameterSet

log = logging.getLogger(__name__)


class KeyEngine(typing.Protocol):
    """Interface of a key generation engine.

    Setters raise `ValueError` when they reject a value. `generate` raises `RuntimeError` (or `MemoryError`) when
    no key could be produced.
    """

    def set_bits(self, bits: int) -> None:
        ...

    def set_public_exponent(self, exponent: int) -> None:
        ...

    def set_primes(self, primes: int) -> None:
        ...

    def generate(self, callback: keygen.ProgressCallback) -> rsa.RSAPrivKey:
        ...


class LocalKeyEngine:
    """Default engine, generating keys with `rsagen.keygen`."""

    def __init__(self) -> None:
        self.bits = config.DEFAULT_BITS
        self.exponent = config.RSA_F4
        self.primes = config.DEFAULT_PRIMES

    def set_bits(self, bits: int) -> None:
        if bits < config.MIN_MODULUS_BITS:
            raise ValueError(f"Key size too small, minimum is {config.MIN_MODULUS_BITS} bits.")
        self.bits = bits

    def set_public_exponent(self, exponent: int) -> None:
        if exponent < 3 or exponent % 2 == 0:
            raise ValueError("Public exponent must be odd and at least 3.")
        self.exponent = exponent

    def set_primes(self, primes: int) -> None:
        if not 2 <= primes <= config.MAX_PRIME_COUNT:
            raise ValueError(f"Prime count must be between 2 and {config.MAX_PRIME_COUNT}.")
        self.primes = primes

    def generate(self, callback: keygen.ProgressCallback) -> rsa.RSAPrivKey:
        # Raises ValueError when the prime count exceeds what the modulus length allows.
        try:
            return rsa.RSAPrivKey.generate(self.bits, self.exponent, self.primes, callback)
        except ValueError as exc:
            raise RuntimeError(str(exc)) from exc


class GeneratedKey:
    """Opaque handle on a freshly generated key.

    Only the public exponent is exposed for display. Serialization goes through `to_pem`, and `release` drops
    the reference to the private key once it has been written.
    """
    __slots__ = ("_key",)

    def __init__(self, key: rsa.RSAPrivKey) -> None:
        self._key: rsa.RSAPrivKey | None = key

    def _require(self) -> rsa.RSAPrivKey:
        if self._key is None:
            raise RuntimeError("Key has already been released.")
        return self._key

    @property
    def public_exponent(self) -> int:
        return self._require().pub.expo

    @property
    def bits(self) -> int:
        return self._require().bits

    @property
    def prime_count(self) -> int:
        return len(self._require().primes)

    def to_pem(self, cipher: str | None = None, passphrase=None) -> bytes:
        return self._require().to_pem(cipher, passphrase)

    def release(self) -> None:
        self._key = None


_SETTINGS = (
    ("length", "set_bits", "bits", "Error setting RSA length"),
    ("exponent", "set_public_exponent", "exponent", "Error setting RSA public exponent"),
    ("primes", "set_primes", "primes", "Error setting number of primes"),
)


def configure(params: ParameterSet, engine: KeyEngine) -> None:
    """Pushes the Parameter Set into the engine, one setting at a time.

    Args:
        params: The validated Parameter Set.
        engine: The engine to configure.

    Raises:
        EngineConfigurationError: Naming the first setting the engine rejected.
    """
    for setting, setter, field, message in _SETTINGS:
        try:
            getattr(engine, setter)(getattr(params, field))
        except ValueError as exc:
            raise EngineConfigurationError(setting, message) from exc
    log.debug("Engine configured: %d bits, e=%d, %d primes", params.bits, params.exponent, params.primes)


def generate(params: ParameterSet, engine: KeyEngine, callback: keygen.ProgressCallback) -> GeneratedKey:
    """Configures the engine and runs a single generation.

    The callback is handed to the engine before generation starts and may be invoked any number of times.
    A failed generation is never retried.

    Args:
        params: The validated Parameter Set.
        engine: The engine to drive.
        callback: Progress callback, typically a `ProgressReporter`.

    Returns:
        The generated key.

    Raises:
        EngineConfigurationError: If the engine rejects a setting.
        KeyGenerationFailed: If the engine fails, or returns a key not matching the configured exponent.
    """
    configure(params, engine)
    return run(params, engine, callback)


def run(params: ParameterSet, engine: KeyEngine, callback: keygen.ProgressCallback) -> GeneratedKey:
    """Runs a single generation on an engine already configured with `configure`.

    Raises:
        KeyGenerationFailed: If the engine fails, or returns a key not matching the Parameter Set.
    """
    try:
        key = engine.generate(callback)
    except (RuntimeError, MemoryError) as exc:
        raise KeyGenerationFailed("Error generating RSA key") from exc
    if key.pub.expo != params.exponent or len(key.primes) != params.primes:
        raise KeyGenerationFailed("Error generating RSA key: engine ignored the requested parameters")
    return GeneratedKey(key)
