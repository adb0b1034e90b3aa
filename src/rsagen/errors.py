"""Error taxonomy for a key generation run.

Every error is terminal to the current invocation. Library code raises these, the orchestrator converts them into a
diagnostic trail and a non-zero exit status.
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0


class RSAGenError(Exception):
    """Base class for all rsagen failures."""


class InvalidParameter(RSAGenError):
    """Bad user input, recoverable by re-invoking with corrected arguments.

    Attributes:
        field: Name of the offending parameter.
    """

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field


class PassphraseError(InvalidParameter):
    """The passphrase source could not be resolved."""

    def __init__(self, message: str) -> None:
        super().__init__("passout", message)


class EngineConfigurationError(RSAGenError):
    """The key engine rejected one of its settings.

    Attributes:
        setting: Which setting failed, one of ``length``, ``exponent`` or ``primes``.
    """

    def __init__(self, setting: str, message: str) -> None:
        super().__init__(message)
        self.setting = setting


class KeyGenerationFailed(RSAGenError):
    """The engine could not produce a key."""


class EncodeError(RSAGenError):
    """Serialization of the key or writing to the sink failed."""


class SinkOpenError(RSAGenError):
    """The output destination could not be created with the required permissions."""
