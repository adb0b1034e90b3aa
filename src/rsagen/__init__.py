"""RSA private key generation, in the manner of the classic genrsa tool.

Validates the generation parameters, drives a key engine while rendering its progress, and writes the key as
PKCS #8 PEM, optionally encrypted with a passphrase-derived AES key. The engine is pluggable; the default one
searches for probable primes locally and supports multi-prime keys.

Typical usage example:

    status = GenRSA().run(3072, out="key.pem", verbose=True)
    pk = RSAPrivKey.generate(2048, primes=2)
    pem = pk.to_pem("aes256", b"passphrase")
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
from rsagen.engine import GeneratedKey
from rsagen.engine import KeyEngine
from rsagen.engine import LocalKeyEngine
from rsagen.errors import EncodeError
from rsagen.errors import EngineConfigurationError
from rsagen.errors import InvalidParameter
from rsagen.errors import KeyGenerationFailed
from rsagen.errors import PassphraseError
from rsagen.errors import RSAGenError
from rsagen.errors import SinkOpenError
from rsagen.genrsa import GenRSA
from rsagen.params import ParameterSet
from rsagen.passphrase import Passphrase
from rsagen.progress import ProgressReporter
from rsagen.rsa import RSAPrivKey
from rsagen.rsa import RSAPubKey

__version__ = "0.1.0"
__all__ = [
    "GenRSA",
    "GeneratedKey",
    "KeyEngine",
    "LocalKeyEngine",
    "ParameterSet",
    "Passphrase",
    "ProgressReporter",
    "RSAPrivKey",
    "RSAPubKey",
    "RSAGenError",
    "InvalidParameter",
    "PassphraseError",
    "EngineConfigurationError",
    "KeyGenerationFailed",
    "EncodeError",
    "SinkOpenError",
]
