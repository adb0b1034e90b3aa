"""Process-level settings for rsagen.

Fixed defaults mirror the classic ``genrsa`` behaviour, while the few operational knobs can be tuned from the
environment without touching the command line.
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import os

DEFAULT_BITS: int = 2048
DEFAULT_PRIMES: int = 2
RSA_3: int = 3
RSA_F4: int = 0x10001

MIN_MODULUS_BITS: int = 512
MAX_PRIME_COUNT: int = 5

# Above this size generation still proceeds, but an advisory is printed.
MAX_MODULUS_BITS: int = int(os.getenv("RSAGEN_MAX_MODULUS_BITS", "16384"))
PBKDF2_ITERATIONS: int = int(os.getenv("RSAGEN_PBKDF2_ITERATIONS", "2048"))
LOG_LEVEL: str = os.getenv("RSAGEN_LOG_LEVEL", "WARNING").upper()
