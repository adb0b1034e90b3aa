"""Core Key Generation Utility, mainly focusing on the generation of random large primes.

This module backs the default local key engine. It searches for probable primes (trial division against a cached
sieve, followed by Miller-Rabin) and assembles two- or multi-prime RSA keys from them. Every step of the search is
reported to an optional progress callback using four event codes:

    0  a new prime candidate was drawn
    1  a candidate survived one Miller-Rabin round
    2  a probable prime was rejected and the search continues
    3  a prime was accepted

A callback returning exactly ``False`` aborts the search with `GenerationAborted`.

Typical usage example:

    get_pre_primes(12000)
    n, e, d, factors = generate_key(2048, 65537, primes=2, callback=print)
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import logging
import math
import secrets
import typing

from rsagen import config

log = logging.getLogger(__name__)

ProgressCallback = typing.Callable[[int], typing.Any]

EVENT_CANDIDATE = 0
EVENT_ROUND = 1
EVENT_REJECTED = 2
EVENT_ACCEPTED = 3

_SMALL_PRIMES: list[int] = []
_SMALL_PRIMES_CAP: int = 0
_MINIMUM_PRIME_SEPARATION: int = 100
_ATTEMPT_FACTOR: int = 20
_MAX_ROUNDS: int = 32


class GenerationAborted(RuntimeError):
    """The progress callback asked for the search to stop."""


def _notify(callback: ProgressCallback | None, event: int) -> None:
    if callback is not None and callback(event) is False:
        raise GenerationAborted("Key generation aborted by progress callback.")


def _sieve(n: int = 10000) -> list[int]:
    """Implements the Sieve of Eratosthenes.

    Uses the textbook Sieve of Eratosthenes to generate a set of primes up to `n`.
    Includes memory space optimization and sieving until root.

    Args:
        n: The number up to which to generate primes. Defaults to 10000. Must be >= 0.

    Returns:
        A list of primes up to `n`.
    """
    if n < 2:
        return []
    i_size = (n - 1) // 2
    candidate: list[bool] = [True] * i_size
    for i in range(int(n**0.5) // 2):
        if candidate[i]:
            r = 2 * i + 3
            for j in range((r * r - 3) // 2, i_size, r):
                candidate[j] = False
    return [2] + [(no * 2 + 3) for no, ele in enumerate(candidate) if ele]


def get_pre_primes(n: int = 10000, change: bool = False) -> list[int]:
    """Get the small primes, automatically generating if necessary.

    Uses the `_SMALL_PRIMES` module cache when it already covers `n`, otherwise hands over to the sieve.

    Args:
        n: The number up to which to generate primes. Defaults to 10000. Must be >= 0.
        change: Whether to force a recomputation of primes. Defaults to False.

    Returns:
        List of primes in ascending order, at least up to `n` unless `change` is True.

    Raises:
        ValueError: If `n` is negative.
    """
    if n < 0:
        raise ValueError("n must be >= 0")
    global _SMALL_PRIMES
    global _SMALL_PRIMES_CAP
    if n > _SMALL_PRIMES_CAP or change or not _SMALL_PRIMES:
        _SMALL_PRIMES = _sieve(n)
        _SMALL_PRIMES_CAP = n
    return _SMALL_PRIMES


def _trial_division(no: int, n: int = 10000) -> bool:
    """Check the provided `no` against the known small primes.

    Args:
         no: The number to check. Must be integer and non-negative.
         n: The number up to which to generate primes. Passed to `get_pre_primes()`.

    Returns:
        False if `no` cannot be prime, True otherwise.
    """
    if no < 2:
        return False
    for prime in get_pre_primes(n):
        if prime**2 > no:
            return True
        if no % prime == 0:
            return False
    return True


def _miller_rabin(w: int, iters: int, callback: ProgressCallback | None = None) -> bool:
    """Perform Miller-Rabin primality test.

    Performs the Miller-Rabin primality test as specified in FIPS 186-5, reporting every passed round.

    Args:
        w: Odd integer to be tested.
        iters: Number of Miller-Rabin iterations to perform.
        callback: Optional progress callback, receives `EVENT_ROUND` after each passed round.

    Returns:
        True if `w` is probably prime, False otherwise.
    """
    if w <= 3:
        return w == 2 or w == 3
    tw = w - 1
    a = (tw & -tw).bit_length() - 1
    m = tw // (2**a)  # Exact, as `a` counts the trailing zero bits.
    for _ in range(iters):
        b = secrets.randbelow(w - 3) + 2
        z = pow(b, m, w)
        if z != 1 and z != w - 1:
            for _ in range(1, a):
                z = pow(z, 2, w)
                if z == w - 1:
                    break
                if z == 1:
                    return False
            else:
                return False
        _notify(callback, EVENT_ROUND)
    return True


def _mr_rounds(bits: int) -> int:
    # FIPS 186-5 Appendix C.1
    if bits <= 512:
        return 40
    if bits <= 1024:
        return 56
    if bits <= 1536:
        return 64
    if bits <= 2048:
        return 70
    return 74


def check_prime(candidate: int,
                iters: None | int = None,
                n: int = 10000,
                callback: ProgressCallback | None = None) -> bool:
    """Performs a composite Primality test, using a limited amount of trial divisions, before a Miller-Rabin test.

    Args:
        candidate: The candidate prime to test.
        iters: Number of Miller-Rabin iterations to perform.
            If not provided will use defaults as per the FIPS 186-5 Appendix C.1
        n: The number up to which small primes are used for trial division.
        callback: Optional progress callback, forwarded to the Miller-Rabin rounds.

    Returns:
        True if `candidate` is probably prime, False otherwise.
    """
    if candidate < 2:
        return False
    if not _trial_division(candidate, n):
        return False
    if iters is None:
        iters = _mr_rounds(candidate.bit_length())
    return _miller_rabin(candidate, iters, callback)


def prime_cap(bits: int) -> int:
    """Maximum number of primes allowed for a modulus of `bits` bits."""
    if bits < 1024:
        return 2
    if bits < 4096:
        return 3
    if bits < 8192:
        return 4
    return config.MAX_PRIME_COUNT


def prime_sizes(bits: int, count: int) -> list[int]:
    """Splits the modulus length over `count` primes, spreading the remainder over the first ones."""
    quo, rmd = divmod(bits, count)
    return [quo + 1 if i < rmd else quo for i in range(count)]


def _too_close(candidate: int, others: list[int], size: int) -> bool:
    if candidate in others:
        return True
    if size <= _MINIMUM_PRIME_SEPARATION:
        return False
    return any(abs(other - candidate) <= (1 << (size - _MINIMUM_PRIME_SEPARATION)) for other in others)


def _generate_probable_prime(size: int,
                             pub: int = config.RSA_F4,
                             others: list[int] | None = None,
                             callback: ProgressCallback | None = None) -> int:
    """Generate a probable prime number of the specified bit size.

    Candidates always have their two top bits set, so that the product of two of them reaches the full length.
    A probable prime is only kept if `prime - 1` is coprime with the public exponent and it lies far enough from
    the primes already chosen for the same key.

    Args:
        size: The size of the prime to generate in bits.
        pub: The public exponent the prime must be compatible with.
        others: Primes already generated for the same key.
        callback: Optional progress callback.

    Returns:
        A probable prime number.

    Raises:
        RuntimeError: If generation loops way beyond a reasonable time and a bit.
    """
    others = others or []
    rep_cap = size * _ATTEMPT_FACTOR
    msk = (1 << size - 1) | (1 << size - 2) | 1
    for _ in range(rep_cap):
        byts = secrets.randbits(size) | msk
        _notify(callback, EVENT_CANDIDATE)
        if not check_prime(byts, callback=callback):
            continue
        if math.gcd(byts - 1, pub) != 1 or _too_close(byts, others, size):
            _notify(callback, EVENT_REJECTED)
            continue
        return byts
    raise RuntimeError(f"Run an improbable {rep_cap} amount of loops with no prime found. "
                       "Check system random number generator.")


def generate_primes(bits: int,
                    pub: int = config.RSA_F4,
                    count: int = config.DEFAULT_PRIMES,
                    callback: ProgressCallback | None = None) -> list[int]:
    """Generates `count` distinct primes whose product is exactly `bits` bits long.

    Args:
        bits: The modulus length in bits.
        pub: The public exponent. Must be odd and greater than 1.
        count: The number of primes.
        callback: Optional progress callback.

    Returns:
        The primes, in generation order.

    Raises:
        ValueError: If the prime count is not supported for the modulus length or `pub` is unusable.
        RuntimeError: If no suitable set of primes could be found.
    """
    if count < 2 or count > prime_cap(bits):
        raise ValueError(f"A {bits} bit modulus supports 2 to {prime_cap(bits)} primes, not {count}.")
    if pub % 2 == 0 or pub < 3:
        raise ValueError("Public exponent does not meet requirements.")
    sizes = prime_sizes(bits, count)
    for _ in range(_MAX_ROUNDS):
        primes: list[int] = []
        for size in sizes:
            primes.append(_generate_probable_prime(size, pub, primes, callback))
            _notify(callback, EVENT_ACCEPTED)
        if math.prod(primes).bit_length() == bits:
            return primes
        log.debug("Product of %d primes fell short of %d bits, starting over", count, bits)
        _notify(callback, EVENT_REJECTED)
    raise RuntimeError(f"Could not find {count} primes forming a {bits} bit modulus.")


def crt_components(d: int, primes: list[int]) -> tuple[list[int], list[int]]:
    """Computes the CRT exponents and coefficients for a (multi-prime) private key.

    Follows PKCS #1: `coefficient[0]` is `q^-1 mod p`, and for each further prime r_i the coefficient is the
    inverse of the product of all preceding primes modulo r_i.

    Args:
        d: The private exponent.
        primes: The primes of the key, in order.

    Returns:
        A tuple of (exponents, coefficients), where coefficients has one entry less than primes.
    """
    exponents = [d % (p - 1) for p in primes]
    coefficients = [pow(primes[1], -1, primes[0])]
    running = primes[0] * primes[1]
    for r in primes[2:]:
        coefficients.append(pow(running, -1, r))
        running *= r
    return exponents, coefficients


def generate_key(bits: int,
                 pub: int = config.RSA_F4,
                 primes: int = config.DEFAULT_PRIMES,
                 callback: ProgressCallback | None = None) -> tuple[int, int, int, list[int]]:
    """Generates an RSA key.

    Args:
        bits: The modulus length in bits.
        pub: The public exponent.
        primes: The number of primes.
        callback: Optional progress callback.

    Returns:
        A tuple of (modulus, public exponent, private exponent, primes).
    """
    factors = generate_primes(bits, pub, primes, callback)
    n = math.prod(factors)
    lam = math.lcm(*(p - 1 for p in factors))
    d = pow(pub, -1, lam)
    log.debug("Generated %d bit modulus from %d primes", n.bit_length(), len(factors))
    return n, pub, d, factors
