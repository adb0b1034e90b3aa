"""Configures pytest further, and provides the fakes shared by the test suites."""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import pytest

from rsagen import keygen
from rsagen import rsa

_KEY_CACHE: dict[tuple[int, int], rsa.RSAPrivKey] = {}


def pytest_addoption(parser):
    parser.addoption("--skip-slow", action="store_true", default=False, help="skip slower tests")
    parser.addoption("--run-extreme", action="store_true", default=False, help="run extreme value extremely slow tests")


def pytest_collection_modifyitems(config, items):
    skipdict = {}
    if config.getoption("--skip-slow"):
        skipdict["slow"] = pytest.mark.skip(reason="Slow test: needs no --skip-slow option")
    if not config.getoption("--run-extreme"):
        skipdict["extreme"] = pytest.mark.skip(reason="Extreme test: needs --run-extreme option")
    if not skipdict:
        return
    for item in items:
        for k, v in skipdict.items():
            if k in item.keywords:
                item.add_marker(v)


def small_key(exponent: int = 65537, primes: int = 2) -> rsa.RSAPrivKey:
    """A real but small key, generated once per (exponent, primes) for the whole session."""
    bits = 512 if primes == 2 else 1024
    if (exponent, primes) not in _KEY_CACHE:
        _, pub, d, factors = keygen.generate_key(bits, exponent, primes)
        _KEY_CACHE[(exponent, primes)] = rsa.RSAPrivKey.from_primes(pub, d, factors)
    return _KEY_CACHE[(exponent, primes)]


class ScriptedEngine:
    """Key engine replaying a fixed list of progress events.

    Attributes:
        settings: The values pushed by the adapter, by setter name.
        generated: Whether `generate` was reached.
    """

    def __init__(self, events=(), fail: BaseException | None = None, reject: str | None = None, key=None):
        self.events = list(events)
        self.fail = fail
        self.reject = reject
        self.key = key
        self.settings: dict[str, int] = {}
        self.generated = False
        self.answers: list = []

    def _set(self, name: str, value: int) -> None:
        if self.reject == name:
            raise ValueError(f"{name} rejected")
        self.settings[name] = value

    def set_bits(self, bits):
        self._set("bits", bits)

    def set_public_exponent(self, exponent):
        self._set("exponent", exponent)

    def set_primes(self, primes):
        self._set("primes", primes)

    def generate(self, callback):
        self.generated = True
        for event in self.events:
            self.answers.append(callback(event))
        if self.fail is not None:
            raise self.fail
        if self.key is not None:
            return self.key
        return small_key(self.settings["exponent"], self.settings["primes"])


@pytest.fixture
def scripted_engine():
    return ScriptedEngine


@pytest.fixture
def rsa_key():
    return small_key()


@pytest.fixture
def multi_prime_key():
    return small_key(primes=3)
