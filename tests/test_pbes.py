# pylint: disable=missing-module-docstring,protected-access
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
from cryptography.hazmat.primitives import serialization
from pyasn1.codec.der import decoder
from pyasn1_modules import rfc5208
import pytest

from rsagen import pbes


@pytest.mark.parametrize("name,expected", [
    ("aes256", "aes256"),
    ("--aes256", "aes256"),
    ("-AES128", "aes128"),
    ("aes-192-cbc", "aes192"),
    ("--aes-256-cbc", "aes256"),
])
def test_cipher_name(name, expected):
    assert pbes.cipher_name(name) == expected
    assert pbes.is_supported(name)


@pytest.mark.parametrize("name", ["des3", "--idea", "aes512", "", "-"])
def test_cipher_name_unsupported(name):
    with pytest.raises(ValueError):
        pbes.cipher_name(name)
    assert not pbes.is_supported(name)


@pytest.mark.parametrize("cipher", list(pbes.CIPHERS))
def test_roundtrip(rsa_key, cipher):
    der = rsa_key.to_pkcs8()
    blob = pbes.encrypt(der, cipher, b"correct horse", iterations=1000)
    assert der not in blob
    assert pbes.decrypt(blob, b"correct horse") == der


def test_envelope_layout(rsa_key):
    blob = pbes.encrypt(rsa_key.to_pkcs8(), "aes192", b"correct horse", iterations=1234)
    wrapper, _ = decoder.decode(blob, asn1Spec=rfc5208.EncryptedPrivateKeyInfo())
    assert wrapper["encryptionAlgorithm"]["algorithm"] == pbes.id_PBES2
    params, _ = decoder.decode(wrapper["encryptionAlgorithm"]["parameters"], asn1Spec=pbes.PBES2Params())
    assert params["keyDerivationFunc"]["algorithm"] == pbes.id_PBKDF2
    assert params["encryptionScheme"]["algorithm"] == pbes.id_aes192_CBC
    kdf, _ = decoder.decode(params["keyDerivationFunc"]["parameters"], asn1Spec=pbes.PBKDF2Params())
    assert int(kdf["iterationCount"]) == 1234
    assert len(kdf["salt"]) == pbes.SALT_LENGTH
    assert kdf["prf"]["algorithm"] == pbes.id_hmacWithSHA256


def test_default_iterations(mocker, rsa_key):
    mocker.patch("rsagen.config.PBKDF2_ITERATIONS", 4321)
    derive = mocker.spy(pbes, "_derive")
    pbes.encrypt(rsa_key.to_pkcs8(), "aes128", b"correct horse")
    assert derive.call_args.args[2] == 4321


def test_fresh_salt_each_time(rsa_key):
    der = rsa_key.to_pkcs8()
    assert pbes.encrypt(der, "aes256", b"pw") != pbes.encrypt(der, "aes256", b"pw")


def test_wrong_passphrase(rsa_key):
    der = rsa_key.to_pkcs8()
    blob = pbes.encrypt(der, "aes256", b"correct horse")
    # Padding of a wrong decrypt is usually invalid, but can pass by chance.
    try:
        result = pbes.decrypt(blob, b"battery staple")
    except ValueError:
        return
    assert result != der


def test_decrypt_reference(rsa_key):
    reference = serialization.load_der_private_key(rsa_key.to_pkcs8(), None)
    blob = reference.private_bytes(serialization.Encoding.DER, serialization.PrivateFormat.PKCS8,
                                   serialization.BestAvailableEncryption(b"correct horse"))
    assert pbes.decrypt(blob, b"correct horse") == rsa_key.to_pkcs8()


@pytest.mark.parametrize("blob", [b"", b"\x30\x03\x02\x01\x00", b"not der at all"])
def test_decrypt_malformed(blob):
    with pytest.raises(IOError):
        pbes.decrypt(blob, b"correct horse")
