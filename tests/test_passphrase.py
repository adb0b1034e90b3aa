# pylint: disable=missing-module-docstring
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import io
import os

import pytest

from rsagen import passphrase
from rsagen.errors import PassphraseError


def test_wipe_zeroes_buffer():
    secret = passphrase.Passphrase(b"hunter22")
    view = secret.view()
    assert bytes(view) == b"hunter22"
    secret.wipe()
    assert secret.wiped
    assert bytes(view) == b"\x00" * 8
    assert len(secret) == 8


def test_wiped_tracks_wipe_call():
    for data in (b"", b"\x00\x00"):
        secret = passphrase.Passphrase(data)
        assert not secret.wiped
        secret.wipe()
        assert secret.wiped


def test_context_manager_wipes():
    with passphrase.Passphrase("hunter22", "env") as secret:
        assert not secret.wiped
    assert secret.wiped


def test_repr_hides_secret():
    secret = passphrase.Passphrase(b"hunter22", "file")
    assert "hunter22" not in repr(secret)
    assert "file" in repr(secret)


def test_bytearray_is_not_copied():
    data = bytearray(b"hunter22")
    passphrase.Passphrase(data).wipe()
    assert data == bytearray(8)


def test_resolve_none():
    assert passphrase.resolve(None) is None


def test_resolve_pass():
    secret = passphrase.resolve("pass:open:sesame")
    assert bytes(secret.view()) == b"open:sesame"
    assert secret.source == "pass"


def test_resolve_pass_empty():
    secret = passphrase.resolve("pass:")
    assert len(secret) == 0
    assert not secret.wiped


def test_resolve_env(monkeypatch):
    monkeypatch.setenv("RSAGEN_TEST_PASS", "from-env")
    assert bytes(passphrase.resolve("env:RSAGEN_TEST_PASS").view()) == b"from-env"


def test_resolve_env_missing(monkeypatch):
    monkeypatch.delenv("RSAGEN_TEST_PASS", raising=False)
    with pytest.raises(PassphraseError) as excinfo:
        passphrase.resolve("env:RSAGEN_TEST_PASS")
    assert excinfo.value.field == "passout"


def test_resolve_file(tmp_path):
    target = tmp_path / "pass.txt"
    target.write_text("first line\nsecond line\n", encoding="utf-8")
    assert bytes(passphrase.resolve(f"file:{target}").view()) == b"first line"


def test_resolve_file_missing(tmp_path):
    with pytest.raises(PassphraseError):
        passphrase.resolve(f"file:{tmp_path / 'absent.txt'}")


def test_resolve_fd():
    read_fd, write_fd = os.pipe()
    try:
        os.write(write_fd, b"piped\r\nrest\n")
        os.close(write_fd)
        assert bytes(passphrase.resolve(f"fd:{read_fd}").view()) == b"piped"
    finally:
        os.close(read_fd)


@pytest.mark.parametrize("descriptor", ["fd:x", "fd:-1"])
def test_resolve_fd_invalid(descriptor):
    with pytest.raises(PassphraseError):
        passphrase.resolve(descriptor)


def test_resolve_stdin():
    assert bytes(passphrase.resolve("stdin", stdin=io.StringIO("typed\n")).view()) == b"typed"


def test_resolve_prompt(mocker):
    getpass = mocker.patch("getpass.getpass", side_effect=["hunter22", "hunter22"])
    assert bytes(passphrase.resolve("prompt", verify=True).view()) == b"hunter22"
    assert getpass.call_count == 2


def test_resolve_prompt_mismatch(mocker):
    mocker.patch("getpass.getpass", side_effect=["hunter22", "hunter23"])
    with pytest.raises(PassphraseError):
        passphrase.resolve("prompt", verify=True)


def test_resolve_prompt_too_short(mocker):
    mocker.patch("getpass.getpass", return_value="abc")
    with pytest.raises(PassphraseError):
        passphrase.resolve("prompt")


def test_resolve_prompt_eof(mocker):
    mocker.patch("getpass.getpass", side_effect=EOFError)
    with pytest.raises(PassphraseError):
        passphrase.resolve("prompt")


@pytest.mark.parametrize("descriptor", ["hunter22", "pass", "env", "stdin:x", "prompt:now", "ftp:host", ""])
def test_resolve_malformed(descriptor):
    with pytest.raises(PassphraseError):
        passphrase.resolve(descriptor)
