import hashlib
import hmac

import pytest

from jirahook.signature import is_valid_signature, make_signature


SECRET = "abc"
BODY = b"hello"


def _flip(hex_digest, index):
    replacement = "0" if hex_digest[index] != "0" else "1"
    return hex_digest[:index] + replacement + hex_digest[index + 1 :]


def test_make_signature():
    expected = hmac.new(b"abc", b"hello", hashlib.sha1).hexdigest()

    assert make_signature(BODY, SECRET, "sha1") == f"sha1={expected}"
    assert make_signature("hello", SECRET, "sha1") == f"sha1={expected}"


@pytest.mark.parametrize("algorithm", ["sha1", "sha256", "sha512"])
def test_is_valid_signature(algorithm):
    digest = hmac.new(SECRET.encode(), BODY, algorithm).hexdigest()

    assert is_valid_signature(BODY, f"{algorithm}={digest}", SECRET) is True


@pytest.mark.parametrize("index", [0, 17, -1])
def test_is_valid_signature_flipped_character(index):
    digest = hmac.new(SECRET.encode(), BODY, hashlib.sha1).hexdigest()

    assert is_valid_signature(BODY, f"sha1={_flip(digest, index)}", SECRET) is False


def test_is_valid_signature_wrong_secret():
    header = make_signature(BODY, "not the secret", "sha1")

    assert is_valid_signature(BODY, header, SECRET) is False


def test_is_valid_signature_modified_body():
    header = make_signature(BODY, SECRET, "sha1")

    assert is_valid_signature(b"hello!", header, SECRET) is False


@pytest.mark.parametrize(
    "header", [None, "", "sha1", hmac.new(b"abc", b"hello", hashlib.sha1).hexdigest(), "sha1=", "=deadbeef"]
)
def test_is_valid_signature_malformed_header(header):
    assert is_valid_signature(BODY, header, SECRET) is False


@pytest.mark.parametrize("algorithm", ["md5", "whirlpool", "shake_128", "nope"])
def test_is_valid_signature_unsupported_algorithm(algorithm):
    digest = hmac.new(SECRET.encode(), BODY, hashlib.sha1).hexdigest()

    assert is_valid_signature(BODY, f"{algorithm}={digest}", SECRET) is False


@pytest.mark.parametrize("secret", [None, ""])
def test_is_valid_signature_missing_secret(secret):
    header = make_signature(BODY, "", "sha1")

    assert is_valid_signature(BODY, header, secret) is False


def test_is_valid_signature_non_ascii_digest():
    assert is_valid_signature(BODY, "sha1=ééé", SECRET) is False
