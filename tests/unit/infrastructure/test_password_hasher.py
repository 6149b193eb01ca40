"""Unit tests for Argon2 password hashing."""

from cmsbase.infrastructure.auth import hash_password, needs_rehash, verify_password


def test_hash_is_argon2id_and_salted():
    first = hash_password("s3cret")
    second = hash_password("s3cret")

    assert first.startswith("$argon2id$")
    assert first != second


def test_verify_password():
    hashed = hash_password("s3cret")

    assert verify_password("s3cret", hashed) is True
    assert verify_password("wrong", hashed) is False


def test_malformed_hash_is_a_mismatch():
    assert verify_password("s3cret", "not-a-hash") is False


def test_fresh_hash_needs_no_rehash():
    assert needs_rehash(hash_password("s3cret")) is False
