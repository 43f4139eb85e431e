"""Password hashing tests."""

from fastapi_cargospace.passwords import (
    MAX_PASSWORD_BYTES,
    hash_password,
    verify_password,
)


def test_hash_is_not_the_password() -> None:
    hashed = hash_password("password", rounds=4)
    assert hashed != "password"
    assert hashed.startswith("$2")


def test_verify_round_trip() -> None:
    hashed = hash_password("password", rounds=4)
    assert verify_password("password", hashed)
    assert not verify_password("Password", hashed)


def test_hashes_are_salted() -> None:
    assert hash_password("password", rounds=4) != hash_password(
        "password", rounds=4
    )


def test_malformed_hash_never_verifies() -> None:
    assert not verify_password("password", "not-a-bcrypt-hash")


def test_password_over_bcrypt_limit_never_verifies() -> None:
    hashed = hash_password("x" * MAX_PASSWORD_BYTES, rounds=4)
    assert verify_password("x" * MAX_PASSWORD_BYTES, hashed)
    assert not verify_password("x" * (MAX_PASSWORD_BYTES + 8), hashed)
