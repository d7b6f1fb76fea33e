from src.adapters.auth.crypto import (
    Argon2PasswordVerifier,
    DisabledPasswordVerifier,
    PlainPasswordVerifier,
    hash_password,
)


def test_argon2_round_trip():
    verifier = Argon2PasswordVerifier(hash_password("open sesame"))
    assert verifier.verify("open sesame") is True
    assert verifier.verify("open sesame!") is False


def test_hash_is_salted():
    assert hash_password("same") != hash_password("same")


def test_corrupt_hash_never_verifies():
    assert Argon2PasswordVerifier("not-a-hash").verify("anything") is False


def test_plain_verifier():
    verifier = PlainPasswordVerifier("hunter2")
    assert verifier.verify("hunter2") is True
    assert verifier.verify("hunter3") is False
    assert verifier.verify("") is False


def test_plain_verifier_empty_config_fails_closed():
    assert PlainPasswordVerifier("").verify("") is False


def test_disabled_verifier():
    assert DisabledPasswordVerifier().verify("anything") is False
