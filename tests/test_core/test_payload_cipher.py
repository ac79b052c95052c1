"""Tests for the Fernet payload cipher."""

import pytest

from fairwatch.core.config import Settings
from fairwatch.core.encryption import FernetCipher
from fairwatch.core.exceptions import ErrorCode, PersistenceError


@pytest.fixture
def cipher() -> FernetCipher:
    return FernetCipher(FernetCipher.generate_key())


class TestFernetCipher:
    """Tests for FernetCipher."""

    def test_round_trip(self, cipher):
        token = cipher.encrypt(b'{"assessment_id": "bias_1"}')
        assert token != b'{"assessment_id": "bias_1"}'
        assert cipher.decrypt(token) == b'{"assessment_id": "bias_1"}'

    def test_accepts_bytes_key(self):
        key = FernetCipher.generate_key().encode()
        cipher = FernetCipher(key)
        assert cipher.decrypt(cipher.encrypt(b"x")) == b"x"

    def test_wrong_key_raises_persistence_error(self, cipher):
        token = cipher.encrypt(b"payload")
        other = FernetCipher(FernetCipher.generate_key())

        with pytest.raises(PersistenceError) as exc_info:
            other.decrypt(token)

        assert exc_info.value.code == ErrorCode.DECRYPTION_FAILED
        assert exc_info.value.operation == "decrypt"

    def test_from_settings_without_key(self):
        assert FernetCipher.from_settings(Settings(_env_file=None)) is None

    def test_from_settings_with_key(self):
        settings = Settings(_env_file=None, encryption_key=FernetCipher.generate_key())
        cipher = FernetCipher.from_settings(settings)
        assert cipher.decrypt(cipher.encrypt(b"ok")) == b"ok"
