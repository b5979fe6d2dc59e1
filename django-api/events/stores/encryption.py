"""Symmetric encryption for sensitive submission fields at rest."""

from cryptography.fernet import Fernet, InvalidToken


class FieldCipher:
    """Fernet wrapper used by the store for bank and national id numbers."""

    def __init__(self, key: str | bytes) -> None:
        self._fernet = Fernet(key)

    def encrypt(self, plaintext: str) -> str:
        return self._fernet.encrypt(plaintext.encode("utf-8")).decode("ascii")

    def decrypt(self, ciphertext: str) -> str:
        try:
            return self._fernet.decrypt(ciphertext.encode("ascii")).decode("utf-8")
        except InvalidToken as exc:
            raise ValueError("Stored value could not be decrypted") from exc
