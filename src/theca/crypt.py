"""Symmetric encryption of profile files.

Keys are derived from the user's passphrase with PBKDF2-HMAC-SHA256; the data is encrypted as a Fernet token
(AES-128-CBC with an HMAC-SHA256 signature), so a wrong key or corrupted file is detected rather than decrypted
into garbage.
"""

import base64
import hashlib

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from theca.errors import DecryptionError


KEY_ITERATIONS = 2056


def password_to_key(passphrase: str) -> bytes:
    """Derives a Fernet key from the passphrase.

    The salt is derived from the passphrase itself, so the same passphrase always yields the same key and
    nothing besides the ciphertext needs to be stored in the profile file.
    """
    salt = hashlib.sha256(passphrase.encode('utf-8')).hexdigest().encode('ascii')
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=32,
        salt=salt,
        iterations=KEY_ITERATIONS,
    )
    return base64.urlsafe_b64encode(kdf.derive(passphrase.encode('utf-8')))


def encrypt(data: bytes, key: bytes) -> bytes:
    return Fernet(key).encrypt(data)


def decrypt(data: bytes, key: bytes) -> bytes:
    """Raises :exc:`theca.errors.DecryptionError` if the key is wrong or the data is corrupted."""
    try:
        return Fernet(key).decrypt(data)
    except InvalidToken as e:
        raise DecryptionError('unable to decrypt profile, is the key correct?', e)
