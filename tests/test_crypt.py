import pytest

from theca.crypt import decrypt, encrypt, password_to_key
from theca.errors import DecryptionError


def test_password_to_key_is_deterministic():
    assert password_to_key('hunter2') == password_to_key('hunter2')
    assert password_to_key('hunter2') != password_to_key('hunter3')
    assert len(password_to_key('')) == 44


def test_encrypt_decrypt():
    key = password_to_key('hunter2')
    ciphertext = encrypt(b'{"notes": []}', key)
    assert b'notes' not in ciphertext
    assert decrypt(ciphertext, key) == b'{"notes": []}'


def test_decrypt_with_wrong_key():
    ciphertext = encrypt(b'secret', password_to_key('hunter2'))
    with pytest.raises(DecryptionError) as exc:
        decrypt(ciphertext, password_to_key('hunter3'))
    assert exc.value.message == 'unable to decrypt profile, is the key correct?'


def test_decrypt_garbage():
    with pytest.raises(DecryptionError):
        decrypt(b'{"encrypted": false, "notes": []}', password_to_key('hunter2'))
