"""Encrypted .env handling (AES-256-GCM with a scrypt-derived key).

Legacy ERP credentials are shipped as ``.env.enc``; the passphrase is shared
out-of-band and supplied through ``ENV_PASSPHRASE`` at start-up or typed at
the ``flask env`` prompts.
"""

from __future__ import annotations

import io
import os
from pathlib import Path
from secrets import token_bytes

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.scrypt import Scrypt
from dotenv import load_dotenv

MAGIC = b'ENV1'           # file marker
SALT_LEN = 16
NONCE_LEN = 12
TAG_LEN = 16


class EnvDecryptError(ValueError):
    """Raised when an encrypted env blob cannot be opened."""


def derive_key(passphrase: bytes, salt: bytes) -> bytes:
    kdf = Scrypt(salt=salt, length=32, n=2**14, r=8, p=1)
    return kdf.derive(passphrase)


def encrypt_bytes(data: bytes, passphrase: str) -> bytes:
    salt = token_bytes(SALT_LEN)
    nonce = token_bytes(NONCE_LEN)
    aes = AESGCM(derive_key(passphrase.encode("utf-8"), salt))
    return MAGIC + salt + nonce + aes.encrypt(nonce, data, associated_data=None)


def decrypt_bytes(blob: bytes, passphrase: str) -> bytes:
    if len(blob) < len(MAGIC) + SALT_LEN + NONCE_LEN + TAG_LEN:
        raise EnvDecryptError("file too short or corrupted")
    if blob[:4] != MAGIC:
        raise EnvDecryptError("wrong file format (magic mismatch)")

    salt = blob[4:4 + SALT_LEN]
    nonce = blob[4 + SALT_LEN:4 + SALT_LEN + NONCE_LEN]
    ct = blob[4 + SALT_LEN + NONCE_LEN:]

    aes = AESGCM(derive_key(passphrase.encode("utf-8"), salt))
    try:
        return aes.decrypt(nonce, ct, associated_data=None)
    except InvalidTag as exc:
        raise EnvDecryptError("decryption failed; wrong passphrase or corrupted file") from exc


def encrypt_file(src: str | os.PathLike, dst: str | os.PathLike, passphrase: str) -> Path:
    data = Path(src).read_bytes()
    target = Path(dst)
    target.write_bytes(encrypt_bytes(data, passphrase))
    return target


def decrypt_file(src: str | os.PathLike, dst: str | os.PathLike, passphrase: str) -> Path:
    target = Path(dst)
    target.write_bytes(decrypt_bytes(Path(src).read_bytes(), passphrase))
    return target


def load_encrypted_env(path: str | os.PathLike, passphrase: str, *, override: bool = False) -> bool:
    """Decrypt ``path`` in memory and feed it to python-dotenv; nothing touches disk."""
    plaintext = decrypt_bytes(Path(path).read_bytes(), passphrase)
    return load_dotenv(stream=io.StringIO(plaintext.decode("utf-8")), override=override)


__all__ = [
    "EnvDecryptError",
    "decrypt_bytes",
    "decrypt_file",
    "encrypt_bytes",
    "encrypt_file",
    "load_encrypted_env",
]
