"""AES-128-CBC decryption backed by PyCryptodomex.

Encrypted archives are decrypted once, in place, before the entry table is
read. The provider is a small object so the parser can be handed a
different implementation (tests use a failing one).
"""

from __future__ import annotations

from typing import Union

from Cryptodome.Cipher import AES

from .constants import AES_BLOCK_SIZE, AES_IV_SIZE, AES_KEY_SIZE, FARC_AES_KEY_HEX
from .errors import DecryptFailedError


Buffer = Union[bytearray, memoryview]


def parse_key_hex(text: str) -> bytes:
    """Parse a 128-bit key written as hex; whitespace is ignored."""
    digits = "".join(text.split())
    if len(digits) != AES_KEY_SIZE * 2:
        raise ValueError(f"AES-128 key must be {AES_KEY_SIZE * 2} hex digits")
    return bytes.fromhex(digits)


FARC_AES_KEY = parse_key_hex(FARC_AES_KEY_HEX)


class CryptoProvider:
    """AES-128-CBC without padding, decrypting a writable buffer in place."""

    def decrypt_in_place(self, buffer: Buffer, key: bytes, iv: bytes) -> None:
        if len(key) != AES_KEY_SIZE:
            raise DecryptFailedError("AES-128 key must be 16 bytes")
        if len(iv) != AES_IV_SIZE:
            raise DecryptFailedError("AES IV must be 16 bytes")
        view = memoryview(buffer)
        if len(view) % AES_BLOCK_SIZE:
            raise DecryptFailedError(
                f"encrypted region of {len(view)} bytes is not a multiple of the AES block size"
            )
        try:
            cipher = AES.new(key, AES.MODE_CBC, iv=iv)
            view[:] = cipher.decrypt(bytes(view))
        except (ValueError, TypeError) as exc:
            raise DecryptFailedError(f"AES-128-CBC decryption failed: {exc}")
