from __future__ import annotations

from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes


class _KeyStream:
    def __init__(self, cipher: Cipher) -> None:
        self._ctx = cipher.encryptor()

    def xor(self, data: bytes) -> bytes:
        return self._ctx.update(data)


class AESCTR:
    iv_size = 16

    def __init__(self, key_size: int) -> None:
        self.key_size = key_size
        self.name = f"AESCTR{key_size * 8}"

    def new(self, key: bytes, iv: bytes) -> _KeyStream:
        return _KeyStream(Cipher(algorithms.AES(key), modes.CTR(iv)))


class ChaCha20:
    """ChaCha20 with the 16-byte nonce cryptography expects (4-byte counter || 12-byte nonce)."""

    name = "CHACHA20"
    key_size = 32
    iv_size = 16

    def new(self, key: bytes, iv: bytes) -> _KeyStream:
        return _KeyStream(Cipher(algorithms.ChaCha20(key, iv), mode=None))


STREAM_CIPHERS = (AESCTR(16), AESCTR(32), ChaCha20())
