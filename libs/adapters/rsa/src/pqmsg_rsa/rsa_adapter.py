from __future__ import annotations
from typing import Tuple

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric import rsa, padding
from cryptography.hazmat.primitives import hashes, serialization


def _gen_rsa_keypair(bits: int):
    sk = rsa.generate_private_key(public_exponent=65537, key_size=bits)
    pk = sk.public_key()
    sk_bytes = sk.private_bytes(
        serialization.Encoding.DER,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    )
    pk_bytes = pk.public_bytes(
        serialization.Encoding.DER,
        serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    return pk_bytes, sk_bytes


def _load_private_key(sk_bytes: bytes):
    return serialization.load_der_private_key(sk_bytes, password=None)


def _load_public_key(pk_bytes: bytes):
    return serialization.load_der_public_key(pk_bytes)


def _oaep() -> padding.OAEP:
    return padding.OAEP(mgf=padding.MGF1(algorithm=hashes.SHA256()),
                        algorithm=hashes.SHA256(),
                        label=None)


class RSAOAEP:
    """RSA-OAEP (SHA-256) public key encryption for group secrets.

    A classical option for recipients without post-quantum keys.
    """
    name = "RSA-OAEP"

    def __init__(self, bits: int) -> None:
        self._bits = bits
        # OAEP overhead is two hash lengths plus two bytes
        self.plaintext_size = bits // 8 - 2 * hashes.SHA256.digest_size - 2

    def keygen(self) -> Tuple[bytes, bytes]:
        return _gen_rsa_keypair(self._bits)

    def encrypt(self, public_key: bytes, plaintext: bytes) -> bytes:
        return _load_public_key(public_key).encrypt(plaintext, _oaep())

    def decrypt(self, secret_key: bytes, ciphertext: bytes) -> bytes:
        return _load_private_key(secret_key).decrypt(ciphertext, _oaep())


class RSASignature:
    """RSA-PSS signature adapter using cryptography (classical baseline)."""
    name = "RSA-PSS"
    prehash = "SHA3-512"
    hash_algorithm = hashes.SHA256
    mgf_hash_algorithm = hashes.SHA256
    salt_length = hashes.SHA256.digest_size  # match the hash size

    def __init__(self, bits: int) -> None:
        self._bits = bits

    def keygen(self) -> Tuple[bytes, bytes]:
        return _gen_rsa_keypair(self._bits)

    def _padding(self) -> padding.PSS:
        return padding.PSS(mgf=padding.MGF1(self.mgf_hash_algorithm()), salt_length=self.salt_length)

    def sign(self, secret_key: bytes, message: bytes) -> bytes:
        sk = _load_private_key(secret_key)
        return sk.sign(message, self._padding(), self.hash_algorithm())

    def verify(self, public_key: bytes, message: bytes, signature: bytes) -> bool:
        pk = _load_public_key(public_key)
        try:
            pk.verify(signature, message, self._padding(), self.hash_algorithm())
            return True
        except InvalidSignature:
            return False
