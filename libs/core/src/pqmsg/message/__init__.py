from .encryption import (
    DerivedEncrypter,
    DerivedEncryption,
    Encryption,
    GroupEncrypter,
    GroupEncryption,
    PassphraseEncrypter,
    PassphraseEncryption,
    SecretEncrypter,
    SecretEncryption,
)
from .model import MESSAGE_BLOCK, MESSAGE_TAG, Auth, FileInfo, Header, Message
from .receive import Decrypt, decrypt, decrypt_message
from .send import new_message

__all__ = [
    "Auth",
    "Decrypt",
    "DerivedEncrypter",
    "DerivedEncryption",
    "Encryption",
    "FileInfo",
    "GroupEncrypter",
    "GroupEncryption",
    "Header",
    "MESSAGE_BLOCK",
    "MESSAGE_TAG",
    "Message",
    "PassphraseEncrypter",
    "PassphraseEncryption",
    "SecretEncrypter",
    "SecretEncryption",
    "decrypt",
    "decrypt_message",
    "new_message",
]
