from .interfaces import Family
from .registry import Registry, SchemeSet, normalize
from .algorithm import Algorithm
from .config import Settings, load_settings
from .errors import (
    CombinedError,
    CompressionError,
    ConfigurationError,
    ContractError,
    IntegrityError,
    InvalidCost,
    KeyTypeError,
    MalformedPacket,
    MissingSecret,
    NotARecipient,
    PacketTagMismatch,
    PQMsgError,
    SignatureInvalid,
    TagMismatch,
    TruncatedStream,
    UnknownScheme,
)
from .keys import Fingerprint, generate_kem, generate_pke, generate_sign
from .secret import PassphraseParams, PassphraseScheme, SecretScheme
from .signature import Signature, Validity
from .message import Decrypt, FileInfo, Message, decrypt_message, new_message
from .bootstrap import default_passphrase_params, default_secret_scheme, load_default_schemes

__all__ = [
    "Algorithm",
    "CombinedError",
    "CompressionError",
    "ConfigurationError",
    "ContractError",
    "Decrypt",
    "Family",
    "FileInfo",
    "Fingerprint",
    "IntegrityError",
    "InvalidCost",
    "KeyTypeError",
    "MalformedPacket",
    "Message",
    "MissingSecret",
    "NotARecipient",
    "PacketTagMismatch",
    "PassphraseParams",
    "PassphraseScheme",
    "PQMsgError",
    "Registry",
    "SchemeSet",
    "SecretScheme",
    "Settings",
    "Signature",
    "SignatureInvalid",
    "TagMismatch",
    "TruncatedStream",
    "UnknownScheme",
    "Validity",
    "decrypt_message",
    "default_passphrase_params",
    "default_secret_scheme",
    "generate_kem",
    "generate_pke",
    "generate_sign",
    "load_default_schemes",
    "load_settings",
    "new_message",
]
