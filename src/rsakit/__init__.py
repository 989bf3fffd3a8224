"""A small RSA toolkit with OpenSSL-compatible PEM/DER key interchange.

Provides key pair generation, PKCS#1 encryption and decryption, digest-then-sign signatures over SHA-1 and the
SHA-2 family, key introspection, and import/export of keys as PEM. The arithmetic is delegated to a provider; the
bundled SoftwareProvider is used unless another one is passed.

Typical usage example:

    pair = generate_key_pair(2048)
    c = encrypt(b"Hi there!", pair.public)
    r = decrypt(c, pair.private)
    text = pair.public.pem()
    pub = KeyHandle.import_pem(text, KeyClass.PUBLIC)
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
from rsakit.digest import DigestAlgorithm
from rsakit.errors import DomainError
from rsakit.errors import ErrorKind
from rsakit.errors import ProviderError
from rsakit.errors import RSAError
from rsakit.keys import KeyAttributes
from rsakit.keys import KeyHandle
from rsakit.keys import KeyPair
from rsakit.provider import KeyClass
from rsakit.provider import Padding
from rsakit.provider import SoftwareProvider
from rsakit.rsa import decrypt
from rsakit.rsa import encrypt
from rsakit.rsa import generate_key_pair
from rsakit.rsa import sign
from rsakit.rsa import verify

__version__ = "0.1.0"
__all__ = [
    "DigestAlgorithm",
    "DomainError",
    "ErrorKind",
    "KeyAttributes",
    "KeyClass",
    "KeyHandle",
    "KeyPair",
    "Padding",
    "ProviderError",
    "RSAError",
    "SoftwareProvider",
    "decrypt",
    "encrypt",
    "generate_key_pair",
    "sign",
    "verify",
]
