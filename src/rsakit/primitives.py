"""RSA primitives and paddings of the software provider.

Holds the native key objects handed out by the software provider as opaque handles. These implement the RSA
primitive (with CRT acceleration for private keys), PKCS#1 v1.5 and OAEP encryption paddings, PKCS#1 v1.5
signature padding, and PKCS#1 DER import/export of the key numbers.

Failures are reported with builtin exceptions; the provider translates them into status codes:

    ValueError: The input does not fit the key (too long, wrong block size, out of range).
    RuntimeError: Decryption error. Padding validation failed.
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import hashlib
import hmac
from math import ceil
from secrets import token_bytes

from pyasn1.codec.der import decoder
from pyasn1.codec.der import encoder
from pyasn1.codec.native import encoder as localize
from pyasn1_modules import rfc8017

PKCS1_OVERHEAD = 11
OAEP_HASH = hashlib.sha1
OAEP_OVERHEAD = 2 * OAEP_HASH().digest_size + 2


def bytes_to_integer(msg: bytes) -> int:
    """Converts a byte string to an integer (OS2IP).

    Args:
        msg: The bytes (AKA Octet String) to convert.

    Returns:
        The representative integer.
    """
    return int.from_bytes(msg, byteorder="big", signed=False)


def integer_to_bytes(msg: int, fixedlen: int) -> bytes:
    """Converts an integer to a fixed-length byte string (I2OSP).

    Args:
        msg: The integer to unmarshal.
        fixedlen: The target length of the byte string.

    Returns:
        The representative bytes. (AKA Octet String)
    """
    return msg.to_bytes(fixedlen, byteorder="big", signed=False)


def xorbytes(a: bytes, b: bytes) -> bytes:
    """XOR bitwise for two byte strings of equal length."""
    return bytes(x ^ y for x, y in zip(a, b, strict=True))


def mgf1(mgfseed: bytes, masklen: int, hashf=OAEP_HASH) -> bytes:
    """The PKCS#1 v2.2 Mask Generation Function 1.

    Args:
        mgfseed: Seed for mask generation
        masklen: Intended length of mask
        hashf: Hash constructor from hashlib.

    Returns:
        The mask in form of bytes of length masklen.

    Raises:
        ValueError: If mask too long for the hash function.
    """
    hlen = hashf().digest_size
    if masklen > 2**32 * hlen:
        raise ValueError("Mask too long for the specified hash function")
    t = b""
    for cnt in range(ceil(masklen / hlen)):
        t += hashf(mgfseed + integer_to_bytes(cnt, 4)).digest()
    return t[:masklen]


def emsa_pkcs1(digest_info: bytes, bsize: int) -> bytes:
    """EMSA-PKCS1-v1_5 encoding of an already DER encoded DigestInfo.

    Raises:
        ValueError: If the DigestInfo does not fit the block.
    """
    if bsize < len(digest_info) + PKCS1_OVERHEAD:
        raise ValueError("Hash function too large for current key.")
    ps = b"\xFF" * (bsize - len(digest_info) - 3)
    return b"\x00\x01" + ps + b"\x00" + digest_info


class RSAKey:
    """The core components shared by public and private keys.

    Attributes:
        mod: The modulus of the keypair.
        expo: The exponent of the key, whether private or public.
        bsize: The block size in bytes.
    """

    def __init__(self, mod: int, expo: int) -> None:
        if mod <= 0 or expo <= 0:
            raise ValueError("Modulus and exponent must be positive.")
        self.mod = mod
        self.expo = expo
        self.bsize = (self.mod.bit_length() + 7) // 8

    @property
    def size_in_bits(self) -> int:
        return self.mod.bit_length()

    def c_rsa(self, message: int) -> int:
        """Performs the core RSA operation.

        Args:
            message: The int-marshalled message.

        Returns:
            The transformed message representative.

        Raises:
            ValueError: If the message is out of range for the current key.
        """
        if not 0 <= message < self.mod:
            raise ValueError("Message representative must be in range [0, mod-1]")
        return pow(message, self.expo, self.mod)

    def block_op(self, block: bytes) -> bytes:
        """Runs c_rsa over one block-sized octet string."""
        if len(block) != self.bsize:
            raise ValueError("Message does not match expected length.")
        return integer_to_bytes(self.c_rsa(bytes_to_integer(block)), self.bsize)


class RSAPubKey(RSAKey):
    """A public key: modulus and public exponent."""

    def enc_raw(self, message: bytes) -> bytes:
        """Unpadded RSA. The message is left-padded with zeros to the block size."""
        if len(message) > self.bsize:
            raise ValueError("Message too long for the current key.")
        return self.block_op(message.rjust(self.bsize, b"\x00"))

    def enc_pkcs1(self, message: bytes) -> bytes:
        """Encrypts the message according to RSAES-PKCS1-v1_5.

        Raises:
            ValueError: If the message is longer than bsize - 11 bytes.
        """
        if len(message) > self.bsize - PKCS1_OVERHEAD:
            raise ValueError("Message too long for the current key.")
        ps = bytearray()
        while len(ps) < self.bsize - len(message) - 3:
            ps.extend(b for b in token_bytes(self.bsize) if b)
        ps = bytes(ps[:self.bsize - len(message) - 3])
        return self.block_op(b"\x00\x02" + ps + b"\x00" + message)

    def enc_oaep(self, message: bytes, label: bytes = b"") -> bytes:
        """Encrypts the message according to RSAES-OAEP, with SHA-1 and MGF1-SHA-1.

        Raises:
            ValueError: If the message is too long for the current key.
        """
        hlen = OAEP_HASH().digest_size
        if len(message) > self.bsize - OAEP_OVERHEAD:
            raise ValueError("Message too long for the current key.")
        lh = OAEP_HASH(label).digest()
        pad = b"\x00" * (self.bsize - len(message) - 2 * (hlen + 1))
        db = lh + pad + b"\x01" + message
        seed = token_bytes(hlen)
        mdb = xorbytes(db, mgf1(seed, self.bsize - hlen - 1))
        mseed = xorbytes(seed, mgf1(mdb, hlen))
        return self.block_op(b"\x00" + mseed + mdb)

    def verify_pkcs1(self, digest_info: bytes, signature: bytes) -> bool:
        """Checks an RSASSA-PKCS1-v1_5 signature against a DER encoded DigestInfo.

        Returns:
            True if the signature matches, False on any mismatch, including malformed signatures.
        """
        if len(signature) != self.bsize:
            return False
        try:
            recovered = self.block_op(signature)
            expected = emsa_pkcs1(digest_info, self.bsize)
        except ValueError:
            return False
        return hmac.compare_digest(recovered, expected)

    def to_der(self) -> bytes:
        """Exports the key as a PKCS#1 RSAPublicKey."""
        keydata = rfc8017.RSAPublicKey()
        keydata["modulus"] = self.mod
        keydata["publicExponent"] = self.expo
        return encoder.encode(keydata)

    @classmethod
    def from_der(cls, data: bytes) -> "RSAPubKey":
        """Imports a PKCS#1 RSAPublicKey.

        Raises:
            PyAsn1Error: If the data is not a RSAPublicKey.
            ValueError: If there is trailing data or the numbers are out of range.
        """
        keydata, rest = decoder.decode(data, asn1Spec=rfc8017.RSAPublicKey())
        if rest:
            raise ValueError("Trailing data after RSAPublicKey.")
        pykeyd = localize.encode(keydata)
        return cls(pykeyd["modulus"], pykeyd["publicExponent"])


class RSAPrivKey(RSAKey):
    """A private key, with CRT components and its connected public key.

    Attributes:
        mod: The modulus of the keypair.
        expo: The private exponent of the key.
        pub: The public key of the key.
        p: Private Prime 1.
        q: Private Prime 2.
    """

    def __init__(self,
                 mod: int,
                 pub_exp: int,
                 priv_exp: int,
                 p: int,
                 q: int,
                 exp1: int | None = None,
                 exp2: int | None = None,
                 coeff: int | None = None) -> None:
        super().__init__(mod, priv_exp)
        if p * q != mod:
            raise ValueError("Primes do not match the modulus.")
        self.pub: RSAPubKey = RSAPubKey(mod, pub_exp)
        self.p = p
        self.q = q
        self.exp1 = exp1 if exp1 is not None else priv_exp % (p - 1)
        self.exp2 = exp2 if exp2 is not None else priv_exp % (q - 1)
        self.coeff = coeff if coeff is not None else pow(q, -1, p)

    def c_rsa(self, message: int) -> int:
        """Performs core RSA operation accelerated with CRT. (Decrypt/Sign)

        Raises:
            ValueError: If the message is out of range for the current key.
        """
        if not 0 <= message < self.mod:
            raise ValueError("Message representative must be in range [0, mod-1]")
        m_1 = pow(message, self.exp1, self.p)
        m_2 = pow(message, self.exp2, self.q)
        h = ((m_1 - m_2) * self.coeff) % self.p
        return m_2 + self.q * h

    def dec_raw(self, ciphertext: bytes) -> bytes:
        return self.block_op(ciphertext)

    def dec_pkcs1(self, ciphertext: bytes) -> bytes:
        """Decrypts the message according to RSAES-PKCS1-v1_5.

        Raises:
            ValueError: If the ciphertext is not block-sized or out of range.
            RuntimeError: If the padding is invalid.
        """
        em = self.block_op(ciphertext)
        sep = em.find(b"\x00", 2)
        if em[0:2] != b"\x00\x02" or sep < 10:
            raise RuntimeError("Decryption error.")
        return em[sep + 1:]

    def dec_oaep(self, ciphertext: bytes, label: bytes = b"") -> bytes:
        """Decrypts the message according to RSAES-OAEP, with SHA-1 and MGF1-SHA-1.

        Raises:
            ValueError: If the ciphertext is not block-sized or out of range.
            RuntimeError: If decryption fails.
        """
        hlen = OAEP_HASH().digest_size
        if self.bsize < OAEP_OVERHEAD:
            raise ValueError("Key too short for OAEP.")
        em = self.block_op(ciphertext)
        lh = OAEP_HASH(label).digest()
        valid = em[0:1] == b"\x00"
        mseed = em[1:hlen + 1]
        mdb = em[hlen + 1:]
        seed = xorbytes(mseed, mgf1(mdb, hlen))
        db = xorbytes(mdb, mgf1(seed, self.bsize - hlen - 1))
        if not hmac.compare_digest(db[0:hlen], lh):
            valid = False
        mrkr = None
        for by in range(hlen, len(db)):
            if db[by:by + 1] == b"\x01" and mrkr is None:
                mrkr = by
            if db[by:by + 1] != b"\x00" and mrkr is None:
                valid = False
        if mrkr is None or not valid:
            raise RuntimeError("Decryption error.")
        return db[mrkr + 1:]

    def sign_pkcs1(self, digest_info: bytes) -> bytes:
        """Signs a DER encoded DigestInfo according to RSASSA-PKCS1-v1_5.

        Raises:
            ValueError: If the DigestInfo does not fit the key.
        """
        return self.block_op(emsa_pkcs1(digest_info, self.bsize))

    def to_der(self) -> bytes:
        """Exports the key as a two-prime PKCS#1 RSAPrivateKey."""
        interkey = rfc8017.RSAPrivateKey()
        interkey["version"] = 0
        interkey["modulus"] = self.mod
        interkey["publicExponent"] = self.pub.expo
        interkey["privateExponent"] = self.expo
        interkey["prime1"] = self.p
        interkey["prime2"] = self.q
        interkey["exponent1"] = self.exp1
        interkey["exponent2"] = self.exp2
        interkey["coefficient"] = self.coeff
        return encoder.encode(interkey)

    @classmethod
    def from_der(cls, data: bytes) -> "RSAPrivKey":
        """Imports a two-prime PKCS#1 RSAPrivateKey.

        Raises:
            PyAsn1Error: If the data is not a RSAPrivateKey.
            ValueError: If the key is multi-prime, inconsistent, or followed by trailing data.
        """
        keydata, rest = decoder.decode(data, asn1Spec=rfc8017.RSAPrivateKey())
        if rest:
            raise ValueError("Trailing data after RSAPrivateKey.")
        if keydata["version"] != 0:
            raise ValueError("Multi-prime keys are not supported.")
        pykeyd = localize.encode(keydata)
        return cls(pykeyd["modulus"], pykeyd["publicExponent"], pykeyd["privateExponent"], pykeyd["prime1"],
                   pykeyd["prime2"], pykeyd["exponent1"], pykeyd["exponent2"], pykeyd["coefficient"])
