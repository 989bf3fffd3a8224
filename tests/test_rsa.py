# pylint: disable=missing-module-docstring,redefined-outer-name
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import hashlib
import pathlib

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import padding
import pytest

import rsakit
from rsakit import DigestAlgorithm
from rsakit import DomainError
from rsakit import ErrorKind
from rsakit import KeyClass
from rsakit import KeyHandle
from rsakit import Padding
from rsakit import ProviderError
from rsakit import SoftwareProvider

test_message = b"RSATests 2016"
standard_payload = "The quick brown fox jumps over the lazy dog1234567890!@#$%^&*()-_=+[{}];:\\|<>,./?~`'\""
location = pathlib.Path(__file__).parent
with open(location / "data" / "openssl_2048", "rb") as f:
    template_key = serialization.load_pem_private_key(f.read(), None)
oaep = padding.OAEP(mgf=padding.MGF1(algorithm=hashes.SHA1()), algorithm=hashes.SHA1(), label=None)
crypto_paddings = {Padding.PKCS1: padding.PKCS1v15(), Padding.OAEP: oaep}


@pytest.fixture
def provider() -> SoftwareProvider:
    return SoftwareProvider()


@pytest.fixture
def keypair(provider) -> rsakit.KeyPair:
    with open(location / "data" / "openssl_2048", "r", encoding="ascii") as fi:
        priv = KeyHandle.import_pem(fi.read(), KeyClass.PRIVATE, provider)
    with open(location / "data" / "openssl_2048.pub", "r", encoding="ascii") as fi:
        pub = KeyHandle.import_pem(fi.read(), KeyClass.PUBLIC, provider)
    return rsakit.KeyPair(pub, priv)


@pytest.fixture(scope="module")
def generated() -> rsakit.KeyPair:
    return rsakit.generate_key_pair(2048)


@pytest.fixture(params=list(DigestAlgorithm))
def hashf(request) -> DigestAlgorithm:
    return request.param


@pytest.mark.parametrize("pad", list(Padding))
def test_encrypt_decrypt(generated, pad):
    ciphtext = rsakit.encrypt(test_message, generated.public, pad)
    assert len(ciphtext) == 256
    cleartext = rsakit.decrypt(ciphtext, generated.private, pad)
    if pad is Padding.NONE:
        cleartext = cleartext.lstrip(b"\x00")
    assert cleartext == test_message


def test_encrypt_default_pkcs1(keypair):
    ciphtext = rsakit.encrypt(test_message, keypair.public)
    assert template_key.decrypt(ciphtext, padding.PKCS1v15()) == test_message


@pytest.mark.parametrize("pad", [Padding.PKCS1, Padding.OAEP])
def test_encrypt_interop(keypair, pad):
    ciphtext = rsakit.encrypt(test_message, keypair.public, pad)
    assert template_key.decrypt(ciphtext, crypto_paddings[pad]) == test_message


@pytest.mark.parametrize("pad", [Padding.PKCS1, Padding.OAEP])
def test_decrypt_interop(keypair, pad):
    ciphtext = template_key.public_key().encrypt(test_message, crypto_paddings[pad])
    assert rsakit.decrypt(ciphtext, keypair.private, pad) == test_message


@pytest.mark.parametrize("pad", ["pkcs1", "OAEP", "None"])
def test_padding_names(keypair, pad):
    ciphtext = rsakit.encrypt(test_message, keypair.public, pad)
    assert rsakit.decrypt(ciphtext, keypair.private, pad).endswith(test_message)


@pytest.mark.parametrize("pad,limit", [(Padding.PKCS1, 245), (Padding.OAEP, 214), (Padding.NONE, 256)])
def test_encrypt_oversize(keypair, pad, limit):
    rsakit.encrypt(b"\x00" * limit, keypair.public, pad)
    with pytest.raises(ProviderError) as exc:
        rsakit.encrypt(b"\x00" * (limit + 1), keypair.public, pad)
    assert exc.value.kind is ErrorKind.INVALID_PARAMETER
    assert exc.value.code == -50


def test_encrypt_raw_out_of_range(keypair):
    with pytest.raises(ProviderError) as exc:
        rsakit.encrypt(b"\xff" * 256, keypair.public, Padding.NONE)
    assert exc.value.kind is ErrorKind.INVALID_PARAMETER


@pytest.mark.parametrize("pad", list(Padding))
@pytest.mark.parametrize("size", [0, 255, 257])
def test_decrypt_wrong_size(keypair, pad, size):
    with pytest.raises(ProviderError) as exc:
        rsakit.decrypt(b"\x01" * size, keypair.private, pad)
    assert exc.value.kind is ErrorKind.INVALID_PARAMETER


@pytest.mark.parametrize("pad", [Padding.PKCS1, Padding.OAEP])
def test_decrypt_bad_padding(keypair, pad):
    with pytest.raises(ProviderError) as exc:
        rsakit.decrypt(b"\x00" * 255 + b"\x01", keypair.private, pad)
    assert exc.value.kind is ErrorKind.DATA_DECODE_ERROR
    assert exc.value.code == -26275


def test_decrypt_needs_private(keypair):
    ciphtext = rsakit.encrypt(test_message, keypair.public)
    with pytest.raises(ProviderError) as exc:
        rsakit.decrypt(ciphtext, keypair.public)
    assert exc.value.kind is ErrorKind.INVALID_PARAMETER


@pytest.mark.parametrize("pad", ["pss", "", None, 3, b"pkcs1"])
def test_unknown_padding(mocker, keypair, provider, pad):
    enc = mocker.spy(provider, "encrypt")
    dec = mocker.spy(provider, "decrypt")
    with pytest.raises(DomainError) as exc:
        rsakit.encrypt(test_message, keypair.public, pad)
    assert exc.value.kind is ErrorKind.INVALID_PARAMETER
    assert exc.value.code == 30
    with pytest.raises(DomainError):
        rsakit.decrypt(b"\x00" * 256, keypair.private, pad)
    enc.assert_not_called()
    dec.assert_not_called()


def test_sign_verify(generated, hashf):
    signature = rsakit.sign(test_message, generated.private, hashf)
    assert len(signature) == 256
    assert rsakit.verify(test_message, generated.public, hashf, signature)


def test_sign_interop(keypair, hashf):
    payload = standard_payload.encode("utf-8")
    signature = rsakit.sign(payload, keypair.private, hashf)
    template_key.public_key().verify(signature, payload, padding.PKCS1v15(), getattr(hashes, hashf.name)())


def test_verify_interop(keypair, hashf):
    payload = standard_payload.encode("utf-8")
    signature = template_key.sign(payload, padding.PKCS1v15(), getattr(hashes, hashf.name)())
    assert rsakit.verify(payload, keypair.public, hashf, signature)
    assert rsakit.verify(payload, keypair.public, hashf.value, signature)


def test_sign_deterministic(keypair):
    assert rsakit.sign(test_message, keypair.private, "SHA-256") == rsakit.sign(test_message, keypair.private,
                                                                                DigestAlgorithm.SHA256)


def test_verify_tampered_signature(keypair, hashf):
    signature = rsakit.sign(test_message, keypair.private, hashf)
    for idx in range(len(signature)):
        tampered = bytearray(signature)
        tampered[idx] ^= 0x01
        assert not rsakit.verify(test_message, keypair.public, hashf, bytes(tampered))


def test_verify_tampered_message(keypair, hashf):
    signature = rsakit.sign(test_message, keypair.private, hashf)
    assert not rsakit.verify(b"RSATests 2017", keypair.public, hashf, signature)
    assert not rsakit.verify(test_message + b"\x00", keypair.public, hashf, signature)


def test_verify_wrong_digest(keypair):
    signature = rsakit.sign(test_message, keypair.private, DigestAlgorithm.SHA256)
    assert not rsakit.verify(test_message, keypair.public, DigestAlgorithm.SHA512, signature)


@pytest.mark.parametrize("signature", [b"", b"\x00", b"\x01" * 255, b"\x01" * 257])
def test_verify_malformed_signature(keypair, signature):
    assert not rsakit.verify(test_message, keypair.public, DigestAlgorithm.SHA1, signature)


@pytest.mark.parametrize("digest", ["md5", "sha3_256", "", None, 256, b"sha256"])
def test_invalid_digest(mocker, keypair, provider, digest):
    sgn = mocker.spy(provider, "raw_sign")
    vrf = mocker.spy(provider, "raw_verify")
    with pytest.raises(DomainError) as exc:
        rsakit.sign(test_message, keypair.private, digest)
    assert exc.value.kind is ErrorKind.INVALID_DIGEST
    assert exc.value.code == 10
    with pytest.raises(DomainError):
        rsakit.verify(test_message, keypair.public, digest, b"\x00" * 256)
    sgn.assert_not_called()
    vrf.assert_not_called()


def test_verify_crypto_mismatch(mocker, keypair, provider):
    mocker.patch.object(provider, "raw_verify", side_effect=ProviderError(-9809))
    assert rsakit.verify(test_message, keypair.public, DigestAlgorithm.SHA256, b"\x00" * 256) is False


@pytest.mark.parametrize("status", [-50, -25300, -4, -1])
def test_verify_other_errors(mocker, keypair, provider, status):
    mocker.patch.object(provider, "raw_verify", side_effect=ProviderError(status))
    with pytest.raises(ProviderError) as exc:
        rsakit.verify(test_message, keypair.public, DigestAlgorithm.SHA256, b"\x00" * 256)
    assert exc.value.code == status


def test_custom_digest_provider(mocker, keypair):
    digests = mocker.Mock()
    digests.hash.return_value = hashlib.sha256(b"Hashed elsewhere").digest()
    signature = rsakit.sign(test_message, keypair.private, DigestAlgorithm.SHA256, digests)
    digests.hash.assert_called_once_with(test_message, DigestAlgorithm.SHA256)
    template_key.public_key().verify(signature, b"Hashed elsewhere", padding.PKCS1v15(), hashes.SHA256())
    assert rsakit.verify(test_message, keypair.public, "sha256", signature, digests)
    assert not rsakit.verify(test_message, keypair.public, "sha256", signature)


def test_digest_too_large_for_key(provider):
    with pytest.warns(RuntimeWarning):
        pair = rsakit.generate_key_pair(512, provider)
    with pytest.raises(ProviderError) as exc:
        rsakit.sign(test_message, pair.private, DigestAlgorithm.SHA512)
    assert exc.value.kind is ErrorKind.INVALID_PARAMETER


@pytest.mark.parametrize("size", [512, 768, 1024, pytest.param(2048, marks=pytest.mark.slow)])
def test_key_size_fidelity(recwarn, size):
    pair = rsakit.generate_key_pair(size)
    assert pair.public.attributes().size_in_bits == size
    assert pair.private.attributes().size_in_bits == size
    assert pair.public.attributes().key_class is KeyClass.PUBLIC
    assert pair.private.attributes().key_class is KeyClass.PRIVATE
    assert len(rsakit.encrypt(test_message, pair.public)) == size // 8
    assert rsakit.decrypt(rsakit.encrypt(test_message, pair.public), pair.private) == test_message
    signature = rsakit.sign(test_message, pair.private, DigestAlgorithm.SHA256)
    assert rsakit.verify(test_message, pair.public, DigestAlgorithm.SHA256, signature)
    if size < 2048:
        assert any(issubclass(w.category, RuntimeWarning) for w in recwarn)


def test_generated_keys_load_in_cryptography(generated):
    loaded = serialization.load_pem_public_key(generated.public.pem().encode("ascii"))
    assert loaded.key_size == 2048
    numbers = loaded.public_numbers()
    assert numbers.e == 65537
    assert rsakit.KeyHandle.import_pem(generated.private.pem(), KeyClass.PRIVATE) == generated.private


def test_generate_default_size(mocker, provider):
    spy = mocker.spy(provider, "generate")
    mocker.patch("rsakit.keygen._random_prime", side_effect=[template_key.private_numbers().p,
                                                             template_key.private_numbers().q])
    pair = rsakit.generate_key_pair(provider=provider)
    spy.assert_called_once_with(2048)
    assert pair.public.raw_bytes() == template_key.public_key().public_bytes(serialization.Encoding.DER,
                                                                            serialization.PublicFormat.PKCS1)


@pytest.mark.parametrize("size", [0, -2048, 256, 511, 1023])
def test_generate_invalid_size(size):
    with pytest.raises(ProviderError) as exc:
        rsakit.generate_key_pair(size)
    assert exc.value.kind is ErrorKind.INVALID_PARAMETER


@pytest.mark.parametrize("handles", [(None, object()), (object(), None), (None, None)])
def test_generate_missing_handle(mocker, provider, handles):
    mocker.patch.object(provider, "generate", return_value=handles)
    with pytest.raises(RuntimeError):
        rsakit.generate_key_pair(1024, provider)


def test_generate_provider_failure(mocker, provider):
    mocker.patch.object(provider, "generate", side_effect=ProviderError(-108))
    with pytest.raises(ProviderError) as exc:
        rsakit.generate_key_pair(2048, provider)
    assert exc.value.kind is ErrorKind.MEMORY_ALLOCATION_FAILED
