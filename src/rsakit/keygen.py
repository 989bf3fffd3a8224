"""Private key generation for the software provider.

The provider asks for one thing: a fresh two-prime RSAPrivKey of a given modulus size. This module validates the
request, draws two probable primes of half that size and derives the private exponent.

Sizes below MINIMUM_KEY_SIZE are refused, and anything below SECURE_KEY_SIZE is generated with a RuntimeWarning.

Typical usage example:

    priv = generate_private_key(2048)
    pub = priv.pub
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import functools
import logging
import math
import secrets
import warnings

from rsakit.primitives import RSAPrivKey

log = logging.getLogger(__name__)

DEFAULT_KEY_SIZE: int = 2048
DEFAULT_PUBLIC_EXPONENT: int = 65537
MINIMUM_KEY_SIZE: int = 512
SECURE_KEY_SIZE: int = 2048

SMALL_PRIME_BOUND: int = 10000
# Miller-Rabin rounds by prime size in bits, after FIPS 186-5 Appendix B.3.
MR_ROUNDS: tuple[tuple[int, int], ...] = ((256, 40), (512, 40), (768, 56), (1024, 56), (1536, 64), (2048, 70))
MR_ROUNDS_LARGE: int = 74
# |p - q| must exceed 2 ** (prime_bits - PRIME_SEPARATION_BITS).
PRIME_SEPARATION_BITS: int = 100


@functools.cache
def _small_primes() -> tuple[int, ...]:
    """The primes up to SMALL_PRIME_BOUND, sieved once."""
    marks = bytearray([1]) * (SMALL_PRIME_BOUND + 1)
    marks[0] = marks[1] = 0
    for i in range(2, math.isqrt(SMALL_PRIME_BOUND) + 1):
        if marks[i]:
            marks[i * i::i] = bytes(len(range(i * i, SMALL_PRIME_BOUND + 1, i)))
    return tuple(no for no, mark in enumerate(marks) if mark)


def _mr_rounds(bits: int) -> int:
    for limit, rounds in MR_ROUNDS:
        if bits <= limit:
            return rounds
    return MR_ROUNDS_LARGE


def _miller_rabin(candidate: int, rounds: int) -> bool:
    """Miller-Rabin test of an odd candidate greater than 3.

    Returns:
        False if a witness of compositeness was found, True otherwise.
    """
    odd, twos = candidate - 1, 0
    while not odd & 1:
        odd >>= 1
        twos += 1
    for _ in range(rounds):
        z = pow(secrets.randbelow(candidate - 3) + 2, odd, candidate)
        if z in (1, candidate - 1):
            continue
        for _ in range(twos - 1):
            z = z * z % candidate
            if z == candidate - 1:
                break
        else:
            return False
    return True


def _is_probable_prime(candidate: int) -> bool:
    """Trial division by the small primes, then Miller-Rabin for whatever survives."""
    if candidate < 2:
        return False
    for prime in _small_primes():
        if candidate % prime == 0:
            return candidate == prime
    if candidate <= SMALL_PRIME_BOUND**2:
        return True
    return _miller_rabin(candidate, _mr_rounds(candidate.bit_length()))


def _random_prime(bits: int, pub_exp: int, other: int | None = None) -> int:
    """Draws a probable prime usable as an RSA factor.

    Args:
        bits: Exact bit length of the prime. The top two bits are set so that two such primes give a modulus of
            exactly 2 * bits.
        pub_exp: The public exponent. The prime minus one must be coprime to it.
        other: The first factor, when drawing the second. Candidates too close to it are skipped.

    Returns:
        The probable prime.

    Raises:
        RuntimeError: If no prime turns up in a generous number of draws.
    """
    fixed = (3 << (bits - 2)) | 1
    draws = bits * 10
    for _ in range(draws):
        candidate = secrets.randbits(bits) | fixed
        if other is not None and abs(candidate - other) <= 1 << (bits - PRIME_SEPARATION_BITS):
            continue
        if math.gcd(candidate - 1, pub_exp) == 1 and _is_probable_prime(candidate):
            return candidate
    raise RuntimeError(f"No {bits}-bit prime found in {draws} draws. Check system random number generator.")


def generate_private_key(size_in_bits: int, pub_exp: int = DEFAULT_PUBLIC_EXPONENT) -> RSAPrivKey:
    """Generates a two-prime RSA private key.

    Args:
        size_in_bits: The modulus size. Even, and at least MINIMUM_KEY_SIZE.
        pub_exp: The public exponent. Odd, and in range `(2**16, 2**256)` exclusive.

    Returns:
        The private key, carrying its public key and CRT components.

    Raises:
        ValueError: If `size_in_bits` or `pub_exp` do not meet requirements.
    """
    if size_in_bits < MINIMUM_KEY_SIZE or size_in_bits % 2:
        raise ValueError(f"Key size must be an even number of at least {MINIMUM_KEY_SIZE} bits, got {size_in_bits}.")
    if not pub_exp & 1 or not 2**16 < pub_exp < 2**256:
        raise ValueError("Public exponent does not meet requirements.")
    if size_in_bits < SECURE_KEY_SIZE:
        warnings.warn(f"{size_in_bits}-bit keys are unsecure! Please use with care.", RuntimeWarning, stacklevel=3)
    log.debug("Generating %d-bit key with public exponent %d.", size_in_bits, pub_exp)
    p = _random_prime(size_in_bits // 2, pub_exp)
    q = _random_prime(size_in_bits // 2, pub_exp, p)
    d = pow(pub_exp, -1, math.lcm(p - 1, q - 1))
    return RSAPrivKey(p * q, pub_exp, d, p, q)
