"""
Arcania - Cryptography Module

Every operation that touches randomness or password hashing lives here:
- Secure random source (fixed-width 32-bit draws from the OS CSPRNG)
- Unbiased bounded selection (rejection sampling, no modulo bias)
- Salt generation
- Client-side auth hash derivation (scrypt)
- Base64 helpers for the wire format

Everything else in the package (generators, auth flow) is built on top of
random_below() and derive_auth_hash().

Modulo bias in one picture (R = 10, n = 3):
    raw draw:  0 1 2 3 4 5 6 7 8 9
    v mod 3:   0 1 2 0 1 2 0 1 2 0   <- 0 appears 4 times, 1 and 2 only 3
    limit = (10 // 3) * 3 = 9, so the draw 9 is thrown away and redrawn.
"""

import os
import hmac
import base64
import binascii
from typing import Iterable, Optional

from cryptography.hazmat.primitives.kdf.scrypt import Scrypt


# =============================================================================
# Configuration
# =============================================================================

RANDOM_RANGE = 2**32     # R: size of one draw from the system source
SALT_SIZE = 16           # 128-bit salts
AUTH_HASH_SIZE = 32      # 256-bit derived auth hash

# scrypt parameters (same cost profile as a vault KDF, ~250ms)
SCRYPT_N = 2**17
SCRYPT_R = 8
SCRYPT_P = 1


# =============================================================================
# Errors
# =============================================================================

class InvalidArgument(ValueError):
    """Bad bound, length or count. Raised before any randomness is used."""


class RandomSourceUnavailable(RuntimeError):
    """The underlying random source could not supply a value."""


# =============================================================================
# Random Sources
# =============================================================================

class RandomSource:
    """
    Capability that yields uniformly distributed integers in [0, range_size).

    Subclasses implement next_u32(). The name follows the conventional
    32-bit width; range_size can be shrunk for synthetic test sources.
    """

    range_size = RANDOM_RANGE

    def next_u32(self) -> int:
        raise NotImplementedError


class SystemRandomSource(RandomSource):
    """
    32-bit draws from os.urandom (the OS CSPRNG).

    Holds no state of its own, so one instance can be shared between threads.
    """

    def next_u32(self) -> int:
        try:
            raw = os.urandom(4)
        except (OSError, NotImplementedError) as e:
            raise RandomSourceUnavailable(f"Secure randomness unavailable: {e}") from e
        return int.from_bytes(raw, "big")


class FixedSequenceSource(RandomSource):
    """
    Replays a fixed list of draws. Used for deterministic tests and demos.

    Running out of values raises RandomSourceUnavailable, the same way an
    exhausted entropy pool would surface. Not thread-safe.
    """

    def __init__(self, values: Iterable[int], range_size: int = RANDOM_RANGE):
        self.range_size = range_size
        self._values = list(values)
        self.draws = 0

        for v in self._values:
            if not 0 <= v < range_size:
                raise InvalidArgument(f"Value {v} outside [0, {range_size})")

    def next_u32(self) -> int:
        if self.draws >= len(self._values):
            raise RandomSourceUnavailable(
                f"Fixed sequence exhausted after {self.draws} draws"
            )
        value = self._values[self.draws]
        self.draws += 1
        return value


_system_source = SystemRandomSource()


# =============================================================================
# Bounded Selection
# =============================================================================

def random_below(n: int, source: Optional[RandomSource] = None) -> int:
    """
    Return a uniformly distributed integer in [0, n).

    Rejection sampling:
        limit = (R // n) * n        largest multiple of n not above R
        draw v until v < limit      every kept residue has R // n preimages
        return v % n

    Termination is almost-sure but not bounded: each draw is rejected with
    probability (R mod n) / R < n / R, so the expected number of draws is
    below 2 for any n <= R. No retry cap is applied.

    Args:
        n: Exclusive upper bound, 1 <= n <= source.range_size
        source: Random source (defaults to the system CSPRNG)

    Returns:
        Integer in [0, n)

    Raises:
        InvalidArgument: n is not an int or out of range (no draw made)
        RandomSourceUnavailable: the source failed (not retried)
    """
    if source is None:
        source = _system_source
    r = source.range_size

    if isinstance(n, bool) or not isinstance(n, int):
        raise InvalidArgument(f"Bound must be an integer, got {n!r}")
    if n <= 0:
        raise InvalidArgument(f"Bound must be positive, got {n}")
    if n > r:
        raise InvalidArgument(f"Bound {n} exceeds source range {r}")

    if n == 1:
        return 0

    limit = (r // n) * n
    while True:
        v = source.next_u32()
        if v < limit:
            return v % n


def check_count(value: int, name: str) -> None:
    """Validate a non-negative length/count argument."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidArgument(f"{name} must be an integer, got {value!r}")
    if value < 0:
        raise InvalidArgument(f"{name} must be >= 0, got {value}")


# =============================================================================
# Salts and Auth Hashes
# =============================================================================

def generate_salt(size: int = SALT_SIZE, source: Optional[RandomSource] = None) -> bytes:
    """
    Generate a random salt, one random_below(256) per byte.

    Salts are not secret, but must be unique per credential.

    Args:
        size: Number of bytes (default 16)
        source: Random source (defaults to the system CSPRNG)

    Returns:
        size random bytes
    """
    check_count(size, "Salt size")
    return bytes(random_below(256, source) for _ in range(size))


def derive_auth_hash(password: str, salt: bytes, n: int = SCRYPT_N) -> bytes:
    """
    Derive the auth hash of a password with scrypt.

    This is what gets sent to the server instead of the password. The server
    only ever sees (salt, hash) pairs.

    Args:
        password: Account or master password
        salt: Salt bytes (see generate_salt)
        n: scrypt CPU/memory cost, power of 2 (lower only in tests)

    Returns:
        32-byte hash
    """
    kdf = Scrypt(
        salt=salt,
        length=AUTH_HASH_SIZE,
        n=n,
        r=SCRYPT_R,
        p=SCRYPT_P,
    )
    return kdf.derive(password.encode('utf-8'))


# =============================================================================
# Helpers
# =============================================================================

def to_base64(data: bytes) -> str:
    """Encode bytes for the JSON wire format."""
    return base64.b64encode(data).decode('ascii')


def from_base64(text: str) -> bytes:
    """Decode a base64 field from the wire, rejecting malformed input."""
    try:
        return base64.b64decode(text, validate=True)
    except (binascii.Error, TypeError, ValueError) as e:
        raise InvalidArgument(f"Invalid base64 value: {e}") from e


def constant_compare(a: bytes, b: bytes) -> bool:
    """Compare two byte strings in constant time (hmac.compare_digest)."""
    return hmac.compare_digest(a, b)
