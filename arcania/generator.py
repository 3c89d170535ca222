"""
Arcania - Generator Module

Three generators, all thin policies over crypto.random_below():
- Passwords: each character drawn uniformly from a composed charset
- Passphrases: words alternating adjective / noun
- Usernames: <Adjective><Noun><0-99>, low entropy, not for secrets

generate() maps a GenerationRequest to its output so a UI only has to
collect options and display the result.
"""

from dataclasses import dataclass, replace
from typing import Optional, Tuple

from .crypto import InvalidArgument, RandomSource, check_count, random_below


# =============================================================================
# Configuration
# =============================================================================

DEFAULT_PASSWORD_LENGTH = 16
DEFAULT_WORD_COUNT = 4
DEFAULT_SEPARATOR = "-"
LABEL_NUMBER_BOUND = 100     # username suffix is 0-99

UPPERCASE = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
LOWERCASE = "abcdefghijklmnopqrstuvwxyz"
DIGITS = "0123456789"
SYMBOLS = "!@#$%^&*()_+-=[]{}|;:,.<>?"

ADJECTIVES = (
    "Ancient", "Bright", "Clever", "Daring", "Eager", "Flying", "Golden",
    "Happy", "Iron", "Jolly", "Keen", "Lucky", "Magic", "Noble", "Open",
    "Proud", "Quick", "Royal", "Silent", "True", "Useful", "Vivid", "Wise",
    "Young", "Zesty",
)

NOUNS = (
    "Castle", "Dragon", "Eagle", "Forest", "Griffin", "Harbor", "Island",
    "Jungle", "Key", "Lion", "Mountain", "Nectar", "Ocean", "Phoenix",
    "Quest", "River", "Shield", "Tower", "Unicorn", "Viper", "Willow",
    "Yeti", "Zephyr",
)

KINDS = ("password", "passphrase", "username")


# =============================================================================
# Passwords
# =============================================================================

def build_charset(
    uppercase: bool = True,
    lowercase: bool = True,
    digits: bool = True,
    symbols: bool = True
) -> Tuple[str, bool]:
    """
    Concatenate the selected character classes in canonical order.

    Order: uppercase, lowercase, digits, symbols. The order only matters for
    reproducing tests; every position is drawn over the whole set anyway.

    Fallback: with no class selected the charset is LOWERCASE and the second
    element of the result is True, so the caller can record that lowercase
    was switched back on.

    Returns:
        (charset, fell_back)
    """
    charset = ""
    if uppercase:
        charset += UPPERCASE
    if lowercase:
        charset += LOWERCASE
    if digits:
        charset += DIGITS
    if symbols:
        charset += SYMBOLS

    if not charset:
        return LOWERCASE, True
    return charset, False


def generate_password(
    length: int = DEFAULT_PASSWORD_LENGTH,
    uppercase: bool = True,
    lowercase: bool = True,
    digits: bool = True,
    symbols: bool = True,
    source: Optional[RandomSource] = None
) -> Tuple[str, bool]:
    """
    Generate a random password of exactly `length` characters.

    Positions are independent; repeated characters are expected.

    Args:
        length: Number of characters (0 gives "")
        uppercase, lowercase, digits, symbols: Character classes to include
        source: Random source (defaults to the system CSPRNG)

    Returns:
        (password, fell_back) - fell_back is True if no class was selected
        and lowercase was used instead

    Raises:
        InvalidArgument: negative or non-integer length
    """
    check_count(length, "Length")
    charset, fell_back = build_charset(uppercase, lowercase, digits, symbols)
    password = "".join(charset[random_below(len(charset), source)] for _ in range(length))
    return password, fell_back


# =============================================================================
# Passphrases
# =============================================================================

def capitalize_word(word: str) -> str:
    """First character upper-cased, the rest lower-cased. Idempotent."""
    return word[:1].upper() + word[1:].lower()


def generate_passphrase(
    word_count: int = DEFAULT_WORD_COUNT,
    separator: Optional[str] = None,
    capitalize: bool = False,
    source: Optional[RandomSource] = None
) -> str:
    """
    Generate a passphrase alternating adjectives and nouns.

    Word i comes from ADJECTIVES when i is even, NOUNS when odd. Casing is
    normalized either way, so output never depends on how the word tables
    happen to be stored.

    Args:
        word_count: Number of words (0 gives "")
        separator: Joiner; None means "-", "" glues the words together
        capitalize: "Word" casing if True, "word" otherwise
        source: Random source (defaults to the system CSPRNG)

    Returns:
        Passphrase string
    """
    check_count(word_count, "Word count")
    if separator is None:
        separator = DEFAULT_SEPARATOR

    words = []
    for i in range(word_count):
        word_list = ADJECTIVES if i % 2 == 0 else NOUNS
        word = word_list[random_below(len(word_list), source)]
        words.append(capitalize_word(word) if capitalize else word.lower())

    return separator.join(words)


# =============================================================================
# Usernames
# =============================================================================

def generate_username(source: Optional[RandomSource] = None) -> str:
    """
    Generate a username like "SilentHarbor42".

    Words are used as stored (no casing transform). Draw order is adjective,
    noun, number.
    """
    adjective = ADJECTIVES[random_below(len(ADJECTIVES), source)]
    noun = NOUNS[random_below(len(NOUNS), source)]
    number = random_below(LABEL_NUMBER_BOUND, source)
    return f"{adjective}{noun}{number}"


# =============================================================================
# Request Dispatch
# =============================================================================

@dataclass(frozen=True)
class GenerationRequest:
    """Options for one generate() call. Fields not used by `kind` are ignored."""

    kind: str = "password"
    length: int = DEFAULT_PASSWORD_LENGTH
    uppercase: bool = True
    lowercase: bool = True
    digits: bool = True
    symbols: bool = True
    word_count: int = DEFAULT_WORD_COUNT
    separator: Optional[str] = None
    capitalize: bool = False


def generate(
    request: GenerationRequest,
    source: Optional[RandomSource] = None
) -> Tuple[str, GenerationRequest]:
    """
    Produce the output for a request.

    Returns:
        (output, effective_request) - effective_request equals `request`
        except when the password charset fell back to lowercase, in which
        case lowercase is set to True

    Raises:
        InvalidArgument: unknown kind or bad length/count
    """
    if request.kind == "password":
        password, fell_back = generate_password(
            request.length, request.uppercase, request.lowercase,
            request.digits, request.symbols, source
        )
        if fell_back:
            return password, replace(request, lowercase=True)
        return password, request

    if request.kind == "passphrase":
        phrase = generate_passphrase(
            request.word_count, request.separator, request.capitalize, source
        )
        return phrase, request

    if request.kind == "username":
        return generate_username(source), request

    raise InvalidArgument(f"Unknown generator kind: {request.kind!r} (expected one of {KINDS})")
