import re
from types import MappingProxyType

EXACT_SCORE = 1.0
CONTAINMENT_SCORE = 0.9
WORD_EXACT_WEIGHT = 1.0
WORD_PARTIAL_WEIGHT = 0.7
WORD_PHONETIC_WEIGHT = 0.6

# Punctuation stripped before comparison, including Devanagari danda marks.
_PUNCTUATION_RE = re.compile(r"[।|॥?!.,;:]")
_WHITESPACE_RE = re.compile(r"\s+")

# Canonical spelling -> common romanized variants.
PHONETIC_VARIANTS = MappingProxyType(
    {
        # Hindi/Urdu
        "kya": frozenset({"kia", "kiya"}),
        "hai": frozenset({"he", "hain"}),
        "aap": frozenset({"ap", "aapko"}),
        "main": frozenset({"mai", "mein"}),
        "kaise": frozenset({"kese", "kaese"}),
        "haan": frozenset({"han", "ha"}),
        "nahi": frozenset({"nahin", "nai"}),
        # English
        "you": frozenset({"u", "your"}),
        "are": frozenset({"r", "ur"}),
        "what": frozenset({"wat", "wot"}),
        "how": frozenset({"hw", "haw"}),
        "hello": frozenset({"helo", "hllo"}),
        "help": frozenset({"halp", "hlp"}),
    }
)


def normalize_text(text: str | None) -> str:
    """Lowercase, drop punctuation and collapse whitespace."""
    if not text:
        return ""
    normalized = _PUNCTUATION_RE.sub("", text.lower().strip())
    return _WHITESPACE_RE.sub(" ", normalized).strip()


def tokenize(text: str) -> list[str]:
    return [word for word in text.split(" ") if len(word) > 1]


def is_phonetically_similar(word1: str, word2: str) -> bool:
    """Check the variant table in both directions, or both words as variants of one spelling."""
    for canonical, variants in PHONETIC_VARIANTS.items():
        if word1 == canonical and word2 in variants:
            return True
        if word2 == canonical and word1 in variants:
            return True
        if word1 in variants and word2 in variants:
            return True
    return False


def _word_weight(word1: str, words2: list[str]) -> float:
    # First candidate that matches at any tier decides the weight.
    for word2 in words2:
        if word1 == word2:
            return WORD_EXACT_WEIGHT
        if word1 in word2 or word2 in word1:
            return WORD_PARTIAL_WEIGHT
        if is_phonetically_similar(word1, word2):
            return WORD_PHONETIC_WEIGHT
    return 0.0


def calculate_similarity(text1: str, text2: str) -> float:
    """
    Score how closely two short phrases match, between 0 and 1.

    Tiers, highest first:
    - identical after normalization: 1.0
    - one phrase contains the other: 0.9
    - word overlap: exact words count 1.0, substrings 0.7 and known
      spelling variants 0.6, divided by the longer phrase's word count
    """
    normalized1 = normalize_text(text1)
    normalized2 = normalize_text(text2)

    if not normalized1 or not normalized2:
        return 0.0

    if normalized1 == normalized2:
        return EXACT_SCORE

    if normalized2 in normalized1 or normalized1 in normalized2:
        return CONTAINMENT_SCORE

    words1 = tokenize(normalized1)
    words2 = tokenize(normalized2)
    if not words1 or not words2:
        return 0.0

    matches = sum(_word_weight(word1, words2) for word1 in words1)
    return matches / max(len(words1), len(words2))
