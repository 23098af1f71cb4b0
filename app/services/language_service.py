"""Keyword heuristics for telling apart the languages the bot answers in.

Romanized Indic text is ambiguous across languages, so detection is a fixed
priority list of patterns: the first pattern that matches decides the
language. There is no scoring across languages and code-switched text is
classified by whichever pattern comes first.
"""

import re
from types import MappingProxyType

DEFAULT_LANGUAGE = "english"

# Checked in this order, first match wins.
LANGUAGE_PATTERNS: tuple[tuple[str, re.Pattern], ...] = (
    (
        "hindi",
        re.compile(r"[अ-ह]|kya|hai|main|aap|kaise|haan|nahi|dhanyawad|namaste|madad", re.IGNORECASE),
    ),
    ("urdu", re.compile(r"assalam|alaikum|adab|shukria|alvida|aap|kaise|madad", re.IGNORECASE)),
    ("punjabi", re.compile(r"sat sri akal|kiddan|tusi|kaun|chahidi", re.IGNORECASE)),
    ("bengali", re.compile(r"namaskar|kemon|achen|dhonnobad|apni|sahajyo", re.IGNORECASE)),
    ("tamil", re.compile(r"vanakkam|eppadi|irukkireenga|nandri|neenga|uthavi", re.IGNORECASE)),
    ("telugu", re.compile(r"ela unnaru|dhanyawadalu|meeru|evaru|sahayam", re.IGNORECASE)),
    ("gujarati", re.compile(r"kem cho|aabhar|aavjo|tame|madad joiye", re.IGNORECASE)),
    ("marathi", re.compile(r"kase aahat|tumhi kon|madad pahije", re.IGNORECASE)),
    ("kannada", re.compile(r"hegiddira|dhanyawadagalu|neevu yaaru|sahaya beku", re.IGNORECASE)),
    ("malayalam", re.compile(r"engane undu|ningal aaraanu|sahayam venam", re.IGNORECASE)),
)

SUPPORTED_LANGUAGES: tuple[str, ...] = tuple(lang for lang, _ in LANGUAGE_PATTERNS) + (DEFAULT_LANGUAGE,)

# Categories that are considered relevant for every detected language.
CROSS_LANGUAGE_CATEGORIES = frozenset({"common_multilingual", "technical_multilingual"})

LANGUAGE_INSTRUCTIONS = MappingProxyType(
    {
        "hindi": "Please respond in Hindi (Devanagari script or Roman Hindi). Be helpful and friendly.",
        "urdu": "Please respond in Urdu (Roman Urdu is fine). Be helpful and respectful.",
        "punjabi": "Please respond in Punjabi (Roman Punjabi is fine). Be helpful and warm.",
        "bengali": "Please respond in Bengali (Roman Bengali is fine). Be helpful and respectful.",
        "tamil": "Please respond in Tamil (Roman Tamil is fine). Be helpful and respectful.",
        "telugu": "Please respond in Telugu (Roman Telugu is fine). Be helpful and respectful.",
        "gujarati": "Please respond in Gujarati (Roman Gujarati is fine). Be helpful and respectful.",
        "marathi": "Please respond in Marathi (Roman Marathi is fine). Be helpful and respectful.",
        "kannada": "Please respond in Kannada (Roman Kannada is fine). Be helpful and respectful.",
        "malayalam": "Please respond in Malayalam (Roman Malayalam is fine). Be helpful and respectful.",
        "english": "Please respond in English. Be helpful and friendly.",
    }
)

FALLBACK_RESPONSES = MappingProxyType(
    {
        "hindi": "Maaf kijiye, mere paas is sawal ka jawab nahi hai. Kya aap kuch aur puch sakte hain?",
        "urdu": "Maaf kijiye, mere paas is sawal ka jawab nahi hai. Kya aap kuch aur pooch sakte hain?",
        "punjabi": "Maaf karo, mere kol is sawal da jawab nahi hai. Kuch hor puch sakte ho?",
        "bengali": "Khoma korben, amar ei proshner uttor nei. Apni onno kichu jigges korte paren?",
        "tamil": "Mannikkavum, enakku indha kelvikku badhil theriyaadhu. Vera edhaavathu kekkalaam?",
        "telugu": "Kshaminchandi, naku ee prashnaku jawabhu thelidhu. Vera emaina adagavachu?",
        "gujarati": "Maaf karo, mare paase aa prashnano jawab nathi. Kainch hor puchi shakao?",
        "marathi": "Maaf kara, majhyakade ya prashnaacha uttar nahi. Dusre kahi vicharu shakta?",
        "kannada": "Kshamisi, nanage ii prashnege uttara gottilla. Bere yenu kelabahudha?",
        "malayalam": "Kshemikkavu, enikku ee chodyathinu utharam ariyilla. Vere enthenkilum chodyikkam?",
        "english": "I don't have an answer for that right now. Could you try asking something else?",
    }
)

PARTIAL_MATCH_NOTES = MappingProxyType(
    {
        "hindi": (
            "\n\n(Note: Ye partial match hai mere knowledge base se. Main AI services temporarily "
            "unavailable hain, isliye ye response de raha hun.)"
        ),
        "urdu": (
            "\n\n(Note: Ye partial match hai mere knowledge base se. Main AI services temporarily "
            "unavailable hain, isliye ye response de raha hun.)"
        ),
        "punjabi": (
            "\n\n(Note: Eh partial match hai mere knowledge base ton. Main AI services temporarily "
            "unavailable ne, isliye eh response de raha han.)"
        ),
        "bengali": (
            "\n\n(Note: Eta amar knowledge base theke partial match. Main AI services temporarily "
            "unavailable, tai eta response dichi.)"
        ),
        "tamil": (
            "\n\n(Note: Idhu en knowledge base la irundhu partial match. Main AI services temporarily "
            "unavailable, adhanaala idha response kudukiren.)"
        ),
        "english": (
            "\n\n(Note: This is a partial match from my knowledge base. Main AI services are "
            "temporarily unavailable, so I'm providing this response.)"
        ),
    }
)


def detect_language(message: str) -> str:
    """Return the language tag of the first matching pattern, or english."""
    if not message:
        return DEFAULT_LANGUAGE
    for language, pattern in LANGUAGE_PATTERNS:
        if pattern.search(message):
            return language
    return DEFAULT_LANGUAGE


def is_language_relevant(category: str | None, tags: list[str] | None, language: str) -> bool:
    """True when an entry belongs to the detected language or to a cross-language category."""
    if category == language or category in CROSS_LANGUAGE_CATEGORIES:
        return True
    return language in (tags or [])


def get_language_instruction(language: str) -> str:
    return LANGUAGE_INSTRUCTIONS.get(language, LANGUAGE_INSTRUCTIONS[DEFAULT_LANGUAGE])


def get_default_fallback(language: str) -> str:
    return FALLBACK_RESPONSES.get(language, FALLBACK_RESPONSES[DEFAULT_LANGUAGE])


def get_partial_match_note(language: str | None) -> str:
    return PARTIAL_MATCH_NOTES.get(language or DEFAULT_LANGUAGE, PARTIAL_MATCH_NOTES[DEFAULT_LANGUAGE])
