import logging
import re
from typing import Optional

import phonenumbers

from imenik_scraper.utils import config

log = logging.getLogger(__name__)

# Prepositions and conjunctions that stay lowercase inside a street name.
CROATIAN_LOWERCASE_WORDS = {"i", "u", "na", "kod", "do", "od", "za", "iz", "s", "sa", "k", "ka"}
DIRECTIONAL_WORDS = {"sjever", "jug", "istok", "zapad", "sjeverni", "južni", "istočni", "zapadni"}

WHITESPACE_REGEX = re.compile(r"\s+")


def _capitalize(word: str) -> str:
    if not word:
        return ""
    return word[0].upper() + word[1:].lower()


def normalize_name(name: str) -> str:
    """
    Title-cases a person's name word by word, e.g. 'IVAN HORVAT' -> 'Ivan Horvat'.
    Splits on single spaces only, so repeated spaces survive as empty segments.
    """
    return " ".join(_capitalize(word) for word in name.split(" "))


def normalize_city(city: str) -> str:
    """City lines follow the same casing rule as names."""
    return normalize_name(city)


def normalize_street(street: str) -> str:
    """
    Title-cases a street name while keeping Croatian prepositions, conjunctions
    and directional words lowercase when they are not the first word.
    A word following a hyphenated word is always capitalized.
    """
    if not street:
        return ""

    words = street.split(" ")
    normalized = []
    for index, word in enumerate(words):
        if not word:
            normalized.append("")
            continue

        lowered = word.lower()
        if index == 0 or words[index - 1].endswith("-"):
            normalized.append(_capitalize(word))
        elif lowered in CROATIAN_LOWERCASE_WORDS or lowered in DIRECTIONAL_WORDS:
            normalized.append(lowered)
        else:
            normalized.append(_capitalize(word))
    return " ".join(normalized)


def clean_phone_number(phone_str: str) -> str:
    return WHITESPACE_REGEX.sub("", phone_str)


def is_mobile_number(phone_str: str) -> bool:
    return clean_phone_number(phone_str).startswith(config.MOBILE_PREFIX)


def normalize_phone_number(phone_str: str) -> Optional[str]:
    """
    Normalizes a Croatian phone number to E.164 format.
    Returns None if the number is invalid.
    """
    if not phone_str:
        return None

    try:
        parsed_number = phonenumbers.parse(clean_phone_number(phone_str), "HR")
        if phonenumbers.is_valid_number(parsed_number):
            return phonenumbers.format_number(parsed_number, phonenumbers.PhoneNumberFormat.E164)
    except phonenumbers.phonenumberutil.NumberParseException:
        log.warning(f"Could not parse phone number: {phone_str}", exc_info=False)
    return None
