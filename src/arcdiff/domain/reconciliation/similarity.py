"""Name keys and bigram Dice similarity for fuzzy entity matching."""

from __future__ import annotations

import re
import unicodedata
from collections import Counter

ID_KEY_PREFIX = "id:"

_NON_ALPHANUMERIC = re.compile(r"[^a-z0-9]+")


def normalize_name(value: str) -> str:
    """Lowercase, strip accents and punctuation, collapse whitespace."""

    decomposed = unicodedata.normalize("NFKD", value)
    stripped = "".join(char for char in decomposed if not unicodedata.combining(char))
    return _NON_ALPHANUMERIC.sub(" ", stripped.lower()).strip()


def id_key(source_id: str, fallback: str) -> str:
    return f"{ID_KEY_PREFIX}{source_id}:{fallback}"


def is_id_key(name_key: str) -> bool:
    return name_key.startswith(ID_KEY_PREFIX)


def bigrams(value: str) -> list[str]:
    padded = f" {value} "
    return [padded[index : index + 2] for index in range(len(padded) - 1)]


def dice_similarity(left: str, right: str) -> float:
    """Return the bigram Dice coefficient of two name keys, in ``[0, 1]``.

    Bigrams are taken over the key padded with one space on each side and the
    intersection is a multiset intersection.
    """

    if left == right:
        return 1.0
    if not left or not right:
        return 0.0

    left_bigrams = bigrams(left)
    right_bigrams = bigrams(right)
    overlap = sum((Counter(left_bigrams) & Counter(right_bigrams)).values())
    return (2 * overlap) / (len(left_bigrams) + len(right_bigrams))
