import re
from typing import Optional
from rapidfuzz.distance import Levenshtein

_NON_ALNUM = re.compile(r"[^a-z0-9\s]")
_WHITESPACE = re.compile(r"\s+")


def normalize_title(title: str) -> str:
    """Lowercase, drop punctuation and collapse whitespace."""
    text = _NON_ALNUM.sub("", title.lower())
    return _WHITESPACE.sub(" ", text).strip()


def title_similarity(a: Optional[str], b: Optional[str]) -> float:
    """
    Score how similar two movie titles are.

    Args:
        a (str): First title, e.g. the title detected in a CSV row.
        b (str): Second title, e.g. a catalog candidate's title.

    Returns:
        float: 1.0 for identical normalized titles, 0.8 scaled by the length
               ratio when one contains the other, otherwise one minus the
               normalized edit distance. 0 when either title is missing.
    """
    if not a or not b:
        return 0.0

    norm_a = normalize_title(a)
    norm_b = normalize_title(b)

    if norm_a == norm_b:
        return 1.0

    if norm_a in norm_b or norm_b in norm_a:
        shorter, longer = sorted((len(norm_a), len(norm_b)))
        return 0.8 * (shorter / longer)

    max_len = max(len(norm_a), len(norm_b))
    distance = Levenshtein.distance(norm_a, norm_b)
    return 1 - distance / max_len
