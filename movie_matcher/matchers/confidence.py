from typing import List, Optional, Tuple
from movie_matcher.config import MATCHED_THRESHOLD, UNCERTAIN_THRESHOLD
from movie_matcher.models import CatalogCandidate, MatchStatus
from movie_matcher.matchers.similarity import title_similarity


def calculate_confidence(
    candidate: CatalogCandidate,
    title: str,
    year: Optional[int] = None,
    title_weight: float = 0.6,
    exact_year_bonus: float = 0.3,
    near_year_bonus: float = 0.1,
    popularity_cap: float = 0.1,
) -> float:
    """
    Combine title similarity, release year proximity and popularity into a
    single match confidence.

    Args:
        candidate (CatalogCandidate): Catalog movie being scored.
        title (str): Title detected in the CSV row.
        year (Optional[int]): Year detected in the CSV row, if any.
        title_weight (float): Weight of the best title similarity (default=0.6).
        exact_year_bonus (float): Added when release years are equal (default=0.3).
        near_year_bonus (float): Added when release years differ by one (default=0.1).
        popularity_cap (float): Upper bound of the popularity tie-breaker (default=0.1).

    Returns:
        float: Confidence in [0, 1].
    """
    title_score = max(
        title_similarity(title, candidate.title),
        title_similarity(title, candidate.original_title),
    )
    confidence = title_score * title_weight

    movie_year = candidate.release_year
    if year and movie_year:
        if movie_year == year:
            confidence += exact_year_bonus
        elif abs(movie_year - year) == 1:
            confidence += near_year_bonus

    # Catalog popularity usually sits in 0-1000
    confidence += min(max(candidate.popularity, 0.0) / 1000, popularity_cap)

    return max(0.0, min(confidence, 1.0))


def get_match_status(confidence: float, has_results: bool) -> MatchStatus:
    """Classify a confidence score; no catalog results is always unmatched."""
    if not has_results:
        return MatchStatus.UNMATCHED
    if confidence > MATCHED_THRESHOLD:
        return MatchStatus.MATCHED
    if confidence > UNCERTAIN_THRESHOLD:
        return MatchStatus.UNCERTAIN
    return MatchStatus.UNMATCHED


def rank_candidates(
    candidates: List[CatalogCandidate],
    title: str,
    year: Optional[int] = None,
) -> List[Tuple[CatalogCandidate, float]]:
    """Score every candidate and sort best-first, keeping catalog order on ties."""
    scored = [(cand, calculate_confidence(cand, title, year)) for cand in candidates]
    # sorted() is stable
    return sorted(scored, key=lambda item: item[1], reverse=True)
