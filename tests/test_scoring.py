import pytest

from movie_matcher.models import CatalogCandidate, MatchStatus
from movie_matcher.matchers.similarity import normalize_title, title_similarity
from movie_matcher.matchers.confidence import calculate_confidence, get_match_status, rank_candidates


def _movie(title, release_date=None, popularity=0.0, original_title=None, movie_id=1):
    return CatalogCandidate(
        id=movie_id,
        title=title,
        original_title=original_title or title,
        release_date=release_date,
        popularity=popularity,
    )


def test_normalize_title_strips_case_punctuation_and_spacing():
    assert normalize_title("  Spider-Man:   Far From Home! ") == "spiderman far from home"


@pytest.mark.parametrize("title", ["Inception", "The Lord of the Rings", "WALL·E", "Se7en", "Amélie"])
def test_identical_titles_score_one(title):
    assert title_similarity(title, title) == 1.0


def test_similarity_ignores_case_and_punctuation():
    assert title_similarity("the matrix", "The Matrix!") == 1.0
    assert title_similarity("Spider-Man", "spiderman") == 1.0


def test_substring_scores_by_length_ratio():
    # "matrix" (6) inside "the matrix" (10)
    assert title_similarity("The Matrix", "Matrix") == pytest.approx(0.8 * 6 / 10)


def test_edit_distance_branch():
    # one transposition = two substitutions over nine characters
    assert title_similarity("Inception", "Inceptoin") == pytest.approx(1 - 2 / 9)
    assert title_similarity("abc", "xyz") == 0.0


def test_missing_input_scores_zero():
    assert title_similarity("", "Heat") == 0.0
    assert title_similarity("Heat", None) == 0.0


def test_titles_without_alphanumerics_are_equal():
    assert title_similarity("!!!", "???") == 1.0


@pytest.mark.parametrize("a,b", [
    ("Heat", "Heath"),
    ("The Godfather", "Godfather Part II"),
    ("Alien", "Aliens"),
    ("Parasite", "Gisaengchung"),
])
def test_similarity_is_symmetric(a, b):
    assert title_similarity(a, b) == pytest.approx(title_similarity(b, a))


def test_confidence_exact_title_and_year():
    movie = _movie("Oppenheimer", "2023-07-19", popularity=500)
    confidence = calculate_confidence(movie, "Oppenheimer", 2023)
    assert confidence >= 0.95
    assert confidence <= 1.0


def test_confidence_uses_original_title():
    movie = _movie("Spirited Away", "2001-07-20", original_title="Sen to Chihiro no Kamikakushi")
    assert calculate_confidence(movie, "Sen to Chihiro no Kamikakushi", None) == pytest.approx(0.6)


def test_confidence_year_bonuses():
    movie = _movie("Heat", "1995-12-15")
    assert calculate_confidence(movie, "Heat", 1995) == pytest.approx(0.9)
    assert calculate_confidence(movie, "Heat", 1996) == pytest.approx(0.7)
    assert calculate_confidence(movie, "Heat", 1990) == pytest.approx(0.6)
    assert calculate_confidence(_movie("Heat"), "Heat", 1995) == pytest.approx(0.6)


def test_popularity_bonus_is_capped():
    assert calculate_confidence(_movie("Heat", popularity=50), "Heat") == pytest.approx(0.65)
    assert calculate_confidence(_movie("Heat", popularity=90000), "Heat") == pytest.approx(0.7)


@pytest.mark.parametrize("title", ["Heat", "Completely Different", ""])
@pytest.mark.parametrize("year", [None, 1995, 1996, 2020])
@pytest.mark.parametrize("popularity", [0.0, 35.5, 1e6])
def test_confidence_always_in_unit_interval(title, year, popularity):
    movie = _movie("Heat", "1995-12-15", popularity=popularity)
    confidence = calculate_confidence(movie, title, year)
    assert 0.0 <= confidence <= 1.0


def test_match_status_thresholds():
    assert get_match_status(0.95, True) == MatchStatus.MATCHED
    assert get_match_status(0.71, True) == MatchStatus.MATCHED
    assert get_match_status(0.7, True) == MatchStatus.UNCERTAIN
    assert get_match_status(0.41, True) == MatchStatus.UNCERTAIN
    assert get_match_status(0.4, True) == MatchStatus.UNMATCHED
    assert get_match_status(0.99, False) == MatchStatus.UNMATCHED


def test_rank_candidates_sorts_best_first_and_is_stable():
    first = _movie("Heat", movie_id=1)
    second = _movie("Heat", movie_id=2)
    weaker = _movie("Heat Wave", movie_id=3)
    ranked = rank_candidates([weaker, first, second], "Heat")
    assert [cand.id for cand, _ in ranked] == [1, 2, 3]
