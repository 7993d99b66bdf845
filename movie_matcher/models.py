"""
Typed data models for the movie matching pipeline.
All data structures used throughout the codebase should be defined here.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class ColumnType(str, Enum):
    """Semantic type inferred for a CSV column."""
    TITLE = "title"
    YEAR = "year"
    DATE = "date"
    RATING = "rating"
    UNKNOWN = "unknown"


class DetectedFormat(str, Enum):
    """Exporter that most likely produced the CSV."""
    LETTERBOXD = "letterboxd"
    IMDB = "imdb"
    TMDB = "tmdb"
    CUSTOM = "custom"
    UNKNOWN = "unknown"


class MatchStatus(str, Enum):
    MATCHED = "matched"
    UNCERTAIN = "uncertain"
    UNMATCHED = "unmatched"


@dataclass(frozen=True)
class ColumnDescriptor:
    """A source column and the type inferred for it."""
    name: str
    type: ColumnType
    index: int


@dataclass
class ParsedTable:
    """Result of structural analysis of a CSV document."""
    headers: List[str]
    columns: List[ColumnDescriptor]
    rows: List[List[str]]
    detected_format: DetectedFormat


@dataclass(frozen=True)
class CatalogCandidate:
    """Movie returned by the catalog search or details endpoint."""
    id: int
    title: str
    original_title: str = ""
    release_date: Optional[str] = None
    poster_path: Optional[str] = None
    backdrop_path: Optional[str] = None
    popularity: float = 0.0
    vote_average: float = 0.0
    vote_count: int = 0
    overview: str = ""

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "CatalogCandidate":
        """Build a candidate from a raw catalog movie object."""
        title = data.get("title") or ""
        return cls(
            id=int(data["id"]),
            title=title,
            original_title=data.get("original_title") or title,
            release_date=data.get("release_date") or None,
            poster_path=data.get("poster_path"),
            backdrop_path=data.get("backdrop_path"),
            popularity=max(float(data.get("popularity") or 0.0), 0.0),
            vote_average=float(data.get("vote_average") or 0.0),
            vote_count=int(data.get("vote_count") or 0),
            overview=data.get("overview") or "",
        )

    @property
    def release_year(self) -> Optional[int]:
        if not self.release_date:
            return None
        head = self.release_date.split("-")[0]
        return int(head) if head.isdigit() else None


@dataclass(frozen=True)
class RowFields:
    """Title, year, date and rating pulled out of a single CSV row."""
    title: str
    year: Optional[int] = None
    date: Optional[str] = None  # YYYY-MM-DD
    rating: Optional[float] = None  # 1-10 scale


@dataclass(frozen=True)
class MatchRecord:
    """Final matching result for one CSV row."""
    csv_data: List[str]
    columns: List[ColumnDescriptor]
    detected_title: str
    detected_year: Optional[int] = None
    detected_date: Optional[str] = None
    detected_rating: Optional[float] = None
    matched_movie: Optional[CatalogCandidate] = None
    confidence: float = 0.0
    status: MatchStatus = MatchStatus.UNMATCHED
    alternatives: List[CatalogCandidate] = field(default_factory=list)
    error_message: Optional[str] = None
    manually_selected: bool = False


@dataclass
class ImportSummary:
    """Counts shown once validation of a batch is complete."""
    total: int
    imported: int
    skipped: int
    failed: int
