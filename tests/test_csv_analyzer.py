import pytest

from movie_matcher.csv_analyzer import detect_column_type, detect_csv_format, load_csv, parse_csv
from movie_matcher.exceptions import ParseError
from movie_matcher.models import ColumnType, DetectedFormat

LETTERBOXD_CSV = """Date,Name,Year,Letterboxd URI,Rating
2023-08-02,Oppenheimer,2023,https://boxd.it/abcd,4.5

2023-09-10,"Crouching Tiger, Hidden Dragon",2000,https://boxd.it/efgh,4
"""


def test_header_keyword_detection():
    assert detect_column_type("Year", ["1994", "1999", "2001"]) == ColumnType.YEAR
    assert detect_column_type("Watched Date", ["2021-05-01"]) == ColumnType.DATE
    assert detect_column_type("Film", []) == ColumnType.TITLE
    assert detect_column_type("movie", []) == ColumnType.TITLE
    assert detect_column_type("Your Rating", ["8"]) == ColumnType.RATING
    assert detect_column_type("Stars", ["★★★"]) == ColumnType.RATING
    assert detect_column_type("Date Rated", ["2021-05-01"]) == ColumnType.DATE


@pytest.mark.parametrize("values,expected", [
    (["1994", "1999", "2001"], ColumnType.YEAR),
    (["2021-05-01", "2021-06-11"], ColumnType.DATE),
    (["05/01/2021"], ColumnType.DATE),
    (["01-Jan-2020"], ColumnType.DATE),
    (["4.5", "3"], ColumnType.RATING),
    (["★★★", "★★★★½"], ColumnType.RATING),
    (["The Shawshank Redemption"], ColumnType.TITLE),
    (["tt01", "tt02"], ColumnType.UNKNOWN),
    (["", "  "], ColumnType.UNKNOWN),
])
def test_value_based_detection(values, expected):
    assert detect_column_type("col1", values) == expected


def test_year_detection_needs_every_sampled_value():
    assert detect_column_type("col1", ["1999", "abc"]) == ColumnType.UNKNOWN


def test_only_first_ten_values_are_sampled():
    values = ["1999"] * 10 + ["not a year at all"]
    assert detect_column_type("col1", values) == ColumnType.YEAR


@pytest.mark.parametrize("headers,expected", [
    (["Date", "Name", "Year", "Letterboxd URI", "Rating"], DetectedFormat.LETTERBOXD),
    (["Const", "Your Rating", "Date Rated", "Title", "URL", "Year"], DetectedFormat.IMDB),
    (["tmdb_id", "Title"], DetectedFormat.TMDB),
    (["Title", "Movie ID"], DetectedFormat.TMDB),
    (["Movie", "Watched On"], DetectedFormat.CUSTOM),
    (["Film Title", "Score"], DetectedFormat.CUSTOM),
    (["foo", "bar"], DetectedFormat.UNKNOWN),
    (["Title"], DetectedFormat.UNKNOWN),
])
def test_detect_csv_format(headers, expected):
    assert detect_csv_format(headers) == expected


def test_parse_letterboxd_export():
    table = parse_csv(LETTERBOXD_CSV)

    assert table.headers == ["Date", "Name", "Year", "Letterboxd URI", "Rating"]
    assert table.detected_format == DetectedFormat.LETTERBOXD
    assert [c.type for c in table.columns] == [
        ColumnType.DATE,
        ColumnType.TITLE,
        ColumnType.YEAR,
        ColumnType.TITLE,
        ColumnType.RATING,
    ]
    assert [c.index for c in table.columns] == [0, 1, 2, 3, 4]
    # blank line skipped, quoted comma kept inside the cell
    assert len(table.rows) == 2
    assert table.rows[1][1] == "Crouching Tiger, Hidden Dragon"
    assert table.rows[0][2] == "2023"


def test_rows_are_padded_and_truncated_to_header_width():
    table = parse_csv("Title,Year,Rating\nHeat,1995\nAlien,1979,8,extra\n")
    assert table.rows == [["Heat", "1995", ""], ["Alien", "1979", "8"]]
    assert all(len(row) == len(table.headers) for row in table.rows)


def test_whitespace_line_before_header_is_skipped():
    table = parse_csv("   \nTitle,Year\nAlien,1979,extra\n")
    assert table.headers == ["Title", "Year"]
    assert table.rows == [["Alien", "1979"]]


def test_header_only_input():
    table = parse_csv("Title,Year\n")
    assert table.rows == []
    assert [c.type for c in table.columns] == [ColumnType.TITLE, ColumnType.YEAR]


def test_uninformative_headers_fall_back_to_unknown():
    table = parse_csv("a,b\nx,y\n")
    assert [c.type for c in table.columns] == [ColumnType.UNKNOWN, ColumnType.UNKNOWN]
    assert table.detected_format == DetectedFormat.UNKNOWN


@pytest.mark.parametrize("text", ["", "   \n\n"])
def test_empty_input_raises(text):
    with pytest.raises(ParseError):
        parse_csv(text)


def test_blank_header_raises():
    with pytest.raises(ParseError, match="headers"):
        parse_csv(",,\nHeat,1995,8\n")


def test_load_csv_reads_file(tmp_path):
    path = tmp_path / "ratings.csv"
    path.write_text("\ufeffTitle,Year\nHeat,1995\n", encoding="utf-8")
    table = load_csv(path)
    assert table.headers == ["Title", "Year"]
    assert table.rows == [["Heat", "1995"]]


def test_load_csv_missing_file(tmp_path):
    with pytest.raises(ParseError, match="not found"):
        load_csv(tmp_path / "missing.csv")
