# movie_matcher/config.py
from dotenv import load_dotenv
import os

load_dotenv()

# API Keys
TMDB_API_KEY = os.getenv("TMDB_API_KEY")

# Runtime parameters
BATCH_SIZE = int(os.getenv("BATCH_SIZE", "5"))
BATCH_PAUSE = float(os.getenv("BATCH_PAUSE", "0.5"))  # seconds between groups
MAX_RETRIES = int(os.getenv("MAX_RETRIES", "3"))  # total attempts per request
RETRY_BASE_DELAY = float(os.getenv("RETRY_BASE_DELAY", "1.0"))
DEFAULT_RETRY_AFTER = 1.0
REQUEST_TIMEOUT = 15
CONCURRENCY = int(os.getenv("CONCURRENCY", "40"))  # requests per second
MAX_ALTERNATIVES = 5
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Confidence thresholds
MATCHED_THRESHOLD = 0.7
UNCERTAIN_THRESHOLD = 0.4

# URLs
TMDB_BASE_URL = os.getenv("TMDB_BASE_URL", "https://api.themoviedb.org/3")
POSTER_BASE_URL = "https://image.tmdb.org/t/p/w500"
BACKDROP_BASE_URL = "https://image.tmdb.org/t/p/original"
PLACEHOLDER_POSTER = "/placeholder.svg"

# File names
INPUT_CSV = os.getenv("INPUT_CSV", "movies.csv")
OUTPUT_CSV = os.getenv("OUTPUT_CSV", "matched_movies.csv")
UNMATCHED_CSV = os.getenv("UNMATCHED_CSV", "unmatched_movies.csv")
