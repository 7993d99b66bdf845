"""Clients for external API interactions."""
from movie_matcher.clients.catalog_client import CatalogClient, get_backdrop_url, get_poster_url

__all__ = ["CatalogClient", "get_poster_url", "get_backdrop_url"]
