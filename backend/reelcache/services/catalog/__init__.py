"""Film catalog service module."""

from .service import DEFAULT_FILMS, FilmCatalog, InMemoryFilmCatalog

__all__ = [
    "DEFAULT_FILMS",
    "FilmCatalog",
    "InMemoryFilmCatalog",
]
