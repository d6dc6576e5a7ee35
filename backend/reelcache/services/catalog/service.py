"""Film catalog service.

The catalog is the expensive computation behind ``/api/films``. In
production it is a database query; this module defines the interface and
an in-memory implementation used for local runs and tests.
"""

import logging
from abc import ABC, abstractmethod
from typing import Iterable, Optional

from reelcache.models import Film

logger = logging.getLogger(__name__)


class FilmCatalog(ABC):
    """Abstract source of published films."""

    @abstractmethod
    async def list_films(self, genre: Optional[str], limit: int) -> list[Film]:
        """List published films, most viewed first.

        Args:
            genre: Only return films of this genre. None for all genres.
            limit: Maximum number of films to return.

        Returns:
            Films ordered by descending view count.
        """


class InMemoryFilmCatalog(FilmCatalog):
    """Catalog backed by a fixed list of films.

    Attributes:
        query_count: Number of ``list_films`` calls served.
    """

    def __init__(self, films: Optional[Iterable[Film]] = None) -> None:
        self._films = list(films) if films is not None else list(DEFAULT_FILMS)
        self.query_count = 0

    async def list_films(self, genre: Optional[str], limit: int) -> list[Film]:
        self.query_count += 1
        films = self._films
        if genre:
            wanted = genre.strip().lower()
            films = [f for f in films if f.genre == wanted]
        ranked = sorted(films, key=lambda f: f.views, reverse=True)
        logger.info(f"[CATALOG] Query genre={genre or 'all'} limit={limit}: {len(ranked)} matches")
        return ranked[:limit]


DEFAULT_FILMS = [
    Film(id="f-001", title="Living in Bondage", genre="drama", views=18250, release_year=1992),
    Film(id="f-002", title="The Wedding Party", genre="comedy", views=24100, release_year=2016),
    Film(id="f-003", title="King of Boys", genre="thriller", views=21870, release_year=2018),
    Film(id="f-004", title="October 1", genre="thriller", views=9640, release_year=2014),
    Film(id="f-005", title="Chief Daddy", genre="comedy", views=12330, release_year=2018),
    Film(id="f-006", title="Half of a Yellow Sun", genre="drama", views=15420, release_year=2013),
    Film(id="f-007", title="The Figurine", genre="thriller", views=7710, release_year=2009),
    Film(id="f-008", title="Omo Ghetto", genre="comedy", views=19980, release_year=2020),
]
