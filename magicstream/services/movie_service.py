# magicstream/services/movie_service.py

import logging
from typing import List, Optional

from pydantic import ValidationError
from pymongo.errors import PyMongoError

from magicstream.data_access.mongo_client import DuplicateDocumentError, MovieRepository
from magicstream.data_access.redis_client import CacheRepository, movie_cache_key
from magicstream.models.movie import MovieCreate, MovieRead

logger = logging.getLogger(__name__)

class MovieNotFoundError(Exception):
    """Custom exception when a movie is not found."""
    pass

class MovieAlreadyExistsError(Exception):
    """Raised when adding a movie whose imdb_id is already stored."""
    pass

class InvalidMovieIdError(ValueError):
    """Raised for a blank IMDb identifier."""
    pass

class MovieService:
    def __init__(
        self,
        repository: MovieRepository,
        cache: Optional[CacheRepository] = None,
        cache_ttl_seconds: Optional[int] = None,
    ):
        """
        Initializes the Movie Service.

        Args:
            repository: Repository over the 'movies' collection.
            cache: Optional cache; when None every lookup goes to the database.
            cache_ttl_seconds: TTL applied to cached movie documents.
        """
        self.repository = repository
        self.cache = cache
        self.cache_ttl_seconds = cache_ttl_seconds

    async def get_movie(self, imdb_id: str) -> MovieRead:
        """
        Retrieves a single movie by its IMDb identifier, reading through the cache.

        Raises:
            InvalidMovieIdError: If imdb_id is blank.
            MovieNotFoundError: If no movie has this imdb_id.
            PyMongoError: If a database error occurs.
        """
        imdb_id = (imdb_id or "").strip()
        if not imdb_id:
            raise InvalidMovieIdError("Movie ID is required")

        cache_key = movie_cache_key(imdb_id)
        if self.cache is not None:
            cached = await self.cache.get_json(cache_key)
            if cached is not None:
                try:
                    return MovieRead.model_validate(cached)
                except ValidationError:
                    logger.warning(f"Discarding malformed cache entry {cache_key}")
                    await self.cache.delete(cache_key)

        movie_doc = await self.repository.find_by_imdb_id(imdb_id)
        if movie_doc is None:
            logger.warning(f"Movie with imdb_id {imdb_id} not found in database.")
            raise MovieNotFoundError(f"Movie with imdb_id '{imdb_id}' not found.")

        movie = MovieRead.from_document(movie_doc)
        if self.cache is not None:
            await self.cache.set_json(cache_key, movie.model_dump(mode="json"), self.cache_ttl_seconds)
        logger.debug(f"Found movie with imdb_id: {imdb_id}")
        return movie

    async def list_movies(self, limit: int = 100) -> List[MovieRead]:
        """Retrieves up to limit movies from the collection."""
        movie_docs = await self.repository.find_all(limit=limit)
        movies = [MovieRead.from_document(doc) for doc in movie_docs]
        logger.info(f"Fetched {len(movies)} movies")
        return movies

    async def add_movie(self, movie_in: MovieCreate) -> MovieRead:
        """
        Stores a new movie.

        Raises:
            MovieAlreadyExistsError: If a movie with the same imdb_id exists.
            PyMongoError: If a database error occurs.
        """
        try:
            movie_doc = await self.repository.insert(movie_in.to_document())
        except DuplicateDocumentError:
            raise MovieAlreadyExistsError(f"Movie with imdb_id '{movie_in.imdb_id}' already exists.")
        except PyMongoError:
            logger.error(f"Failed to insert movie {movie_in.imdb_id}", exc_info=True)
            raise

        if self.cache is not None:
            # Drop any stale negative/old entry for this id
            await self.cache.delete(movie_cache_key(movie_in.imdb_id))

        logger.info(f"Added movie {movie_in.imdb_id} ({movie_in.title})")
        return MovieRead.from_document(movie_doc)
