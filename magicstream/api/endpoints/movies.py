# magicstream/api/endpoints/movies.py

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status
from motor.motor_asyncio import AsyncIOMotorDatabase

from magicstream.api.deps import get_cache, get_db
from magicstream.core.config import settings
from magicstream.core.security import AuthGatedRoute, get_current_user
from magicstream.data_access.mongo_client import MovieRepository
from magicstream.data_access.redis_client import CacheRepository
from magicstream.models.auth import TokenClaims
from magicstream.models.movie import MovieCreate, MovieRead
from magicstream.services.movie_service import (
    InvalidMovieIdError,
    MovieAlreadyExistsError,
    MovieNotFoundError,
    MovieService,
)

logger = logging.getLogger(__name__)

# Public movie routes
router = APIRouter()
# Routes mounted behind the auth gate (see magicstream.api.api).
# AuthGatedRoute checks the token before the request body is parsed.
protected_router = APIRouter(route_class=AuthGatedRoute)

# --- Dependency to get the service ---
def get_movie_service(
    db: AsyncIOMotorDatabase = Depends(get_db),
    cache: Optional[CacheRepository] = Depends(get_cache),
) -> MovieService:
    return MovieService(
        repository=MovieRepository(db),
        cache=cache,
        cache_ttl_seconds=settings.CACHE_TTL_MOVIES,
    )
# --- ---

@router.get(
    "/movies",
    response_model=List[MovieRead],
    summary="List Movies",
    description="Retrieve movies from the catalogue, at most `limit` of them.",
)
async def list_movies(
    limit: int = Query(100, ge=1, le=500, description="Maximum number of movies to return."),
    movie_service: MovieService = Depends(get_movie_service),
):
    try:
        return await movie_service.list_movies(limit=limit)
    except Exception as e:
        logger.error(f"Error listing movies: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An error occurred while retrieving movies."
        )

@protected_router.get(
    "/movie/{imdb_id}",
    response_model=MovieRead,
    summary="Get Movie",
    description="Retrieve a single movie by its IMDb identifier.",
    responses={
        400: {"description": "Movie ID is required"},
        401: {"description": "Missing or invalid access token"},
        404: {"description": "Movie not found"},
    }
)
async def get_movie(
    imdb_id: str = Path(..., description="IMDb identifier, e.g. 'tt0111161'."),
    movie_service: MovieService = Depends(get_movie_service),
):
    """
    Fetches a movie by IMDb identifier. Requires authentication.
    """
    try:
        return await movie_service.get_movie(imdb_id)
    except InvalidMovieIdError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Movie ID is required")
    except MovieNotFoundError:
        logger.warning(f"Movie not found attempt: imdb_id {imdb_id}")
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Movie not found")
    except Exception as e:
        logger.error(f"Error getting movie {imdb_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An error occurred while retrieving the movie."
        )

@protected_router.post(
    "/addmovie",
    response_model=MovieRead,
    status_code=status.HTTP_201_CREATED,
    summary="Add Movie",
    description="Create a new movie record.",
    responses={
        401: {"description": "Missing or invalid access token"},
        409: {"description": "A movie with this imdb_id already exists"},
        422: {"description": "Validation Error"},
    }
)
async def add_movie(
    movie_in: MovieCreate,
    current_user: TokenClaims = Depends(get_current_user),
    movie_service: MovieService = Depends(get_movie_service),
):
    """
    Adds a movie to the catalogue. Requires authentication.
    """
    try:
        movie = await movie_service.add_movie(movie_in)
        logger.info(f"Movie {movie.imdb_id} added by user {current_user.sub}")
        return movie
    except MovieAlreadyExistsError as e:
        logger.warning(str(e))
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except Exception as e:
        logger.error(f"Error adding movie {movie_in.imdb_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to add movie"
        )
