# magicstream/models/movie.py

from typing import List

from pydantic import BaseModel, ConfigDict, Field, HttpUrl, field_validator


class Genre(BaseModel):
    """A genre tag attached to a movie or to a user's favourites."""
    genre_id: int = Field(..., description="Numeric genre identifier.")
    genre_name: str = Field(..., min_length=2, max_length=100, description="Display name of the genre.")


class Ranking(BaseModel):
    """Editorial ranking of a movie (e.g. 1 / "Excellent")."""
    ranking_value: int = Field(..., description="Numeric rank, lower is better.")
    ranking_name: str = Field(..., min_length=1, description="Label matching the rank value.")


# --- Base Model ---
class MovieBase(BaseModel):
    """Common attributes for a movie, shared by request and response models."""
    imdb_id: str = Field(..., description="IMDb identifier, e.g. 'tt0111161'.")
    title: str = Field(..., min_length=2, max_length=500, description="Movie title.")
    poster_path: HttpUrl = Field(..., description="URL to the movie poster image.")
    youtube_id: str = Field(..., min_length=1, description="YouTube video ID of the trailer.")
    genre: List[Genre] = Field(..., min_length=1, description="Genres associated with the movie.")
    admin_review: str = Field("", description="Free-text review written by an administrator.")
    ranking: Ranking = Field(..., description="Editorial ranking.")

    @field_validator("imdb_id")
    @classmethod
    def imdb_id_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("imdb_id must not be blank")
        return v


# --- Model for API Requests ---
class MovieCreate(MovieBase):
    """Request body for POST /addmovie."""

    def to_document(self) -> dict:
        """Serializes the movie into the shape stored in MongoDB."""
        return self.model_dump(mode="json")


# --- Model for API Responses ---
class MovieRead(MovieBase):
    """A movie as returned by the API."""
    id: str = Field(..., description="Internal database ID (MongoDB ObjectId as string).")

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_document(cls, doc: dict) -> "MovieRead":
        """Builds a response model from a raw MongoDB document, mapping _id to id."""
        data = {k: v for k, v in doc.items() if k != "_id"}
        return cls(id=str(doc["_id"]), **data)
