# MongoDB repository logic
# magicstream/data_access/mongo_client.py

import logging
from typing import Any, Dict, List, Optional

from motor.motor_asyncio import AsyncIOMotorCollection, AsyncIOMotorDatabase
from pymongo import ASCENDING
from pymongo.errors import DuplicateKeyError, PyMongoError

logger = logging.getLogger(__name__)

MOVIES_COLLECTION = "movies"
USERS_COLLECTION = "users"


class DuplicateDocumentError(Exception):
    """Raised when an insert violates a unique index."""
    def __init__(self, collection: str, key: str, value: Any):
        self.collection = collection
        self.key = key
        self.value = value
        super().__init__(f"Document with {key}={value!r} already exists in '{collection}'.")


# --- Base Repository ---
class BaseRepository:
    """Common repository logic shared by the collections below."""
    unique_key: Optional[str] = None

    def __init__(self, db: AsyncIOMotorDatabase, collection_name: str):
        self.db = db
        self.collection: AsyncIOMotorCollection = db[collection_name]
        self.collection_name = collection_name
        logger.debug(f"Initialized repository for collection: {collection_name}")

    async def ensure_indexes(self) -> None:
        """Creates the unique index backing this repository's natural key."""
        if self.unique_key is None:
            return
        try:
            await self.collection.create_index([(self.unique_key, ASCENDING)], unique=True)
            logger.info(f"Ensured unique index on {self.collection_name}.{self.unique_key}")
        except PyMongoError as e:
            logger.error(f"DB error creating index on {self.collection_name}.{self.unique_key}: {e}", exc_info=True)
            raise

    async def _find_one_by(self, key: str, value: Any) -> Optional[Dict[str, Any]]:
        try:
            return await self.collection.find_one({key: value})
        except PyMongoError as e:
            logger.error(f"DB error finding {self.collection_name} by {key}={value}: {e}", exc_info=True)
            raise

    async def _insert(self, document: Dict[str, Any]) -> Dict[str, Any]:
        """Inserts a document and returns it with its generated _id."""
        doc = dict(document)
        try:
            result = await self.collection.insert_one(doc)
        except DuplicateKeyError:
            key = self.unique_key or "_id"
            logger.warning(f"Duplicate {key} on insert into {self.collection_name}: {doc.get(key)}")
            raise DuplicateDocumentError(self.collection_name, key, doc.get(key))
        except PyMongoError as e:
            logger.error(f"DB error inserting into {self.collection_name}: {e}", exc_info=True)
            raise
        doc["_id"] = result.inserted_id
        return doc


# --- Movie Repository ---
class MovieRepository(BaseRepository):
    unique_key = "imdb_id"

    def __init__(self, db: AsyncIOMotorDatabase):
        super().__init__(db, collection_name=MOVIES_COLLECTION)

    async def find_by_imdb_id(self, imdb_id: str) -> Optional[Dict[str, Any]]:
        """Finds a single movie document by its IMDb identifier."""
        return await self._find_one_by("imdb_id", imdb_id)

    async def find_all(self, limit: int = 100) -> List[Dict[str, Any]]:
        """Returns at most limit movie documents in insertion order."""
        try:
            cursor = self.collection.find({}).sort("_id", 1).limit(limit)
            return await cursor.to_list(length=limit)
        except PyMongoError as e:
            logger.error(f"DB error listing movies: {e}", exc_info=True)
            raise

    async def insert(self, movie_doc: Dict[str, Any]) -> Dict[str, Any]:
        return await self._insert(movie_doc)


# --- User Repository ---
class UserRepository(BaseRepository):
    unique_key = "email"

    def __init__(self, db: AsyncIOMotorDatabase):
        super().__init__(db, collection_name=USERS_COLLECTION)

    async def find_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        return await self._find_one_by("email", email)

    async def insert(self, user_doc: Dict[str, Any]) -> Dict[str, Any]:
        return await self._insert(user_doc)
