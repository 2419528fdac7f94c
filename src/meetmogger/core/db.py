from typing import Any, Self
from urllib.parse import urlparse
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field
from pymongo import AsyncMongoClient
from pymongo.asynchronous.cursor import AsyncCursor

from meetmogger.config import Config


class MongoModel(BaseModel):
    id: UUID = Field(alias="_id", serialization_alias="id", default_factory=uuid4)

    model_config = ConfigDict(
        populate_by_name=True,
        arbitrary_types_allowed=True,
        json_schema_serialization_defaults_required=True,
    )

    def to_mongo(self) -> dict[str, Any]:
        """Convert the model to a dictionary for MongoDB storage with _id field."""
        data = self.model_dump()
        if "id" in data:
            data["_id"] = data.pop("id")  # Rename id → _id for MongoDB
        return data

    @classmethod
    async def list_cursor(cls, cursor: AsyncCursor[dict[str, Any]]) -> list[Self]:
        """Iterate over an AsyncCursor and return a list of model instances."""
        return [cls.model_validate(item) async for item in cursor]


def create_mongo_client(config: Config) -> AsyncMongoClient[dict[str, Any]]:
    """Build the process-wide MongoDB client (and its connection pool).

    Every operation is bounded by timeoutMS, so a stalled server surfaces as a
    PyMongoError instead of hanging the request.
    """
    return AsyncMongoClient(
        config.database_url,
        uuidRepresentation="standard",
        timeoutMS=config.database_timeout_ms,
        maxPoolSize=config.database_max_pool_size,
    )


def database_name(database_url: str) -> str:
    """Extract the database name from a MongoDB URL path."""
    return urlparse(database_url).path[1:]
