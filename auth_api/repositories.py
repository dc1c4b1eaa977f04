"""
User persistence on top of a Motor collection.
"""

from datetime import datetime, timezone
from typing import Optional

from bson import ObjectId
from bson.errors import InvalidId
from pymongo.errors import DuplicateKeyError

from auth_api.errors import ConflictError

USER_EXISTS_MESSAGE = "Username or email already exists"


class UserRepository:
    """Lookups and writes against the ``users`` collection.

    Every method is a single-document operation; nothing here spans two
    round-trips, so there is nothing to roll back.
    """

    def __init__(self, collection):
        self.collection = collection

    async def find_by_username(self, username: str) -> Optional[dict]:
        return await self.collection.find_one({"username": username})

    async def find_by_email(self, email: str) -> Optional[dict]:
        return await self.collection.find_one({"email": email})

    async def find_by_username_or_email(self, username: str, email: str) -> Optional[dict]:
        return await self.collection.find_one({"$or": [{"username": username}, {"email": email}]})

    async def find_by_id(self, user_id) -> Optional[dict]:
        """Look up by store id; a string that is not an ObjectId matches nothing"""
        try:
            oid = user_id if isinstance(user_id, ObjectId) else ObjectId(user_id)
        except (InvalidId, TypeError):
            return None
        return await self.collection.find_one({"_id": oid})

    async def insert(self, username: str, email: str, password_hash: str) -> str:
        """Insert a new user and return its id.

        Raises:
            ConflictError: the unique index rejected the username or email.
        """
        now = datetime.now(timezone.utc)
        document = {
            "username": username,
            "email": email,
            "password": password_hash,
            "created_at": now,
            "updated_at": now,
        }
        try:
            result = await self.collection.insert_one(document)
        except DuplicateKeyError:
            raise ConflictError(USER_EXISTS_MESSAGE)
        return str(result.inserted_id)

    async def update_password(self, user_id, password_hash: str) -> bool:
        result = await self.collection.update_one(
            {"_id": user_id if isinstance(user_id, ObjectId) else ObjectId(user_id)},
            {"$set": {"password": password_hash, "updated_at": datetime.now(timezone.utc)}},
        )
        return result.matched_count == 1
