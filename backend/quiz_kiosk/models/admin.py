from typing import Optional
from datetime import datetime
import hashlib
from bson import ObjectId
from bson.errors import InvalidId
from pydantic import BaseModel, EmailStr
from ..database.connection import get_database, serialize_document, ADMINS


class Admin(BaseModel):
    id: Optional[str] = None
    email: EmailStr
    role: str = "admin"
    createdAt: Optional[datetime] = None


def hash_password(password: str) -> str:
    """SHA-256 hex digest of the password"""
    return hashlib.sha256(password.encode()).hexdigest()


def _public(admin: Optional[dict]) -> Optional[dict]:
    if admin is not None:
        admin.pop("password", None)
    return admin


class AdminModel:
    @staticmethod
    async def find_by_email(email: str, include_password: bool = False) -> Optional[dict]:
        """Find admin by email"""
        database = get_database()
        if database is None:
            return None
        admin = serialize_document(await database[ADMINS].find_one({"email": email}))
        return admin if include_password else _public(admin)

    @staticmethod
    async def find_by_id(admin_id: str) -> Optional[dict]:
        """Find admin by ID"""
        database = get_database()
        if database is None:
            return None
        try:
            admin = await database[ADMINS].find_one({"_id": ObjectId(admin_id)})
        except (InvalidId, TypeError):
            return None
        return _public(serialize_document(admin))

    @staticmethod
    async def authenticate(email: str, password: str) -> Optional[dict]:
        """Return the admin when the credential pair matches, else None"""
        admin = await AdminModel.find_by_email(email, include_password=True)
        if not admin or admin.get("password") != hash_password(password):
            return None
        return _public(admin)

    @staticmethod
    async def create(email: str, password: str) -> dict:
        """Create a new admin"""
        database = get_database()
        if database is None:
            raise Exception("Database not connected")

        admin_data = {
            "email": email,
            "password": hash_password(password),
            "role": "admin",
            "createdAt": datetime.now(),
        }
        result = await database[ADMINS].insert_one(admin_data)
        admin_data["_id"] = result.inserted_id
        return _public(serialize_document(admin_data))
