from typing import Optional, Union, Literal
from datetime import datetime
from bson import ObjectId
from bson.errors import InvalidId
from pydantic import BaseModel, EmailStr, Field
from ..database.connection import get_database, serialize_document, PARTICIPANTS

ANONYMOUS_NAME = "Anonymous User"


class ParticipantCreate(BaseModel):
    name: str = Field(..., min_length=1)
    email: Optional[Union[EmailStr, Literal[""]]] = None
    phone: Optional[str] = None
    organization: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {
                "name": "Ada Lovelace",
                "email": "ada@example.com",
                "organization": "Analytical Engines Ltd"
            }
        }


class Participant(ParticipantCreate):
    id: str
    createdAt: Optional[datetime] = None


class ParticipantModel:
    @staticmethod
    async def create(participant_data: dict) -> dict:
        """Register a participant"""
        database = get_database()
        if database is None:
            raise Exception("Database not connected")

        participant_data = {**participant_data, "createdAt": datetime.now()}
        result = await database[PARTICIPANTS].insert_one(participant_data)
        participant_data["_id"] = result.inserted_id
        return serialize_document(participant_data)

    @staticmethod
    async def find_by_id(participant_id: str) -> Optional[dict]:
        """Find participant by ID"""
        database = get_database()
        if database is None:
            return None
        try:
            participant = await database[PARTICIPANTS].find_one({"_id": ObjectId(participant_id)})
        except (InvalidId, TypeError):
            return None
        return serialize_document(participant)
