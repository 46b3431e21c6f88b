from fastapi import APIRouter, HTTPException, status
from ..models.participant import ParticipantCreate, ParticipantModel


router = APIRouter(prefix="/api/participants", tags=["participants"])


@router.post("/", status_code=status.HTTP_201_CREATED)
async def register_participant(participant_data: ParticipantCreate):
    """Register a participant before taking a quiz (optional step)"""
    try:
        participant = await ParticipantModel.create(participant_data.model_dump())
        print(f"🙋 Participant registered: {participant['name']} ({participant['id']})")
        return participant
    except Exception as e:
        print(f"Registration error: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to register"
        )
