from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, EmailStr
from ..models.admin import AdminModel
from ..middleware.auth import require_admin
from ..utils.jwt_utils import create_access_token


router = APIRouter(prefix="/api/auth", tags=["auth"])


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


@router.post("/login")
async def login(request_data: LoginRequest):
    """Authenticate an administrator and issue an access token"""
    try:
        admin = await AdminModel.authenticate(request_data.email, request_data.password)
        if not admin:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid email or password"
            )

        token = create_access_token({
            "sub": admin["id"],
            "email": admin["email"],
            "role": admin.get("role", "admin"),
        })
        print(f"🔐 Admin logged in: {admin['email']}")

        return {
            "success": True,
            "token": token,
            "tokenType": "bearer",
            "user": {
                "id": admin["id"],
                "email": admin["email"],
                "role": admin.get("role", "admin"),
            }
        }
    except HTTPException:
        raise
    except Exception as e:
        print(f"Login error: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to login"
        )


@router.get("/me")
async def get_me(user: dict = Depends(require_admin)):
    """Current administrator"""
    return {
        "id": user.get("id"),
        "email": user.get("email"),
        "role": user.get("role"),
    }
