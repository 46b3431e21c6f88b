from typing import Callable
from fastapi import Request, HTTPException, status
from ..models.admin import AdminModel
from ..utils.jwt_utils import decode_access_token


class AuthMiddleware:
    """Attaches the authenticated admin (if any) to request.state.user."""

    async def __call__(self, request: Request, call_next: Callable):
        request.state.user = None

        auth_header = request.headers.get("authorization")
        if auth_header and auth_header.startswith("Bearer "):
            token = auth_header.split(" ", 1)[1]

            try:
                payload = decode_access_token(token)
            except ValueError as e:
                # JWT_SECRET missing: treat every request as anonymous
                print(f"⚠️ Cannot verify token: {e}")
                payload = None

            if payload:
                admin_id = payload.get("sub")
                token_user = {
                    "id": admin_id or "unknown",
                    "email": payload.get("email"),
                    "role": payload.get("role"),
                }

                try:
                    admin = await AdminModel.find_by_id(admin_id) if admin_id else None
                    request.state.user = admin or token_user
                except Exception as e:
                    print(f"Error fetching admin: {e}")
                    request.state.user = token_user

        return await call_next(request)


# Dependency functions for FastAPI
async def get_current_user(request: Request) -> dict:
    """Get current admin from request state"""
    user = getattr(request.state, "user", None)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required"
        )
    return user


async def require_admin(request: Request) -> dict:
    """Require admin role"""
    user = await get_current_user(request)
    if user.get("role") != "admin":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Forbidden: Admin access required"
        )
    return user
