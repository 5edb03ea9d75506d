from fastapi import APIRouter, Depends

from ..auth import AuthProvider, AuthService, AuthUser, LoginRequest, get_auth_provider
from ..dependencies import get_current_user

router = APIRouter(prefix="/api/auth", tags=["Authentication"])


@router.post(
    "/login",
    summary="Login admin",
    description="Check the admin credentials and return a 7-day bearer token",
)
async def login(
    request_data: LoginRequest,
    provider: AuthProvider = Depends(get_auth_provider),
):
    user, token = AuthService.login(provider, request_data.email, request_data.password)
    return {
        "success": True,
        "message": "Login successful",
        "data": {"user": user.model_dump(), "token": token},
    }


@router.get("/verify", summary="Verify bearer token")
async def verify(current_user: AuthUser = Depends(get_current_user)):
    return {
        "success": True,
        "message": "Token is valid",
        "user": current_user.model_dump(),
    }


@router.get("/me", summary="Current user profile")
async def get_profile(current_user: AuthUser = Depends(get_current_user)):
    return {"success": True, "data": {"user": current_user.model_dump()}}


@router.post("/logout", summary="Logout")
async def logout():
    """Tokens are stateless; the client discards its copy"""
    return {"success": True, "message": "Logged out successfully"}
