from fastapi import APIRouter, HTTPException, Depends, Request
from pymongo.errors import PyMongoError

from core.config import settings
from core.errors import handle_db_error
from core.logging_config import logger
from core.permission_helpers import requires_permission, is_admin
from core.rate_limiter import enforce_rate_limit, LOGIN_POLICY
from core.security import create_access_token
from core.utils import sanitize
from dependencies.auth import get_current_user, CurrentUser
from models.auth import LoginRequest, TokenResponse, UserCreate
from services import users as users_service


router = APIRouter(
    prefix="/auth",
    tags=["Auth"],
)


# ============================================================
# LOGIN (email + password → signed JWT)
# ============================================================
@router.post("/login", response_model=TokenResponse, summary="Authenticate user")
def login(payload: LoginRequest, request: Request):
    enforce_rate_limit(request, LOGIN_POLICY)

    email = payload.email.strip().lower()

    try:
        user = users_service.authenticate(email, payload.password)
    except PyMongoError as e:
        raise handle_db_error(e, "Login failed")

    if not user:
        logger.warning(f"Login attempt failed for {email}")
        raise HTTPException(status_code=401, detail="Invalid email or password")

    token = create_access_token(users_service.token_claims(user))
    return TokenResponse(
        access_token=token,
        expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )


# ============================================================
# CURRENT USER
# ============================================================
@router.get("/me", response_model=CurrentUser, summary="Current authenticated user")
def read_me(current_user: CurrentUser = Depends(get_current_user)):
    return current_user


# ============================================================
# CREATE USER (staff / tenant portal accounts)
# ============================================================
@router.post(
    "/users",
    summary="Create user",
    dependencies=[Depends(requires_permission("users:create"))],
)
def create_user(payload: UserCreate, current_user: CurrentUser = Depends(get_current_user)):
    data = sanitize(payload.model_dump(exclude={"password"}))
    data["password"] = payload.password

    if not is_admin(current_user):
        if data.get("role") == "super_admin":
            raise HTTPException(403, "Only super admins can create super admins")
        # Org admins always create inside their own organization
        data["organization_id"] = current_user.organization_id

    try:
        user = users_service.create_user(data)
    except PyMongoError as e:
        raise handle_db_error(e, "Failed to create user")

    return {"success": True, "data": user}
