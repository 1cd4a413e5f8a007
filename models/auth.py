from typing import Optional
from pydantic import BaseModel, EmailStr, Field


# -----------------------------------------------------
# LOGIN REQUEST
# -----------------------------------------------------
class LoginRequest(BaseModel):
    email: EmailStr
    password: str


# -----------------------------------------------------
# TOKEN RESPONSE (signed JWT)
# -----------------------------------------------------
class TokenResponse(BaseModel):
    access_token: str
    expires_in: int           # Seconds until expiration
    token_type: str = "bearer"


# -----------------------------------------------------
# USER CREATE (staff and tenant portal accounts)
# -----------------------------------------------------
class UserCreate(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=8)
    full_name: Optional[str] = None
    role: str
    organization_id: Optional[str] = None
    tenant_id: Optional[str] = None
