from pydantic import BaseModel, Field


# ── Login ────────────────────────────────────────────────────

class LoginRequest(BaseModel):
    """Email address (account users) or login code (relationship managers)."""
    identifier: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=1)


class SessionOut(BaseModel):
    subject_id: str
    source: str
    role: str
    permissions: dict[str, bool]
    display_name: str
    email: str | None

    model_config = {"from_attributes": True}


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    session: SessionOut


# ── Token refresh ────────────────────────────────────────────

class RefreshRequest(BaseModel):
    refresh_token: str
