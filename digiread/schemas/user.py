"""
User & Auth Pydantic Schemas

These schemas define the shape of data for the magic-link flow and the
user profile.

Schemas:
- GenerateLinkRequest: Email to send a magic link to
- ProfileResponse: Public projection of a user
- VerifyResponse: JSON body returned after a link is verified
- ExchangeTokenRequest / ExchangeTokenResponse: Credential-for-cookie swap
- AuthenticatedContext: Identity resolved from a session credential

Pydantic v2 Features Used:
- model_config: Configure model behavior
- Field(): Define constraints and metadata
- EmailStr: Built-in email validation
"""

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


class GenerateLinkRequest(BaseModel):
    """Request body for POST /auth/generate-link."""

    email: EmailStr = Field(
        ...,
        description="Address the sign-in link is sent to",
        examples=["reader@example.com"],
    )


class MessageResponse(BaseModel):
    """Generic acknowledgement."""

    message: str


class ProfileResponse(BaseModel):
    """
    Public user profile.

    SECURITY: Never includes tokens or internal fields.
    """

    id: int = Field(..., description="Unique user identifier", examples=[1])
    email: EmailStr = Field(..., description="User's email address")
    name: str | None = Field(default=None, description="Display name")
    role: str = Field(..., description="user or author")
    avatar: str | None = Field(default=None, description="Public avatar URL")
    signed_up: bool = Field(..., description="Whether a link was ever verified")
    author_id: int | None = Field(default=None, description="Linked author profile")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": 1,
                "email": "reader@example.com",
                "name": "Jane Reader",
                "role": "user",
                "avatar": None,
                "signed_up": True,
                "author_id": None,
            }
        },
    )


class ProfileEnvelope(BaseModel):
    """Response wrapper for profile endpoints."""

    profile: ProfileResponse


class VerifyResponse(BaseModel):
    """JSON response of GET /auth/verify for non-browser clients."""

    message: str = Field(default="Verification successful")
    redirect_url: str = Field(
        ...,
        serialization_alias="redirectUrl",
        description="Where a browser would be sent",
    )
    token: str = Field(..., description="Session credential (JWT)")
    profile: ProfileResponse


class ExchangeTokenRequest(BaseModel):
    """
    Request body for POST /auth/exchange-token.

    token is optional at the schema level so that a missing or non-string
    value is reported as 400 by the handler rather than 422.
    """

    token: str | None = Field(default=None, description="Session credential")

    @field_validator("token", mode="before")
    @classmethod
    def non_string_is_missing(cls, v: object) -> object:
        return v if isinstance(v, str) else None


class ExchangeTokenResponse(BaseModel):
    message: str = Field(default="Token exchanged successfully")
    profile: ProfileResponse


class AuthenticatedContext(BaseModel):
    """
    Identity of the caller, resolved once per request by get_current_user.

    Handlers receive this explicitly instead of reading request state.
    """

    id: int
    email: str
    name: str | None = None
    role: str
    avatar: str | None = None
    signed_up: bool
    author_id: int | None = None
    book_ids: list[int] = Field(default_factory=list)

    def to_profile(self) -> ProfileResponse:
        return ProfileResponse(
            id=self.id,
            email=self.email,
            name=self.name,
            role=self.role,
            avatar=self.avatar,
            signed_up=self.signed_up,
            author_id=self.author_id,
        )
