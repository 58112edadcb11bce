"""
Author Pydantic Schemas

These schemas define the shape of data for Author-related API operations.

Pydantic v2 Features Used:
- Field(): Define constraints and metadata
- field_validator: Validate and transform field values
- ConfigDict: Type-safe configuration
"""

from pydantic import AnyHttpUrl, BaseModel, ConfigDict, Field, field_validator

from digiread.schemas.user import ProfileResponse


class AuthorBase(BaseModel):
    """
    Base schema with shared author fields.

    Contains fields common to register and update.
    """

    name: str = Field(
        ...,
        min_length=3,
        max_length=255,
        description="Author's public name",
        examples=["Jane Writer"],
    )

    about: str = Field(
        ...,
        min_length=100,
        max_length=5000,
        description="Author biography (at least 100 characters)",
    )

    social_links: list[AnyHttpUrl] = Field(
        default_factory=list,
        description="Links to the author's social profiles",
    )

    @field_validator("name", "about", mode="before")
    @classmethod
    def strip_text(cls, v: str) -> str:
        """Strip surrounding whitespace before length checks."""
        if isinstance(v, str):
            return v.strip()
        return v


class AuthorRegister(AuthorBase):
    """
    Schema for POST /author/register.

    Example request body:
    {
        "name": "Jane Writer",
        "about": "...",
        "social_links": ["https://example.com/jane"]
    }
    """


class AuthorUpdate(AuthorBase):
    """Schema for PATCH /author."""


class AuthorRegisterResponse(BaseModel):
    message: str = Field(default="Thanks for registering as an author.")
    user: ProfileResponse


class AuthorBookSummary(BaseModel):
    """Book as listed on an author's page (prices in currency units)."""

    id: int
    title: str
    slug: str | None
    genre: str
    price: dict[str, str] = Field(..., examples=[{"mrp": "12.00", "sale": "9.50"}])
    cover: str | None = None
    rating: str | None = Field(default=None, examples=["4.5"])


class AuthorDetailResponse(BaseModel):
    id: int
    name: str
    about: str
    slug: str | None
    social_links: list[str]
    books: list[AuthorBookSummary]


class AuthorBookItem(BaseModel):
    id: int
    title: str
    slug: str | None

    model_config = ConfigDict(from_attributes=True)


class AuthorBooksResponse(BaseModel):
    books: list[AuthorBookItem]
