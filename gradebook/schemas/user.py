from pydantic import EmailStr, Field, field_validator
from gradebook.models.user import RoleType
from gradebook.schemas.base import CamelModel

class RegisterRequest(CamelModel):
    email: EmailStr
    password: str = Field(min_length=6)
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    role: RoleType

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.lower()

class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(min_length=6)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.lower()

class UserProfile(CamelModel):
    id: int
    email: str
    first_name: str
    last_name: str
    role: RoleType

class TokenResponse(CamelModel):
    token: str
    user: UserProfile

class CurrentUser(CamelModel):
    """Identity carried by a verified bearer token."""
    id: int
    email: str
    role: RoleType
