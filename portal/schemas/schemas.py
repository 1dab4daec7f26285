"""
Pydantic Schemas - Request/Response Validation

All API request and response schemas in one file for simplicity.

Storage uses snake_case field names; the API speaks camelCase
(`profileImage`, `startYear`, ...). Aliases translate between the two.
"""

from pydantic import BaseModel, ConfigDict, EmailStr, Field, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel
from typing import Optional, List, Any
from datetime import datetime


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _not_blank(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("must not be empty")
    return value


# ============================================================
# AUTH SCHEMAS
# ============================================================

class RegisterForm(BaseModel):
    """Registration fields (sent as multipart form data)."""
    fullname: str
    email: EmailStr
    username: str
    password: str
    mobile_number: str
    birth_date: str

    @field_validator("fullname", "username", "password", "mobile_number", "birth_date")
    @classmethod
    def required_not_blank(cls, v: str, info: ValidationInfo) -> str:
        stripped = _not_blank(v)
        # passwords are kept byte-for-byte
        return v if info.field_name == "password" else stripped


class LoginRequest(BaseModel):
    username: Optional[str] = None
    email: Optional[str] = None
    password: str


class RefreshRequest(CamelModel):
    refresh_token: Optional[str] = None


class ChangePasswordRequest(CamelModel):
    old_password: str
    new_password: str = Field(..., min_length=1)


# ============================================================
# PROFILE SCHEMAS
# ============================================================

class AccountUpdate(BaseModel):
    fullname: str
    email: EmailStr

    @field_validator("fullname")
    @classmethod
    def fullname_not_blank(cls, v: str) -> str:
        return _not_blank(v)


class Qualification(CamelModel):
    degree: str
    start_year: int
    end_year: int

    @field_validator("degree")
    @classmethod
    def degree_not_blank(cls, v: str) -> str:
        return _not_blank(v)


class QualificationAdd(BaseModel):
    qualification: Qualification


class ApplyRequest(CamelModel):
    job_id: str = Field(..., min_length=1)


class UserPublic(CamelModel):
    """Sanitized identity - never carries the password hash or refresh token."""
    id: str = Field(..., alias="_id")
    username: str
    email: str
    fullname: str
    profile_image: str = ""
    cover_image: str = ""
    birth_date: Optional[str] = None
    mobile_number: Optional[str] = None
    qualifications: List[Qualification] = []
    my_applied: List[str] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class LoginData(CamelModel):
    user: UserPublic
    access_token: str
    refresh_token: str


class TokenPair(CamelModel):
    access_token: str
    refresh_token: str


# ============================================================
# JOB SCHEMAS
# ============================================================

class JobSummary(CamelModel):
    """Job without its large descriptive fields."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    id: str = Field(..., alias="_id")
    title: Optional[str] = None
    company: Optional[str] = None
    location: Optional[str] = None
    job_type: Optional[str] = None
    created_at: Optional[datetime] = None


class JobDetail(JobSummary):
    description: Optional[str] = None
    impression: Optional[str] = None


class JobListResponse(CamelModel):
    jobs: List[JobSummary]
    total: int
    page: int
    page_size: int


# ============================================================
# GENERIC SCHEMAS
# ============================================================

class ApiResponse(BaseModel):
    status: int
    data: Any = None
    message: str = "Success"


def envelope(status: int, data: Any, message: str) -> dict:
    """Wrap a payload as {status, data, message}, serialized with API aliases."""
    if isinstance(data, BaseModel):
        data = data.model_dump(mode="json", by_alias=True)
    elif isinstance(data, list):
        data = [d.model_dump(mode="json", by_alias=True) if isinstance(d, BaseModel) else d for d in data]
    return ApiResponse(status=status, data=data, message=message).model_dump(mode="json")
