from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, EmailStr, Field, ValidationInfo, field_validator

from catalog.core.statuses import BookStatus, CommentStatus
from catalog.security.roles import ASSIGNABLE_ROLES


T = TypeVar("T")


# 数据库列不带时区：带时区的输入统一换算成 UTC 再去掉 tzinfo
def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is not None and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def isbn13_checksum(digits: str) -> int:
    total = sum(int(ch) * (1 if index % 2 == 0 else 3) for index, ch in enumerate(digits[:12]))
    return (10 - total % 10) % 10


# ---- forms ----


class AuthorForm(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    date_of_birth: datetime
    date_of_death: Optional[datetime] = None
    nationality: Optional[str] = Field(default=None, max_length=255)

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("This value should not be blank.")
        return value

    @field_validator("date_of_birth")
    @classmethod
    def _naive_birth(cls, value: datetime) -> datetime:
        return to_naive_utc(value)

    @field_validator("date_of_death")
    @classmethod
    def _death_after_birth(cls, value: Optional[datetime], info: ValidationInfo) -> Optional[datetime]:
        value = to_naive_utc(value)
        born = info.data.get("date_of_birth")
        if value is not None and born is not None and value < born:
            raise ValueError("The date of death cannot precede the date of birth.")
        return value


class EditorForm(BaseModel):
    name: str = Field(min_length=1, max_length=255)

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("This value should not be blank.")
        return value


class BookForm(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    isbn: str
    cover: str = Field(min_length=1, max_length=255)
    edited_at: datetime
    plot: str = Field(min_length=1)
    page_number: int = Field(gt=0)
    status: BookStatus
    author_id: int
    editor_id: int

    @field_validator("edited_at")
    @classmethod
    def _naive_edited_at(cls, value: datetime) -> datetime:
        return to_naive_utc(value)

    @field_validator("isbn")
    @classmethod
    def _valid_isbn13(cls, value: str) -> str:
        digits = value.replace("-", "").replace(" ", "")
        if len(digits) != 13 or not digits.isdigit():
            raise ValueError("This value is not a valid ISBN-13.")
        if isbn13_checksum(digits) != int(digits[12]):
            raise ValueError("This value is not a valid ISBN-13.")
        return digits


class RegistrationForm(BaseModel):
    email: EmailStr
    plain_password: str = Field(min_length=6, max_length=4096)
    roles: List[str] = Field(default_factory=list)
    agree_terms: bool = False

    @field_validator("roles")
    @classmethod
    def _known_roles(cls, value: List[str]) -> List[str]:
        unknown = [role for role in value if role not in ASSIGNABLE_ROLES]
        if unknown:
            raise ValueError(f"Unknown role(s): {', '.join(unknown)}.")
        return sorted(set(value))

    @field_validator("agree_terms")
    @classmethod
    def _must_agree(cls, value: bool) -> bool:
        if not value:
            raise ValueError("You should agree to our terms.")
        return value


class LoginForm(BaseModel):
    email: str
    password: str


# ---- views ----


class FormView(BaseModel):
    form: str
    data: Dict[str, Any] = Field(default_factory=dict)
    errors: Dict[str, List[str]] = Field(default_factory=dict)
    submitted: bool = False
    valid: bool = False


class LoginView(BaseModel):
    last_username: Optional[str] = None
    error: Optional[str] = None


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user: "UserOut"


class AuthorOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    date_of_birth: datetime
    date_of_death: Optional[datetime] = None
    nationality: Optional[str] = None


class EditorOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    created_at: Optional[datetime] = None


class CommentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    created_at: datetime
    published_at: Optional[datetime] = None
    status: CommentStatus
    content: str


class BookOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    isbn: str
    cover: str
    edited_at: datetime
    plot: str
    page_number: int
    status: BookStatus
    author_id: int
    editor_id: int
    created_by_id: Optional[int] = None


class BookDetail(BookOut):
    author: AuthorOut
    editor: EditorOut
    comments: List[CommentOut] = Field(default_factory=list)


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    roles: List[str]
    last_connected_at: Optional[datetime] = None


class PageOut(BaseModel, Generic[T]):
    items: List[T]
    page: int
    pages: int
    per_page: int
    total: int
    has_previous: bool
    has_next: bool


LoginResponse.model_rebuild()
