from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator
from typing import Optional, List
from enum import Enum
from datetime import datetime


class ApplicationStatusEnum(str, Enum):
    PENDING = "Pending"
    ACCEPTED = "Accepted"
    REJECTED = "Rejected"


class AccountRoleEnum(str, Enum):
    USER = "user"
    LEAD = "lead"
    CO_LEAD = "coLead"
    ADMIN = "admin"
    JUDGE = "judge"
    PARTICIPANT = "isParticipant"


class AccountStatusEnum(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class EventCategoryEnum(str, Enum):
    TICKETING = "ticketing"
    NON_TICKETING = "nonticketing"


class EventStatusEnum(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    COMPLETE = "complete"
    DRAFT = "draft"


class AudienceEnum(str, Enum):
    ALL = "All"
    USERS = "Users"
    JUDGES = "Judges"


class AssignmentStatusEnum(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"


class SubpostEnum(str, Enum):
    LEAD = "Lead"
    CO_LEAD = "Co-Lead"


def _strip_required(value: str) -> str:
    value = str(value or "").strip()
    if not value:
        raise ValueError("must not be blank")
    return value


# Auth Schemas
class AccountRegister(BaseModel):
    name: str = Field(..., min_length=3, max_length=30)
    email: EmailStr
    password: str = Field(..., min_length=6)
    confirm_password: str
    role: AccountRoleEnum = AccountRoleEnum.USER
    is_participant: bool = False
    cnic: str = Field(..., min_length=13, max_length=15)

    @model_validator(mode="after")
    def passwords_match(self):
        if self.password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self


class AccountLogin(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6)


class GoogleLoginRequest(BaseModel):
    token_id: str = Field(..., min_length=1)


class RefreshTokenRequest(BaseModel):
    refresh_token: str


class AccountResponse(BaseModel):
    id: int
    name: str
    email: str
    role: AccountRoleEnum
    status: AccountStatusEnum
    is_participant: bool
    cnic: Optional[str] = None
    position: Optional[str] = None
    subpost: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    user: AccountResponse


class AccessTokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class AccountUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = Field(default=None, min_length=3, max_length=30)
    role: Optional[AccountRoleEnum] = None
    status: Optional[AccountStatusEnum] = None
    is_participant: Optional[bool] = None
    position: Optional[str] = None
    subpost: Optional[str] = None


# Application (apply for a post) Schemas
class ApplicationCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=255)
    roll_number: str = Field(..., min_length=1, max_length=50)
    phone: str = Field(..., min_length=7, max_length=20)
    email: Optional[EmailStr] = None
    position: str = Field(..., min_length=1, max_length=255)
    subpost: Optional[SubpostEnum] = None
    additional_details: Optional[str] = None

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v):
        digits = v.replace("+", "").replace("-", "").replace(" ", "")
        if not digits.isdigit():
            raise ValueError("Phone number must contain only digits")
        return v


class ApplicationStatusUpdate(BaseModel):
    # Validated by the review workflow so an unknown value is reported as an invalid status
    status: str


class ApplicationResponse(BaseModel):
    id: int
    name: str
    roll_number: str
    contact_number: str
    email: Optional[str] = None
    post: str
    subpost: Optional[str] = None
    additional_details: Optional[str] = None
    status: ApplicationStatusEnum
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ApplicantSummary(BaseModel):
    id: int
    name: str
    email: Optional[str] = None
    post: str
    contact_number: str

    class Config:
        from_attributes = True


class LeadershipApplicants(BaseModel):
    lead: List[ApplicantSummary]
    co_lead: List[ApplicantSummary]


# Category Schemas
class CategoryResponse(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    card_image: Optional[str] = None
    banner_image: Optional[str] = None
    lead: Optional[ApplicantSummary] = None
    co_lead: Optional[ApplicantSummary] = None
    created_at: datetime

    class Config:
        from_attributes = True


# Game Schemas
class GameCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    category_id: int
    description: str = Field(..., min_length=1)
    image_url: Optional[str] = None
    date: str = Field(..., min_length=1)
    time: str = Field(..., min_length=1)
    lead: str = Field(..., min_length=1)
    co_lead: str = Field(..., min_length=1)
    price: float = Field(..., ge=0)
    player: int = Field(..., ge=1)
    venue: str = Field(..., min_length=1)

    @field_validator("title")
    @classmethod
    def validate_title(cls, v):
        return _strip_required(v)


class GameUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    category_id: Optional[int] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    date: Optional[str] = None
    time: Optional[str] = None
    lead: Optional[str] = None
    co_lead: Optional[str] = None
    price: Optional[float] = Field(default=None, ge=0)
    player: Optional[int] = Field(default=None, ge=1)
    venue: Optional[str] = None


class GameResponse(BaseModel):
    id: int
    title: str
    category_id: int
    description: str
    image_url: Optional[str] = None
    date: str
    time: str
    lead: str
    co_lead: str
    price: float
    player: int
    venue: str
    created_at: datetime

    class Config:
        from_attributes = True


# Player Schemas
class PlayerCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    cnic: str = Field(..., min_length=1, max_length=20)
    phone: str = Field(..., min_length=1, max_length=20)
    email: Optional[EmailStr] = None
    ticket_price: float = Field(..., ge=0)
    category_id: int
    game_id: int


class TitleRef(BaseModel):
    id: int
    title: str

    class Config:
        from_attributes = True


class PlayerResponse(BaseModel):
    id: int
    name: str
    cnic: str
    phone: str
    email: Optional[str] = None
    ticket_price: float
    category_id: int
    game_id: int
    category: Optional[TitleRef] = None
    game: Optional[TitleRef] = None
    registered_at: datetime

    class Config:
        from_attributes = True


class PlayerImportResponse(BaseModel):
    message: str
    count: int


# Event Schemas
class EventCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    start_date: str = Field(..., min_length=1)
    category: EventCategoryEnum = EventCategoryEnum.TICKETING
    subcategory: str = Field(..., min_length=1)
    description: Optional[str] = None
    status: EventStatusEnum = EventStatusEnum.ACTIVE
    ticket_price: Optional[str] = None
    image_url: Optional[str] = None
    registration_deadline: Optional[str] = None
    location_details: Optional[str] = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, v):
        return _strip_required(v)


class EventUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    start_date: Optional[str] = None
    category: Optional[EventCategoryEnum] = None
    subcategory: Optional[str] = None
    description: Optional[str] = None
    status: Optional[EventStatusEnum] = None
    ticket_price: Optional[str] = None
    image_url: Optional[str] = None
    registration_deadline: Optional[str] = None
    location_details: Optional[str] = None


class EventResponse(BaseModel):
    id: int
    title: str
    start_date: str
    category: EventCategoryEnum
    subcategory: str
    description: Optional[str] = None
    status: EventStatusEnum
    ticket_price: Optional[str] = None
    image_url: Optional[str] = None
    registration_deadline: Optional[str] = None
    location_details: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


# Announcement Schemas
class AnnouncementCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    audience: AudienceEnum = AudienceEnum.ALL

    @field_validator("title")
    @classmethod
    def validate_title(cls, v):
        return _strip_required(v)


class AnnouncementUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    audience: Optional[AudienceEnum] = None


class AnnouncementResponse(BaseModel):
    id: int
    title: str
    description: str
    audience: AudienceEnum
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# News Schemas
class NewsResponse(BaseModel):
    id: int
    title: str
    content: str
    image: Optional[str] = None
    date: datetime

    class Config:
        from_attributes = True


# Judge Schemas
class JudgeCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=255)
    email: EmailStr
    contact: str = Field(..., min_length=7, max_length=20)
    assigned_games: List[int] = Field(default_factory=list)


class JudgeUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = Field(default=None, min_length=2, max_length=255)
    email: Optional[EmailStr] = None
    contact: Optional[str] = Field(default=None, min_length=7, max_length=20)
    assigned_games: Optional[List[int]] = None


class JudgeAssignmentResponse(BaseModel):
    id: int
    game_id: int
    game: Optional[TitleRef] = None
    status: AssignmentStatusEnum
    winner: Optional[str] = None
    runner_up: Optional[str] = None
    announced_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class JudgeResponse(BaseModel):
    id: int
    name: str
    email: str
    contact: str
    account_id: Optional[int] = None
    assignments: List[JudgeAssignmentResponse] = Field(default_factory=list)
    created_at: datetime

    class Config:
        from_attributes = True


class GameResultRequest(BaseModel):
    winner: str = Field(..., min_length=1, max_length=255)
    runner_up: Optional[str] = Field(default=None, max_length=255)


# Contact Schemas
class ContactCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    department: Optional[str] = None
    subject: str = Field(..., min_length=1, max_length=255)
    message: str = Field(..., min_length=1)
    user_id: Optional[int] = None


class ContactResponse(BaseModel):
    id: int
    name: str
    email: str
    department: Optional[str] = None
    subject: str
    message: str
    account_id: Optional[int] = None
    created_at: datetime

    class Config:
        from_attributes = True
