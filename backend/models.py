from sqlalchemy import Column, Integer, String, Boolean, DateTime, Float, Enum as SQLEnum, ForeignKey, Text, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from database import Base
import enum


class ApplicationStatus(str, enum.Enum):
    PENDING = "Pending"
    ACCEPTED = "Accepted"
    REJECTED = "Rejected"


class AccountRole(str, enum.Enum):
    USER = "user"
    LEAD = "lead"
    CO_LEAD = "coLead"
    ADMIN = "admin"
    JUDGE = "judge"
    PARTICIPANT = "isParticipant"


class AccountStatus(str, enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class EventCategory(str, enum.Enum):
    TICKETING = "ticketing"
    NON_TICKETING = "nonticketing"


class EventStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    COMPLETE = "complete"
    DRAFT = "draft"


class Audience(str, enum.Enum):
    ALL = "All"
    USERS = "Users"
    JUDGES = "Judges"


class AssignmentStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"


class Account(Base):
    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=True)
    google_id = Column(String(255), unique=True, nullable=True)
    cnic = Column(String(20), unique=True, nullable=True)
    role = Column(SQLEnum(AccountRole), default=AccountRole.USER, nullable=False)
    status = Column(SQLEnum(AccountStatus), default=AccountStatus.PENDING, nullable=False)
    is_participant = Column(Boolean, default=False, nullable=False)
    position = Column(String(255), nullable=True)
    subpost = Column(String(50), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())


class Application(Base):
    __tablename__ = "smec_posts"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    roll_number = Column(String(50), nullable=False)
    contact_number = Column(String(20), nullable=False)
    email = Column(String(255), index=True, nullable=True)
    post = Column(String(255), nullable=False)
    subpost = Column(String(50), nullable=True)
    additional_details = Column(Text, nullable=True)
    status = Column(SQLEnum(ApplicationStatus), default=ApplicationStatus.PENDING, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())


class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    card_image = Column(String(500), nullable=True)
    card_image_key = Column(String(500), nullable=True)
    banner_image = Column(String(500), nullable=True)
    banner_image_key = Column(String(500), nullable=True)
    lead_id = Column(Integer, ForeignKey("smec_posts.id", ondelete="SET NULL"), nullable=True)
    co_lead_id = Column(Integer, ForeignKey("smec_posts.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    lead = relationship("Application", foreign_keys=[lead_id])
    co_lead = relationship("Application", foreign_keys=[co_lead_id])


class Game(Base):
    __tablename__ = "games"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False, index=True)
    description = Column(Text, nullable=False)
    image_url = Column(String(500), nullable=True)
    date = Column(String(50), nullable=False)
    time = Column(String(50), nullable=False)
    lead = Column(String(255), nullable=False)
    co_lead = Column(String(255), nullable=False)
    price = Column(Float, nullable=False)
    player = Column(Integer, nullable=False)  # capacity
    venue = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    category = relationship("Category")


class Player(Base):
    __tablename__ = "players"
    __table_args__ = (
        UniqueConstraint("cnic", "category_id", "game_id", name="uq_players_cnic_category_game"),
    )

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    cnic = Column(String(20), nullable=False, index=True)
    phone = Column(String(20), nullable=False)
    email = Column(String(255), nullable=True)
    ticket_price = Column(Float, nullable=False)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False)
    game_id = Column(Integer, ForeignKey("games.id"), nullable=False)
    registered_at = Column(DateTime(timezone=True), server_default=func.now())
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    category = relationship("Category")
    game = relationship("Game")


class Event(Base):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), unique=True, nullable=False)
    start_date = Column(String(50), nullable=False)
    category = Column(SQLEnum(EventCategory), default=EventCategory.TICKETING, nullable=False)
    subcategory = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(SQLEnum(EventStatus), default=EventStatus.ACTIVE, nullable=False)
    ticket_price = Column(String(50), nullable=True)
    image_url = Column(String(500), nullable=True)
    registration_deadline = Column(String(50), nullable=True)
    location_details = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())


class Announcement(Base):
    __tablename__ = "announcements"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    audience = Column(SQLEnum(Audience), default=Audience.ALL, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())


class News(Base):
    __tablename__ = "news"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=False)
    image = Column(String(500), nullable=True)
    image_key = Column(String(500), nullable=True)
    date = Column(DateTime(timezone=True), server_default=func.now())
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class Judge(Base):
    __tablename__ = "judges"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    contact = Column(String(20), nullable=False)
    account_id = Column(Integer, ForeignKey("accounts.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    assignments = relationship("JudgeAssignment", back_populates="judge", cascade="all, delete-orphan")


class JudgeAssignment(Base):
    __tablename__ = "judge_assignments"

    id = Column(Integer, primary_key=True, index=True)
    judge_id = Column(Integer, ForeignKey("judges.id", ondelete="CASCADE"), nullable=False)
    game_id = Column(Integer, ForeignKey("games.id", ondelete="CASCADE"), nullable=False)
    status = Column(SQLEnum(AssignmentStatus), default=AssignmentStatus.PENDING, nullable=False)
    winner = Column(String(255), nullable=True)
    runner_up = Column(String(255), nullable=True)
    announced_at = Column(DateTime(timezone=True), nullable=True)

    judge = relationship("Judge", back_populates="assignments")
    game = relationship("Game")


class ContactMessage(Base):
    __tablename__ = "contact_messages"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)
    department = Column(String(150), nullable=True)
    subject = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    account_id = Column(Integer, ForeignKey("accounts.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class RevokedToken(Base):
    __tablename__ = "revoked_tokens"

    id = Column(Integer, primary_key=True, index=True)
    token_hash = Column(String(64), unique=True, index=True, nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
