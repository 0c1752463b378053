import uuid
from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.dialects.postgresql import JSONB, UUID
from .database import Base


class Profile(Base):
    __tablename__ = "profiles"

    id = Column(UUID(as_uuid=True), primary_key=True)
    email = Column(String, nullable=True)
    display_name = Column(String, nullable=False)
    preferences = Column(JSONB, nullable=False, server_default="{}")
    birthdate = Column(Date, nullable=True)
    consent_given_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class UserRole(Base):
    __tablename__ = "user_roles"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), nullable=False)
    role = Column(String, nullable=False)

    __table_args__ = (
        UniqueConstraint("user_id", "role", name="uq_user_roles_user_role"),
        Index("idx_user_roles_user_id", "user_id"),
    )


class Quest(Base):
    __tablename__ = "quests"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    slug = Column(String, nullable=False, unique=True)
    title = Column(String, nullable=False)
    icon = Column(String, nullable=True, server_default="🎯")
    short_teaser = Column(Text, nullable=True)
    start_datetime = Column(DateTime(timezone=True), nullable=True)
    end_datetime = Column(DateTime(timezone=True), nullable=True)
    meeting_location_name = Column(String, nullable=True)
    capacity_total = Column(Integer, nullable=False, server_default="6")
    status = Column(String, nullable=False, server_default="draft")
    previous_status = Column(String, nullable=True)
    review_status = Column(String, nullable=False, server_default="draft")
    sponsor_name = Column(String, nullable=True)
    paused_at = Column(DateTime(timezone=True), nullable=True)
    paused_reason = Column(Text, nullable=True)
    revoked_at = Column(DateTime(timezone=True), nullable=True)
    revoked_reason = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        Index("idx_quests_status_review", "status", "review_status"),
    )


class QuestConstraints(Base):
    __tablename__ = "quest_constraints"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    quest_id = Column(UUID(as_uuid=True), ForeignKey("quests.id", ondelete="CASCADE"), nullable=False, unique=True)
    alcohol = Column(String, nullable=False, server_default="none")
    age_requirement = Column(String, nullable=False, server_default="all_ages")
    physical_intensity = Column(String, nullable=False, server_default="medium")
    social_intensity = Column(String, nullable=False, server_default="moderate")
    noise_level = Column(String, nullable=False, server_default="moderate")
    time_of_day = Column(String, nullable=False, server_default="flex")
    indoor_outdoor = Column(String, nullable=False, server_default="mixed")
    accessibility_level = Column(String, nullable=False, server_default="unknown")
    budget_level = Column(String, nullable=False, server_default="free")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class QuestPersonalityAffinity(Base):
    __tablename__ = "quest_personality_affinity"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    quest_id = Column(UUID(as_uuid=True), ForeignKey("quests.id", ondelete="CASCADE"), nullable=False)
    trait_key = Column(String, nullable=False)
    trait_weight = Column(Integer, nullable=False, server_default="50")
    explanation = Column(Text, nullable=True)
    ai_generated = Column(Boolean, nullable=False, server_default="false")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        UniqueConstraint("quest_id", "trait_key", name="uq_quest_affinity_trait"),
        CheckConstraint("trait_weight >= 0 AND trait_weight <= 100", name="ck_quest_affinity_weight_range"),
        Index("idx_quest_personality_affinity_quest_id", "quest_id"),
        Index("idx_quest_personality_affinity_trait", "trait_key"),
    )


class ProductEvent(Base):
    __tablename__ = "product_event"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), nullable=True)
    quest_id = Column(UUID(as_uuid=True), nullable=True)
    event_name = Column(String, nullable=False)
    properties = Column(JSONB, nullable=False, server_default="{}")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        Index("idx_product_event_name_created", "event_name", "created_at"),
    )
