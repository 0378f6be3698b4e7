# db/models/competition.py
import uuid
from datetime import datetime
from typing import List, Optional
from sqlalchemy import (
    Boolean, CheckConstraint, DateTime, Enum as SAEnum, Float, ForeignKey, Integer, String, Text,
    UniqueConstraint, Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from formco.db.models._base import Base, JsonType
from formco.db.enums import CompetitionMode
from formco.utils.clock import utcnow

class Competition(Base):
    __tablename__ = "competition"
    __table_args__ = (
        UniqueConstraint("organization_id", "title", name="uq_competition_organization_title"),
        CheckConstraint("registration_fee >= 0", name="ck_competition_fee_non_negative"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    title: Mapped[str] = mapped_column(String(256), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    instructions: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(String(128), nullable=False)
    mode: Mapped[CompetitionMode] = mapped_column(
        SAEnum(CompetitionMode, name="competition_mode"), nullable=False, default=CompetitionMode.ONLINE
    )
    location: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)
    event: Mapped[Optional[str]] = mapped_column(String(256), nullable=True)

    is_team_event: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    team_size_min: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    team_size_max: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    registration_fee: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    verification_needed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    account_details: Mapped[Optional[dict]] = mapped_column(JsonType, nullable=True)

    required_application_fields: Mapped[list] = mapped_column(JsonType, nullable=False, default=list)
    skills_required: Mapped[list] = mapped_column(JsonType, nullable=False, default=list)
    eligibility: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    deadline_to_apply: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False)
    start_date: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False)
    end_date: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=utcnow)

    organization_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("organization.id", ondelete="CASCADE"), nullable=False, index=True
    )
    organizer_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("organizer.id", ondelete="SET NULL"), nullable=True
    )

    organization: Mapped["Organization"] = relationship(back_populates="competitions")
    applications: Mapped[List["Application"]] = relationship(
        back_populates="competition", cascade="all, delete-orphan", passive_deletes=True
    )
