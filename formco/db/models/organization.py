# db/models/organization.py
import uuid
from datetime import datetime
from typing import List, Optional
from sqlalchemy import Column, DateTime, ForeignKey, String, Table, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from formco.db.models._base import Base
from formco.utils.clock import utcnow

organization_organizer = Table(
    "organization_organizer",
    Base.metadata,
    Column("organization_id", Uuid, ForeignKey("organization.id", ondelete="CASCADE"), primary_key=True),
    Column("organizer_id", Uuid, ForeignKey("organizer.id", ondelete="CASCADE"), primary_key=True),
)

class Organization(Base):
    __tablename__ = "organization"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(256), nullable=False)
    email: Mapped[str] = mapped_column(String(254), nullable=False, unique=True)
    website: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)
    logo: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)
    secret_code: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=utcnow)

    organizers: Mapped[List["Organizer"]] = relationship(
        secondary=organization_organizer, back_populates="organizations"
    )
    competitions: Mapped[List["Competition"]] = relationship(
        back_populates="organization", cascade="all, delete-orphan", passive_deletes=True
    )
