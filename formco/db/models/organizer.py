# db/models/organizer.py
import uuid
from datetime import datetime
from typing import List, Optional
from sqlalchemy import DateTime, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from formco.db.models._base import Base
from formco.db.models.organization import organization_organizer
from formco.utils.clock import utcnow

class Organizer(Base):
    __tablename__ = "organizer"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(256), nullable=False)
    email: Mapped[str] = mapped_column(String(254), nullable=False, unique=True)
    phone: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    department: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    position: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=utcnow)

    organizations: Mapped[List["Organization"]] = relationship(
        secondary=organization_organizer, back_populates="organizers"
    )
