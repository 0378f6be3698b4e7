# db/models/student.py
import uuid
from datetime import datetime
from typing import Optional
from sqlalchemy import Enum as SAEnum, DateTime, ForeignKey, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column
from formco.db.models._base import Base
from formco.db.enums import EducationLevel
from formco.utils.clock import utcnow

class Student(Base):
    __tablename__ = "student"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(256), nullable=False)
    email: Mapped[str] = mapped_column(String(254), nullable=False, unique=True)
    phone: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    education_level: Mapped[EducationLevel] = mapped_column(SAEnum(EducationLevel, name="education_level"), nullable=False)
    year_or_semester: Mapped[str] = mapped_column(String(32), nullable=False)
    country: Mapped[str] = mapped_column(String(64), nullable=False, default="Pakistan")
    organization_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("organization.id", ondelete="SET NULL"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=utcnow)
