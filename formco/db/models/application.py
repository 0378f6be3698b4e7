# db/models/application.py
import uuid
from datetime import datetime
from typing import Optional
from sqlalchemy import Boolean, DateTime, Enum as SAEnum, Float, ForeignKey, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from formco.db.models._base import Base, JsonType
from formco.db.enums import AcceptanceStatus
from formco.utils.clock import utcnow

class Application(Base):
    __tablename__ = "application"
    __table_args__ = (
        UniqueConstraint("competition_id", "student_id", name="uq_application_competition_student"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    competition_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("competition.id", ondelete="CASCADE"), nullable=False, index=True
    )
    student_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("student.id", ondelete="CASCADE"), nullable=False, index=True
    )

    team_name: Mapped[Optional[str]] = mapped_column(String(256), nullable=True)
    team_members: Mapped[list] = mapped_column(JsonType, nullable=False, default=list)

    payment_amount: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    payment_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, index=True)
    payment_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=False), nullable=True)
    receipt_image: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)
    transaction_id: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    verification_code: Mapped[str] = mapped_column(String(16), nullable=False)

    attended: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    accepted: Mapped[AcceptanceStatus] = mapped_column(
        SAEnum(AcceptanceStatus, name="acceptance_status"), nullable=False, default=AcceptanceStatus.PENDING
    )
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    submitted_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False), nullable=False, default=utcnow, onupdate=utcnow
    )

    competition: Mapped["Competition"] = relationship(back_populates="applications")
