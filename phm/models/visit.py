# phm/models/visit.py
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import (
    JSON,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from phm.db import Base

SURVEY_TYPES = ("boiler", "heat_pump", "solar_pv", "ev_charger", "full_home")
VISIT_STATUSES = ("in_progress", "completed", "abandoned")
MODULE_TYPES = (
    "property",
    "central_heating",
    "heat_pump",
    "solar_pv",
    "ev_charger",
    "hazards",
    "insulation",
    "glazing",
)
MODULE_STATUSES = ("pending", "in_progress", "completed", "skipped")
OBSERVATION_CATEGORIES = ("equipment", "property", "customer_requirement", "hazard")
CONFIDENCE_LEVELS = ("low", "medium", "high", "confirmed")
MEDIA_FILE_TYPES = ("photo", "document")


class VisitSession(Base):
    __tablename__ = "visit_sessions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    account_id: Mapped[int] = mapped_column(
        ForeignKey("accounts.id", ondelete="CASCADE"), index=True, nullable=False
    )
    customer_id: Mapped[int] = mapped_column(
        ForeignKey("customers.id", ondelete="CASCADE"), index=True, nullable=False
    )
    appointment_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("appointments.id", ondelete="SET NULL"), nullable=True
    )

    survey_type: Mapped[str] = mapped_column(String(50), nullable=False)
    status: Mapped[str] = mapped_column(String(50), nullable=False, default="in_progress")
    started_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    surveyor_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), index=True, nullable=True
    )
    weather_conditions: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # opaque token for the public report view
    share_id: Mapped[Optional[str]] = mapped_column(String(36), unique=True, index=True, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    customer: Mapped["Customer"] = relationship("Customer", back_populates="visits")
    modules: Mapped[List["SurveyModule"]] = relationship(
        "SurveyModule",
        back_populates="visit_session",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="SurveyModule.id",
    )
    transcriptions: Mapped[List["Transcription"]] = relationship(
        "Transcription",
        back_populates="visit_session",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Transcription.recorded_at",
    )
    observations: Mapped[List["VisitObservation"]] = relationship(
        "VisitObservation",
        back_populates="visit_session",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="VisitObservation.id",
    )
    media: Mapped[List["MediaAttachment"]] = relationship(
        "MediaAttachment",
        back_populates="visit_session",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="MediaAttachment.id",
    )

    def __repr__(self) -> str:
        return f"<VisitSession id={self.id} type={self.survey_type} status={self.status}>"


class SurveyModule(Base):
    __tablename__ = "survey_modules"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    visit_session_id: Mapped[int] = mapped_column(
        ForeignKey("visit_sessions.id", ondelete="CASCADE"), index=True, nullable=False
    )
    module_type: Mapped[str] = mapped_column(String(50), nullable=False)
    status: Mapped[str] = mapped_column(String(50), nullable=False, default="pending")
    data: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)
    started_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    visit_session: Mapped["VisitSession"] = relationship("VisitSession", back_populates="modules")

    def __repr__(self) -> str:
        return f"<SurveyModule id={self.id} visit={self.visit_session_id} type={self.module_type}>"


class Transcription(Base):
    __tablename__ = "transcriptions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    visit_session_id: Mapped[int] = mapped_column(
        ForeignKey("visit_sessions.id", ondelete="CASCADE"), index=True, nullable=False
    )
    module_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("survey_modules.id", ondelete="SET NULL"), nullable=True
    )

    audio_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    transcript_text: Mapped[str] = mapped_column(Text, nullable=False)
    confidence: Mapped[Optional[Decimal]] = mapped_column(Numeric(5, 4), nullable=True)
    language: Mapped[str] = mapped_column(String(10), nullable=False, default="en-GB")
    duration_seconds: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    recorded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    processed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    visit_session: Mapped["VisitSession"] = relationship("VisitSession", back_populates="transcriptions")

    def __repr__(self) -> str:
        return f"<Transcription id={self.id} visit={self.visit_session_id}>"


class VisitObservation(Base):
    __tablename__ = "visit_observations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    visit_session_id: Mapped[int] = mapped_column(
        ForeignKey("visit_sessions.id", ondelete="CASCADE"), index=True, nullable=False
    )
    transcription_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("transcriptions.id", ondelete="SET NULL"), nullable=True
    )

    observation_type: Mapped[str] = mapped_column(String(50), nullable=False)
    category: Mapped[str] = mapped_column(String(50), nullable=False)
    key: Mapped[str] = mapped_column(String(100), nullable=False)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    confidence: Mapped[str] = mapped_column(String(20), nullable=False, default="high")
    context: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    visit_session: Mapped["VisitSession"] = relationship("VisitSession", back_populates="observations")

    def __repr__(self) -> str:
        return f"<VisitObservation id={self.id} {self.key}={self.value!r}>"


class MediaAttachment(Base):
    __tablename__ = "media_attachments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    visit_session_id: Mapped[int] = mapped_column(
        ForeignKey("visit_sessions.id", ondelete="CASCADE"), index=True, nullable=False
    )
    module_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("survey_modules.id", ondelete="SET NULL"), nullable=True
    )

    file_type: Mapped[str] = mapped_column(String(50), nullable=False)
    file_name: Mapped[str] = mapped_column(String(255), nullable=False)
    file_path: Mapped[str] = mapped_column(String(500), nullable=False)
    file_size: Mapped[int] = mapped_column(Integer, nullable=False)
    mime_type: Mapped[str] = mapped_column(String(100), nullable=False)
    caption: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    # "metadata" is reserved on declarative classes
    meta: Mapped[Optional[dict]] = mapped_column("metadata", JSON, nullable=True)
    thumbnail_path: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    uploaded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    visit_session: Mapped["VisitSession"] = relationship("VisitSession", back_populates="media")

    def __repr__(self) -> str:
        return f"<MediaAttachment id={self.id} visit={self.visit_session_id} file={self.file_name!r}>"
