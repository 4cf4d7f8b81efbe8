# phm/schemas/visit.py
from datetime import datetime
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import Field

from phm.schemas.common import CamelModel, JsonMap, UtcDatetime

SurveyType = Literal["boiler", "heat_pump", "solar_pv", "ev_charger", "full_home"]
VisitStatus = Literal["in_progress", "completed", "abandoned"]
ModuleType = Literal[
    "property",
    "central_heating",
    "heat_pump",
    "solar_pv",
    "ev_charger",
    "hazards",
    "insulation",
    "glazing",
]
ModuleStatus = Literal["pending", "in_progress", "completed", "skipped"]
ObservationCategory = Literal["equipment", "property", "customer_requirement", "hazard"]
Confidence = Literal["low", "medium", "high", "confirmed"]


# --- visit sessions ---
class VisitCreate(CamelModel):
    customer_id: int
    appointment_id: Optional[int] = None
    survey_type: SurveyType
    weather_conditions: Optional[str] = Field(default=None, max_length=100)
    notes: Optional[str] = None


class VisitUpdate(CamelModel):
    status: Optional[VisitStatus] = None
    weather_conditions: Optional[str] = Field(default=None, max_length=100)
    notes: Optional[str] = None


class VisitCompleteIn(CamelModel):
    notes: Optional[str] = None


class VisitOut(CamelModel):
    id: int
    account_id: int
    customer_id: int
    appointment_id: Optional[int] = None
    survey_type: str
    status: str
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    surveyor_id: Optional[int] = None
    weather_conditions: Optional[str] = None
    notes: Optional[str] = None
    share_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# --- survey modules ---
class ModuleCreate(CamelModel):
    module_type: ModuleType
    data: Optional[JsonMap] = None


class ModuleUpdate(CamelModel):
    status: Optional[ModuleStatus] = None
    data: Optional[JsonMap] = None


class ModuleOut(CamelModel):
    id: int
    visit_session_id: int
    module_type: str
    status: str
    data: Optional[JsonMap] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# --- transcriptions ---
class TranscriptionCreate(CamelModel):
    visit_session_id: int
    module_id: Optional[int] = None
    audio_url: Optional[str] = Field(default=None, max_length=500)
    transcript_text: str = Field(min_length=1)
    confidence: Optional[Decimal] = Field(default=None, ge=0, le=1)
    language: str = Field(default="en-GB", max_length=10)
    duration_seconds: Optional[int] = Field(default=None, ge=0)
    recorded_at: Optional[UtcDatetime] = None


class TranscriptionOut(CamelModel):
    id: int
    visit_session_id: int
    module_id: Optional[int] = None
    audio_url: Optional[str] = None
    transcript_text: str
    confidence: Optional[Decimal] = None
    language: str
    duration_seconds: Optional[int] = None
    recorded_at: Optional[datetime] = None
    processed_at: Optional[datetime] = None


# --- observations ---
class ObservationCreate(CamelModel):
    visit_session_id: int
    transcription_id: Optional[int] = None
    observation_type: str = Field(min_length=1, max_length=50)
    category: ObservationCategory
    key: str = Field(min_length=1, max_length=100)
    value: str = Field(min_length=1)
    confidence: Confidence = "high"
    context: Optional[str] = None


class ObservationUpdate(CamelModel):
    observation_type: Optional[str] = Field(default=None, min_length=1, max_length=50)
    category: Optional[ObservationCategory] = None
    key: Optional[str] = Field(default=None, min_length=1, max_length=100)
    value: Optional[str] = Field(default=None, min_length=1)
    confidence: Optional[Confidence] = None
    context: Optional[str] = None


class ObservationOut(CamelModel):
    id: int
    visit_session_id: int
    transcription_id: Optional[int] = None
    observation_type: str
    category: str
    key: str
    value: str
    confidence: str
    context: Optional[str] = None
    created_at: Optional[datetime] = None


class ExtractObservationsIn(CamelModel):
    visit_session_id: int
    transcription_id: Optional[int] = None
    transcript_text: Optional[str] = None


# --- media ---
class MediaOut(CamelModel):
    id: int
    visit_session_id: int
    module_id: Optional[int] = None
    file_type: str
    file_name: str
    file_size: int
    mime_type: str
    caption: Optional[str] = None
    metadata: Optional[JsonMap] = Field(
        default=None, validation_alias="meta", serialization_alias="metadata"
    )
    thumbnail_path: Optional[str] = None
    uploaded_at: Optional[datetime] = None


class MediaAnnotateIn(CamelModel):
    caption: Optional[str] = None
    metadata: Optional[JsonMap] = None


# --- composite views ---
class VisitDetailOut(VisitOut):
    modules: List[ModuleOut] = []
    transcriptions: List[TranscriptionOut] = []
    observations: List[ObservationOut] = []
    media: List[MediaOut] = []


class ShareOut(CamelModel):
    share_id: str
    share_url: str


class PublicVisitOut(CamelModel):
    id: int
    survey_type: str
    status: str
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    weather_conditions: Optional[str] = None
    notes: Optional[str] = None
