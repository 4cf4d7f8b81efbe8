# phm/schemas/profile.py
from typing import Dict, List, Optional

from phm.presentation.cognitive import CognitiveProfile
from phm.schemas.common import CamelModel


class ProfileSettingsOut(CamelModel):
    focus_mode_enabled: bool
    show_parking_lot: bool
    visual_timers_enabled: bool
    gamification_enabled: bool
    reading_ruler_enabled: bool
    bionic_reading_enabled: bool
    large_hit_areas: bool
    hide_notification_badges: bool
    soft_errors_enabled: bool
    confirm_destructive_actions: bool


class ProfileOut(CamelModel):
    profile: CognitiveProfile
    label: str
    settings: ProfileSettingsOut


class PreviewIn(CamelModel):
    profile: Optional[CognitiveProfile] = None
    # flag overrides, camelCase or snake_case keys
    settings: Optional[Dict[str, bool]] = None
    text: Optional[str] = None
    message: Optional[str] = None


class SegmentOut(CamelModel):
    text: str
    bold: bool


class PreviewOut(CamelModel):
    settings: ProfileSettingsOut
    segments: List[SegmentOut] = []
    message: Optional[str] = None
