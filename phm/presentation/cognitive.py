# phm/presentation/cognitive.py
"""
Cognitive accessibility presets.

A profile is a named bundle of presentation flags. Clients pick a profile
(or send explicit settings) and the server threads the resulting
``ProfileSettings`` through whatever renders text for them: bionic
reading segments and softened error messages.
"""
from __future__ import annotations

import math
import re
from dataclasses import asdict, dataclass, replace
from enum import Enum
from typing import Dict, List, Optional


class CognitiveProfile(str, Enum):
    DEFAULT = "default"
    LASER_FOCUS = "laser-focus"
    CLARITY = "clarity"
    CALM = "calm"


PROFILE_LABELS: Dict[CognitiveProfile, str] = {
    CognitiveProfile.DEFAULT: "Default",
    CognitiveProfile.LASER_FOCUS: "Laser Focus",
    CognitiveProfile.CLARITY: "Clarity",
    CognitiveProfile.CALM: "Calm",
}


@dataclass(frozen=True)
class ProfileSettings:
    focus_mode_enabled: bool = False
    show_parking_lot: bool = False
    visual_timers_enabled: bool = False
    gamification_enabled: bool = False
    reading_ruler_enabled: bool = False
    bionic_reading_enabled: bool = False
    large_hit_areas: bool = False
    hide_notification_badges: bool = False
    soft_errors_enabled: bool = False
    confirm_destructive_actions: bool = False

    def to_dict(self) -> Dict[str, bool]:
        return asdict(self)


_PRESETS: Dict[CognitiveProfile, ProfileSettings] = {
    CognitiveProfile.DEFAULT: ProfileSettings(),
    CognitiveProfile.LASER_FOCUS: ProfileSettings(
        focus_mode_enabled=True,
        show_parking_lot=True,
        visual_timers_enabled=True,
        gamification_enabled=True,
    ),
    CognitiveProfile.CLARITY: ProfileSettings(
        reading_ruler_enabled=True,
        large_hit_areas=True,
    ),
    CognitiveProfile.CALM: ProfileSettings(
        hide_notification_badges=True,
        soft_errors_enabled=True,
        confirm_destructive_actions=True,
    ),
}


def settings_for_profile(profile: CognitiveProfile | str) -> ProfileSettings:
    return _PRESETS[CognitiveProfile(profile)]


def resolve_settings(
    profile: Optional[CognitiveProfile | str] = None,
    overrides: Optional[Dict[str, bool]] = None,
) -> ProfileSettings:
    """Start from a preset and apply explicit per-flag overrides on top."""
    base = settings_for_profile(profile or CognitiveProfile.DEFAULT)
    if not overrides:
        return base
    known = {k: bool(v) for k, v in overrides.items() if k in ProfileSettings.__dataclass_fields__}
    return replace(base, **known)


def profile_from_header(value: Optional[str]) -> Optional[ProfileSettings]:
    if not value:
        return None
    try:
        return settings_for_profile(value.strip().lower())
    except ValueError:
        return None


# ----------------------------------------------------
# Bionic reading
# ----------------------------------------------------
BIONIC_RATIO = 0.4
_WS = re.compile(r"(\s+)")


@dataclass(frozen=True)
class TextSegment:
    text: str
    bold: bool = False


def bionic_segments(text: str, settings: ProfileSettings) -> List[TextSegment]:
    """
    Split text into bold/plain segments. The first 40% (rounded up) of
    every word is bold. Whitespace is kept as-is so the segments join back
    into the original string.
    """
    if not settings.bionic_reading_enabled:
        return [TextSegment(text)] if text else []

    out: List[TextSegment] = []
    for part in _WS.split(text):
        if not part:
            continue
        if part.isspace():
            out.append(TextSegment(part))
            continue
        cut = math.ceil(len(part) * BIONIC_RATIO)
        out.append(TextSegment(part[:cut], bold=True))
        if part[cut:]:
            out.append(TextSegment(part[cut:]))
    return out


# ----------------------------------------------------
# Soft errors
# ----------------------------------------------------
_SOFT_WORDS = [
    ("invalid", "not quite right"),
    ("error", "issue"),
    ("failed", "didn't work"),
    ("cannot", "can't"),
    ("must", "should"),
    ("required", "needed"),
    ("forbidden", "not available"),
    ("unauthorized", "need permission"),
    ("denied", "not allowed right now"),
]
_SOFT_PATTERNS = [(re.compile(rf"\b{w}\b", re.IGNORECASE), r) for w, r in _SOFT_WORDS]


def soften_error(message: str, settings: ProfileSettings) -> str:
    if not settings.soft_errors_enabled or not message:
        return message
    for pattern, repl in _SOFT_PATTERNS:
        message = pattern.sub(repl, message)
    return message
