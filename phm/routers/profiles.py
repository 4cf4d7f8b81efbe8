# phm/routers/profiles.py
from typing import Dict, Optional

from fastapi import APIRouter, Depends
from pydantic.alias_generators import to_snake

from phm.auth.deps import get_current_user
from phm.models.user import User
from phm.presentation.cognitive import (
    PROFILE_LABELS,
    CognitiveProfile,
    bionic_segments,
    resolve_settings,
    settings_for_profile,
    soften_error,
)
from phm.schemas.profile import PreviewIn, PreviewOut, ProfileOut, ProfileSettingsOut, SegmentOut

router = APIRouter(prefix="/api/profiles", tags=["profiles"])


def _profile_out(profile: CognitiveProfile) -> ProfileOut:
    return ProfileOut(
        profile=profile,
        label=PROFILE_LABELS[profile],
        settings=ProfileSettingsOut(**settings_for_profile(profile).to_dict()),
    )


def _snake_keys(flags: Optional[Dict[str, bool]]) -> Dict[str, bool]:
    return {to_snake(k): v for k, v in (flags or {}).items()}


@router.get("")
def list_profiles(user: User = Depends(get_current_user)):
    return {"data": [_profile_out(p) for p in CognitiveProfile]}


@router.get("/{profile}")
def get_profile(profile: CognitiveProfile, user: User = Depends(get_current_user)):
    return {"data": _profile_out(profile)}


@router.post("/preview")
def preview(payload: PreviewIn, user: User = Depends(get_current_user)):
    """Render sample text and an error message the way a profile would see them."""
    settings = resolve_settings(payload.profile, _snake_keys(payload.settings))
    out = PreviewOut(
        settings=ProfileSettingsOut(**settings.to_dict()),
        segments=[SegmentOut(text=s.text, bold=s.bold) for s in bionic_segments(payload.text or "", settings)],
        message=soften_error(payload.message, settings) if payload.message else None,
    )
    return {"data": out}
