"""Profile completion gate.

Two related checks over a profile snapshot:

- completeness: every field the candidate onboarding form collects is
  populated according to its own presence rule (`missing_fields`,
  `is_complete`). The onboarding form is presented one field at a time, for
  the first missing field in a fixed order.
- onboarding priority: the account-level requirements (user type, then name,
  then city) that route a signed-in user to a setup page before they reach the
  feed (`next_onboarding_step`). Only one outstanding requirement is surfaced
  at a time.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Callable, List, Optional, Tuple

from pydantic import BaseModel, Field

from .models import Profile

ALL_MISSING = "all"

EXEMPT_ROUTES: Tuple[str, ...] = (
    "/login",
    "/complete-profile",
    "/complete-profile-info",
    "/setup-account",
    "/confirm-email",
    "/forgot-password",
    "/reset-password",
    "/auth/callback",
)


class OnboardingStep(str, Enum):
    NEEDS_USER_TYPE = "needs_user_type"
    NEEDS_NAME = "needs_name"
    NEEDS_CITY = "needs_city"
    COMPLETE = "complete"

    @property
    def route(self) -> str:
        return _STEP_ROUTES[self]


_STEP_ROUTES = {
    OnboardingStep.NEEDS_USER_TYPE: "/setup-account",
    OnboardingStep.NEEDS_NAME: "/complete-profile-info",
    OnboardingStep.NEEDS_CITY: "/complete-profile-info",
    OnboardingStep.COMPLETE: "/feed",
}


class GateDecision(BaseModel):
    complete: bool
    next_step: OnboardingStep
    missing: List[str] = Field(default_factory=list)


def _filled(value: Optional[str]) -> bool:
    return bool(value and value.strip())


def _non_empty(values: Optional[list]) -> bool:
    return bool(values)


def _experiences_present(p: Profile) -> bool:
    if p.experiences is None:
        return False
    # An empty history is only valid for someone looking for a first job.
    return bool(p.experiences) or p.is_first_job is not False


# Fixed check order; the onboarding form follows it.
REQUIRED_FIELDS: List[Tuple[str, Callable[[Profile], bool]]] = [
    ("full_name", lambda p: _filled(p.full_name)),
    ("city", lambda p: _filled(p.city)),
    ("state", lambda p: _filled(p.state)),
    ("birth_date", lambda p: p.birth_date is not None),
    ("education", lambda p: _non_empty(p.education)),
    ("experiences", _experiences_present),
    ("skills", lambda p: _non_empty(p.skills)),
    ("cnh_types", lambda p: p.cnh_types is not None),
    ("is_first_job", lambda p: p.is_first_job is not None),
    ("professional_summary", lambda p: _filled(p.professional_summary)),
    ("address", lambda p: _filled(p.address)),
]


def _as_profile(profile: Any) -> Optional[Profile]:
    if profile is None:
        return None
    return Profile.from_record(profile)


def missing_fields(profile: Any) -> List[str]:
    """Names of required fields that fail their presence rule, in check order.

    A missing profile yields `["all"]`. Mappings are validated into `Profile`
    first and raise `InvalidInputError` when malformed.
    """
    p = _as_profile(profile)
    if p is None:
        return [ALL_MISSING]
    return [name for name, present in REQUIRED_FIELDS if not present(p)]


def is_complete(profile: Any) -> bool:
    if profile is None:
        return False
    return not missing_fields(profile)


def next_missing_field(profile: Any) -> Optional[str]:
    """The single field the onboarding form should ask for next, or None."""
    missing = missing_fields(profile)
    return missing[0] if missing else None


def next_onboarding_step(profile: Any) -> OnboardingStep:
    p = _as_profile(profile)
    if p is None or p.user_type is None:
        return OnboardingStep.NEEDS_USER_TYPE
    if not _filled(p.full_name):
        return OnboardingStep.NEEDS_NAME
    if not p.city_id:
        return OnboardingStep.NEEDS_CITY
    return OnboardingStep.COMPLETE


def evaluate(profile: Any) -> GateDecision:
    p = _as_profile(profile)
    missing = missing_fields(p)
    return GateDecision(
        complete=not missing,
        next_step=next_onboarding_step(p),
        missing=missing,
    )


def requires_gate(path: str) -> bool:
    """False for pages a user must reach while onboarding is still outstanding."""
    return not any(path.startswith(route) for route in EXEMPT_ROUTES)
