import pytest

from feed_engine.errors import InvalidInputError
from feed_engine.models import Profile
from feed_engine.profile_gate import (
    OnboardingStep,
    evaluate,
    is_complete,
    missing_fields,
    next_missing_field,
    next_onboarding_step,
    requires_gate,
)


def test_complete_profile(complete_profile):
    assert is_complete(complete_profile)
    assert missing_fields(complete_profile) == []
    assert next_missing_field(complete_profile) is None


def test_missing_profile_is_incomplete():
    assert not is_complete(None)
    assert missing_fields(None) == ["all"]


def test_empty_skills_is_the_only_gap(complete_profile):
    complete_profile["skills"] = []
    assert not is_complete(complete_profile)
    assert missing_fields(complete_profile) == ["skills"]


def test_first_job_allows_empty_experiences(complete_profile):
    complete_profile.update(experiences=[], is_first_job=True)
    assert "experiences" not in missing_fields(complete_profile)
    assert is_complete(complete_profile)


def test_empty_experiences_without_first_job_is_missing(complete_profile):
    complete_profile.update(experiences=[], is_first_job=False)
    assert missing_fields(complete_profile) == ["experiences"]


def test_null_experiences_is_missing_even_for_first_job(complete_profile):
    complete_profile.update(experiences=None, is_first_job=True)
    assert missing_fields(complete_profile) == ["experiences"]


def test_empty_cnh_list_is_accepted(complete_profile):
    complete_profile["cnh_types"] = []
    assert is_complete(complete_profile)


@pytest.mark.parametrize("field", ["cnh_types", "is_first_job"])
def test_nullable_fields_must_be_present(complete_profile, field):
    del complete_profile[field]
    assert missing_fields(complete_profile) == [field]


def test_false_first_job_flag_counts_as_present(complete_profile):
    assert complete_profile["is_first_job"] is False
    assert "is_first_job" not in missing_fields(complete_profile)


def test_blank_strings_are_missing(complete_profile):
    complete_profile.update(full_name="   ", address="")
    assert missing_fields(complete_profile) == ["full_name", "address"]


def test_missing_fields_follow_fixed_order():
    assert missing_fields({"id": "u"}) == [
        "full_name",
        "city",
        "state",
        "birth_date",
        "education",
        "experiences",
        "skills",
        "cnh_types",
        "is_first_job",
        "professional_summary",
        "address",
    ]
    assert next_missing_field({"id": "u"}) == "full_name"


def test_next_missing_field_presents_one_at_a_time(complete_profile):
    complete_profile.update(state=None, skills=[], address=None)
    assert next_missing_field(complete_profile) == "state"


def test_accepts_profile_models(complete_profile):
    assert is_complete(Profile.from_record(complete_profile))


def test_malformed_profile_raises(complete_profile):
    complete_profile["birth_date"] = "not a date"
    with pytest.raises(InvalidInputError) as exc:
        missing_fields(complete_profile)
    assert exc.value.record_id == "u-1"


def test_onboarding_priority_user_type_first():
    assert next_onboarding_step({"full_name": "", "city_id": None}) is OnboardingStep.NEEDS_USER_TYPE
    assert next_onboarding_step(None) is OnboardingStep.NEEDS_USER_TYPE


def test_onboarding_priority_name_before_city():
    profile = {"user_type": "candidate", "full_name": "  ", "city_id": None}
    assert next_onboarding_step(profile) is OnboardingStep.NEEDS_NAME


def test_onboarding_city_step():
    profile = {"user_type": "recruiter", "full_name": "Carla", "city_id": None}
    assert next_onboarding_step(profile) is OnboardingStep.NEEDS_CITY


def test_onboarding_complete(complete_profile):
    assert next_onboarding_step(complete_profile) is OnboardingStep.COMPLETE
    assert OnboardingStep.COMPLETE.route == "/feed"


def test_step_routes():
    assert OnboardingStep.NEEDS_USER_TYPE.route == "/setup-account"
    assert OnboardingStep.NEEDS_NAME.route == "/complete-profile-info"
    assert OnboardingStep.NEEDS_CITY.route == "/complete-profile-info"


def test_onboarding_gate_is_independent_of_profile_completeness():
    profile = {"user_type": "candidate", "full_name": "Bruno", "city_id": 3}
    decision = evaluate(profile)
    assert decision.next_step is OnboardingStep.COMPLETE
    assert not decision.complete
    assert decision.missing[0] == "city"


def test_evaluate_complete(complete_profile):
    decision = evaluate(complete_profile)
    assert decision.complete
    assert decision.missing == []
    assert decision.next_step is OnboardingStep.COMPLETE


def test_evaluate_none():
    decision = evaluate(None)
    assert not decision.complete
    assert decision.missing == ["all"]
    assert decision.next_step is OnboardingStep.NEEDS_USER_TYPE


@pytest.mark.parametrize(
    "path,gated",
    [
        ("/feed", True),
        ("/profile/ana", True),
        ("/login", False),
        ("/setup-account", False),
        ("/complete-profile-info", False),
        ("/auth/callback?code=x", False),
    ],
)
def test_requires_gate(path, gated):
    assert requires_gate(path) is gated
