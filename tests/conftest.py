from datetime import datetime, timedelta, timezone

import pytest

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def hours_ago(hours: float) -> str:
    return (NOW - timedelta(hours=hours)).isoformat()


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def complete_profile():
    """A candidate profile that satisfies every onboarding requirement."""
    return {
        "id": "u-1",
        "user_type": "candidate",
        "full_name": "Ana Souza",
        "city": "Campinas",
        "state": "SP",
        "city_id": 1,
        "birth_date": "1998-03-14",
        "professional_summary": "Atendimento ao público.",
        "address": "Rua das Flores, 100",
        "education": [{"level": "Ensino Médio", "institution": "EE Central", "isComplete": True}],
        "experiences": [{"position": "Caixa", "company": "Mercado Central"}],
        "skills": ["Atendimento"],
        "cnh_types": ["B"],
        "is_first_job": False,
    }
