"""Shared fixtures: user record factory and a loaded sample page."""

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from src.core.schemas import UserRecord

FIXTURES_DIR = Path(__file__).parent / "fixtures"


def _user_payload(
    n: int = 0,
    *,
    first: str | None = None,
    last: str = "Doe",
    email: str | None = None,
    username: str | None = None,
    city: str = "Springfield",
    country: str = "United States",
    age: int = 30,
    postcode: str | int = 12345,
) -> dict[str, Any]:
    """Wire-shaped user dict, unique per n unless overridden."""
    first = first or f"User{n}"
    return {
        "gender": "female",
        "name": {"title": "Ms", "first": first, "last": last},
        "location": {
            "street": {"number": 100 + n, "name": "Main Street"},
            "city": city,
            "state": "Oregon",
            "country": country,
            "postcode": postcode,
            "coordinates": {"latitude": "45.5", "longitude": "-122.6"},
            "timezone": {"offset": "-8:00", "description": "Pacific Time"},
        },
        "email": email or f"user{n}@example.com",
        "login": {"uuid": f"uuid-{n}", "username": username or f"user{n}"},
        "dob": {"date": "1994-03-01T10:00:00.000Z", "age": age},
        "registered": {"date": "2015-06-01T10:00:00.000Z", "age": 10},
        "phone": "(555) 010-0000",
        "cell": "(555) 010-0001",
        "id": {"name": "SSN", "value": f"000-00-{n:04d}"},
        "picture": {
            "large": f"https://randomuser.me/api/portraits/women/{n}.jpg",
            "medium": f"https://randomuser.me/api/portraits/med/women/{n}.jpg",
            "thumbnail": f"https://randomuser.me/api/portraits/thumb/women/{n}.jpg",
        },
        "nat": "US",
    }


@pytest.fixture
def user_payload() -> Callable[..., dict[str, Any]]:
    return _user_payload


@pytest.fixture
def make_user() -> Callable[..., UserRecord]:
    def _make(n: int = 0, **kwargs: Any) -> UserRecord:
        return UserRecord.model_validate(_user_payload(n, **kwargs))

    return _make


@pytest.fixture
def sample_page_json() -> str:
    return (FIXTURES_DIR / "randomuser_page.json").read_text()


@pytest.fixture
def sample_page_dict(sample_page_json: str) -> dict[str, Any]:
    return json.loads(sample_page_json)  # type: ignore[no-any-return]
