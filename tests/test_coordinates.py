from __future__ import annotations

import pydantic
import pytest

from trainbuilder.api.schemas import CoordinatesIn
from trainbuilder.errors import ValidationError
from trainbuilder.schemas.core import Coordinates


@pytest.mark.parametrize(
    "raw",
    [
        {"lat": -90.0, "lon": -180.0},
        {"lat": 90.0, "lon": 180.0},
        {"lat": 52.09, "lon": 5.11},
    ],
)
def test_stored_and_requested_coordinates_accept_the_same_values(raw: dict) -> None:
    assert Coordinates.from_dict(raw) == CoordinatesIn.model_validate(raw).to_domain()


@pytest.mark.parametrize(
    "raw",
    [
        {"lat": 90.5, "lon": 0.0},
        {"lat": -90.5, "lon": 0.0},
        {"lat": 0.0, "lon": 180.5},
        {"lat": 0.0, "lon": -180.5},
        {"lat": float("nan"), "lon": 0.0},
        {"lat": 0.0, "lon": float("inf")},
    ],
)
def test_stored_and_requested_coordinates_reject_the_same_values(raw: dict) -> None:
    with pytest.raises(ValidationError):
        Coordinates.from_dict(raw)
    with pytest.raises(pydantic.ValidationError):
        CoordinatesIn.model_validate(raw)
