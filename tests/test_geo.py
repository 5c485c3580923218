from __future__ import annotations

import json

import pytest

from catmouse.api.models import Coordinate
from catmouse.errors import ValidationError
from catmouse.geo import parse_coordinates, point_in_polygon

SQUARE = [
    {"latitude": 45.742, "longitude": 4.635},
    {"latitude": 45.748, "longitude": 4.635},
    {"latitude": 45.748, "longitude": 4.640},
    {"latitude": 45.742, "longitude": 4.640},
]


def test_parse_coordinates_keeps_order() -> None:
    points = parse_coordinates(json.dumps(SQUARE))
    assert [(p.latitude, p.longitude) for p in points] == [(c["latitude"], c["longitude"]) for c in SQUARE]


@pytest.mark.parametrize(
    "text",
    [
        "not json",
        '{"latitude": 1, "longitude": 2}',
        '[{"latitude": 1}]',
        '[{"latitude": "north", "longitude": 2}]',
    ],
)
def test_parse_coordinates_rejects_bad_shapes(text: str) -> None:
    with pytest.raises(ValidationError):
        parse_coordinates(text)


def test_point_in_polygon() -> None:
    polygon = parse_coordinates(json.dumps(SQUARE))

    assert point_in_polygon(Coordinate(latitude=45.745, longitude=4.637), polygon) is True
    assert point_in_polygon(Coordinate(latitude=45.750, longitude=4.637), polygon) is False
    assert point_in_polygon(Coordinate(latitude=45.745, longitude=4.630), polygon) is False


def test_degenerate_polygon_contains_nothing() -> None:
    line = [Coordinate(latitude=0, longitude=0), Coordinate(latitude=1, longitude=1)]
    assert point_in_polygon(Coordinate(latitude=0.5, longitude=0.5), line) is False
