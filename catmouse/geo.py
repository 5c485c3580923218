from __future__ import annotations

import json
from collections.abc import Sequence

from pydantic import ValidationError as PydanticValidationError

from catmouse.api.models import Coordinate
from catmouse.errors import ValidationError


def parse_coordinates(text: str) -> list[Coordinate]:
    """Decode zone coordinates stored as JSON text.

    Only the shape is checked: a JSON array of {latitude, longitude} objects.
    Point count and polygon geometry are left to the caller.
    """

    try:
        raw = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValidationError(f"coordinates must be JSON: {e.msg}") from e

    if not isinstance(raw, list):
        raise ValidationError("coordinates must be a JSON array")

    points: list[Coordinate] = []
    for idx, item in enumerate(raw):
        try:
            points.append(Coordinate.model_validate(item))
        except PydanticValidationError as e:
            raise ValidationError(f"coordinates[{idx}] must have numeric latitude and longitude") from e
    return points


def point_in_polygon(point: Coordinate, polygon: Sequence[Coordinate]) -> bool:
    # Even-odd ray casting in lat/lon space; fine for play areas a few km wide.
    if len(polygon) < 3:
        return False

    x, y = point.longitude, point.latitude
    inside = False
    j = len(polygon) - 1
    for i in range(len(polygon)):
        xi, yi = polygon[i].longitude, polygon[i].latitude
        xj, yj = polygon[j].longitude, polygon[j].latitude
        if (yi > y) != (yj > y):
            x_cross = (xj - xi) * (y - yi) / (yj - yi) + xi
            if x < x_cross:
                inside = not inside
        j = i
    return inside
