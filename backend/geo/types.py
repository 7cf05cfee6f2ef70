from __future__ import annotations

from typing import Callable, TypeAlias


# (lon, lat) in degrees. Longitude may leave [-180, 180] for unwrapped paths.
Coordinate: TypeAlias = tuple[float, float]

# (x, y) in the projector's output units.
Point2D: TypeAlias = tuple[float, float]

# Forward projection; must accept any longitude, not only canonical ones.
Projector: TypeAlias = Callable[[float, float], Point2D]
