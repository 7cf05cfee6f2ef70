from __future__ import annotations

import os


_DEFAULT_PROJECTOR = "mercator"
_DEFAULT_GEODESIC_THRESHOLD_M = 55_555.0
_DEFAULT_ARC_POINTS = 100


def projector_name() -> str:
    v = (os.getenv("TILEBAG_PROJECTOR") or _DEFAULT_PROJECTOR).strip().lower()
    return v or _DEFAULT_PROJECTOR


def geodesic_threshold_m() -> float:
    """
    Segments shorter than this (in meters) are drawn as straight lines instead of
    being interpolated along the geodesic.
    """
    raw = (os.getenv("TILEBAG_GEODESIC_THRESHOLD_M") or "").strip()
    if not raw:
        return _DEFAULT_GEODESIC_THRESHOLD_M
    try:
        v = float(raw)
    except ValueError:
        raise ValueError(f"TILEBAG_GEODESIC_THRESHOLD_M must be a number, got {raw!r}") from None
    if v < 0:
        raise ValueError(f"TILEBAG_GEODESIC_THRESHOLD_M must be >= 0, got {raw!r}")
    return v


def arc_points() -> int:
    """
    Count of points forming a full circle; a geodesic segment uses half of it.
    """
    raw = (os.getenv("TILEBAG_ARC_POINTS") or "").strip()
    if not raw:
        return _DEFAULT_ARC_POINTS
    try:
        v = int(raw)
    except ValueError:
        raise ValueError(f"TILEBAG_ARC_POINTS must be an integer, got {raw!r}") from None
    return check_arc_points(v, name="TILEBAG_ARC_POINTS")


def check_arc_points(v: int, *, name: str = "arc_points") -> int:
    if v < 4 or v % 2:
        raise ValueError(f"{name} must be an even integer >= 4, got {v!r}")
    return v
