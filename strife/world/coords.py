"""Axial hex coordinates used to approximate distances between settlements."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Sequence


@dataclass(frozen=True)
class HexCoord:
    """Axial hex-grid coordinate."""

    q: int
    r: int

    @property
    def s(self) -> int:
        return -self.q - self.r

    def translate(self, dq: int, dr: int) -> "HexCoord":
        return HexCoord(self.q + dq, self.r + dr)

    def distance_to(self, other: "HexCoord") -> int:
        return max(abs(self.q - other.q), abs(self.r - other.r), abs(self.s - other.s))


def coerce_coord(value: object) -> HexCoord | None:
    """Return ``value`` as a :class:`HexCoord` when it describes one."""

    if isinstance(value, HexCoord):
        return value
    if isinstance(value, Mapping):
        try:
            return HexCoord(int(value["q"]), int(value["r"]))
        except (KeyError, TypeError, ValueError):
            return None
    if isinstance(value, Sequence) and not isinstance(value, str) and len(value) == 2:
        try:
            return HexCoord(int(value[0]), int(value[1]))
        except (TypeError, ValueError):
            return None
    if isinstance(value, str) and "," in value:
        left, right = value.split(",", 1)
        try:
            return HexCoord(int(left), int(right))
        except ValueError:
            return None
    return None


__all__ = ["HexCoord", "coerce_coord"]
