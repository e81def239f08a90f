"""Settlement records and the in-memory settlement directory."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, Iterable, List, Mapping, MutableMapping

from .coords import HexCoord, coerce_coord


class GovernmentType(str, Enum):
    """Government forms recognised by the conflict tables."""

    TRIBAL = "tribal"
    CHIEFDOM = "chiefdom"
    MONARCHY = "monarchy"
    REPUBLIC = "republic"
    DEMOCRACY = "democracy"
    THEOCRACY = "theocracy"
    OLIGARCHY = "oligarchy"
    JUNTA = "junta"
    ANARCHY = "anarchy"


@dataclass(frozen=True)
class ReligionProfile:
    """A settlement's faith and the tenets it preaches."""

    identifier: str
    tenets: frozenset[str] = frozenset()

    def compatibility(self, other: "ReligionProfile") -> float:
        """Return a score in ``[-1, 1]``; shared faith is fully compatible."""

        if self.identifier == other.identifier:
            return 1.0
        union = self.tenets | other.tenets
        if not union:
            return 0.0
        shared = len(self.tenets & other.tenets) / len(union)
        score = shared * 2.0 - 1.0
        if ("pacifism" in self.tenets) != ("pacifism" in other.tenets):
            score -= 0.25
        return max(-1.0, min(1.0, score))


@dataclass
class Settlement:
    """An autonomous polity taking part in the conflict simulation."""

    identifier: str
    name: str
    population: int
    soldiers: int = 0
    influences: MutableMapping[str, float] = field(default_factory=dict)
    government: GovernmentType = GovernmentType.CHIEFDOM
    religion: ReligionProfile | None = None
    traditions: frozenset[str] = frozenset()
    specializations: frozenset[str] = frozenset()
    unrest: float = 0.0
    famine: bool = False
    drought: bool = False
    disaster: bool = False
    revolution: bool = False
    grudges: MutableMapping[str, float] = field(default_factory=dict)
    embargoes: frozenset[str] = frozenset()
    bonds: frozenset[str] = frozenset()
    location: HexCoord = field(default_factory=lambda: HexCoord(0, 0))
    landmass: str | None = None
    regions: List[str] = field(default_factory=list)
    active_conflict: int | None = None

    def influence(self, name: str) -> float:
        return float(self.influences.get(name, 0.0))

    def distance_to(self, other: "Settlement") -> int:
        return self.location.distance_to(other.location)

    @property
    def alive(self) -> bool:
        return self.population > 0

    def to_dict(self) -> Dict[str, object]:
        return {
            "identifier": self.identifier,
            "name": self.name,
            "population": self.population,
            "soldiers": self.soldiers,
            "influences": dict(self.influences),
            "government": self.government.value,
            "religion": (
                None
                if self.religion is None
                else {
                    "identifier": self.religion.identifier,
                    "tenets": sorted(self.religion.tenets),
                }
            ),
            "traditions": sorted(self.traditions),
            "specializations": sorted(self.specializations),
            "unrest": self.unrest,
            "famine": self.famine,
            "drought": self.drought,
            "disaster": self.disaster,
            "revolution": self.revolution,
            "grudges": dict(self.grudges),
            "embargoes": sorted(self.embargoes),
            "bonds": sorted(self.bonds),
            "location": [self.location.q, self.location.r],
            "landmass": self.landmass,
            "regions": list(self.regions),
            "active_conflict": self.active_conflict,
        }

    @staticmethod
    def from_dict(payload: Mapping[str, object]) -> "Settlement":
        influences: Dict[str, float] = {}
        raw_influences = payload.get("influences", {})
        if isinstance(raw_influences, Mapping):
            for key, value in raw_influences.items():
                influences[str(key)] = float(value)
        religion = None
        raw_religion = payload.get("religion")
        if isinstance(raw_religion, Mapping):
            religion = ReligionProfile(
                identifier=str(raw_religion.get("identifier")),
                tenets=frozenset(_strings(raw_religion.get("tenets"))),
            )
        grudges: Dict[str, float] = {}
        raw_grudges = payload.get("grudges", {})
        if isinstance(raw_grudges, Mapping):
            for key, value in raw_grudges.items():
                grudges[str(key)] = float(value)
        raw_conflict = payload.get("active_conflict")
        return Settlement(
            identifier=str(payload.get("identifier")),
            name=str(payload.get("name", "Settlement")),
            population=max(0, int(payload.get("population", 0))),
            soldiers=max(0, int(payload.get("soldiers", 0))),
            influences=influences,
            government=GovernmentType(str(payload.get("government", "chiefdom"))),
            religion=religion,
            traditions=frozenset(_strings(payload.get("traditions"))),
            specializations=frozenset(_strings(payload.get("specializations"))),
            unrest=float(payload.get("unrest", 0.0)),
            famine=bool(payload.get("famine", False)),
            drought=bool(payload.get("drought", False)),
            disaster=bool(payload.get("disaster", False)),
            revolution=bool(payload.get("revolution", False)),
            grudges=grudges,
            embargoes=frozenset(_strings(payload.get("embargoes"))),
            bonds=frozenset(_strings(payload.get("bonds"))),
            location=coerce_coord(payload.get("location")) or HexCoord(0, 0),
            landmass=(
                str(payload["landmass"]) if payload.get("landmass") is not None else None
            ),
            regions=_strings(payload.get("regions")),
            active_conflict=int(raw_conflict) if raw_conflict is not None else None,
        )


def _strings(value: object) -> list[str]:
    if isinstance(value, Iterable) and not isinstance(value, (str, bytes)):
        return [str(item) for item in value]
    return []


class SettlementManager:
    """In-memory settlement directory keyed by identifier."""

    def __init__(self, settlements: Iterable[Settlement] | None = None) -> None:
        self._settlements: Dict[str, Settlement] = {
            settlement.identifier: settlement for settlement in (settlements or [])
        }

    @property
    def settlements(self) -> Mapping[str, Settlement]:
        return self._settlements

    def add(self, settlement: Settlement) -> Settlement:
        self._settlements[settlement.identifier] = settlement
        return settlement

    def remove(self, identifier: str) -> Settlement | None:
        return self._settlements.pop(identifier, None)

    def get(self, identifier: str) -> Settlement | None:
        return self._settlements.get(identifier)

    def filter(self, predicate: Callable[[Settlement], bool]) -> list[Settlement]:
        """Return matching settlements ordered by identifier."""

        return [
            self._settlements[key]
            for key in sorted(self._settlements)
            if predicate(self._settlements[key])
        ]

    def living(self) -> list[Settlement]:
        return self.filter(lambda settlement: settlement.alive)


__all__ = ["GovernmentType", "ReligionProfile", "Settlement", "SettlementManager"]
