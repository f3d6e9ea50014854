"""Series, race and standings records.

The input side (:class:`Series`, :class:`Race`, :class:`Result`) is frozen and
built from the raw results document with lenient field coercion: values that
should be numeric but are not are treated as absent rather than rejected.
The output side (:class:`ScoreCell`, :class:`Competitor`, :class:`Standings`)
is built fresh for every scoring request.
"""

from __future__ import annotations

import datetime as dt
import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

logger = logging.getLogger(__name__)

UNKNOWN = "N/A"

FINISHED = "FINISHED"
OOD = "OOD"
DNC = "DNC"
NR = "NR"


class DncScoringRule(Enum):
    RACE_ENTRIES = "raceEntries"
    TOTAL_COMPETITORS = "totalCompetitors"

    @classmethod
    def parse(cls, value: Any) -> "DncScoringRule":
        if value is None or str(value).strip() == "":
            return cls.RACE_ENTRIES
        if str(value).strip().lower() == cls.RACE_ENTRIES.value.lower():
            return cls.RACE_ENTRIES
        # Anything other than raceEntries scores against the whole series.
        return cls.TOTAL_COMPETITORS


def normalize_id(value: Any) -> str:
    """Return the comparison key for a series id.

    Ids may arrive as numbers or text; both compare as stripped strings and
    integral floats collapse to their integer form so ``3``, ``3.0`` and
    ``"3"`` all match.
    """
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def to_number(value: Any) -> Optional[float]:
    """Coerce ``value`` to a float or ``None`` when it is not numeric."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def to_position(value: Any) -> Union[int, str, None]:
    """Return an integer finishing place, a status code, or ``None``."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    text = str(value).strip()
    if not text:
        return None
    if text.isdigit():
        return int(text)
    return text


def _to_date(value: Any, race_number: int) -> Optional[dt.date]:
    if not value:
        return None
    try:
        return dt.date.fromisoformat(str(value).strip()[:10])
    except ValueError:
        logger.warning("Invalid date %r for race %s; ignoring", value, race_number)
        return None


def _to_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


@dataclass(frozen=True)
class Result:
    """One competitor's recorded result in one race."""

    sail_number: str
    skipper: Optional[str] = None
    boat_class: Optional[str] = None
    yardstick: Optional[float] = None
    status: Optional[str] = None
    position: Union[int, str, None] = None
    points: Optional[float] = None
    elapsed_time: Optional[str] = None
    corrected_time: Optional[str] = None

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Result":
        status = _to_text(raw.get("status"))
        yardstick = to_number(raw.get("yardstick"))
        if yardstick is not None and yardstick <= 0:
            yardstick = None
        return cls(
            sail_number=normalize_id(raw.get("sailNumber")),
            skipper=_to_text(raw.get("skipper")),
            boat_class=_to_text(raw.get("boatClass")),
            yardstick=yardstick,
            status=status.upper() if status else None,
            position=to_position(raw.get("position")),
            points=to_number(raw.get("points")),
            elapsed_time=_to_text(raw.get("elapsedTime")),
            corrected_time=_to_text(raw.get("correctedTime")),
        )

    @property
    def numeric_position(self) -> Optional[int]:
        return self.position if isinstance(self.position, int) else None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sailNumber": self.sail_number,
            "skipper": self.skipper,
            "boatClass": self.boat_class,
            "yardstick": self.yardstick,
            "status": self.status,
            "position": self.position,
            "points": self.points,
            "elapsedTime": self.elapsed_time,
            "correctedTime": self.corrected_time,
        }


@dataclass(frozen=True)
class Race:
    race_number: int
    date: Optional[dt.date] = None
    results: Tuple[Result, ...] = ()

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Race":
        number = to_number(raw.get("raceNumber"))
        if number is None or not number.is_integer():
            raise ValueError(f"race has invalid raceNumber {raw.get('raceNumber')!r}")
        race_number = int(number)
        results = raw.get("results") or []
        if not isinstance(results, list):
            raise ValueError(f"race {race_number} results must be a list")
        return cls(
            race_number=race_number,
            date=_to_date(raw.get("date"), race_number),
            results=tuple(Result.from_dict(r) for r in results if isinstance(r, dict)),
        )

    @property
    def completed(self) -> bool:
        return len(self.results) > 0

    def find_result(self, sail_number: str) -> Optional[Result]:
        for result in self.results:
            if result.sail_number == sail_number:
                return result
        return None


@dataclass(frozen=True)
class Series:
    id: Any
    name: str
    number_of_races: int
    discard_threshold: int = 0
    dnc_scoring_rule: DncScoringRule = DncScoringRule.RACE_ENTRIES
    races: Tuple[Race, ...] = ()

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Series":
        if "id" not in raw:
            raise ValueError("series record has no id")
        number = to_number(raw.get("numberOfRaces"))
        if number is None or number < 1 or not number.is_integer():
            raise ValueError(
                f"series {raw.get('id')!r} has invalid numberOfRaces {raw.get('numberOfRaces')!r}"
            )
        threshold_raw = raw.get("discardThreshold")
        threshold = to_number(threshold_raw)
        if threshold is None or threshold < 0 or not threshold.is_integer():
            if threshold_raw is not None:
                logger.warning(
                    "Series %r has invalid discardThreshold %r; discards disabled",
                    raw.get("id"),
                    threshold_raw,
                )
            threshold = 0
        races = raw.get("races") or []
        if not isinstance(races, list):
            raise ValueError(f"series {raw.get('id')!r} races must be a list")
        return cls(
            id=raw.get("id"),
            name=str(raw.get("name") or ""),
            number_of_races=int(number),
            discard_threshold=int(threshold),
            dnc_scoring_rule=DncScoringRule.parse(raw.get("dncScoringRule")),
            races=tuple(Race.from_dict(r) for r in races if isinstance(r, dict)),
        )

    @property
    def key(self) -> str:
        return normalize_id(self.id)

    @property
    def completed_races(self) -> List[Race]:
        return [r for r in self.races if r.completed]

    def find_race(self, race_number: int) -> Optional[Race]:
        for race in self.races:
            if race.race_number == race_number:
                return race
        return None


@dataclass
class ScoreCell:
    points: Optional[float]
    status: str
    race_position: Union[int, str, None]
    discarded: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "points": self.points,
            "status": self.status,
            "racePosition": self.race_position,
            "discarded": self.discarded,
        }


@dataclass
class Competitor:
    sail_number: str
    skipper: str
    boat_class: str
    race_scores: List[Optional[ScoreCell]]
    total_points: float = 0.0
    net_points: float = 0.0
    position: int = 0

    def scored_cells(self) -> List[Tuple[int, ScoreCell]]:
        """Return ``(race_index, cell)`` pairs for cells that carry points."""
        return [
            (idx, cell)
            for idx, cell in enumerate(self.race_scores)
            if cell is not None and cell.points is not None
        ]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "position": self.position,
            "sailNumber": self.sail_number,
            "skipper": self.skipper,
            "boatClass": self.boat_class,
            "raceScores": [c.to_dict() if c is not None else None for c in self.race_scores],
            "totalPoints": self.total_points,
            "netPoints": self.net_points,
        }


@dataclass
class Standings:
    series_id: Any
    series_name: str
    races_planned: int
    races_completed: int
    discard_rule: str
    discards_applied: int
    competitors: List[Competitor] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "seriesId": self.series_id,
            "seriesName": self.series_name,
            "racesPlanned": self.races_planned,
            "racesCompleted": self.races_completed,
            "discardRule": self.discard_rule,
            "discardsApplied": self.discards_applied,
            "competitors": [c.to_dict() for c in self.competitors],
        }
