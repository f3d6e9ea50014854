"""Series scoring using the low-point system with discards.

A scoring pass takes one :class:`~sailresults.models.Series` snapshot and
builds the whole competitor table from scratch:

1. every sail number seen in any race becomes a competitor;
2. recorded results fill their race slot, OOD slots are scored from the
   competitor's own form, empty slots become DNC (race sailed) or NR (race
   not sailed);
3. the worst scores are discarded per the series threshold;
4. competitors are ranked by net points with countback tie-breaks.
"""

from __future__ import annotations

import logging
import re
from decimal import ROUND_HALF_UP, Decimal
from functools import cmp_to_key
from typing import Dict, List, Optional, Sequence, Tuple

from .models import (
    DNC,
    FINISHED,
    NR,
    OOD,
    UNKNOWN,
    Competitor,
    DncScoringRule,
    Race,
    ScoreCell,
    Series,
    Standings,
)

logger = logging.getLogger(__name__)

_DIGITS_RE = re.compile(r"(\d+)")


def natural_key(text: Optional[str]) -> Tuple[Tuple[Tuple[int, int, str], ...], str]:
    """Sort key comparing digit runs as numbers, so ``"9" < "10" < "A2"``."""
    text = text or ""
    parts = []
    for chunk in _DIGITS_RE.split(text):
        if not chunk:
            continue
        if chunk.isdigit():
            parts.append((0, int(chunk), ""))
        else:
            parts.append((1, 0, chunk.casefold()))
    return tuple(parts), text


def _sign(value: float) -> int:
    return (value > 0) - (value < 0)


def _round_tenths(value: float) -> float:
    """Round half-up to one decimal place."""
    return float(Decimal(repr(value)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values)


def discard_rule_text(threshold: int) -> str:
    return f"1 per {threshold} completed" if threshold > 0 else "None"


def discards_to_apply(completed_races: int, threshold: int) -> int:
    """Return how many worst scores each competitor drops."""
    if threshold <= 0 or completed_races <= 0:
        return 0
    return completed_races // threshold


def build_competitors(series: Series) -> Dict[str, Competitor]:
    """Return sail number -> competitor for every boat seen in the series.

    Skipper and boat class come from the boat's most recent appearance,
    scanning races from last to first. Race score slots start empty.
    """
    sail_numbers: List[str] = []
    seen = set()
    for race in series.races:
        for result in race.results:
            if result.sail_number not in seen:
                seen.add(result.sail_number)
                sail_numbers.append(result.sail_number)

    competitors: Dict[str, Competitor] = {}
    for sail_no in sail_numbers:
        latest = None
        for race in reversed(series.races):
            latest = race.find_result(sail_no)
            if latest is not None:
                break
        competitors[sail_no] = Competitor(
            sail_number=sail_no,
            skipper=(latest.skipper if latest else None) or UNKNOWN,
            boat_class=(latest.boat_class if latest else None) or UNKNOWN,
            race_scores=[None] * series.number_of_races,
        )
    return competitors


def _apply_recorded_results(series: Series, competitors: Dict[str, Competitor]) -> None:
    for race in series.races:
        idx = race.race_number - 1
        for result in race.results:
            competitor = competitors.get(result.sail_number)
            if competitor is None:
                continue
            if not 0 <= idx < series.number_of_races:
                logger.warning(
                    "Race index out of bounds (%s) for sail number %s in series %s",
                    idx,
                    result.sail_number,
                    series.name,
                )
                continue
            status = result.status or UNKNOWN
            competitor.race_scores[idx] = ScoreCell(
                points=result.points,
                status=status,
                race_position=result.position if result.position is not None else status,
            )


def dnc_points(race: Race, rule: DncScoringRule, total_competitors: int) -> float:
    """Points for a boat with no result in a race that others sailed."""
    if rule is DncScoringRule.RACE_ENTRIES:
        return float(len(race.results) + 1)
    return float(total_competitors + 1)


def absent_cell(series: Series, race_number: int, total_competitors: int) -> ScoreCell:
    """Return the DNC or NR cell for a race slot without a recorded result."""
    race = series.find_race(race_number)
    if race is not None and race.completed:
        points = dnc_points(race, series.dnc_scoring_rule, total_competitors)
        return ScoreCell(points=points, status=DNC, race_position=DNC)
    return ScoreCell(points=None, status=NR, race_position=NR)


def resolve_ood_points(
    sail_number: str,
    ood_race_number: int,
    series: Series,
    competitors: Dict[str, Competitor],
) -> float:
    """Compute the score for a boat on race officer duty.

    The boat gets the average of its own finished scores in the other races.
    Without any, it gets the average of the finishers' points in the OOD race
    itself, or 0 when that race has no scored finishers.

    Args:
        sail_number: Boat serving OOD.
        ood_race_number: 1-based race number of the duty.
        series: Series being scored.
        competitors: In-progress competitor table holding recorded results.

    Returns:
        Points rounded half-up to one decimal place.
    """
    competitor = competitors.get(sail_number)
    if competitor is None:
        return 0.0

    own_points = [
        cell.points
        for idx, cell in competitor.scored_cells()
        if idx + 1 != ood_race_number and cell.status == FINISHED
    ]
    if own_points:
        return _round_tenths(_mean(own_points))

    fallback = 0.0
    race = series.find_race(ood_race_number)
    if race is not None:
        finisher_points = [
            r.points for r in race.results if r.status == FINISHED and r.points is not None
        ]
        if finisher_points:
            fallback = _round_tenths(_mean(finisher_points))
    logger.warning(
        "OOD fallback used for %s in race %s. Points: %s", sail_number, ood_race_number, fallback
    )
    return fallback


def ood_points_or_default(
    sail_number: str,
    ood_race_number: int,
    series: Series,
    competitors: Dict[str, Competitor],
    default: float = 0.0,
) -> float:
    """Return :func:`resolve_ood_points` or ``default`` if it fails."""
    try:
        return resolve_ood_points(sail_number, ood_race_number, series, competitors)
    except Exception:  # pylint: disable=broad-except
        logger.exception(
            "Error calculating OOD points for %s in race %s", sail_number, ood_race_number
        )
        return default


def _resolve_special_cells(series: Series, competitors: Dict[str, Competitor]) -> None:
    total_competitors = len(competitors)
    for competitor in competitors.values():
        for idx in range(series.number_of_races):
            race_number = idx + 1
            cell = competitor.race_scores[idx]
            if cell is None:
                competitor.race_scores[idx] = absent_cell(series, race_number, total_competitors)
            elif cell.status == OOD:
                cell.points = ood_points_or_default(
                    competitor.sail_number, race_number, series, competitors
                )


def apply_discards(competitor: Competitor, discards: int) -> None:
    """Mark the competitor's worst scores discarded and set the totals.

    Among equal scores the earliest race is discarded first.
    """
    scored = competitor.scored_cells()
    for _, cell in scored:
        cell.discarded = False
    competitor.total_points = sum((cell.points for _, cell in scored), 0.0)

    if scored and discards > 0:
        worst_first = sorted(scored, key=lambda item: -item[1].points)
        for _, cell in worst_first[: min(discards, len(scored))]:
            cell.discarded = True

    competitor.net_points = sum((cell.points for _, cell in scored if not cell.discarded), 0.0)


def compare_competitors(a: Competitor, b: Competitor, number_of_races: int) -> int:
    """Order two competitors, lower net points first.

    Ties on net points are broken by the most recent race both scored in,
    then by the sorted counting scores, then by sail number.
    """
    if a.net_points != b.net_points:
        return _sign(a.net_points - b.net_points)

    for idx in range(number_of_races - 1, -1, -1):
        cell_a = a.race_scores[idx]
        cell_b = b.race_scores[idx]
        if cell_a is None or cell_b is None or cell_a.points is None or cell_b.points is None:
            continue
        if cell_a.points != cell_b.points:
            return _sign(cell_a.points - cell_b.points)

    counting_a = sorted(cell.points for _, cell in a.scored_cells() if not cell.discarded)
    counting_b = sorted(cell.points for _, cell in b.scored_cells() if not cell.discarded)
    for points_a, points_b in zip(counting_a, counting_b):
        if points_a != points_b:
            return _sign(points_a - points_b)

    key_a = natural_key(a.sail_number)
    key_b = natural_key(b.sail_number)
    return (key_a > key_b) - (key_a < key_b)


def assign_positions(ranked: List[Competitor]) -> None:
    """Number the ranked list; equal net points share a position."""
    position = 0
    for idx, competitor in enumerate(ranked, start=1):
        if idx == 1 or competitor.net_points != ranked[idx - 2].net_points:
            position = idx
        competitor.position = position


def rank_competitors(competitors: List[Competitor], number_of_races: int) -> List[Competitor]:
    ranked = sorted(
        competitors,
        key=cmp_to_key(lambda a, b: compare_competitors(a, b, number_of_races)),
    )
    assign_positions(ranked)
    return ranked


def compute_standings(series: Series) -> Standings:
    """Score a series and return its ranked standings.

    Args:
        series: Immutable series snapshot. It is only read.

    Returns:
        :class:`Standings` with competitors in ranking order and the summary
        fields used by the series results view.
    """
    completed = len(series.completed_races)
    discards = discards_to_apply(completed, series.discard_threshold)

    competitors = build_competitors(series)
    _apply_recorded_results(series, competitors)
    _resolve_special_cells(series, competitors)
    for competitor in competitors.values():
        apply_discards(competitor, discards)

    ranked = rank_competitors(list(competitors.values()), series.number_of_races)
    logger.debug(
        "Scored series %s: %d competitors, %d completed races, %d discards",
        series.key,
        len(ranked),
        completed,
        discards,
    )
    return Standings(
        series_id=series.id,
        series_name=series.name,
        races_planned=series.number_of_races,
        races_completed=completed,
        discard_rule=discard_rule_text(series.discard_threshold),
        discards_applied=discards,
        competitors=ranked,
    )


__all__ = [
    "absent_cell",
    "apply_discards",
    "assign_positions",
    "build_competitors",
    "compare_competitors",
    "compute_standings",
    "discard_rule_text",
    "discards_to_apply",
    "dnc_points",
    "natural_key",
    "ood_points_or_default",
    "rank_competitors",
    "resolve_ood_points",
]
