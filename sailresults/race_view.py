"""Single race leaderboard helpers."""

from __future__ import annotations

import math
from typing import Any, Dict, List, Optional

from .models import FINISHED, Race, Result, Series
from .scoring import natural_key
from .time_utils import resolve_corrected_time, seconds_to_time, time_to_seconds


def _result_sort_key(result: Result):
    position = result.numeric_position
    points = result.points
    return (
        math.inf if position is None else position,
        math.inf if points is None else points,
        natural_key(result.sail_number),
    )


def sort_race_results(race: Race) -> List[Result]:
    """Return a race's results ordered for display.

    Numeric finishing place first, then points, then sail number. Results
    without a numeric place or points sort after those that have one.
    """
    return sorted(race.results, key=_result_sort_key)


def display_corrected_time(result: Result) -> Optional[str]:
    """Corrected time for a result, recomputed from elapsed time and yardstick.

    Non-finishers have no corrected time. When the elapsed time or yardstick
    is unusable the stored corrected time is shown instead.
    """
    if result.status != FINISHED:
        return None
    elapsed = time_to_seconds(result.elapsed_time)
    if elapsed and result.yardstick:
        return seconds_to_time(resolve_corrected_time(elapsed, result.yardstick))
    return result.corrected_time


def race_rows(race: Race) -> List[Dict[str, Any]]:
    rows = []
    for result in sort_race_results(race):
        row = result.to_dict()
        row["correctedTime"] = display_corrected_time(result)
        rows.append(row)
    return rows


def race_summaries(series: Series) -> List[Dict[str, Any]]:
    """One entry per planned race, whether or not it has been sailed."""
    summaries = []
    for race_number in range(1, series.number_of_races + 1):
        race = series.find_race(race_number)
        summaries.append(
            {
                "raceNumber": race_number,
                "date": race.date.isoformat() if race and race.date else None,
                "hasResults": bool(race and race.completed),
                "entries": len(race.results) if race else 0,
            }
        )
    return summaries


def default_race_number(series: Series) -> Optional[int]:
    """Race to show first: the last race with results in document order."""
    for race in reversed(series.races):
        if race.completed:
            return race.race_number
    return None
