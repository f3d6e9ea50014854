import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .models import Series, normalize_id

logger = logging.getLogger(__name__)

# Data directory lives at the project root under ``data``.
DATA_DIR = Path(__file__).resolve().parent.parent / "data"
DEFAULT_DATA_PATH = DATA_DIR / "latest-results-data.json"


class DocumentError(ValueError):
    """The results document is missing or not in the expected shape."""


def parse_document(data: Any) -> List[Series]:
    """Return the series held in a decoded results document.

    The document root must be an object whose ``seriesData`` key holds a list
    of series records.
    """
    if not isinstance(data, dict) or not isinstance(data.get("seriesData"), list):
        raise DocumentError("results document has no seriesData list")
    series_list: List[Series] = []
    for idx, raw in enumerate(data["seriesData"]):
        if not isinstance(raw, dict):
            raise DocumentError(f"seriesData[{idx}] is not an object")
        try:
            series_list.append(Series.from_dict(raw))
        except ValueError as exc:
            raise DocumentError(f"seriesData[{idx}]: {exc}") from exc
    return series_list


def load_document(path: Union[str, Path, None] = None) -> List[Series]:
    """Read and parse the results document at ``path``."""
    path = Path(path) if path else DEFAULT_DATA_PATH
    try:
        with path.open(encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError as exc:
        raise DocumentError(f"results document not found: {path}") from exc
    except OSError as exc:
        raise DocumentError(f"results document could not be read: {exc}") from exc
    except UnicodeDecodeError as exc:
        raise DocumentError(f"results document is not valid UTF-8: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise DocumentError(f"results document is not valid JSON: {exc}") from exc
    series_list = parse_document(data)
    logger.info("Loaded %d series from %s", len(series_list), path)
    return series_list


def list_series(series_list: List[Series]) -> List[Dict[str, Any]]:
    """Return id/name pairs sorted by series name."""
    ordered = sorted(series_list, key=lambda s: s.name.casefold())
    return [{"id": s.id, "name": s.name} for s in ordered]


def find_series(series_id: Any, series_list: List[Series]) -> Optional[Series]:
    """Return the series whose id matches ``series_id`` or ``None``.

    Ids compare as normalized strings, see :func:`~sailresults.models.normalize_id`.
    """
    target = normalize_id(series_id)
    if not target:
        return None
    for series in series_list:
        if series.key == target:
            return series
    return None
