from flask import Blueprint, current_app, redirect, url_for

from .datastore import DocumentError, find_series, list_series, load_document
from .race_view import default_race_number, race_rows, race_summaries
from .scoring import compute_standings, discard_rule_text


bp = Blueprint('main', __name__)


#<getdata>
def _load_series_list():
    """Load the results document named in the app config.

    The document is read on every request so that a replaced file is picked
    up without a restart.
    """
    return load_document(current_app.config.get('RESULTS_DATA_PATH'))
#</getdata>


def _document_error(exc: DocumentError):
    current_app.logger.error("Results document unavailable: %s", exc)
    return {'status': 'error', 'error': str(exc)}, 503


def _series_unavailable(series_id: str):
    current_app.logger.warning("Series not found for id %r", series_id)
    return {'status': 'unavailable', 'error': f'Series {series_id} not found'}, 404


def _series_info(series) -> dict:
    completed = len(series.completed_races)
    return {
        'id': series.id,
        'name': series.name,
        'racesPlanned': series.number_of_races,
        'racesCompleted': completed,
        'discardRule': discard_rule_text(series.discard_threshold),
    }


@bp.route('/')
def index():
    return redirect(url_for('main.series_index'))


@bp.route('/health')
def health():
    try:
        series_list = _load_series_list()
    except DocumentError as e:
        return {'ok': False, 'status': 'error', 'error': str(e)}, 503
    return {'ok': True, 'status': 'ok', 'series': len(series_list)}


#<getdata>
@bp.route('/api/series')
def series_index():
    try:
        series_list = _load_series_list()
    except DocumentError as e:
        return _document_error(e)
    return {'series': list_series(series_list)}
#</getdata>


#<getdata>
@bp.route('/api/series/<series_id>/standings')
def series_standings(series_id):
    try:
        series_list = _load_series_list()
    except DocumentError as e:
        return _document_error(e)
    series = find_series(series_id, series_list)
    if series is None:
        return _series_unavailable(series_id)
    return compute_standings(series).to_dict()
#</getdata>


#<getdata>
@bp.route('/api/series/<series_id>/races')
def series_races(series_id):
    try:
        series_list = _load_series_list()
    except DocumentError as e:
        return _document_error(e)
    series = find_series(series_id, series_list)
    if series is None:
        return _series_unavailable(series_id)
    return {
        'series': _series_info(series),
        'races': race_summaries(series),
        'defaultRace': default_race_number(series),
    }
#</getdata>


#<getdata>
@bp.route('/api/series/<series_id>/races/<int:race_number>')
def race_results(series_id, race_number):
    try:
        series_list = _load_series_list()
    except DocumentError as e:
        return _document_error(e)
    series = find_series(series_id, series_list)
    if series is None:
        return _series_unavailable(series_id)
    race = series.find_race(race_number)
    if race is None and not 1 <= race_number <= series.number_of_races:
        return {'status': 'unavailable', 'error': f'Race {race_number} not found'}, 404
    results = race_rows(race) if race is not None else []
    return {
        'series': _series_info(series),
        'race': {
            'raceNumber': race_number,
            'date': race.date.isoformat() if race is not None and race.date else None,
            'entries': len(results),
        },
        'results': results,
    }
#</getdata>
