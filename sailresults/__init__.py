import os
from flask import Flask


def create_app():
    app = Flask(__name__)

    # Results document location; read on every request, never cached
    from .datastore import DEFAULT_DATA_PATH, DocumentError, load_document
    app.config['RESULTS_DATA_PATH'] = os.environ.get('RESULTS_DATA_PATH') or str(DEFAULT_DATA_PATH)

    from . import routes  # type: ignore
    app.register_blueprint(routes.bp)

    app.logger.info("Checking results document at %s", app.config['RESULTS_DATA_PATH'])
    try:
        load_document(app.config['RESULTS_DATA_PATH'])
    except DocumentError:
        app.logger.exception("Results document could not be loaded; endpoints will report errors")

    return app
