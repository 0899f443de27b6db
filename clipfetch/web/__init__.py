"""Flask application factory for the clipfetch HTTP API."""

from flask import Flask, jsonify

from clipfetch.config import ClipConfig, load_config
from clipfetch.engine import ClipExtractor


def create_app(config: ClipConfig | None = None) -> Flask:
    app = Flask(__name__)
    app.extensions["clip_extractor"] = ClipExtractor(config or load_config())

    from clipfetch.web.routes import bp
    app.register_blueprint(bp)

    @app.errorhandler(413)
    def request_entity_too_large(error):
        return jsonify({"error": "Request too large"}), 413

    return app
