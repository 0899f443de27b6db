"""HTTP routes: clip extraction and tool health."""

from flask import Blueprint, Response, current_app, jsonify, request

from clipfetch.engine import ClipExtractor
from clipfetch.models import Failure

bp = Blueprint("web", __name__)


def _extractor() -> ClipExtractor:
    return current_app.extensions["clip_extractor"]


@bp.route("/api/clip-video", methods=["POST"])
def clip_video():
    payload = request.get_json(silent=True)
    result = _extractor().extract(payload)

    if isinstance(result, Failure):
        return jsonify(result.to_dict()), result.kind.http_status

    return Response(
        result.content,
        status=200,
        mimetype=result.content_type,
        headers={
            "Content-Disposition": f'attachment; filename="{result.filename}"',
            "Content-Length": str(result.byte_size),
            "Cache-Control": "no-cache",
        },
    )


@bp.route("/api/clip-video", methods=["GET"])
def health():
    # Degradation is reported in the body; the status code stays 200.
    return jsonify(_extractor().health())
