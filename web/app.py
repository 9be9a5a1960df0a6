"""
Flask application exposing the strip pipeline to a kiosk or browser front end.
"""
from io import BytesIO
from typing import Optional

from flask import Flask, Response, jsonify, request

from controller.frame_source import FrameSourceError, open_frame
from controller.output_session import OutputSession
from controller.photo_library import PhotoLibrary
from controller.settings import BoothSettings, parse_bool
from controller.share import encode_jpeg
from controller.strip_preview_worker import StripPreviewWorker
from imaging.effects import EffectKind
from imaging.strip_errors import StripCreationError
from imaging.strip_layout import FrameColor

REQUEST_ERRORS = (FrameSourceError, StripCreationError, ValueError)


def create_app(
        settings: Optional[BoothSettings] = None,
        library: Optional[PhotoLibrary] = None,
        preview_worker: Optional[StripPreviewWorker] = None,
):
    app = Flask(__name__)
    # PHOTOSTRIP_TOTAL_SHOTS, PHOTOSTRIP_SHOW_DATE, ... -> app.config
    app.config.from_prefixed_env("PHOTOSTRIP")

    if settings is None:
        settings = BoothSettings.from_mapping(app.config)
    if library is None:
        library = PhotoLibrary(root=settings.library_root, quality=settings.jpeg_quality)
    if preview_worker is None:
        preview_worker = StripPreviewWorker()

    preview_worker.start()
    app.settings = settings
    app.library = library
    app.preview_worker = preview_worker

    def error(message: str, status: int = 400):
        return jsonify({"ok": False, "error": message}), status

    def session_from_request() -> OutputSession:
        frames = [
            open_frame(BytesIO(upload.read()), name=upload.filename or "upload")
            for upload in request.files.getlist("frames")
        ]
        session = OutputSession(frames, settings)

        form = request.form
        if "effect" in form:
            session.select_effect(EffectKind.from_name(form["effect"]))
        if "frame" in form:
            session.frame_color = FrameColor.from_name(form["frame"])
        if "show_date" in form:
            session.set_show_date(parse_bool(form["show_date"]))
        return session

    @app.route("/effects", methods=["GET"])
    def effects():
        return jsonify({"effects": [effect.value for effect in EffectKind]})

    @app.route("/strip", methods=["POST"])
    def strip():
        try:
            image = session_from_request().render()
        except REQUEST_ERRORS as e:
            return error(str(e))

        if image is None:
            return error("strip_unavailable", 503)

        return Response(encode_jpeg(image, settings.jpeg_quality), mimetype="image/jpeg")

    @app.route("/strip/collect", methods=["POST"])
    def collect():
        try:
            path = session_from_request().collect(app.library)
        except REQUEST_ERRORS as e:
            return error(str(e))

        if path is None:
            return error("strip_unavailable", 503)

        return jsonify({"ok": True, "path": str(path)})

    @app.route("/strip/preview", methods=["POST"])
    def request_preview():
        try:
            snapshot = session_from_request().snapshot()
        except REQUEST_ERRORS as e:
            return error(str(e))

        generation = app.preview_worker.request(snapshot)
        return jsonify({"ok": True, "generation": generation}), 202

    @app.route("/strip/preview", methods=["GET"])
    def latest_preview():
        image = app.preview_worker.latest()
        if image is None:
            return "", 204
        return Response(
            encode_jpeg(image, settings.jpeg_quality),
            mimetype="image/jpeg",
            headers={"X-Preview-Generation": str(app.preview_worker.latest_generation())},
        )

    return app
