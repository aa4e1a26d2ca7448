"""
Flask application exposing the Slack webhook endpoints.

- POST /events    Events API (url_verification and event_callback)
- POST /commands  Slash commands
"""

import logging

from flask import Flask, Response, request
from werkzeug.exceptions import BadRequest, HTTPException

from .dispatcher import DispatchResult, Dispatcher

logger = logging.getLogger(__name__)


def _request_log(result: DispatchResult) -> None:
    extra = {"method": request.method, "code": result.status, "uri": request.path}
    message = f"{request.method} {request.path} {result.status}"
    if result.access_denied:
        extra["access"] = "denied"
        message += " access=denied"
    logger.info(message, extra=extra)


def _to_response(result: DispatchResult) -> Response:
    response = Response(result.body, status=result.status)
    if result.content_type:
        response.headers["Content-Type"] = result.content_type
    return response


def _read_body() -> bytes | None:
    try:
        return request.get_data(cache=True)
    except BadRequest as e:
        logger.warning(f"Could not read request body: {e}")
        return None


def create_app(dispatcher: Dispatcher) -> Flask:
    """Build the Flask app serving ``dispatcher``."""
    app = Flask(__name__)
    app.config["GADGET_DISPATCHER"] = dispatcher

    @app.route("/events", methods=["POST"])
    def events() -> Response:
        body = _read_body()
        if body is None:
            result = DispatchResult(status=400)
        else:
            result = dispatcher.handle_event(dict(request.headers), body)
        _request_log(result)
        return _to_response(result)

    @app.route("/commands", methods=["POST"])
    def commands() -> Response:
        body = _read_body()
        if body is None:
            result = DispatchResult(status=400)
        else:
            result = dispatcher.handle_command(dict(request.headers), body)
        _request_log(result)
        return _to_response(result)

    @app.errorhandler(Exception)
    def internal_error(e: Exception) -> Response:
        # Werkzeug HTTP errors (404, 405) keep their own status
        if isinstance(e, HTTPException):
            return e.get_response()
        logger.exception(f"Unhandled error serving {request.path}: {e}")
        return Response("", status=500)

    return app
