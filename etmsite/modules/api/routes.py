"""
API Routes
==========

Single catch-all endpoint under /api. Every request is handed to the Router;
every outcome, including failures, is rendered as JSON.
"""

import json

from flask import current_app, jsonify, request
from werkzeug.exceptions import HTTPException

from ...core.errors import APIError, ServerError, ValidationError
from ..auth import extract_bearer
from . import api_bp
from .router import ApiRequest

ALL_METHODS = ['GET', 'POST', 'PUT', 'DELETE', 'PATCH', 'OPTIONS']


def _extension():
    return current_app.extensions['etmsite']


def _read_json_body():
    """Decode the request body; an empty body is treated as an empty object"""
    raw = request.get_data(cache=True)
    if not raw or not raw.strip():
        return None
    try:
        return json.loads(raw)
    except ValueError:
        raise ValidationError('Некорректный JSON', status_code=400)


def _build_request(path):
    return ApiRequest(
        method=request.method,
        path=path,
        token=extract_bearer(request.headers.get('Authorization')),
        args=request.args,
        files=request.files,
        body=_read_json_body,
    )


def error_response(error):
    return jsonify(error.to_dict()), int(error.status_code)


@api_bp.before_request
def answer_preflight():
    """CORS preflight never reaches the router; Flask-CORS adds the headers"""
    if request.method == 'OPTIONS':
        return current_app.response_class(status=204)


@api_bp.route('/', defaults={'path': ''}, methods=ALL_METHODS)
@api_bp.route('/<path:path>', methods=ALL_METHODS)
def dispatch(path):
    payload, status = _extension().router.dispatch(_build_request(path))
    return jsonify(payload), status


# ===== Error handling =====

@api_bp.app_errorhandler(APIError)
def handle_api_error(error):
    return error_response(error)


@api_bp.app_errorhandler(HTTPException)
def handle_http_exception(error):
    """Werkzeug errors (unknown URL, oversized body, ...) in the same envelope"""
    return jsonify({'error': error.description or error.name}), error.code


@api_bp.app_errorhandler(Exception)
def handle_unexpected_error(error):
    ext = _extension()
    ext.db.rollback()
    current_app.logger.exception(f"Unhandled error on {request.method} {request.path}")
    ext.log.log_error_with_traceback('api', error, {'method': request.method, 'path': request.path})

    body = ServerError().to_dict()
    if ext.settings.debug_mode:
        body['detail'] = str(error)
    return jsonify(body), 500
