"""
API Module
==========

JSON API consumed by the public site and the admin panel.

Provides:
- Catch-all /api/<resource>[/<id>] dispatch through a static route table
- Bearer-token gate for mutating operations
- JSON error envelopes for every failure
"""

from flask import Blueprint

api_bp = Blueprint('api', __name__, url_prefix='/api')

from . import routes
from .router import ApiRequest, Route, RouteKind, Router, build_router, parse_path

__all__ = ['api_bp', 'ApiRequest', 'Route', 'RouteKind', 'Router', 'build_router', 'parse_path']
