"""
API Router
==========

Maps ``<resource>[/<id>]`` paths to handlers.

Routes are resolved once at startup into a table keyed by
``(method, resource)``. Auth sub-actions are addressed as ``auth/<action>``.

    POST   auth/login              login
    POST   auth/logout             logout (bearer optional)
    GET    auth/check              token check + renewal
    GET    <records>[/<id>]        list / fetch one
    POST   <records>               create (bearer)
    PUT    <records>/<id>          full replace (bearer)
    DELETE <records>/<id>          delete (bearer)
    POST   upload                  image upload (bearer)
"""

from dataclasses import dataclass, field
from enum import Enum
from functools import partial
from typing import Any, Callable, Mapping, Optional

from ...core.errors import MethodNotAllowed, NotFound, ValidationError


class RouteKind(Enum):
    AUTH = 'auth'
    RECORDS = 'records'
    UPLOAD = 'upload'


@dataclass(frozen=True)
class ApiRequest:
    """Transport-independent view of an incoming request"""
    method: str
    path: str
    token: Optional[str] = None
    args: Mapping[str, str] = field(default_factory=dict)
    files: Mapping[str, Any] = field(default_factory=dict)
    body: Callable[[], Any] = dict

    def json(self):
        """Decoded JSON body; anything but an object is rejected"""
        data = self.body()
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ValidationError('Некорректный JSON', status_code=400)
        return data


@dataclass(frozen=True)
class Route:
    kind: RouteKind
    method: str
    resource: str
    handler: Callable[[ApiRequest, Optional[str], Optional[int]], tuple]
    auth_required: bool = False
    accepts_id: bool = True


def parse_path(path):
    """Split a path into (resource, identifier). Nested paths are not routable."""
    segments = [s for s in (path or '').strip('/').split('/') if s]
    if len(segments) > 2:
        raise NotFound()
    resource = segments[0] if segments else ''
    identifier = segments[1] if len(segments) > 1 else None
    return resource, identifier


# ===== Handlers =====

def _login(auth, req, identifier, admin_id):
    body = req.json()
    result = auth.login(body.get('login'), body.get('password'))
    return result.to_dict(), 200


def _logout(auth, req, identifier, admin_id):
    auth.logout(req.token)
    return {'success': True, 'message': 'Выход выполнен'}, 200


def _check(auth, req, identifier, admin_id):
    return {'success': True, 'admin_id': auth.check(req.token)}, 200


def _read(resource, req, identifier, admin_id):
    if identifier is not None:
        return resource.get(identifier), 200
    return resource.list(req.args.get('limit'), req.args.get('offset'), req.args.get('sort')), 200


def _create(resource, req, identifier, admin_id):
    new_id = resource.create(req.json(), admin_id=admin_id)
    return {'success': True, 'id': new_id, 'message': resource.spec.created}, 201


def _update(resource, req, identifier, admin_id):
    if identifier is None:
        raise ValidationError(resource.spec.id_required, status_code=400)
    resource.update(identifier, req.json(), admin_id=admin_id)
    return {'success': True, 'message': resource.spec.updated}, 200


def _delete(resource, req, identifier, admin_id):
    resource.delete(identifier, admin_id=admin_id)
    return {'success': True, 'message': resource.spec.deleted}, 200


def _upload(uploads, req, identifier, admin_id):
    return uploads.handle(req.files.get('file'), admin_id=admin_id), 201


class Router:
    """Route table plus the auth gate applied before guarded handlers"""

    def __init__(self, auth, routes):
        self.auth = auth
        self.routes = tuple(routes)
        self._table = {(route.method, route.resource): route for route in self.routes}
        self._resources = {route.resource for route in self.routes}

    def resolve(self, method, path):
        """Return (route, identifier) or raise NotFound / MethodNotAllowed"""
        resource, identifier = parse_path(path)

        key = resource
        if resource == RouteKind.AUTH.value:
            key = f"auth/{identifier or ''}"
            identifier = None
            if key not in self._resources:
                raise NotFound('Неизвестное действие')

        if key not in self._resources:
            raise NotFound()

        route = self._table.get((method.upper(), key))
        if route is None:
            raise MethodNotAllowed()
        if identifier is not None and not route.accepts_id:
            raise NotFound()
        return route, identifier

    def dispatch(self, req):
        """Run the handler for *req*, returning (payload, status)"""
        route, identifier = self.resolve(req.method, req.path)
        admin_id = self.auth.require_auth(req.token) if route.auth_required else None
        return route.handler(req, identifier, admin_id)


def build_router(auth, resources, uploads):
    """Assemble the route table for the auth service, record resources and uploads"""
    routes = [
        Route(RouteKind.AUTH, 'POST', 'auth/login', partial(_login, auth)),
        Route(RouteKind.AUTH, 'POST', 'auth/logout', partial(_logout, auth)),
        Route(RouteKind.AUTH, 'GET', 'auth/check', partial(_check, auth)),
        Route(RouteKind.UPLOAD, 'POST', 'upload', partial(_upload, uploads),
              auth_required=True, accepts_id=False),
    ]
    for name, resource in resources.items():
        routes.extend([
            Route(RouteKind.RECORDS, 'GET', name, partial(_read, resource)),
            Route(RouteKind.RECORDS, 'POST', name, partial(_create, resource),
                  auth_required=True, accepts_id=False),
            Route(RouteKind.RECORDS, 'PUT', name, partial(_update, resource), auth_required=True),
            Route(RouteKind.RECORDS, 'DELETE', name, partial(_delete, resource), auth_required=True),
        ])
    return Router(auth, routes)
