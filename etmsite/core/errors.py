"""
API Errors
==========

Exception taxonomy rendered by the API blueprint as ``{"error": message}``
with the matching HTTP status.
"""

from http import HTTPStatus


class APIError(Exception):
    """Base class for errors that reach the client as a JSON envelope"""
    status_code = HTTPStatus.BAD_REQUEST
    default_message = 'Некорректный запрос'

    def __init__(self, message=None, status_code=None):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = int(status_code)
        super().__init__(self.message)

    def to_dict(self):
        return {'error': self.message}


class ValidationError(APIError):
    """Malformed or missing input. 422 for rule violations, 400 for bad requests."""
    status_code = HTTPStatus.UNPROCESSABLE_ENTITY
    default_message = 'Ошибка валидации'

    def __init__(self, message=None, status_code=None, errors=None):
        self.errors = list(errors or [])
        if message is None and self.errors:
            message = ', '.join(self.errors)
        super().__init__(message, status_code)


class Unauthenticated(APIError):
    status_code = HTTPStatus.UNAUTHORIZED
    default_message = 'Требуется авторизация'


class InvalidCredentials(Unauthenticated):
    default_message = 'Неверный логин или пароль'


class NotFound(APIError):
    status_code = HTTPStatus.NOT_FOUND
    default_message = 'Маршрут не найден'


class MethodNotAllowed(APIError):
    status_code = HTTPStatus.METHOD_NOT_ALLOWED
    default_message = 'Метод не разрешён'


class ServerError(APIError):
    # Message stays generic so storage/filesystem details never leak
    status_code = HTTPStatus.INTERNAL_SERVER_ERROR
    default_message = 'Внутренняя ошибка сервера'
