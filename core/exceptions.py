# core/exceptions.py
"""
Typed rejections raised by the shop services.

Every error carries a human readable ``message``, a machine readable
``code`` (the rejection reason) and the HTTP status the API answers with.
"""


class ShopError(Exception):
    status_code = 400
    default_code = 'error'

    def __init__(self, message, code=None, status_code=None):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        if status_code is not None:
            self.status_code = status_code

    def as_dict(self):
        return {'message': self.message, 'code': self.code}


class ValidationError(ShopError):
    status_code = 400
    default_code = 'ValidationError'

    def __init__(self, message, code=None, status_code=None, errors=None):
        super().__init__(message, code=code, status_code=status_code)
        self.errors = errors or {}

    def as_dict(self):
        data = super().as_dict()
        if self.errors:
            data['errors'] = self.errors
        return data


class NotFoundError(ShopError):
    status_code = 404
    default_code = 'NotFound'


class ConflictError(ShopError):
    status_code = 400
    default_code = 'Conflict'


class AuthenticationError(ShopError):
    status_code = 401
    default_code = 'Unauthenticated'


class AuthorizationError(ShopError):
    status_code = 403
    default_code = 'AccessDenied'


class StorageError(ShopError):
    status_code = 500
    default_code = 'StorageError'
