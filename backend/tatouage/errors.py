# Error taxonomy shared by services and routes


class TatouageError(Exception):
    """Base class for errors the API reports to clients."""
    status_code = 500
    message = 'Internal server error'

    def __init__(self, message: str = None):
        super().__init__(message or self.message)
        if message:
            self.message = message


class NotFound(TatouageError):
    status_code = 404
    message = 'Not found'


class ValidationError(TatouageError):
    status_code = 400
    message = 'Invalid request'


class InvalidCredentials(TatouageError):
    status_code = 401
    message = 'Invalid credentials'


class AmbiguousAccount(TatouageError):
    status_code = 401
    message = 'Several accounts share this email'


class DuplicateAccount(TatouageError):
    status_code = 409
    message = 'An account with this email already exists'


class CodecError(TatouageError):
    message = 'Could not read or write image metadata'


class UnsupportedFormat(TatouageError):
    status_code = 400
    message = 'Unsupported image format'


class StoreError(TatouageError):
    message = 'Database error'
