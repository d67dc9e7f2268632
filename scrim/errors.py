"""Errors raised by the row store, the repository and the API layer.

Every error carries the HTTP status the API should answer with, so route
handlers can raise freely and a single handler renders the JSON envelope.
"""


class ScrimError(Exception):
    status_code = 500

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class InvalidRequest(ScrimError):
    status_code = 400


class DuplicateRecord(ScrimError):
    status_code = 400


class RecordNotFound(ScrimError):
    status_code = 404


class StoreError(ScrimError):
    """The spreadsheet could not be reached or returned rows of the wrong shape."""
    status_code = 500
