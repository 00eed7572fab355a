"""
Domain errors raised by the campaign services.

Every error carries a ``kind`` and an HTTP ``status_code`` so the routes can
report it as a structured failure without knowing which service raised it.
"""


class CampaignServiceError(Exception):
    kind = 'error'
    status_code = 400

    def __init__(self, message, payload=None):
        super().__init__(message)
        self.message = message
        self.payload = payload or {}

    def to_dict(self):
        data = dict(self.payload)
        data['error'] = self.message
        data['kind'] = self.kind
        return data


class ValidationError(CampaignServiceError):
    """Malformed or missing input."""
    kind = 'validation_error'
    status_code = 400


class Forbidden(CampaignServiceError):
    """Caller is authenticated but lacks the role or ownership required."""
    kind = 'forbidden'
    status_code = 403


class NotFound(CampaignServiceError):
    kind = 'not_found'
    status_code = 404


class InvalidState(CampaignServiceError):
    """Operation is not legal in the record's current lifecycle state."""
    kind = 'invalid_state'
    status_code = 409


class AlreadyExists(CampaignServiceError):
    kind = 'already_exists'
    status_code = 409
