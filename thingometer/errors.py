"""
Domain exceptions

Raised by the judging and CRUD layers and converted to JSON responses by the
handlers registered in thingometer.main.
"""


class ThingometerError(Exception):
    """Base class for errors surfaced to API callers"""
    status_code: int = 500

    def __init__(self, message: str, status_code: int = None):
        self.message = message
        if status_code:
            self.status_code = status_code
        super().__init__(self.message)


class ValidationError(ThingometerError):
    """
    Malformed input.

    Examples:
    - Missing required fields or non-numeric ids
    - Score out of range
    - Zero given for a category without a "none" option
    """
    status_code = 400

    def __init__(self, message: str = "Invalid request"):
        super().__init__(message, self.status_code)


class UnauthorizedError(ThingometerError):
    """Missing or wrong credentials."""
    status_code = 401

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message, self.status_code)


class LockedError(ThingometerError):
    """Judge has submitted; scores are read-only until a coordinator unlocks them."""
    status_code = 403

    def __init__(self, message: str = "Judge has already submitted scores"):
        super().__init__(message, self.status_code)


class NotFoundError(ThingometerError):
    """Referenced event, entry, category or judge does not exist."""
    status_code = 404

    def __init__(self, message: str = "Resource not found"):
        super().__init__(message, self.status_code)


class ConflictError(ThingometerError):
    """
    Request collides with existing state.

    Examples:
    - Position number taken by a concurrent allocation
    - Duplicate category or judge name within an event
    - Deleting a judge or entry that already has scores
    """
    status_code = 409

    def __init__(self, message: str = "Conflict"):
        super().__init__(message, self.status_code)
