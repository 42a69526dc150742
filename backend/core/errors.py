"""
errors.py — Failure taxonomy for the analytics engine.

Caller errors (400) are surfaced immediately, unknown entities map to 404 and
store failures to a generic 500. "No data" is never an error.
"""


class AnalyticsError(Exception):
    """Base class for every failure the engine reports to a caller."""

    status_code = 500
    default_message = "Internal server error."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidParameter(AnalyticsError):
    status_code = 400
    default_message = "Invalid parameter."


class InvalidIdentifier(InvalidParameter):
    """A parameter that should reference an entity is malformed."""

    def __init__(self, field: str):
        self.field = field
        super().__init__(f"Valid {field} is required.")


class MissingParameter(AnalyticsError):
    status_code = 400

    def __init__(self, *fields: str):
        self.fields = fields
        names = " and ".join(fields)
        verb = "are" if len(fields) > 1 else "is"
        super().__init__(f"{names} {verb} required.")


class EntityNotFound(AnalyticsError):
    status_code = 404

    def __init__(self, entity: str):
        self.entity = entity
        super().__init__(f"{entity} not found.")


class StoreUnavailable(AnalyticsError):
    """The record store could not answer; not attributable to caller input."""

    status_code = 500
