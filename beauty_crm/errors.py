"""Domain errors raised by the service layer.

Services raise these before touching the session when input is bad, so a
failed action never leaves half-written rows behind. The app-level error
handler in create_app() rolls the session back and turns them into
``{"error": message}`` JSON responses with ``status_code``.

They subclass ValueError so callers that only care about "bad request vs.
everything else" can keep catching ValueError.
"""


class CrmError(ValueError):
    status_code = 400

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class NotFound(CrmError):
    """Entity or referenced foreign entity does not exist."""

    status_code = 404


class InvalidArgument(CrmError):
    """Malformed input: bad JSON, out-of-enum status, wrong payload shape."""

    status_code = 400


class Conflict(CrmError):
    """Entity is already in a terminal/qualified state, or was converted."""

    status_code = 409


class Internal(CrmError):
    """Unexpected failure while persisting a multi-step action."""

    status_code = 500
