"""Error taxonomy shared by the store and the HTTP layer.

Every error carries a short, user-facing ``message``; anything more detailed
belongs in the server log, never in a response body.
"""


class ProjectError(Exception):
    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ProjectError):
    """Missing or invalid input."""

    status_code = 400


class NotFoundError(ProjectError):
    status_code = 404

    def __init__(self, message: str = "Project not found"):
        super().__init__(message)


class InternalError(ProjectError):
    """Unexpected failure; the cause is logged, not exposed."""

    status_code = 500
