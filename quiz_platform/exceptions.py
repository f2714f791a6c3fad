class QuizPlatformError(Exception):
    """Base for errors that map onto an HTTP status at the view boundary."""

    status_code = 500
    default_message = "Server error"

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidRequest(QuizPlatformError):
    status_code = 400
    default_message = "Invalid request"


class PreconditionFailed(QuizPlatformError):
    status_code = 400
    default_message = "The request cannot be applied in the current state"


class PermissionDenied(QuizPlatformError):
    status_code = 403
    default_message = "Access denied"


class NotFound(QuizPlatformError):
    status_code = 404
    default_message = "Not found"


class SubmissionConflict(QuizPlatformError):
    status_code = 409
    default_message = "Your submission conflicted with another request, please retry"
