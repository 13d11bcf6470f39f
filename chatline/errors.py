"""Error taxonomy of the messaging core.

Every error carries the HTTP status and client-facing message used by the
envelope handlers in ``chatline.main``. ``DeliverySoftFailure`` is the one
exception that is never surfaced to a caller.
"""


class ChatError(Exception):

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(ChatError):

    status_code = 400
    default_message = "Invalid request"


class Unauthorized(ChatError):

    status_code = 401
    default_message = "Not authorized"


class NotFound(ChatError):

    status_code = 404
    default_message = "Not found"


class UploadError(ChatError):

    status_code = 502
    default_message = "Image upload failed"


class StorageError(ChatError):

    status_code = 503
    default_message = "Message storage unavailable"


class DeliverySoftFailure(ChatError):

    default_message = "Real-time delivery failed"
