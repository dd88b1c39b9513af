"""Domain exceptions raised by services and mapped to HTTP responses in `main`."""


class BusinessError(ValueError):
    """A booking rule was violated; reported to clients as HTTP 400."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ResourceNotFoundError(LookupError):
    """A referenced record does not exist; reported as HTTP 404."""

    status_code = 404

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message
