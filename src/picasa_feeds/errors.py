"""Exceptions raised by picasa_feeds."""


class PicasaError(RuntimeError):
    pass


class MissingSessionError(PicasaError):
    """An entity needs to fetch data but no client is reachable from it."""


class PicasaAPIError(PicasaError):
    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class AuthenticationError(PicasaAPIError):
    pass


class NotFoundError(PicasaAPIError):
    pass


class RateLimitError(PicasaAPIError):
    pass
