"""Exceptions raised by starrelay."""


class StarrelayError(Exception):
    """Base class for all starrelay errors."""


class ConfigurationError(StarrelayError):
    """An environment setting could not be interpreted."""


class HorizonsError(StarrelayError):
    """A Horizons request failed or returned something we could not parse."""


class SnapshotUnavailableError(StarrelayError):
    """A snapshot refresh produced no bodies at all."""


class UnknownBodyError(StarrelayError, LookupError):
    """The requested body id is not part of the catalog."""

    def __init__(self, body_id: str):
        super().__init__(f"Unknown body id: {body_id}")
        self.body_id = body_id
