from __future__ import annotations


class CalEventError(Exception):
    """Base class for errors raised by calevent."""


class InvalidTimeInput(CalEventError, ValueError):
    pass


class MissingCollaborator(CalEventError, RuntimeError):
    pass


class MalformedResponse(CalEventError, ValueError):
    pass
