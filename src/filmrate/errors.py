class FilmrateError(Exception):
    """Base class for errors raised by the rating engine and catalog."""


class NotFoundError(FilmrateError):
    """A referenced entity, or a vote/rating/edge expected to exist, is absent."""


class ValidationError(FilmrateError):
    """Input rejected before touching the store."""


class ConflictError(FilmrateError):
    """A write could not be serialised against concurrent writers."""


class StorageError(FilmrateError):
    """The store did not apply a mutation it was expected to apply."""
