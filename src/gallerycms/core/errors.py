"""Domain errors raised by the persistence layer.

Route handlers in :mod:`gallerycms.api.main` translate these into HTTP
responses; the database classes never know about HTTP.
"""


class ContentError(Exception):
    """Base class for content persistence errors.

    The message is intended to be returned to the client unchanged.
    """

    pass


class NotFoundError(ContentError):
    """The referenced setting, asset, or category does not exist."""

    pass


class ConflictError(ContentError):
    """The operation would create a duplicate (e.g. an existing category name)."""

    pass


class InvalidOperationError(ContentError):
    """The operation is never allowed (e.g. deleting ``uncategorized``)."""

    pass


class PermutationError(ContentError):
    """A reorder request is not a permutation of the collection's asset ids."""

    pass


class BatchUpdateError(ContentError):
    """A settings batch was rejected as a whole.

    Attributes:
        errors: One entry per offending item, each with ``id`` and ``message``.
    """

    def __init__(self, errors: list[dict]):
        self.errors = errors
        super().__init__(f"{len(errors)} setting(s) could not be updated")
