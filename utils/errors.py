class ReviseError(Exception):
    """Base for failures the session recovers from."""


class NotFoundError(ReviseError):
    def __init__(self, item_id):
        super().__init__(f"Not found: {item_id}")
        self.item_id = item_id


class PersistenceError(ReviseError):
    pass


class EditorLaunchError(ReviseError):
    pass


class InvalidRatingError(ValueError):
    """A review was committed with a rating outside 1-4. Not recoverable."""
