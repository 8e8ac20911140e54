class AdherenceEngineError(Exception):
    """Base class for errors raised by the adherence engine."""


class ConcurrencyConflict(AdherenceEngineError):
    """
    Another writer holds the lock for the same completion or streak row.

    Retryable: the caller should roll back and retry with fresh reads.
    """

    def __init__(self, key: str):
        super().__init__(f"Concurrent write in progress for {key}")
        self.key = key


class PersistenceUnavailable(AdherenceEngineError):
    """The database could not be reached; the current pass was aborted."""


class UserNotFound(AdherenceEngineError):
    def __init__(self, user_id: str):
        super().__init__(f"User {user_id} not found")
        self.user_id = user_id
