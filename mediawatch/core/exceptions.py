"""Exceptions raised by the monitoring core."""


class MediaWatchError(Exception):
    """Base class for all monitoring errors."""


class InsufficientTrainingDataError(MediaWatchError):
    """Retraining was requested with too few labelled posts."""

    def __init__(self, available: int, required: int):
        self.available = available
        self.required = required
        super().__init__(
            f"Retraining needs at least {required} labelled posts, got {available}")


class ModelTrainingError(MediaWatchError):
    """Fitting the sentiment model failed; the active model is unchanged."""


class StoreError(MediaWatchError):
    """A post or rule store could not complete an operation."""
