class QuizError(Exception):
    """Base class for failures that abort a turn."""


class ContentFetchError(QuizError):
    """Content pack could not be read or downloaded."""


class ContentValidationError(QuizError):
    """Content pack was readable but malformed."""


class QuizStateError(QuizError):
    """Session data does not support the requested turn."""


class UnknownActionError(QuizError):
    def __init__(self, name: str) -> None:
        super().__init__(f"unknown handler action: {name!r}")
        self.name = name
