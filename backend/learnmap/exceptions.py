"""Custom exceptions for the topic engine."""


class LearnmapError(Exception):
    """Base exception for application errors."""

    pass


class ValidationError(LearnmapError):
    """Raised when submitted data is rejected."""

    pass


class InvalidTopics(ValidationError):
    """Raised when a topic selection references unknown topic ids."""

    def __init__(self, topic_ids):
        self.topic_ids = sorted(topic_ids)
        super().__init__(f"Unknown topic ids: {self.topic_ids}")


class EmptySelection(ValidationError):
    """Raised when an author submits no topics."""

    def __init__(self):
        super().__init__("At least one topic must be selected")


class NotFoundError(LearnmapError):
    """Raised when a roadmap or topic does not exist."""

    pass


class TransientStoreError(LearnmapError):
    """Raised when the underlying storage is unavailable."""

    pass
