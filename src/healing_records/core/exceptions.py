"""Exception types raised by the healing record service."""


class HealingRecordError(Exception):
    """Base class for healing record errors."""
    pass


class MissingSelectorError(HealingRecordError):
    """Raised when a healing references a selector that was never registered."""

    def __init__(self, selector_id: str):
        self.selector_id = selector_id
        super().__init__(f"Selector '{selector_id}' is not registered")


class InternalConsistencyError(HealingRecordError):
    """Raised when the used locator is not among the candidates just persisted."""
    pass


class DuplicateIdentityError(HealingRecordError):
    """Raised by the store when a record with the same identifier already exists."""

    def __init__(self, uid: str):
        self.uid = uid
        super().__init__(f"Record '{uid}' already exists")


class MetricsGatewayError(HealingRecordError):
    """Raised when the metrics gateway rejects or fails a call."""
    pass


class ConfigurationError(Exception):
    """Raised when configuration is invalid or cannot be loaded."""
    pass
