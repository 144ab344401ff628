from typing import Optional


class LifecycleError(RuntimeError):
    pass


class NotFound(LifecycleError):
    def __init__(self, entity: str, entity_id: str):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} not found: {entity_id}")


class InvalidTransition(LifecycleError):
    def __init__(self, entity: str, current: Optional[str], requested: str):
        self.entity = entity
        self.current = current
        self.requested = requested
        super().__init__(f"{entity} cannot transition from {current} to {requested}")


class PersistenceFailure(LifecycleError):
    pass


class ConcurrentModification(PersistenceFailure):
    pass


class DispatchFailure(LifecycleError):
    """Raised by notification transports; never rolls back a committed transition."""
