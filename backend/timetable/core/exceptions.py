class AppError(Exception):
    """Base class for all application exceptions."""
    def __init__(self, message: str, status_code: int = 500, details: dict = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

class ValidationError(AppError):
    """Raised when a time slot or schedule entry cannot be built from the given input."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=400, details=details)

class InvalidTimeRange(ValidationError):
    """Raised when a time slot does not start before it ends."""
    def __init__(self, start, end):
        super().__init__(
            f"Start time {start:%H:%M} must be before end time {end:%H:%M}",
            details={"start_time": f"{start:%H:%M}", "end_time": f"{end:%H:%M}"},
        )

class StateError(AppError):
    """Raised when a lifecycle transition is requested from the wrong state."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=409, details=details)

class AlreadyCancelled(StateError):
    def __init__(self, entry_id: str):
        super().__init__(f"Schedule entry {entry_id} is already cancelled", details={"entry_id": entry_id})

class AlreadyActive(StateError):
    def __init__(self, entry_id: str):
        super().__init__(f"Schedule entry {entry_id} is already active", details={"entry_id": entry_id})

class PersistenceConflict(AppError):
    """Raised by a repository when a uniqueness guard rejects a write."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=409, details=details)

class SchedulingRejected(AppError):
    """Raised by the command layer when validation reports one or more violations."""
    def __init__(self, reasons: list):
        self.reasons = list(reasons)
        super().__init__(
            "Schedule entry violates scheduling rules",
            status_code=409,
            details={"reasons": [reason.as_dict() for reason in self.reasons]},
        )

class ResourceNotFoundError(AppError):
    """Raised when a requested resource is not found."""
    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(f"{resource_type} with id {resource_id} not found", status_code=404)

class ConfigurationError(AppError):
    """Raised when system configuration is invalid."""
    def __init__(self, message: str):
        super().__init__(message, status_code=500)
