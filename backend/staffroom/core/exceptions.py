class AppError(Exception):
    """Base class for all application exceptions."""
    def __init__(self, message: str, status_code: int = 500, details: dict = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

class ReallocationInputError(AppError):
    """Raised when a generation request does not line up with the stored leave."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=400, details=details)

class LeaveNotApprovedError(AppError):
    """Raised when suggestions are requested for a leave that is not approved."""
    def __init__(self, leave_id: str, status: str):
        super().__init__(
            f"Leave request {leave_id} is {status}; only approved leave can be reallocated",
            status_code=409,
            details={"leave_request_id": leave_id, "status": status},
        )

class ReallocationPersistenceError(AppError):
    """Raised when the suggestion store rejects the bulk insert. Nothing is committed."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=400, details=details)

class ResourceNotFoundError(AppError):
    """Raised when a requested resource is not found."""
    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(f"{resource_type} with id {resource_id} not found", status_code=404)
