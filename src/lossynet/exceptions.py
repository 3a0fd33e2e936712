"""
Custom exceptions for the lossynet package.
"""


class LossyNetError(Exception):
    """Base exception for all lossynet errors."""

    pass


class InvalidProfileError(LossyNetError, ValueError):
    """
    Raised when impairment profile parameters are out of range.

    Latencies and header overhead must be non-negative, max_latency must
    not be smaller than min_latency and loss_rate must lie within [0, 1].
    """

    def __init__(self, field: str, reason: str):
        self.field = field
        super().__init__(f"Invalid impairment profile field {field}: {reason}")


class ProfileNotFoundError(LossyNetError):
    """
    Raised when a requested impairment profile is not found.

    Check that the profile name is correct and the profiles file
    has been loaded properly.
    """

    def __init__(self, profile_name: str):
        self.profile_name = profile_name
        super().__init__(f"Impairment profile not found: {profile_name}")


class ProfileLoadError(LossyNetError):
    """
    Raised when profile configuration file cannot be loaded.

    Check that the file exists, is valid YAML, and has the expected structure.
    """

    def __init__(self, path: str, reason: str = ""):
        self.path = path
        message = f"Failed to load profiles from: {path}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)


class DeadlineExceededError(LossyNetError, TimeoutError):
    """Raised when an I/O call is made after its deadline has passed."""

    def __init__(self, operation: str = "i/o"):
        self.operation = operation
        super().__init__(f"{operation} timeout: deadline exceeded")


class ConnectionClosedError(LossyNetError, OSError):
    """Raised when an operation is attempted on a closed connection."""

    def __init__(self, operation: str = "i/o"):
        self.operation = operation
        super().__init__(f"{operation} on closed connection")
