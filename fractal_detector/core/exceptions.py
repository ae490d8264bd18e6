"""
Custom exceptions for the fractal detector.
"""


class FractalIndicatorError(Exception):
    """Base exception for the fractal detector package"""
    pass


class CheckpointError(FractalIndicatorError, ValueError):
    """Raised when a serialized detector or scanner state cannot be restored"""
    def __init__(self, message: str, field: str = None):
        self.field = field
        if field:
            message = f"{message} (field: {field})"
        super().__init__(message)


class ConfigurationError(FractalIndicatorError, ValueError):
    """Raised for unreadable or invalid configuration"""
    pass
