"""
Error handling utilities for camfrustum

Exception hierarchy shared by the geometry core, the configuration layer
and the command line entry point.
"""

from typing import Callable


class CamFrustumError(Exception):
    """Base exception for camfrustum-specific errors"""
    pass


class ConfigurationError(CamFrustumError):
    """Error in configuration or setup"""
    pass


class InvalidIntrinsicsError(ConfigurationError):
    """Field of view, focal length, resolution or clip distances are invalid"""
    pass


class InvalidTransformError(CamFrustumError):
    """Pose or extrinsic matrix is not a finite 4x4 rigid transform"""
    pass


class DegeneratePlaneError(CamFrustumError):
    """Plane points are collinear/coincident or the normal is not usable"""
    pass


class CameraModelNotReadyError(CamFrustumError):
    """Derived frustum state was queried before it was computed"""
    pass


def validate_and_raise(condition: bool, error_message: str,
                      error_type: type = ValueError) -> None:
    """
    Validate condition and raise error with message if false.

    Args:
        condition: Condition to validate
        error_message: Error message if condition fails
        error_type: Type of error to raise

    Raises:
        error_type: If condition is False
    """
    if not condition:
        raise error_type(error_message)


def with_error_context(context: str):
    """
    Decorator to add context to errors.

    The original exception type is preserved so callers can still catch
    the specific class.

    Args:
        context: Context description for errors

    Returns:
        Decorator function
    """
    def decorator(func: Callable) -> Callable:
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except CamFrustumError as e:
                raise type(e)(f"{context}: {str(e)}") from e
        wrapper.__name__ = func.__name__
        wrapper.__doc__ = func.__doc__
        return wrapper
    return decorator
