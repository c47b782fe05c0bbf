"""
Shared utility functions for camfrustum
"""

from .error_handling import (
    CamFrustumError,
    ConfigurationError,
    InvalidIntrinsicsError,
    InvalidTransformError,
    DegeneratePlaneError,
    CameraModelNotReadyError,
    validate_and_raise,
    with_error_context
)

__all__ = [
    # Error handling
    'CamFrustumError', 'ConfigurationError', 'InvalidIntrinsicsError',
    'InvalidTransformError', 'DegeneratePlaneError', 'CameraModelNotReadyError',
    'validate_and_raise', 'with_error_context'
]
