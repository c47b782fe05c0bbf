"""
camfrustum: configuration and command line entry point

Builds camera models from YAML/JSON configs and answers frustum queries
from the command line.
"""

from .config import (
    CameraModelConfig,
    IntrinsicsConfig,
    ExtrinsicsConfig,
    PRESET_CONFIGS,
    get_preset_config
)

__all__ = [
    "CameraModelConfig",
    "IntrinsicsConfig",
    "ExtrinsicsConfig",
    "PRESET_CONFIGS",
    "get_preset_config",
]
