"""
camfrustum: camera visibility frustum for sensor fusion

Six bounding planes and an axis-aligned bounding box for a posed camera,
used to restrict per-voxel and per-point work to what the camera sees.
"""

__version__ = "0.1.0"
__author__ = "camfrustum Team"

# Main components
from main.main import main
from main.config import CameraModelConfig, get_preset_config

# Core modules
from camera.camera_model import CameraModel, FrustumCorner
from shared.geometry.plane import Plane

__all__ = [
    # Entry points
    'main',
    # Core components
    'CameraModel', 'FrustumCorner', 'Plane',
    'CameraModelConfig', 'get_preset_config',
    # Metadata
    '__version__', '__author__'
]
