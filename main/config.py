"""
camfrustum Configuration System

Camera intrinsics, extrinsics and query options loaded from YAML or JSON
and turned into a ready-to-use CameraModel.
"""

import copy
import json
import math
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from camera.camera_model import CameraModel
from shared.geometry.transforms import pose_from_config
from shared.utils.error_handling import ConfigurationError, with_error_context


@dataclass
class IntrinsicsConfig:
    """Frustum shape: either both fields of view or resolution + focal length"""
    horizontal_fov: Optional[float] = None
    vertical_fov: Optional[float] = None
    fov_in_degrees: bool = False
    resolution: Optional[List[float]] = None  # (width, height)
    focal_length: Optional[float] = None
    min_distance: float = 0.1
    max_distance: float = 10.0

    @property
    def uses_fov(self) -> bool:
        return self.horizontal_fov is not None or self.vertical_fov is not None

    @property
    def uses_focal_length(self) -> bool:
        return self.resolution is not None or self.focal_length is not None

    def validate(self):
        """Check that exactly one complete intrinsics form is given"""
        if self.uses_fov and self.uses_focal_length:
            raise ConfigurationError(
                "Specify either horizontal_fov/vertical_fov or resolution/focal_length, not both"
            )
        if self.uses_fov:
            if self.horizontal_fov is None or self.vertical_fov is None:
                raise ConfigurationError("Both horizontal_fov and vertical_fov are required")
        elif self.uses_focal_length:
            if self.resolution is None or self.focal_length is None:
                raise ConfigurationError("Both resolution and focal_length are required")
            if len(self.resolution) != 2:
                raise ConfigurationError(f"resolution must be [width, height], got {self.resolution}")
        else:
            raise ConfigurationError("No intrinsics given: set a field of view or resolution/focal_length")

    def fov_radians(self):
        """(horizontal, vertical) field of view in radians"""
        if self.fov_in_degrees:
            return math.radians(self.horizontal_fov), math.radians(self.vertical_fov)
        return float(self.horizontal_fov), float(self.vertical_fov)


@dataclass
class ExtrinsicsConfig:
    """Camera-to-body transform as [x, y, z, qx, qy, qz, qw] or [x, y, z, rx, ry, rz]"""
    T_C_B: List[float] = field(default_factory=list)


@dataclass
class CameraModelConfig:
    """Main configuration class for camfrustum"""
    name: str = "camera"
    intrinsics: IntrinsicsConfig = field(default_factory=IntrinsicsConfig)
    extrinsics: ExtrinsicsConfig = field(default_factory=ExtrinsicsConfig)
    boundary_tolerance: float = 0.0
    log_level: str = "INFO"

    def build_camera_model(self) -> CameraModel:
        """Create a CameraModel with intrinsics and extrinsics applied"""
        self.intrinsics.validate()
        model = CameraModel(boundary_tolerance=self.boundary_tolerance)

        intrinsics = self.intrinsics
        if intrinsics.uses_fov:
            horizontal_fov, vertical_fov = intrinsics.fov_radians()
            model.set_intrinsics_from_fov(horizontal_fov, vertical_fov,
                                          intrinsics.min_distance, intrinsics.max_distance)
        else:
            model.set_intrinsics_from_focal_length(intrinsics.resolution, intrinsics.focal_length,
                                                   intrinsics.min_distance, intrinsics.max_distance)

        model.set_extrinsics(pose_from_config(self.extrinsics.T_C_B))
        return model

    def save(self, path: Union[str, Path]):
        """Save configuration to file"""
        path = Path(path)
        if path.suffix == ".yaml" or path.suffix == ".yml":
            self.save_yaml(path)
        elif path.suffix == ".json":
            self.save_json(path)
        else:
            raise ConfigurationError(f"Unsupported file format: {path.suffix}")

    def save_yaml(self, path: Union[str, Path]):
        """Save configuration as YAML"""
        with open(path, 'w') as f:
            yaml.safe_dump(asdict(self), f, default_flow_style=False, indent=2)

    def save_json(self, path: Union[str, Path]):
        """Save configuration as JSON"""
        with open(path, 'w') as f:
            json.dump(asdict(self), f, indent=2)

    @classmethod
    def load(cls, path: Union[str, Path]) -> "CameraModelConfig":
        """Load configuration from file"""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Required config file not found: {path}")
        if path.suffix == ".yaml" or path.suffix == ".yml":
            return cls.load_yaml(path)
        elif path.suffix == ".json":
            return cls.load_json(path)
        else:
            raise ConfigurationError(f"Unsupported file format: {path.suffix}")

    @classmethod
    def load_yaml(cls, path: Union[str, Path]) -> "CameraModelConfig":
        """Load configuration from YAML file"""
        with open(path, 'r') as f:
            data = yaml.safe_load(f)
        return cls.from_dict(data or {})

    @classmethod
    def load_json(cls, path: Union[str, Path]) -> "CameraModelConfig":
        """Load configuration from JSON file"""
        with open(path, 'r') as f:
            data = json.load(f)
        return cls.from_dict(data)

    @classmethod
    @with_error_context("Invalid camera config")
    def from_dict(cls, data: Dict[str, Any]) -> "CameraModelConfig":
        """Create configuration from dictionary"""
        data = copy.deepcopy(data)
        try:
            if "intrinsics" in data:
                data["intrinsics"] = IntrinsicsConfig(**data["intrinsics"])
            if "extrinsics" in data:
                data["extrinsics"] = ExtrinsicsConfig(**data["extrinsics"])
            return cls(**data)
        except TypeError as e:
            raise ConfigurationError(str(e)) from e


# Preset configurations
PRESET_CONFIGS = {
    "wide-90": {
        "name": "wide-90",
        "intrinsics": {
            "horizontal_fov": 90.0,
            "vertical_fov": 90.0,
            "fov_in_degrees": True,
            "min_distance": 1.0,
            "max_distance": 10.0,
        },
    },

    "realsense-d435": {
        "name": "realsense-d435",
        "intrinsics": {
            "resolution": [640, 480],
            "focal_length": 385.0,
            "min_distance": 0.1,
            "max_distance": 5.0,
        },
    },

    "kinect-v2": {
        "name": "kinect-v2",
        "intrinsics": {
            "horizontal_fov": 70.6,
            "vertical_fov": 60.0,
            "fov_in_degrees": True,
            "min_distance": 0.5,
            "max_distance": 4.5,
        },
    },
}


def get_preset_config(preset_name: str) -> CameraModelConfig:
    """Get a preset configuration by name"""
    if preset_name not in PRESET_CONFIGS:
        available = ", ".join(PRESET_CONFIGS.keys())
        raise ConfigurationError(f"Unknown preset: {preset_name}. Available: {available}")

    return CameraModelConfig.from_dict(PRESET_CONFIGS[preset_name])
