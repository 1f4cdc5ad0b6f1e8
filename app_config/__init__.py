"""
Configuration package for the Interior Surface Visualizer.
Centralizes all tunable parameters, constants and the material catalog.
"""

from .constants import (
    IngestConfig,
    MaskConfig,
    OrientationConfig,
    RenderConfig,
    InferenceConfig,
    UIConfig,
    LoggingConfig,
    PerformanceConfig
)
from .materials import DEFAULT_CATALOG, DEFAULT_MATERIALS, MaterialCatalog

__all__ = [
    'IngestConfig',
    'MaskConfig',
    'OrientationConfig',
    'RenderConfig',
    'InferenceConfig',
    'UIConfig',
    'LoggingConfig',
    'PerformanceConfig',
    'DEFAULT_CATALOG',
    'DEFAULT_MATERIALS',
    'MaterialCatalog'
]
