"""Core module: the converter session.

Components:
    config: ConverterConfig (canvas size, background, antialiasing,
        image filter, PDF version)
    converter: SceneConverter (single-flight conversion, drawing, PDF
        export, picking and pointer dispatch)
"""

from src.flatscene.core.config import ConverterConfig
from src.flatscene.core.converter import SceneConverter

__all__ = [
    "ConverterConfig",
    "SceneConverter",
]
