"""Composition: asset imports, conflict policies, packaging and the engine."""
from __future__ import annotations

from .conflicts import (
    ImportDecision,
    ImportStrategy,
    add_output_file,
    allow_import,
    resolve_conflict,
)
from .content_for import config_replace_patterns, content_for, replace_config
from .engine import CompositionEngine
from .imports import AssetImportRegistry, ImportOptions, NodeModule, OtherAssetPath
from .packager import DefaultPackager
from .transforms import CustomTransform, TransformRegistry, load_addon_transforms

__all__ = [
    "CompositionEngine",
    "AssetImportRegistry",
    "ImportOptions",
    "OtherAssetPath",
    "NodeModule",
    "ImportStrategy",
    "ImportDecision",
    "resolve_conflict",
    "allow_import",
    "add_output_file",
    "CustomTransform",
    "TransformRegistry",
    "load_addon_transforms",
    "DefaultPackager",
    "content_for",
    "config_replace_patterns",
    "replace_config",
]
