"""Preprocessor plugin registry and the default preprocessors."""
from __future__ import annotations

from .preprocessors import (
    is_type,
    preprocess_css,
    preprocess_js,
    preprocess_minify_css,
    preprocess_minify_js,
    preprocess_templates,
)
from .registry import Plugin, PluginRegistry

__all__ = [
    "Plugin",
    "PluginRegistry",
    "is_type",
    "preprocess_css",
    "preprocess_js",
    "preprocess_minify_css",
    "preprocess_minify_js",
    "preprocess_templates",
]
