"""Preprocessor plugin registry.

Plugins are registered per type (``js``, ``css``, ``template``,
``minify-css``, ``minify-js``) by the host and by addons through their
``setup_preprocessor_registry`` hook. Each plugin names the file extensions
it handles and may mark itself as the default compiler for its type.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

from brocade.core.exceptions import ConfigurationError
from brocade.core.trees.nodes import Tree

logger = logging.getLogger(__name__)

# Extensions every registry understands even with no plugins registered.
BUILTIN_EXTENSIONS: Dict[str, List[str]] = {
    "js": ["js"],
    "css": ["css"],
}


@dataclass
class Plugin:
    """A named tree compiler for one type.

    ``to_tree`` receives the input tree followed by the positional arguments
    the preprocessor passes for the type (input and output paths for ``js``
    and ``css``) and keyword options; it returns the compiled tree.
    """

    name: str
    ext: Union[str, Sequence[str]] = field(default_factory=list)
    to_tree: Callable[..., Tree] = field(default=lambda tree, *args, **options: tree)
    is_default_for_type: bool = False

    @property
    def extensions(self) -> List[str]:
        if isinstance(self.ext, str):
            return [self.ext]
        return list(self.ext)


class PluginRegistry:
    """Ordered plugins per type."""

    def __init__(self, host: Any = None) -> None:
        self.host = host
        self._plugins: Dict[str, List[Plugin]] = {}

    def add(self, type_: str, plugin: Plugin) -> None:
        self._plugins.setdefault(type_, []).append(plugin)
        logger.debug("registered %s plugin %s", type_, plugin.name)

    def remove(self, type_: str, name: str) -> None:
        plugins = self._plugins.get(type_, [])
        self._plugins[type_] = [p for p in plugins if p.name != name]

    def load(self, type_: str) -> List[Plugin]:
        return list(self._plugins.get(type_, []))

    def registered_for_type(self, type_: str) -> List[str]:
        return [p.name for p in self._plugins.get(type_, [])]

    def extensions_for_type(self, type_: str) -> List[str]:
        extensions: List[str] = list(BUILTIN_EXTENSIONS.get(type_, []))
        for plugin in self._plugins.get(type_, []):
            for ext in plugin.extensions:
                if ext not in extensions:
                    extensions.append(ext)
        return extensions

    def default_for_type(self, type_: str) -> Optional[Plugin]:
        """Return the single plugin marked default for ``type_``, if any."""
        defaults = [p for p in self.load(type_) if p.is_default_for_type]
        if len(defaults) > 1:
            names = ", ".join(p.name for p in defaults)
            raise ConfigurationError(
                f"There are multiple preprocessor plugins marked as default for '{type_}': {names}",
                context={"type": type_, "plugins": [p.name for p in defaults]},
            )
        return defaults[0] if defaults else None


__all__ = ["BUILTIN_EXTENSIONS", "Plugin", "PluginRegistry"]
