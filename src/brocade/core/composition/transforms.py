"""Named per-import transforms contributed by addons.

An addon's ``import_transforms()`` returns a mapping of transform names to
either a plain callable or a mapping / object with a callable ``transform``
and an optional ``process_options`` (``processOptions`` is accepted too).
Each ``import_(..., using=[{"transformation": name, ...}])`` threads the
transform's options through ``process_options(asset_path, entry, options)``
and records the asset in the transform's file list. The packager later
applies ``callback(path, text, options)`` to those files inside the vendor
script bundles.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, Iterator, List, Mapping, Optional

from brocade.core.diagnostics import Diagnostics
from brocade.core.exceptions import AddonContractError, ConfigurationError

logger = logging.getLogger(__name__)

ProcessOptions = Callable[[str, Mapping[str, Any], Dict[str, Any]], Dict[str, Any]]


def _keep_options(asset_path: str, entry: Mapping[str, Any], options: Dict[str, Any]) -> Dict[str, Any]:
    return options


@dataclass
class CustomTransform:
    name: str
    callback: Callable[..., Any]
    process_options: ProcessOptions = _keep_options
    files: List[str] = field(default_factory=list)
    options: Dict[str, Any] = field(default_factory=dict)
    addon_name: Optional[str] = None

    def apply(self, path: str, text: str) -> str:
        return self.callback(path, text, self.options)


class TransformRegistry:
    """Transforms by name, in registration order."""

    def __init__(self, diagnostics: Optional[Diagnostics] = None) -> None:
        self._transforms: Dict[str, CustomTransform] = {}
        self._diagnostics = diagnostics if diagnostics is not None else Diagnostics(logger)

    def register(self, transform: CustomTransform) -> None:
        if transform.name in self._transforms:
            self._diagnostics.warn(
                f'Addon "{transform.addon_name}" is defining a transform name: {transform.name} '
                f'that is already being defined. Using transform from addon: "{transform.addon_name}".',
                logger=logger,
                transform=transform.name,
                addon=transform.addon_name,
            )
        self._transforms[transform.name] = transform

    def get(self, name: str) -> Optional[CustomTransform]:
        return self._transforms.get(name)

    def names(self) -> List[str]:
        return list(self._transforms)

    def apply_import(self, asset_path: str, entry: Mapping[str, Any]) -> CustomTransform:
        """Record ``asset_path`` for the transform named by ``entry``."""
        name = entry.get("transformation") if isinstance(entry, Mapping) else None
        if not name:
            raise ConfigurationError(
                f"while importing {asset_path}: each entry in the `using` list must have a `transformation` name",
                context={"asset": asset_path},
            )

        transform = self._transforms.get(name)
        if transform is None:
            raise ConfigurationError(
                f"while importing {asset_path}: found an unknown transformation name {name}. "
                f"Available transformNames are: {','.join(self._transforms)}",
                context={"asset": asset_path, "transformation": name, "available": self.names()},
            )

        transform.options = transform.process_options(asset_path, entry, transform.options)
        transform.files.append(asset_path)
        logger.debug("import %s uses transform %s", asset_path, name)
        return transform

    def __contains__(self, name: object) -> bool:
        return name in self._transforms

    def __iter__(self) -> Iterator[CustomTransform]:
        return iter(list(self._transforms.values()))

    def __len__(self) -> int:
        return len(self._transforms)


def _lookup(entry: Any, *names: str) -> Any:
    for name in names:
        if isinstance(entry, Mapping):
            if name in entry:
                return entry[name]
        elif hasattr(entry, name):
            return getattr(entry, name)
    return None


def build_transform(addon_name: str, name: str, entry: Any) -> CustomTransform:
    """Normalise one ``import_transforms()`` entry."""
    if callable(entry) and not isinstance(entry, Mapping):
        return CustomTransform(name=name, callback=entry, addon_name=addon_name)

    callback = _lookup(entry, "transform")
    if entry is None or not callable(callback):
        raise AddonContractError(
            f'Addon "{addon_name}" did not return a callback function correctly for transform "{name}".',
            addon=addon_name,
            context={"transform": name},
        )

    process_options = _lookup(entry, "process_options", "processOptions") or _keep_options
    if not callable(process_options):
        raise AddonContractError(
            f'Addon "{addon_name}" returned a non-callable process_options for transform "{name}".',
            addon=addon_name,
            context={"transform": name},
        )
    return CustomTransform(
        name=name,
        callback=callback,
        process_options=process_options,
        addon_name=addon_name,
    )


def load_addon_transforms(addons: Iterable[Any], registry: TransformRegistry) -> TransformRegistry:
    """Register the transforms of every addon with an ``import_transforms`` hook."""
    for addon in addons:
        hook = getattr(addon, "import_transforms", None)
        if not callable(hook):
            continue
        transforms = hook()
        if transforms is None:
            raise AddonContractError(
                f'Addon "{addon.name}" did not return a transform map from import_transforms',
                addon=addon.name,
            )
        for name, entry in transforms.items():
            registry.register(build_transform(addon.name, name, entry))
    return registry


__all__ = [
    "CustomTransform",
    "TransformRegistry",
    "build_transform",
    "load_addon_transforms",
]
