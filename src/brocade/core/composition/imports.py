"""Ad-hoc single-file imports routed into ordered bundles.

``AssetImportRegistry.import_asset`` is the only entry point. It resolves the
asset path (optionally per environment), validates it and routes it:

* scripts (extensions registered for ``js``) go to the vendor script bundle
  for their output file, or to the legacy test-support list for
  ``type="test"``; both under first-one-wins;
* ``.css`` goes to the vendor style bundle for its output file, or to the
  test-support styles; both under last-one-wins;
* anything else is copied as-is by :meth:`CompositionEngine.other_assets`.

No file is read here. The only file-system access is locating the package
directory of ``node_modules/<pkg>/...`` imports.
"""
from __future__ import annotations

import logging
import posixpath
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

from brocade.core.diagnostics import Diagnostics
from brocade.core.exceptions import ConfigurationError
from brocade.core.plugins.preprocessors import is_type
from brocade.core.plugins.registry import PluginRegistry

from .conflicts import ImportStrategy, add_output_file, allow_import, insert_asset
from .transforms import TransformRegistry

logger = logging.getLogger(__name__)

NODE_MODULE_RE = re.compile(r"^node_modules/((@[^/]+/)?[^/]+)/")
GLOB_RE = re.compile(r"[*,]")

Asset = Union[str, Mapping[str, Optional[str]], None]


@dataclass
class ImportOptions:
    type: str = "vendor"
    prepend: bool = False
    dest_dir: Optional[str] = None
    output_file: Optional[str] = None
    using: Any = None
    resolve_from: Optional[str] = None

    _ALIASES = {
        "destDir": "dest_dir",
        "outputFile": "output_file",
        "resolveFrom": "resolve_from",
    }

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> "ImportOptions":
        values: Dict[str, Any] = {}
        for key, value in (data or {}).items():
            name = cls._ALIASES.get(key, key)
            if name not in cls.__dataclass_fields__:
                # Extra keys (for example AMD export maps) are accepted and ignored.
                logger.debug("ignoring import option %s", key)
                continue
            values[name] = value
        return cls(**values)


@dataclass(frozen=True)
class OtherAssetPath:
    src: str
    file: str
    dest: str


@dataclass(frozen=True)
class NodeModule:
    name: str
    path: Path


def resolve_node_module(name: str, basedir: Path) -> Path:
    """Find ``node_modules/<name>`` from ``basedir`` or any parent directory."""
    for directory in [basedir, *basedir.parents]:
        candidate = directory / "node_modules" / name
        if (candidate / "package.json").is_file():
            return candidate
    raise ConfigurationError(
        f"Cannot find module '{name}/package.json' from '{basedir}'",
        context={"module": name, "basedir": str(basedir)},
    )


class AssetImportRegistry:
    """Owns every bundle list fed by imports."""

    def __init__(
        self,
        *,
        env: str,
        vendor_js: str,
        vendor_css: str,
        plugins: PluginRegistry,
        transforms: TransformRegistry,
        project_root: Path,
        bower_directory: str = "bower_components",
        diagnostics: Optional[Diagnostics] = None,
    ) -> None:
        self.env = env
        self.vendor_js = vendor_js
        self.vendor_css = vendor_css
        self.plugins = plugins
        self.transforms = transforms
        self.project_root = Path(project_root)
        self.bower_directory = bower_directory
        self.diagnostics = diagnostics if diagnostics is not None else Diagnostics(logger)

        self.script_output_files: Dict[str, List[str]] = {}
        # Declared up front so the vendor stylesheet is always produced.
        self.style_output_files: Dict[str, List[str]] = {vendor_css: []}
        self.legacy_test_files_to_append: List[str] = []
        self.vendor_test_static_styles: List[str] = []
        self.other_asset_paths: List[OtherAssetPath] = []
        self.node_modules: Dict[str, NodeModule] = {}

    # ------------------------------------------------------------------
    # Path handling
    # ------------------------------------------------------------------
    def asset_path(self, asset: Asset) -> Optional[str]:
        """Pick the path for the current env and validate it.

        Returns None when there is nothing to import for this env.
        """
        if isinstance(asset, Mapping):
            path = asset[self.env] if self.env in asset else asset.get("development")
        else:
            path = asset
        if not path:
            return None

        path = str(path).replace("\\", "/")
        if len(path.split("/")) < 2:
            self.diagnostics.warn(
                f"Using `import` with a file in the root of `vendor/` causes a significant "
                f"performance penalty. Please move `{path}` into a subdirectory.",
                logger=logger,
                asset=path,
            )
        if GLOB_RE.search(path):
            raise ConfigurationError(
                f"You must pass a file path (without glob pattern) to `import`. path was: `{path}`",
                context={"asset": path},
            )
        return path

    def _record_node_module(self, path: str, resolve_from: Optional[str]) -> None:
        match = NODE_MODULE_RE.match(path)
        if match is None:
            return
        name = match.group(1)
        basedir = Path(resolve_from) if resolve_from else self.project_root
        location = resolve_node_module(name, basedir)
        self.node_modules[str(location)] = NodeModule(name=name, path=location)

    def _subdirectory(self, directory: str) -> str:
        pattern = f"^vendor/|{re.escape(self.bower_directory)}|node_modules/"
        return re.sub(pattern, "", directory, count=1)

    # ------------------------------------------------------------------
    # Import
    # ------------------------------------------------------------------
    def import_asset(self, asset: Asset, options: Union[ImportOptions, Mapping[str, Any], None] = None) -> None:
        if not isinstance(options, ImportOptions):
            options = ImportOptions.from_mapping(options)

        path = self.asset_path(asset)
        if path is None:
            return

        self._record_node_module(path, options.resolve_from)

        directory = posixpath.dirname(path)
        basename = posixpath.basename(path)
        if not posixpath.splitext(basename)[1]:
            raise ConfigurationError(
                "You must pass a file to `import`. For directories specify them to "
                "the constructor under the `trees` option.",
                context={"asset": path},
            )

        if is_type(path, "js", self.plugins):
            self._import_script(path, basename, options)
        elif path.endswith(".css"):
            self._import_style(path, options)
        else:
            dest = options.dest_dir
            if dest == "":
                dest = "/"
            self.other_asset_paths.append(
                OtherAssetPath(src=directory, file=basename, dest=dest or self._subdirectory(directory))
            )

    def _import_script(self, path: str, basename: str, options: ImportOptions) -> None:
        if options.using is not None:
            if not isinstance(options.using, (list, tuple)):
                raise ConfigurationError(
                    "You must pass an array of transformations for `using` option",
                    context={"asset": path},
                )
            for entry in options.using:
                self.transforms.apply_import(path, entry)

        if options.type == "vendor":
            add_output_file(
                ImportStrategy.FIRST_ONE_WINS,
                self.script_output_files,
                path,
                output_file=options.output_file or self.vendor_js,
                prepend=options.prepend,
                diagnostics=self.diagnostics,
            )
        elif options.type == "test":
            if allow_import(
                ImportStrategy.FIRST_ONE_WINS,
                self.legacy_test_files_to_append,
                path,
                options.prepend,
                self.diagnostics,
            ):
                insert_asset(self.legacy_test_files_to_append, path, options.prepend)
        else:
            raise ConfigurationError(
                "You must pass either `vendor` or `test` for options.type in your call "
                f"to `import` for file: {basename}",
                context={"asset": path, "type": options.type},
            )

    def _import_style(self, path: str, options: ImportOptions) -> None:
        if options.type == "vendor":
            add_output_file(
                ImportStrategy.LAST_ONE_WINS,
                self.style_output_files,
                path,
                output_file=options.output_file or self.vendor_css,
                prepend=options.prepend,
                diagnostics=self.diagnostics,
            )
        elif allow_import(
            ImportStrategy.LAST_ONE_WINS,
            self.vendor_test_static_styles,
            path,
            options.prepend,
            self.diagnostics,
        ):
            insert_asset(self.vendor_test_static_styles, path, options.prepend)


__all__ = [
    "ImportOptions",
    "OtherAssetPath",
    "NodeModule",
    "AssetImportRegistry",
    "resolve_node_module",
]
