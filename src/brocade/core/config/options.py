"""Layered build options, resolved once per engine.

Option sources (highest to lowest priority):
1. User-supplied mapping passed to the engine
2. Detected defaults: values derived from the environment (production
   builds minify and drop source maps), the app name (output file names)
   and the project layout (trees that exist on disk)
3. Bundled defaults: brocade.data/config/defaults.yaml

Plain-data options are validated against
``brocade.data/schemas/build-options.schema.json`` after merging. Trees are
resolved separately because they may be live :class:`Tree` objects.
"""
from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from jsonschema import Draft202012Validator

from brocade.core.exceptions import ConfigurationError
from brocade.core.trees.nodes import SourceDir, Tree
from brocade.core.utils.merge import layer_options
from brocade.data import read_json, read_yaml

from .env import current_env, is_test_command

logger = logging.getLogger(__name__)

TREE_NAMES = ("src", "app", "tests", "styles", "templates", "bower", "vendor", "public")


@dataclass
class OutputPaths:
    app_html: str
    app_js: str
    app_css: Dict[str, str]
    tests_js: str
    vendor_js: str
    vendor_css: str
    test_support_js: str
    test_support_css: str
    test_loader_js: Optional[str] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "OutputPaths":
        app = data.get("app") or {}
        support = data.get("testSupport") or {}
        support_js = support.get("js")
        if isinstance(support_js, dict):
            test_support_js = support_js.get("testSupport", "/assets/test-support.js")
            test_loader_js = support_js.get("testLoader")
        else:
            test_support_js = support_js or "/assets/test-support.js"
            test_loader_js = None
        return cls(
            app_html=app.get("html", "index.html"),
            app_js=app["js"],
            app_css=dict(app.get("css") or {}),
            tests_js=(data.get("tests") or {}).get("js", "/assets/tests.js"),
            vendor_js=(data.get("vendor") or {}).get("js", "/assets/vendor.js"),
            vendor_css=(data.get("vendor") or {}).get("css", "/assets/vendor.css"),
            test_support_js=test_support_js,
            test_support_css=support.get("css", "/assets/test-support.css"),
            test_loader_js=test_loader_js,
        )


@dataclass
class AddonsOptions:
    blacklist: Optional[List[str]] = None
    whitelist: Optional[List[str]] = None
    required: List[str] = field(default_factory=list)
    recommended: List[str] = field(default_factory=list)
    minimum_versions: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "AddonsOptions":
        blacklist = data.get("blacklist")
        whitelist = data.get("whitelist")
        return cls(
            blacklist=list(blacklist) if blacklist is not None else None,
            whitelist=list(whitelist) if whitelist is not None else None,
            required=list(data.get("required") or []),
            recommended=list(data.get("recommended") or []),
            minimum_versions=dict(data.get("minimumVersions") or {}),
        )


@dataclass
class BuildOptions:
    name: str
    env: str
    tests: bool
    hinting: bool
    store_config_in_meta: bool
    auto_run: bool
    bower_directory: str
    bower_enabled: bool
    output_paths: OutputPaths
    addons: AddonsOptions
    minify_css: Dict[str, Any]
    minify_js: Dict[str, Any]
    sourcemaps: Dict[str, Any]
    vendor_files: Dict[str, Any]
    trees: Dict[str, Optional[Tree]]
    raw: Dict[str, Any] = field(default_factory=dict)
    app_config: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_production(self) -> bool:
        return self.env == "production"


def detected_defaults(name: str, env: str) -> Dict[str, Any]:
    """Defaults that depend on the environment and the app name."""
    production = env == "production"
    return {
        "minifyCSS": {"enabled": production, "options": {"processImport": False}},
        "minifyJS": {
            "enabled": production,
            "options": {
                "compress": {"negate_iife": False, "sequences": 30},
                "output": {"semicolons": False},
            },
        },
        "outputPaths": {
            "app": {
                "css": {"app": f"/assets/{name}.css"},
                "js": f"/assets/{name}.js",
            },
        },
        "sourcemaps": {"enabled": not production, "extensions": ["js"]},
    }


def validate_options(options: Mapping[str, Any]) -> None:
    schema = read_json("schemas", "build-options.schema.json")
    validator = Draft202012Validator(schema)
    issues = [
        f"{'/'.join(str(p) for p in err.path) or '<root>'}: {err.message}"
        for err in sorted(validator.iter_errors(options), key=lambda e: list(map(str, e.path)))
    ]
    if issues:
        raise ConfigurationError(
            "Invalid build options:\n  " + "\n  ".join(issues),
            context={"issues": issues},
        )


def _build_tree_for(
    project_root: Path,
    default_path: str,
    specified: Any,
    *,
    watched: bool = True,
) -> Optional[Tree]:
    if isinstance(specified, Tree):
        return specified
    if specified is not None and not isinstance(specified, (str, Path)):
        raise ConfigurationError(
            f"Tree option must be a path or a Tree, got {type(specified).__name__}",
            context={"default_path": default_path},
        )
    resolved = project_root / (specified or default_path)
    if resolved.exists():
        return SourceDir(resolved, watched=watched)
    return None


def resolve_trees(
    user_trees: Mapping[str, Any],
    *,
    project_root: Path,
    bower_directory: str,
    watch_bower: bool = False,
) -> Dict[str, Optional[Tree]]:
    unknown = sorted(set(user_trees) - set(TREE_NAMES))
    if unknown:
        raise ConfigurationError(
            f"Unknown tree name(s) in trees option: {', '.join(unknown)}",
            context={"unknown": unknown},
        )
    return {
        "src": _build_tree_for(project_root, "src", user_trees.get("src")),
        "app": _build_tree_for(project_root, "app", user_trees.get("app")),
        "tests": _build_tree_for(project_root, "tests", user_trees.get("tests")),
        # Styles and templates live inside app/, which is already watched.
        "styles": _build_tree_for(project_root, "app/styles", user_trees.get("styles"), watched=False),
        "templates": _build_tree_for(project_root, "app/templates", user_trees.get("templates"), watched=False),
        "bower": _build_tree_for(project_root, bower_directory, user_trees.get("bower"), watched=watch_bower),
        "vendor": _build_tree_for(project_root, "vendor", user_trees.get("vendor")),
        "public": _build_tree_for(project_root, "public", user_trees.get("public")),
    }


def resolve_build_options(
    options: Optional[Mapping[str, Any]],
    *,
    project_root: Path,
    project_name: str,
    env: Optional[str] = None,
    watch_bower: bool = False,
) -> BuildOptions:
    """Merge bundled, detected and user options and return typed options."""
    user: Dict[str, Any] = dict(options or {})
    user_trees = dict(user.pop("trees", None) or {})

    env = env or current_env()
    name = str(user.get("name") or project_name)
    production = env == "production"

    merged = layer_options(
        copy.deepcopy(read_yaml("config", "defaults.yaml")),
        detected_defaults(name, env),
        user,
    )
    merged["name"] = name
    tests_default = is_test_command() or not production
    merged.setdefault("tests", tests_default)
    merged.setdefault("hinting", tests_default)

    validate_options(merged)

    bower_directory = merged["bowerDirectory"]
    trees = resolve_trees(
        user_trees,
        project_root=project_root,
        bower_directory=bower_directory,
        watch_bower=watch_bower,
    )
    bower_enabled = bower_directory != "vendor" and (project_root / bower_directory).exists()

    logger.debug("resolved build options for %s (%s)", name, env)
    return BuildOptions(
        name=name,
        env=env,
        tests=bool(merged["tests"]),
        hinting=bool(merged["hinting"]),
        store_config_in_meta=bool(merged["storeConfigInMeta"]),
        auto_run=bool(merged["autoRun"]),
        bower_directory=bower_directory,
        bower_enabled=bower_enabled,
        output_paths=OutputPaths.from_mapping(merged["outputPaths"]),
        addons=AddonsOptions.from_mapping(merged.get("addons") or {}),
        minify_css=dict(merged.get("minifyCSS") or {}),
        minify_js=dict(merged.get("minifyJS") or {}),
        sourcemaps=dict(merged.get("sourcemaps") or {}),
        vendor_files=dict(merged.get("vendorFiles") or {}),
        trees=trees,
        raw=merged,
        app_config=dict(merged.get("appConfig") or {}),
    )


__all__ = [
    "TREE_NAMES",
    "OutputPaths",
    "AddonsOptions",
    "BuildOptions",
    "detected_defaults",
    "validate_options",
    "resolve_trees",
    "resolve_build_options",
]
