"""Default packaging of composed trees into output bundles.

The engine decides *which* trees take part; the packager decides how each
category is laid out and concatenated:

* ``vendor/brocade/`` holds the internal prefix/suffix/boot files, generated
  in memory from the app config and spliced with ``content-for`` output;
* app JavaScript is ``<name>/**/*.js`` wrapped by the app prefix, suffix and
  boot files;
* each vendor script bundle concatenates the prefix, its imported files in
  bundle order, ``addon-tree-output/**/*.js`` (main bundle only) and the
  suffix, after every custom import transform has rewritten its files.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional, Sequence

from brocade.core.addons.hooks import AddonHookRunner
from brocade.core.config.options import BuildOptions
from brocade.core.plugins.preprocessors import (
    preprocess_js,
    preprocess_minify_js,
    preprocess_templates,
)
from brocade.core.plugins.registry import PluginRegistry
from brocade.core.trees.cache import TreeCache, cache_key
from brocade.core.trees.merge import merge_trees
from brocade.core.trees.nodes import ConcatTree, Funnel, StaticTree, TransformedTree, Tree
from brocade.core.utils.merge import merge_options

from .content_for import config_replace, config_replace_patterns
from .imports import AssetImportRegistry
from .transforms import TransformRegistry

logger = logging.getLogger(__name__)

INTERNAL_DIR = "vendor/brocade"

# Internal file name -> content-for marker it expands.
INTERNAL_MARKERS = {
    "app-prefix.js": "app-prefix",
    "app-suffix.js": "app-suffix",
    "app-boot.js": "app-boot",
    "vendor-prefix.js": "vendor-prefix",
    "vendor-suffix.js": "vendor-suffix",
    "tests-prefix.js": "tests-prefix",
    "tests-suffix.js": "tests-suffix",
    "test-support-prefix.js": "test-support-prefix",
    "test-support-suffix.js": "test-support-suffix",
}


def internal_path(filename: str) -> str:
    return f"{INTERNAL_DIR}/{filename}"


class DefaultPackager:
    def __init__(
        self,
        options: BuildOptions,
        *,
        plugins: PluginRegistry,
        hooks: AddonHookRunner,
        imports: AssetImportRegistry,
        transforms: TransformRegistry,
        cache: Optional[TreeCache] = None,
    ) -> None:
        self.options = options
        self.name = options.name
        self.plugins = plugins
        self.hooks = hooks
        self.imports = imports
        self.transforms = transforms
        self.cache = cache if cache is not None else TreeCache()

    def _concat(self, tree: Tree, **options: Any) -> ConcatTree:
        return ConcatTree(tree, source_map_config=self.options.sourcemaps, **options)

    # ------------------------------------------------------------------
    # Config
    # ------------------------------------------------------------------
    def package_config(self, tests: bool = False) -> Dict[str, Any]:
        """Return the app config for the build env, or the test config."""
        base = {
            "modulePrefix": self.name,
            "environment": "test" if tests else self.options.env,
            "rootURL": "/",
            "APP": {"autoboot": not tests and self.options.auto_run},
        }
        return merge_options(base, self.options.app_config)

    def _patterns(self):
        return config_replace_patterns(
            self.hooks.addons,
            auto_run=self.options.auto_run,
            store_config_in_meta=self.options.store_config_in_meta,
        )

    def package_internal_files(self) -> Tree:
        return self.cache.fetch(cache_key("packager.internal_files"), self._internal_files)

    def _internal_files(self) -> Tree:
        markers = {
            internal_path(filename): f'{{{{content-for "{marker}"}}}}'
            for filename, marker in INTERNAL_MARKERS.items()
        }
        tree = StaticTree(markers, annotation="Packaged internal files")
        return config_replace(
            tree,
            self.package_config(),
            files=list(markers),
            patterns=self._patterns(),
            annotation="ConfigReplace (internal files)",
        )

    def package_test_app_config(self) -> Tree:
        return self.cache.fetch(cache_key("packager.test_app_config"), self._test_app_config)

    def _test_app_config(self) -> Tree:
        config = self.package_config(tests=True)
        module = f"{self.name}/config/environment"
        text = (
            f"define('{module}', [], function () {{\n"
            f"  return {json.dumps(config, sort_keys=True)};\n"
            f"}});\n"
        )
        return StaticTree({internal_path("app-config.js"): text}, annotation="Test app config")

    # ------------------------------------------------------------------
    # Trees
    # ------------------------------------------------------------------
    def package_vendor(self, tree: Tree) -> Tree:
        return Funnel(tree, dest_dir="vendor", annotation="Packaged Vendor")

    def package_bower(self, tree: Tree, bower_directory: str) -> Tree:
        return Funnel(tree, dest_dir=bower_directory, annotation="Packaged Bower")

    def package_public(self, trees: Sequence[Optional[Tree]]) -> Tree:
        return merge_trees(trees, overwrite=True, annotation="Packaged Public")

    def package_tests(self, tree: Tree) -> Tree:
        tests = Funnel(tree, dest_dir=f"{self.name}/tests", annotation="Funnel (tests)")
        return self.hooks.process(
            "test",
            tests,
            compiler=lambda t: preprocess_js(t, "/", "/", registry=self.plugins),
        )

    def process_index(self, all_js: Tree) -> Tree:
        html = self.options.output_paths.app_html
        index = Funnel(
            all_js,
            src_dir=self.name,
            files=["index.html"],
            get_destination_path=lambda _rel: html,
            annotation="Funnel (index.html)",
        )
        return config_replace(
            index,
            self.package_config(),
            files=[html.lstrip("/")],
            patterns=self._patterns(),
            annotation="ConfigReplace (index.html)",
        )

    def process_test_index(self, tests_tree: Tree) -> Tree:
        index = Funnel(tests_tree, files=["index.html"], dest_dir="tests", annotation="Funnel (test index)")
        return config_replace(
            index,
            self.package_config(tests=True),
            files=["tests/index.html"],
            patterns=self._patterns(),
            annotation="ConfigReplace (test index)",
        )

    # ------------------------------------------------------------------
    # JavaScript
    # ------------------------------------------------------------------
    def process_app_javascript(self, all_js: Tree) -> Tree:
        """Compile templates and JS of ``<name>/`` through the hook stages."""
        templates = self.hooks.process(
            "template",
            Funnel(
                all_js,
                src_dir=f"{self.name}/templates",
                dest_dir=f"{self.name}/templates",
                annotation="Funnel (app templates)",
            ),
            compiler=lambda t: preprocess_templates(t, registry=self.plugins),
        )
        sources = Funnel(
            all_js,
            src_dir=self.name,
            dest_dir=self.name,
            exclude=["templates/**/*", "index.html"],
            annotation="Funnel (app sources)",
        )
        return self.hooks.process(
            "js",
            merge_trees([sources, templates], overwrite=True, annotation="TreeMerger (app js)"),
            compiler=lambda t: preprocess_js(t, "/", "/", registry=self.plugins),
        )

    def apply_custom_transforms(self, external: Tree) -> Tree:
        tree = external
        for transform in self.transforms:
            if not transform.files:
                continue
            tree = TransformedTree(
                tree,
                transform.apply,
                files=list(transform.files),
                annotation=f"Custom transform: {transform.name}",
            )
        return tree

    def package_vendor_javascript(self, tree: Tree) -> List[Tree]:
        source = merge_trees(
            [self.apply_custom_transforms(tree), self.package_internal_files()],
            overwrite=True,
            annotation="TreeMerger (vendor js)",
        )
        vendor_js = self.options.output_paths.vendor_js
        bundles: List[Tree] = []
        bundles_by_file: Dict[str, List[str]] = {vendor_js: []}
        bundles_by_file.update(self.imports.script_output_files)
        logger.debug("packaging %d vendor script bundle(s)", len(bundles_by_file))
        for output_file, files in bundles_by_file.items():
            is_main = output_file == vendor_js
            header: List[str] = [internal_path("vendor-prefix.js")] if is_main else []
            bundles.append(
                self._concat(
                    source,
                    output_file=output_file,
                    header_files=header + list(files),
                    input_files=["addon-tree-output/**/*.js"] if is_main else [],
                    footer_files=[internal_path("vendor-suffix.js")] if is_main else [],
                    allow_none=True,
                    annotation=f"Concat: Vendor {output_file}",
                )
            )
        return bundles

    def package_javascript(self, all_js: Tree) -> Tree:
        app = merge_trees(
            [self.process_app_javascript(all_js), self.package_internal_files()],
            overwrite=True,
            annotation="TreeMerger (app)",
        )
        app_js = self._concat(
            app,
            output_file=self.options.output_paths.app_js,
            header_files=[internal_path("app-prefix.js")],
            input_files=[f"{self.name}/**/*.js"],
            footer_files=[internal_path("app-suffix.js"), internal_path("app-boot.js")],
            annotation="Concat: App",
        )

        tree = merge_trees(
            [app_js, *self.package_vendor_javascript(all_js)],
            overwrite=True,
            annotation="TreeMerger (javascript)",
        )
        if self.options.minify_js.get("enabled") is True:
            tree = preprocess_minify_js(tree, registry=self.plugins, **self.options.minify_js.get("options", {}))
        return tree


__all__ = ["DefaultPackager", "INTERNAL_DIR", "internal_path"]
