"""Composition engine: one build of an application and its addons.

Construction resolves everything that can fail early, in this order:

1. build options (bundled defaults < detected < user) and source trees
2. plugin registry, transform registry and asset import registry
3. legacy ``vendor_files`` imports
4. deny/allow-list validation
5. ``setup_preprocessor_registry`` on eligible addons
6. ``included`` on eligible addons (the addon list is filtered here)
7. ``import_transforms`` of the included addons
8. required / recommended / minimum-version addon checks
9. the packager

Every derived tree is memoised in the engine's :class:`TreeCache`, so calling
:meth:`CompositionEngine.to_tree` twice re-derives nothing. Imports made after
a tree has been derived do not change that tree; addons import from their
``included`` hook.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, TypeVar

from brocade.core.addons.hooks import AddonHookRunner
from brocade.core.addons.project import Project
from brocade.core.addons.traversal import check_minimum_versions, walk_addons
from brocade.core.config.options import BuildOptions, resolve_build_options
from brocade.core.diagnostics import Diagnostics
from brocade.core.exceptions import ConfigurationError
from brocade.core.plugins.preprocessors import (
    preprocess_css,
    preprocess_js,
    preprocess_minify_css,
    preprocess_templates,
)
from brocade.core.plugins.registry import Plugin, PluginRegistry
from brocade.core.trees.cache import TreeCache, cache_key
from brocade.core.trees.funnel_reducer import reduce_funnels
from brocade.core.trees.merge import EMPTY_TREE, merge_trees
from brocade.core.trees.nodes import ConcatTree, Funnel, Tree, unwatched_dir

from .imports import AssetImportRegistry, ImportOptions
from .packager import DefaultPackager, internal_path
from .transforms import TransformRegistry, load_addon_transforms

logger = logging.getLogger(__name__)

T = TypeVar("T")

COMPILED_TYPES = ("js", "css", "template")


class CompositionEngine:
    """Compose an application and its addons into one output tree."""

    def __init__(
        self,
        project: Project,
        options: Optional[Mapping[str, Any]] = None,
        *,
        registry: Optional[PluginRegistry] = None,
        env: Optional[str] = None,
        diagnostics: Optional[Diagnostics] = None,
    ) -> None:
        self.project = project
        self.diagnostics = diagnostics if diagnostics is not None else Diagnostics(logger)
        self.cache = TreeCache()

        self.options: BuildOptions = resolve_build_options(
            options,
            project_root=project.root,
            project_name=project.name,
            env=env,
            watch_bower=project.watch_bower,
        )
        self.name = self.options.name
        self.env = self.options.env
        self.trees: Dict[str, Optional[Tree]] = self.options.trees
        self.tests = self.options.tests
        self.hinting = self.options.hinting

        self.registry = registry if registry is not None else PluginRegistry(self)
        self.transforms = TransformRegistry(self.diagnostics)
        self.imports = AssetImportRegistry(
            env=self.env,
            vendor_js=self.options.output_paths.vendor_js,
            vendor_css=self.options.output_paths.vendor_css,
            plugins=self.registry,
            transforms=self.transforms,
            project_root=project.root,
            bower_directory=self.options.bower_directory,
            diagnostics=self.diagnostics,
        )

        self.vendor_files = {
            name: entry for name, entry in self.options.vendor_files.items() if entry is not None
        }
        self.populate_legacy_files()

        self.hooks = AddonHookRunner(
            project.addons,
            blacklist=self.options.addons.blacklist,
            whitelist=self.options.addons.whitelist,
        )
        self.hooks.validate_lists()
        for addon in project.addons:
            addon.app = self

        self._setup_registry()
        self.project.addons = self.hooks.notify_included(self)
        load_addon_transforms(self.project.addons, self.transforms)
        self._check_addons()

        self.packager = DefaultPackager(
            self.options,
            plugins=self.registry,
            hooks=self.hooks,
            imports=self.imports,
            transforms=self.transforms,
            cache=self.cache,
        )
        logger.debug("engine for %s ready with %d addon(s)", self.name, len(self.project.addons))

    # ------------------------------------------------------------------
    # Construction helpers
    # ------------------------------------------------------------------
    def _setup_registry(self) -> None:
        for addon in self.hooks.eligible():
            if self.hooks.capabilities(addon).has("setup_preprocessor_registry"):
                addon.setup_preprocessor_registry(self.registry)
        for type_ in COMPILED_TYPES:
            self.registry.default_for_type(type_)

    def _check_addons(self) -> None:
        present = {getattr(addon, "name", None) for addon in walk_addons(self.project.addons)}

        for name in self.options.addons.required:
            if name not in present:
                raise ConfigurationError(
                    f"The {name} addon is missing from your project, please add it to `package.json`.",
                    context={"addon": name},
                )
        for name in self.options.addons.recommended:
            if name not in present:
                self.diagnostics.warn(
                    f"You have not included `{name}` in your project. "
                    "This only works if you provide an alternative yourself.",
                    logger=logger,
                    addon=name,
                )
        check_minimum_versions(self.project.addons, self.options.addons.minimum_versions, self.diagnostics)

    def populate_legacy_files(self) -> None:
        for name, entry in self.vendor_files.items():
            logger.debug("importing legacy vendor file %s", name)
            if isinstance(entry, (list, tuple)):
                self.import_(entry[0], entry[1] if len(entry) > 1 else None)
            else:
                self.import_(entry)

    def _cached(self, kind: str, factory: Callable[[], T], **options: Any) -> T:
        return self.cache.fetch(cache_key(kind, **options), factory)

    # ------------------------------------------------------------------
    # Imports
    # ------------------------------------------------------------------
    def import_(self, asset: Any, options: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> None:
        """Import one file into a bundle.

        ``asset`` is a path or a mapping of env name to path. Options may be
        passed as a mapping, as keywords, or both (keywords win): ``type``
        (``vendor`` or ``test``), ``prepend``, ``dest_dir``, ``output_file``,
        ``using`` and ``resolve_from``.
        """
        merged: Dict[str, Any] = dict(options or {})
        merged.update(kwargs)
        self.imports.import_asset(asset, ImportOptions.from_mapping(merged))

    # ------------------------------------------------------------------
    # Addon trees
    # ------------------------------------------------------------------
    def addon_trees_for(self, type_: str) -> List[Tree]:
        return [bundle.tree for bundle in self.hooks.trees_for(type_)]

    def _default_plugin_for_type(self, type_: str) -> Optional[Plugin]:
        return self.registry.default_for_type(type_)

    def _compile_addon_templates(self, tree: Tree) -> Tree:
        plugin = self._default_plugin_for_type("template")
        if plugin is not None:
            return plugin.to_tree(tree, annotation="_compile_addon_templates", registry=self.registry)
        return preprocess_templates(tree, registry=self.registry)

    def _compile_addon_js(self, tree: Tree) -> Tree:
        plugin = self._default_plugin_for_type("js")
        if plugin is not None:
            return plugin.to_tree(tree, annotation="_compile_addon_js", registry=self.registry)
        return preprocess_js(tree, "/", "/", registry=self.registry)

    def _addon_tree(self, type_: str, output_dir: str, *, skip_templates: bool = False) -> Tree:
        merged = merge_trees(self.addon_trees_for(type_), overwrite=True, annotation=f"TreeMerger ({type_})")
        if not skip_templates:
            merged = self._compile_addon_templates(merged)
        compiled = self._compile_addon_js(merged)
        return Funnel(compiled, dest_dir=output_dir, annotation=f"Funnel: {output_dir} {type_}")

    def addon_tree(self) -> Tree:
        return self._cached("addon_tree", lambda: self._addon_tree("addon", "addon-tree-output"))

    def addon_test_support_tree(self) -> Tree:
        return self._cached(
            "addon_test_support_tree",
            lambda: self._addon_tree("addon-test-support", "addon-test-support", skip_templates=True),
        )

    def addon_src_tree(self) -> Tree:
        return self._cached("addon_src_tree", lambda: self._addon_tree("src", "addon-tree-output"))

    # ------------------------------------------------------------------
    # App trees
    # ------------------------------------------------------------------
    def get_app_javascript(self) -> Tree:
        def build() -> Tree:
            merged = merge_trees(
                [*self.addon_trees_for("app"), self.trees.get("app")],
                overwrite=True,
                annotation="TreeMerger (app)",
            )
            return Funnel(merged, dest_dir=self.name, annotation="ProcessedAppTree")

        return self._cached("app_javascript", build)

    def get_src(self) -> Optional[Tree]:
        src = self.trees.get("src")
        if src is None:
            return None
        return self._cached("src", lambda: Funnel(src, dest_dir="src", annotation="Funnel (src)"))

    def _pod_template_patterns(self) -> List[str]:
        return [f"**/*/template.{ext}" for ext in self.registry.extensions_for_type("template")]

    def pod_templates(self) -> Tree:
        app = self.trees.get("app")
        if app is None:
            return EMPTY_TREE
        return self._cached(
            "pod_templates",
            lambda: Funnel(
                app,
                include=self._pod_template_patterns(),
                exclude=["templates/**/*"],
                dest_dir=self.name,
                annotation="Funnel: Pod Templates",
            ),
        )

    def templates_tree(self) -> Tree:
        def build() -> Tree:
            trees: List[Tree] = []
            templates = self.trees.get("templates")
            if templates is not None:
                trees.append(Funnel(templates, dest_dir=f"{self.name}/templates", annotation="Funnel: Templates"))
            if self.trees.get("app") is not None:
                trees.append(self.pod_templates())
            return merge_trees(trees, annotation="TreeMerge (templates)")

        return self._cached("templates", build)

    def get_addon_templates(self) -> Tree:
        def build() -> Tree:
            merged = merge_trees(
                self.addon_trees_for("templates"),
                overwrite=True,
                annotation="TreeMerger (templates)",
            )
            return Funnel(merged, dest_dir=f"{self.name}/templates", annotation="ProcessedTemplateTree")

        return self._cached("addon_templates", build)

    # ------------------------------------------------------------------
    # External tree
    # ------------------------------------------------------------------
    def node_module_trees(self) -> List[Tree]:
        return self._cached(
            "node_module_trees",
            lambda: [
                Funnel(
                    unwatched_dir(module.path),
                    dest_dir=f"node_modules/{module.name}",
                    annotation=f"Funnel (node_modules/{module.name})",
                )
                for module in self.imports.node_modules.values()
            ],
        )

    def get_external_tree(self) -> Tree:
        """Vendor files of the app and addons, addon outputs, bower and node modules."""

        def build() -> Tree:
            vendor = self.packager.package_vendor(
                merge_trees(
                    [*self.addon_trees_for("vendor"), self.trees.get("vendor")],
                    overwrite=True,
                    annotation="TreeMerger (vendor)",
                )
            )
            trees: List[Optional[Tree]] = [vendor, self.addon_tree(), self.addon_src_tree()]
            bower = self.trees.get("bower")
            if self.options.bower_enabled and bower is not None:
                trees.append(self.packager.package_bower(bower, self.options.bower_directory))
            return merge_trees(
                [*self.node_module_trees(), *trees],
                overwrite=True,
                annotation="TreeMerger (ExternalTree)",
            )

        return self._cached("external_tree", build)

    # ------------------------------------------------------------------
    # Styles
    # ------------------------------------------------------------------
    def styles(self) -> Tree:
        return self._cached("styles", self._build_styles)

    def _build_styles(self) -> Tree:
        trees: List[Optional[Tree]] = [self.get_external_tree(), *self.addon_trees_for("styles")]
        app_styles = self.trees.get("styles")
        if app_styles is not None:
            trees.append(Funnel(app_styles, dest_dir="app/styles", annotation="Funnel (styles)"))

        minify = self.options.minify_css
        css_options = {
            "output_paths": self.options.output_paths.app_css,
            "minify_css": minify.get("options", {}),
        }
        styles_and_vendor = self.hooks.preprocess(
            "css",
            merge_trees(trees, overwrite=True, annotation="TreeMerger (stylesAndVendor)"),
        )
        preprocessed = preprocess_css(
            styles_and_vendor, "/app/styles", "/assets", registry=self.registry, **css_options
        )

        vendor_css = self.options.output_paths.vendor_css
        vendor_bundles: List[Tree] = []
        for output_file, header_files in self.imports.style_output_files.items():
            is_main = output_file == vendor_css
            vendor_bundles.append(
                ConcatTree(
                    styles_and_vendor,
                    output_file=output_file,
                    header_files=header_files,
                    input_files=["addon-tree-output/**/*.css"] if is_main else [],
                    allow_none=True,
                    source_map_config=self.options.sourcemaps,
                    annotation=f"Concat: Vendor Styles{output_file}",
                )
            )
        vendor_styles = self.hooks.preprocess(
            "css",
            merge_trees(vendor_bundles, overwrite=True, annotation="TreeMerger (vendorStyles)"),
        )

        if minify.get("enabled") is True:
            preprocessed = preprocess_minify_css(preprocessed, registry=self.registry, **css_options)
            vendor_styles = preprocess_minify_css(vendor_styles, registry=self.registry, **css_options)

        merged = merge_trees([preprocessed, vendor_styles], annotation="styles")
        return self.hooks.postprocess("css", merged)

    # ------------------------------------------------------------------
    # Tests
    # ------------------------------------------------------------------
    def test(self) -> Tree:
        def build() -> Tree:
            merged_tests = merge_trees(
                [*self.addon_trees_for("test-support"), self.trees.get("tests")],
                overwrite=True,
                annotation="TreeMerger (tests)",
            )
            core_tests = self.packager.package_tests(merged_tests)
            return merge_trees(
                [self.app_tests(core_tests), self.test_files(core_tests)],
                annotation="TreeMerger (test)",
            )

        return self._cached("test", build)

    def app_tests(self, core_test_tree: Tree) -> Tree:
        def build() -> Tree:
            trees: List[Tree] = []
            if self.hinting:
                trees.extend(self.lint_test_trees())
            trees.extend(
                [
                    self.packager.package_internal_files(),
                    self.packager.package_test_app_config(),
                    core_test_tree,
                ]
            )
            merged = merge_trees(trees, overwrite=True, annotation="TreeMerger (appTestTrees)")
            return ConcatTree(
                merged,
                output_file=self.options.output_paths.tests_js,
                header_files=[internal_path("tests-prefix.js")],
                input_files=[f"{self.name}/tests/**/*.js"],
                footer_files=[internal_path("app-config.js"), internal_path("tests-suffix.js")],
                source_map_config=self.options.sourcemaps,
                annotation="Concat: App Tests",
            )

        return self._cached("app_tests", build, core=core_test_tree)

    def lint_test_trees(self) -> List[Tree]:
        """Run lint hooks over app, src, tests and templates, placed under ``<name>/tests``."""

        def lint_into(type_: str, tree: Optional[Tree], dest_dir: str) -> Tree:
            linted = self.hooks.lint(type_, tree)
            return Funnel(linted, dest_dir=dest_dir, annotation=f"Funnel (lint {type_})")

        def build() -> List[Tree]:
            tests_dir = f"{self.name}/tests"
            lint_trees: List[Tree] = []
            app = self.trees.get("app")
            if app is not None:
                filtered = Funnel(
                    app,
                    exclude=[*self._pod_template_patterns(), "styles/**/*", "templates/**/*"],
                    annotation="Funnel: Filtered App",
                )
                lint_trees.append(lint_into("app", filtered, tests_dir))
            src = self.trees.get("src")
            if src is not None:
                lint_trees.append(lint_into("src", src, f"{tests_dir}/src"))

            return [
                lint_into("tests", self.trees.get("tests"), tests_dir),
                lint_into("templates", self.templates_tree(), tests_dir),
                *lint_trees,
            ]

        return self._cached("lint_test_trees", build)

    def test_files(self, core_test_tree: Tree) -> Tree:
        def build() -> Tree:
            paths = self.options.output_paths
            external = self.get_external_tree()
            base = merge_trees(
                [
                    self.packager.package_internal_files(),
                    external,
                    core_test_tree,
                    self.addon_test_support_tree(),
                ],
                overwrite=True,
                annotation="TreeMerger (testFiles base)",
            )
            test_js = ConcatTree(
                base,
                output_file=paths.test_support_js,
                header_files=[internal_path("test-support-prefix.js"), *self.imports.legacy_test_files_to_append],
                input_files=["addon-test-support/**/*.js"],
                footer_files=[internal_path("test-support-suffix.js")],
                allow_none=True,
                source_map_config=self.options.sourcemaps,
                annotation="Concat: Test Support JS",
            )
            trees: List[Tree] = [test_js]
            if self.imports.vendor_test_static_styles:
                trees.append(
                    ConcatTree(
                        external,
                        output_file=paths.test_support_css,
                        header_files=self.imports.vendor_test_static_styles,
                        source_map_config=self.options.sourcemaps,
                        annotation="Concat: Test Support CSS",
                    )
                )
            return merge_trees(trees, overwrite=True, annotation="TreeMerger (testFiles)")

        return self._cached("test_files", build, core=core_test_tree)

    def test_index(self) -> Tree:
        tests = self.trees.get("tests")
        if tests is None:
            return EMPTY_TREE
        return self._cached("test_index", lambda: self.packager.process_test_index(tests))

    # ------------------------------------------------------------------
    # Other assets and output
    # ------------------------------------------------------------------
    def other_assets(self) -> Tree:
        """Copy non-script, non-style imports, one funnel per source/destination pair."""

        def build() -> Tree:
            external = self.get_external_tree()
            funnels = [
                Funnel(
                    external,
                    src_dir=spec.src_dir,
                    dest_dir=spec.dest_dir,
                    include=spec.include,
                    annotation=spec.annotation,
                )
                for spec in reduce_funnels(self.imports.other_asset_paths)
            ]
            return merge_trees(funnels, annotation="TreeMerger (otherAssetTrees)")

        return self._cached("other_assets", build)

    def all_javascript(self) -> Tree:
        return self._cached(
            "all_javascript",
            lambda: merge_trees(
                [
                    self.get_app_javascript(),
                    self.get_addon_templates(),
                    self.get_external_tree(),
                    self.get_src(),
                ],
                overwrite=True,
                annotation="Javascript",
            ),
        )

    def public_tree(self) -> Tree:
        return self._cached(
            "public",
            lambda: self.packager.package_public([*self.addon_trees_for("public"), self.trees.get("public")]),
        )

    def to_array(self) -> List[Tree]:
        all_js = self.all_javascript()
        trees = [
            self._cached("index", lambda: self.packager.process_index(all_js)),
            self._cached("javascript", lambda: self.packager.package_javascript(all_js)),
            self.styles(),
            self.other_assets(),
            self.public_tree(),
        ]
        if self.tests and self.trees.get("tests") is not None:
            trees.extend([self.test_index(), self.test()])
        return trees

    def to_tree(self, additional_trees: Optional[Sequence[Tree]] = None) -> Tree:
        """Return the whole build as one tree, after the ``all`` post-process hook."""
        extra = list(additional_trees or [])

        def build() -> Tree:
            merged = merge_trees([*self.to_array(), *extra], overwrite=True, annotation="TreeMerger (allTrees)")
            return self.hooks.postprocess("all", merged)

        return self._cached("to_tree", build, additional=extra)


__all__ = ["CompositionEngine"]
