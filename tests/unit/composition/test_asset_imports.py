"""AssetImportRegistry routing and validation.

NO MOCKS - node module resolution uses real package directories.
"""
from __future__ import annotations

from pathlib import Path

import pytest

from brocade.core.composition.imports import (
    AssetImportRegistry,
    ImportOptions,
    OtherAssetPath,
)
from brocade.core.composition.transforms import CustomTransform, TransformRegistry
from brocade.core.diagnostics import INFO, WARNING, Diagnostics
from brocade.core.exceptions import ConfigurationError
from brocade.core.plugins.registry import Plugin, PluginRegistry
from helpers.addons import wrap_in_iife

VENDOR_JS = "/assets/vendor.js"
VENDOR_CSS = "/assets/vendor.css"


def make_registry(root: Path, env: str = "development", plugins: PluginRegistry | None = None) -> AssetImportRegistry:
    return AssetImportRegistry(
        env=env,
        vendor_js=VENDOR_JS,
        vendor_css=VENDOR_CSS,
        plugins=plugins or PluginRegistry(),
        transforms=TransformRegistry(),
        project_root=root,
        diagnostics=Diagnostics(),
    )


class TestScripts:
    def test_vendor_css_bundle_is_declared_up_front(self, tmp_path: Path) -> None:
        registry = make_registry(tmp_path)

        assert registry.style_output_files == {VENDOR_CSS: []}
        assert registry.script_output_files == {}

    def test_importing_twice_keeps_one_entry_and_logs_once(self, tmp_path: Path) -> None:
        registry = make_registry(tmp_path)

        registry.import_asset("vendor/widget.js")
        registry.import_asset("vendor/widget.js")

        assert registry.script_output_files == {VENDOR_JS: ["vendor/widget.js"]}
        infos = registry.diagnostics.by_level(INFO)
        assert len(infos) == 1
        assert "vendor/widget.js" in infos[0].message

    def test_custom_output_file(self, tmp_path: Path) -> None:
        registry = make_registry(tmp_path)

        registry.import_asset("vendor/a.js", {"outputFile": "/assets/other.js"})

        assert registry.script_output_files == {"/assets/other.js": ["vendor/a.js"]}

    def test_test_type_goes_to_legacy_test_files(self, tmp_path: Path) -> None:
        registry = make_registry(tmp_path)

        registry.import_asset("vendor/qunit.js", {"type": "test"})
        registry.import_asset("vendor/helpers.js", {"type": "test", "prepend": True})
        registry.import_asset("vendor/qunit.js", {"type": "test"})

        assert registry.legacy_test_files_to_append == ["vendor/helpers.js", "vendor/qunit.js"]
        assert registry.script_output_files == {}

    def test_unknown_type_names_the_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError, match="for file: widget.js"):
            make_registry(tmp_path).import_asset("vendor/lib/widget.js", {"type": "app"})

    def test_plugin_extensions_count_as_scripts(self, tmp_path: Path) -> None:
        plugins = PluginRegistry()
        plugins.add("js", Plugin(name="ts", ext="ts"))
        registry = make_registry(tmp_path, plugins=plugins)

        registry.import_asset("vendor/lib/a.ts")

        assert registry.script_output_files == {VENDOR_JS: ["vendor/lib/a.ts"]}

    def test_using_records_the_file_in_the_transform(self, tmp_path: Path) -> None:
        registry = make_registry(tmp_path)
        registry.transforms.register(CustomTransform(name="wrap", callback=wrap_in_iife))

        registry.import_asset("vendor/lib/foo.js", {"using": [{"transformation": "wrap"}]})

        assert registry.transforms.get("wrap").files == ["vendor/lib/foo.js"]

    def test_using_must_be_a_list(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError, match="array of transformations"):
            make_registry(tmp_path).import_asset("vendor/a.js", {"using": {"transformation": "wrap"}})


class TestStyles:
    def test_vendor_styles_last_one_wins(self, tmp_path: Path) -> None:
        registry = make_registry(tmp_path)

        registry.import_asset("vendor/a.css")
        registry.import_asset("vendor/b.css")
        registry.import_asset("vendor/a.css")

        assert registry.style_output_files == {VENDOR_CSS: ["vendor/b.css", "vendor/a.css"]}

    def test_non_vendor_styles_go_to_test_support(self, tmp_path: Path) -> None:
        registry = make_registry(tmp_path)

        registry.import_asset("vendor/qunit.css", {"type": "test"})

        assert registry.vendor_test_static_styles == ["vendor/qunit.css"]
        assert registry.style_output_files == {VENDOR_CSS: []}


class TestPaths:
    @pytest.mark.parametrize("path", ["vendor/lib/foo", "vendor/lib/.hidden"])
    def test_extensionless_path_is_rejected(self, tmp_path: Path, path: str) -> None:
        with pytest.raises(ConfigurationError, match="You must pass a file"):
            make_registry(tmp_path).import_asset(path)

    @pytest.mark.parametrize("path", ["vendor/*.js", "vendor/a,b.js", "vendor/**/x.css"])
    def test_glob_paths_are_rejected(self, tmp_path: Path, path: str) -> None:
        with pytest.raises(ConfigurationError, match="without glob pattern"):
            make_registry(tmp_path).import_asset(path)

    def test_env_map_picks_current_env(self, tmp_path: Path) -> None:
        asset = {"development": "vendor/dev.js", "production": "vendor/prod.js"}

        production = make_registry(tmp_path, env="production")
        production.import_asset(asset)
        other = make_registry(tmp_path, env="test")
        other.import_asset(asset)

        assert production.script_output_files == {VENDOR_JS: ["vendor/prod.js"]}
        assert other.script_output_files == {VENDOR_JS: ["vendor/dev.js"]}

    def test_env_map_without_a_path_is_skipped(self, tmp_path: Path) -> None:
        registry = make_registry(tmp_path)

        registry.import_asset({"production": "vendor/prod.js"})
        registry.import_asset({"development": None})
        registry.import_asset(None)

        assert registry.script_output_files == {}
        assert len(registry.diagnostics) == 0

    def test_backslashes_are_normalised(self, tmp_path: Path) -> None:
        registry = make_registry(tmp_path)

        registry.import_asset("vendor\\lib\\a.js")

        assert registry.script_output_files == {VENDOR_JS: ["vendor/lib/a.js"]}

    def test_root_level_import_warns_but_is_imported(self, tmp_path: Path) -> None:
        registry = make_registry(tmp_path)

        registry.import_asset("widget.js")

        assert registry.script_output_files == {VENDOR_JS: ["widget.js"]}
        [warning] = registry.diagnostics.by_level(WARNING)
        assert "widget.js" in warning.message


class TestOtherAssets:
    def test_destination_defaults_to_the_vendor_subdirectory(self, tmp_path: Path) -> None:
        registry = make_registry(tmp_path)

        registry.import_asset("vendor/fonts/a.woff")

        assert registry.other_asset_paths == [OtherAssetPath(src="vendor/fonts", file="a.woff", dest="fonts")]

    def test_explicit_and_root_destinations(self, tmp_path: Path) -> None:
        registry = make_registry(tmp_path)

        registry.import_asset("vendor/img/a.png", {"destDir": "images"})
        registry.import_asset("vendor/img/b.png", {"dest_dir": ""})

        assert [p.dest for p in registry.other_asset_paths] == ["images", "/"]

    def test_node_modules_prefix_is_stripped(self, tmp_path: Path, write_file) -> None:
        write_file(tmp_path, "node_modules/pkg/package.json", "{}")
        registry = make_registry(tmp_path)

        registry.import_asset("node_modules/pkg/fonts/a.woff")

        assert registry.other_asset_paths[0].dest == "pkg/fonts"


class TestNodeModules:
    def test_package_directory_is_recorded(self, tmp_path: Path, write_file) -> None:
        write_file(tmp_path, "node_modules/pkg/package.json", "{}")
        write_file(tmp_path, "node_modules/@scope/lib/package.json", "{}")
        registry = make_registry(tmp_path)

        registry.import_asset("node_modules/pkg/dist/pkg.js")
        registry.import_asset("node_modules/@scope/lib/index.css")

        names = [module.name for module in registry.node_modules.values()]
        assert names == ["pkg", "@scope/lib"]
        assert registry.node_modules[str(tmp_path / "node_modules" / "pkg")].path == tmp_path / "node_modules" / "pkg"

    def test_resolution_walks_up_from_resolve_from(self, tmp_path: Path, write_file) -> None:
        write_file(tmp_path, "node_modules/pkg/package.json", "{}")
        nested = tmp_path / "lib" / "deep"
        nested.mkdir(parents=True)
        registry = make_registry(tmp_path / "elsewhere")

        registry.import_asset("node_modules/pkg/a.js", {"resolveFrom": str(nested)})

        assert [m.name for m in registry.node_modules.values()] == ["pkg"]

    def test_unresolvable_package_is_a_configuration_error(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError, match="Cannot find module 'missing/package.json'"):
            make_registry(tmp_path).import_asset("node_modules/missing/a.js")


def test_import_options_accept_camel_and_snake_case() -> None:
    options = ImportOptions.from_mapping(
        {"type": "test", "prepend": True, "outputFile": "/a.js", "dest_dir": "x", "resolveFrom": "/r", "exports": {}}
    )

    assert options == ImportOptions(type="test", prepend=True, dest_dir="x", output_file="/a.js", resolve_from="/r")
