"""Import transforms contributed by addons."""
from __future__ import annotations

from types import SimpleNamespace

import pytest

from brocade.core.composition.transforms import (
    CustomTransform,
    TransformRegistry,
    build_transform,
    load_addon_transforms,
)
from brocade.core.diagnostics import WARNING, Diagnostics
from brocade.core.exceptions import AddonContractError, ConfigurationError
from helpers.addons import TransformAddon, wrap_in_iife


class TestBuildTransform:
    def test_plain_callable_keeps_options(self) -> None:
        transform = build_transform("x", "wrap", wrap_in_iife)

        assert transform.callback is wrap_in_iife
        assert transform.process_options("a.js", {}, {"k": 1}) == {"k": 1}
        assert transform.addon_name == "x"

    def test_mapping_with_camel_case_process_options(self) -> None:
        def process(asset_path, entry, options):
            return {**options, asset_path: entry.get("as")}

        transform = build_transform("x", "amd", {"transform": wrap_in_iife, "processOptions": process})

        assert transform.process_options is process

    def test_object_with_transform_attribute(self) -> None:
        entry = SimpleNamespace(transform=wrap_in_iife, process_options=None)

        transform = build_transform("x", "wrap", entry)

        assert transform.callback is wrap_in_iife
        assert transform.process_options("a.js", {}, {"k": 1}) == {"k": 1}

    @pytest.mark.parametrize("entry", ["not-a-function", {"transform": "nope"}, {}, None])
    def test_malformed_entries_violate_the_contract(self, entry) -> None:
        with pytest.raises(AddonContractError) as exc:
            build_transform("bad-addon", "wrap", entry)

        assert exc.value.context["addon"] == "bad-addon"
        assert exc.value.context["transform"] == "wrap"


class TestLoadAddonTransforms:
    def test_registers_every_transform_in_order(self) -> None:
        registry = TransformRegistry()
        addons = [
            TransformAddon("a", {"wrap": wrap_in_iife}),
            TransformAddon("b", {"amd": {"transform": wrap_in_iife}}),
        ]

        load_addon_transforms(addons, registry)

        assert registry.names() == ["wrap", "amd"]

    def test_missing_transform_map_is_a_contract_violation(self) -> None:
        with pytest.raises(AddonContractError, match='Addon "a" did not return a transform map'):
            load_addon_transforms([TransformAddon("a", None)], TransformRegistry())

    def test_empty_map_is_allowed(self) -> None:
        registry = load_addon_transforms([TransformAddon("a", {})], TransformRegistry())

        assert len(registry) == 0

    def test_duplicate_name_warns_and_later_wins(self) -> None:
        diagnostics = Diagnostics()
        registry = TransformRegistry(diagnostics)

        def other(path, text, options):
            return text

        load_addon_transforms(
            [TransformAddon("a", {"wrap": wrap_in_iife}), TransformAddon("b", {"wrap": other})],
            registry,
        )

        assert registry.get("wrap").callback is other
        [warning] = diagnostics.by_level(WARNING)
        assert "wrap" in warning.message
        assert warning.context["addon"] == "b"


class TestApplyImport:
    def test_threads_options_and_records_files(self) -> None:
        registry = TransformRegistry()
        registry.register(
            CustomTransform(
                name="amd",
                callback=wrap_in_iife,
                process_options=lambda path, entry, options: {**options, path: entry["as"]},
            )
        )

        registry.apply_import("vendor/a.js", {"transformation": "amd", "as": "a"})
        registry.apply_import("vendor/b.js", {"transformation": "amd", "as": "b"})

        transform = registry.get("amd")
        assert transform.files == ["vendor/a.js", "vendor/b.js"]
        assert transform.options == {"vendor/a.js": "a", "vendor/b.js": "b"}

    def test_entry_without_name_is_rejected(self) -> None:
        with pytest.raises(ConfigurationError, match="must have a `transformation` name"):
            TransformRegistry().apply_import("vendor/a.js", {"as": "a"})

    def test_unknown_name_lists_available_transforms(self) -> None:
        registry = TransformRegistry()
        registry.register(CustomTransform(name="wrap", callback=wrap_in_iife))

        with pytest.raises(ConfigurationError) as exc:
            registry.apply_import("vendor/a.js", {"transformation": "nope"})

        assert "nope" in str(exc.value)
        assert exc.value.context["available"] == ["wrap"]


def test_apply_runs_callback_with_current_options() -> None:
    transform = CustomTransform(name="wrap", callback=lambda p, t, o: f"{o['pre']}{t}", options={"pre": ">"})

    assert transform.apply("a.js", "x") == ">x"
