from __future__ import annotations

from brocade.data import clear_caches, get_data_path, read_json, read_yaml


def test_bundled_files_exist() -> None:
    assert get_data_path("config", "defaults.yaml").is_file()
    assert get_data_path("schemas", "build-options.schema.json").is_file()


def test_defaults_and_schema_load() -> None:
    defaults = read_yaml("config", "defaults.yaml")
    schema = read_json("schemas", "build-options.schema.json")

    assert defaults["outputPaths"]["vendor"]["css"] == "/assets/vendor.css"
    assert "addons" in schema["properties"]
    assert read_yaml("config", "defaults.yaml") is defaults


def test_clear_caches_reparses() -> None:
    first = read_json("schemas", "build-options.schema.json")

    clear_caches()

    second = read_json("schemas", "build-options.schema.json")
    assert second == first
    assert second is not first
