from __future__ import annotations

from urllib.parse import unquote

from brocade.core.composition.content_for import (
    config_replace,
    config_replace_patterns,
    content_for,
    replace_config,
)
from brocade.core.trees import StaticTree, read_tree
from helpers.addons import ContentAddon

CONFIG = {"modulePrefix": "my-app", "environment": "development", "rootURL": "/", "APP": {"autoboot": True}}


class TestContentFor:
    def test_head_carries_the_config_meta_tag(self) -> None:
        text = content_for(CONFIG, "head", [])

        assert text.startswith('<meta name="my-app/config/environment" content="')
        encoded = text.split('content="', 1)[1].rsplit('"', 1)[0]
        assert '"modulePrefix":"my-app"' in unquote(encoded)

    def test_meta_tag_can_be_disabled(self) -> None:
        assert content_for(CONFIG, "head", [], store_config_in_meta=False) == ""

    def test_app_boot_creates_the_app_unless_auto_run_is_off(self) -> None:
        boot = content_for(CONFIG, "app-boot", [])

        assert 'require("my-app/app")["default"].create({"autoboot": true});' in boot
        assert content_for(CONFIG, "app-boot", [], auto_run=False) == ""

    def test_addon_contributions_follow_addon_order(self) -> None:
        addons = [
            ContentAddon("a", {"body": "<a-body>"}),
            ContentAddon("b", {"body": "<b-body>", "head": "<b-head>"}),
        ]

        assert content_for(CONFIG, "body", addons) == "<a-body>\n<b-body>"
        assert content_for(CONFIG, "head", addons, store_config_in_meta=False) == "<b-head>"


class TestReplaceConfig:
    def test_markers_and_placeholders_are_replaced(self) -> None:
        patterns = config_replace_patterns([ContentAddon("a", {"body-footer": "<footer/>"})])
        html = (
            "<base href=\"{{rootURL}}\">{{MODULE_PREFIX}}:{{BROCADE_ENV}}"
            "{{content-for 'body-footer'}}{{content-for \"unknown\"}}"
        )

        assert replace_config(html, CONFIG, patterns) == '<base href="/">my-app:development<footer/>'

    def test_config_replace_only_touches_listed_files(self) -> None:
        tree = StaticTree({"index.html": "{{rootURL}}", "other.html": "{{rootURL}}"})

        replaced = config_replace(tree, CONFIG, files=["index.html"], patterns=config_replace_patterns([]))

        assert read_tree(replaced) == {"index.html": "/", "other.html": "{{rootURL}}"}
