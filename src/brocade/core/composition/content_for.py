"""``{{content-for "type"}}`` and config placeholder replacement for HTML entry points."""
from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, Callable, Iterable, List, Mapping
from urllib.parse import quote

from brocade.core.trees.nodes import TransformedTree, Tree

CONTENT_FOR_RE = re.compile(r"\{\{content-for ['\"](.+?)['\"]\}\}")


@dataclass(frozen=True)
class ReplacePattern:
    match: re.Pattern[str]
    replacement: Callable[[Mapping[str, Any], re.Match[str]], str]


def content_for(
    config: Mapping[str, Any],
    type_: str,
    addons: Iterable[Any],
    *,
    auto_run: bool = True,
    store_config_in_meta: bool = True,
) -> str:
    """Collect the text for one ``content-for`` marker.

    Built-in contributions come first (the config meta tag for ``head`` and
    the boot call for ``app-boot``), then every addon's ``content_for`` in
    addon order.
    """
    prefix = config.get("modulePrefix", "")
    parts: List[str] = []

    if type_ == "head" and store_config_in_meta:
        content = quote(json.dumps(config, sort_keys=True, separators=(",", ":")), safe="")
        parts.append(f'<meta name="{prefix}/config/environment" content="{content}" />')

    if type_ == "app-boot" and auto_run:
        app = json.dumps(config.get("APP") or {}, sort_keys=True)
        parts.append(f'if (!runningTests) {{\n  require("{prefix}/app")["default"].create({app});\n}}')

    for addon in addons:
        hook = getattr(addon, "content_for", None)
        if not callable(hook):
            continue
        contributed = hook(type_, config)
        if contributed:
            parts.append(contributed)

    return "\n".join(parts)


def config_replace_patterns(
    addons: Iterable[Any],
    *,
    auto_run: bool = True,
    store_config_in_meta: bool = True,
) -> List[ReplacePattern]:
    addon_list = list(addons)
    return [
        ReplacePattern(
            CONTENT_FOR_RE,
            lambda config, match: content_for(
                config,
                match.group(1),
                addon_list,
                auto_run=auto_run,
                store_config_in_meta=store_config_in_meta,
            ),
        ),
        ReplacePattern(re.compile(r"\{\{rootURL\}\}"), lambda config, _m: str(config.get("rootURL", ""))),
        ReplacePattern(re.compile(r"\{\{BROCADE_ENV\}\}"), lambda config, _m: str(config.get("environment", ""))),
        ReplacePattern(re.compile(r"\{\{MODULE_PREFIX\}\}"), lambda config, _m: str(config.get("modulePrefix", ""))),
    ]


def replace_config(text: str, config: Mapping[str, Any], patterns: Iterable[ReplacePattern]) -> str:
    for pattern in patterns:
        text = pattern.match.sub(lambda m, p=pattern: p.replacement(config, m), text)
    return text


def config_replace(
    tree: Tree,
    config: Mapping[str, Any],
    *,
    files: List[str],
    patterns: List[ReplacePattern],
    annotation: str = "ConfigReplace",
) -> Tree:
    """Return ``tree`` with placeholders in ``files`` replaced."""
    return TransformedTree(
        tree,
        lambda _path, text: replace_config(text, config, patterns),
        files=files,
        annotation=annotation,
    )


__all__ = [
    "CONTENT_FOR_RE",
    "ReplacePattern",
    "content_for",
    "config_replace_patterns",
    "replace_config",
    "config_replace",
]
