"""
Brocade - deterministic build-tree composition

Brocade composes an application and an open-ended set of addons into a
small number of output bundles, running addon hooks over named tree types
and resolving ad-hoc asset imports under a fixed conflict policy.

Example:
    from brocade import CompositionEngine, Project
    from brocade.core.trees import read_tree

    engine = CompositionEngine(Project("my-app", "/path/to/my-app", addons))
    engine.import_("vendor/lib/widget.js")
    files = read_tree(engine.to_tree())
"""

__version__ = "1.0.0"

from brocade.core.addons import Addon, Project
from brocade.core.composition import CompositionEngine
from brocade.core.exceptions import (
    AddonContractError,
    BrocadeError,
    ConfigurationError,
    TreeMergeError,
    TreeReadError,
)

__all__ = [
    "__version__",
    "Addon",
    "Project",
    "CompositionEngine",
    "BrocadeError",
    "ConfigurationError",
    "AddonContractError",
    "TreeMergeError",
    "TreeReadError",
]
