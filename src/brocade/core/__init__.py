"""Brocade core: trees, addons, plugins and the composition engine."""
