"""YAML utilities for configuration processing.

This module provides utilities for loading YAML configuration files with
ordered, case-insensitive dictionaries.
"""

import yaml
from pydicti import odicti


def ordered_load(stream, loader=yaml.SafeLoader, object_pairs_hook=odicti):
    """
    Load YAML mappings as ordered dictionaries.
    """

    def construct_mapping(loader, node, _deep=False):
        """Construct mapping with preserved order."""
        loader.flatten_mapping(node)
        return object_pairs_hook(loader.construct_pairs(node))

    # Copy the parent's constructors so the original loader is never mutated
    parent_constructors = dict(getattr(loader, "yaml_constructors", {}))
    NewLoader = type("NewLoader", (loader,), {"yaml_constructors": parent_constructors})

    NewLoader.add_constructor(
        yaml.resolver.BaseResolver.DEFAULT_MAPPING_TAG, construct_mapping
    )

    return yaml.load(stream, NewLoader)
