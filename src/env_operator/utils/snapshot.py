"""Load environment snapshots (YAML or JSON) into models."""

from __future__ import annotations

from pathlib import Path

import yaml

from env_operator.errors import SnapshotError
from env_operator.models.environment import Environment

# Scalars under these keys are kept exactly as written: ``version: 1.10``
# must not become the float 1.1.
_VERBATIM_KEYS = frozenset({"version", "value"})


class SnapshotLoader(yaml.SafeLoader):
    """SafeLoader that keeps version and env var value scalars as text."""


def _construct_mapping(loader: SnapshotLoader, node: yaml.MappingNode) -> dict:
    loader.flatten_mapping(node)
    mapping = {}
    for key_node, value_node in node.value:
        key = loader.construct_object(key_node, deep=True)
        if (
            key in _VERBATIM_KEYS
            and isinstance(value_node, yaml.ScalarNode)
            and value_node.tag != "tag:yaml.org,2002:null"
        ):
            mapping[key] = value_node.value
        else:
            mapping[key] = loader.construct_object(value_node, deep=True)
    return mapping


SnapshotLoader.add_constructor(yaml.resolver.BaseResolver.DEFAULT_MAPPING_TAG, _construct_mapping)


def parse_environment(text: str) -> Environment:
    """Parse a single environment document. JSON is accepted as YAML."""
    try:
        doc = yaml.load(text, Loader=SnapshotLoader)
    except yaml.YAMLError as e:
        raise SnapshotError(f"invalid environment snapshot: {e}") from e
    if doc is None:
        doc = {}
    if not isinstance(doc, dict):
        raise SnapshotError("environment snapshot must be a mapping")
    try:
        return Environment.from_dict(doc)
    except (TypeError, ValueError) as e:
        raise SnapshotError(f"invalid environment snapshot: {e}") from e


def load_environment(path: Path | str) -> Environment:
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise SnapshotError(f"cannot read {path}: {e}") from e
    return parse_environment(text)


class SnapshotSource:
    """Environment source that serves a snapshot file for any namespace."""

    def __init__(self, path: Path | str):
        self.path = Path(path)

    def load_environment(self, namespace: str) -> Environment:
        env = load_environment(self.path)
        if not env.namespace:
            env.namespace = namespace
        return env
