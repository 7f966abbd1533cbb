"""
Configuration steps of a lifecycle run and their HCL rendering.

Each step carries only the keys it changes; the configuration applied at step
N is the merge of every override up to N, later steps winning per key.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator, Mapping

from gpdb_toolkit.acceptance.expectations import ExpectedAttributeSet

_REFERENCE = re.compile(r"^\$\{.+\}$")


@dataclass(frozen=True)
class ConfigStep:
    """Sparse configuration overrides plus the attributes expected afterwards."""

    overrides: Mapping[str, Any] = field(default_factory=dict)
    expected: ExpectedAttributeSet = field(default_factory=ExpectedAttributeSet)
    name: str = ""
    import_verify: bool = False

    @classmethod
    def import_state(cls, name: str = "import") -> "ConfigStep":
        """Step that re-imports the resource by id and compares the imported state."""
        return cls(name=name, import_verify=True)


def cumulative_configs(steps: Iterable[ConfigStep]) -> Iterator[dict[str, Any]]:
    """Yield the merged configuration in effect at each step."""
    merged: dict[str, Any] = {}
    for step in steps:
        merged = {**merged, **step.overrides}
        yield dict(merged)


def _render_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(_render_value(item) for item in value) + "]"
    if isinstance(value, Mapping):
        inner = ", ".join(f"{key} = {_render_value(item)}" for key, item in value.items())
        return "{ " + inner + " }"
    text = str(value)
    if _REFERENCE.match(text):
        # Bare expression so references resolve to their typed value
        return text[2:-1]
    return json.dumps(text)


def render_resource_block(resource_address: str, config: Mapping[str, Any]) -> str:
    """Render ``resource "<type>" "<name>" { ... }`` for a config map."""
    resource_type, _, resource_name = resource_address.partition(".")
    if not resource_type or not resource_name:
        raise ValueError(f"Invalid resource address: {resource_address!r}")
    lines = [f'resource "{resource_type}" "{resource_name}" {{']
    for key, value in config.items():
        lines.append(f"  {key} = {_render_value(value)}")
    lines.append("}")
    return "\n".join(lines) + "\n"


def render_configuration(resource_address: str, config: Mapping[str, Any], dependencies: str = "") -> str:
    """Render the full configuration: dependency blocks followed by the resource."""
    parts = []
    if dependencies.strip():
        parts.append(dependencies.strip() + "\n")
    parts.append(render_resource_block(resource_address, config))
    return "\n".join(parts)
