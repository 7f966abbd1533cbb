"""
Expected attribute sets for lifecycle checks.

Expectations are tagged: ``Exact(value)`` must match the observed string form,
``ANY_NON_EMPTY`` only requires the attribute to be present and non-empty.
Keys use the flat Terraform notation (``security_ip_list.#``,
``security_ip_list.0``).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator, Mapping


@dataclass(frozen=True)
class Exact:
    """Observed value must equal this value."""

    value: Any

    def matches(self, actual: str | None) -> bool:
        return actual is not None and actual == to_flat_string(self.value)

    def __str__(self):
        return repr(to_flat_string(self.value))


@dataclass(frozen=True)
class AnyNonEmpty:
    """Observed value must be present and non-empty."""

    def matches(self, actual: str | None) -> bool:
        return bool(actual)

    def __str__(self):
        return "<any non-empty value>"


ANY_NON_EMPTY = AnyNonEmpty()


@dataclass(frozen=True)
class AttributeMismatch:
    """One key whose observed value did not satisfy its expectation."""

    key: str
    expected: Exact | AnyNonEmpty
    actual: str | None

    def __str__(self):
        actual = "<missing>" if self.actual is None else repr(self.actual)
        return f"{self.key}: expected {self.expected}, got {actual}"


def to_flat_string(value: Any) -> str:
    """Render a scalar the way flat attribute maps store it."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def flatten_attributes(values: Mapping[str, Any], prefix: str = "") -> dict[str, str]:
    """
    Flatten nested values into a Terraform-style flat string map.

    Lists become ``key.#`` plus ``key.N``; maps become ``key.%`` plus
    ``key.name``; None values are omitted.
    """
    flat: dict[str, str] = {}
    for key, value in values.items():
        name = f"{prefix}{key}"
        if value is None:
            continue
        if isinstance(value, Mapping):
            flat[f"{name}.%"] = str(len(value))
            flat.update(flatten_attributes(value, prefix=f"{name}."))
        elif isinstance(value, (list, tuple)):
            flat[f"{name}.#"] = str(len(value))
            for index, item in enumerate(value):
                if isinstance(item, Mapping):
                    flat.update(flatten_attributes(item, prefix=f"{name}.{index}."))
                elif item is not None:
                    flat[f"{name}.{index}"] = to_flat_string(item)
        else:
            flat[name] = to_flat_string(value)
    return flat


def _tag(value: Any) -> Exact | AnyNonEmpty:
    if isinstance(value, (Exact, AnyNonEmpty)):
        return value
    return Exact(value)


def _is_list_element(key: str, list_key: str) -> bool:
    """True for ``list_key.N`` and anything nested under it."""
    prefix = f"{list_key}."
    if not key.startswith(prefix):
        return False
    return key[len(prefix):].split(".", 1)[0].isdigit()


class ExpectedAttributeSet(Mapping):
    """Immutable mapping of flat attribute keys to tagged expectations."""

    def __init__(self, expectations: Mapping[str, Any] | None = None):
        entries: dict[str, Exact | AnyNonEmpty] = {}
        for key, value in (expectations or {}).items():
            if isinstance(value, (list, tuple)):
                entries[f"{key}.#"] = Exact(len(value))
                for index, item in enumerate(value):
                    entries[f"{key}.{index}"] = _tag(item)
            else:
                entries[key] = _tag(value)
        self._entries = entries

    def __getitem__(self, key):
        return self._entries[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self):
        return len(self._entries)

    def __repr__(self):
        return f"ExpectedAttributeSet({self._entries!r})"

    def merged(self, other: "ExpectedAttributeSet") -> "ExpectedAttributeSet":
        """
        Return a new set with other's entries layered on top (last write wins).

        A list in other replaces the whole list, so element entries of a
        longer earlier list do not linger.
        """
        replaced_lists = [key[: -len(".#")] for key in other._entries if key.endswith(".#")]
        kept = {
            key: expectation
            for key, expectation in self._entries.items()
            if not any(_is_list_element(key, list_key) for list_key in replaced_lists)
        }
        result = ExpectedAttributeSet()
        result._entries = {**kept, **other._entries}
        return result

    def check(self, observed: Mapping[str, str]) -> list[AttributeMismatch]:
        """Return every expectation the observed attribute map fails."""
        mismatches = []
        for key, expectation in self._entries.items():
            actual = observed.get(key)
            if not expectation.matches(actual):
                mismatches.append(AttributeMismatch(key, expectation, actual))
        return mismatches
