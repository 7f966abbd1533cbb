"""
Explicit sweeper registration.

Sweepers are collected into a SweeperRegistry by a startup routine instead of
registering themselves at import time; the harness receives the registry and
runs the requested sweepers per region, dependencies first.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, Optional, Sequence


@dataclass(frozen=True)
class Sweeper:
    """A named cleanup routine run once per region."""

    name: str
    func: Callable[[str], object]
    dependencies: tuple[str, ...] = ()


@dataclass(frozen=True)
class SweeperFailure:
    """A sweeper that raised for a region."""

    name: str
    region: str
    error: Exception


class SweeperRegistry:
    """Holds sweepers by name."""

    def __init__(self):
        self._sweepers: dict[str, Sweeper] = {}

    def register(self, sweeper: Sweeper) -> Sweeper:
        """Add a sweeper; names must be unique."""
        if sweeper.name in self._sweepers:
            raise ValueError(f"Sweeper {sweeper.name!r} is already registered")
        self._sweepers[sweeper.name] = sweeper
        return sweeper

    def get(self, name: str) -> Sweeper:
        try:
            return self._sweepers[name]
        except KeyError as exc:
            raise ValueError(f"Unknown sweeper {name!r}") from exc

    def names(self) -> list[str]:
        return list(self._sweepers)

    def resolve_order(self, names: Optional[Iterable[str]] = None) -> list[Sweeper]:
        """
        Return the requested sweepers with their dependencies, dependencies first.

        Raises:
            ValueError: On unknown names or dependency cycles
        """
        ordered: list[Sweeper] = []
        done: set[str] = set()
        visiting: set[str] = set()

        def visit(name: str) -> None:
            if name in done:
                return
            if name in visiting:
                raise ValueError(f"Sweeper dependency cycle at {name!r}")
            visiting.add(name)
            sweeper = self.get(name)
            for dependency in sweeper.dependencies:
                visit(dependency)
            visiting.discard(name)
            done.add(name)
            ordered.append(sweeper)

        for name in names if names is not None else self.names():
            visit(name)
        return ordered


def run_sweepers(
    registry: SweeperRegistry,
    regions: Sequence[str],
    names: Optional[Iterable[str]] = None,
) -> list[SweeperFailure]:
    """Run sweepers for every region; failures are collected, not raised."""
    failures: list[SweeperFailure] = []
    sweepers = registry.resolve_order(names)
    for region in regions:
        for sweeper in sweepers:
            logging.info("Running sweeper %s in %s", sweeper.name, region)
            try:
                sweeper.func(region)
            except Exception as exc:  # pylint: disable=broad-except
                logging.error("Sweeper %s failed in %s: %s", sweeper.name, region, exc)
                failures.append(SweeperFailure(sweeper.name, region, exc))
    return failures


def register_default_sweepers(registry: SweeperRegistry) -> SweeperRegistry:
    """Startup routine registering the toolkit's sweepers."""
    from gpdb_toolkit.scripts.cleanup.gpdb_elastic_instance_sweeper import (
        SWEEPER_NAME,
        sweep_gpdb_elastic_instances,
    )

    registry.register(Sweeper(name=SWEEPER_NAME, func=sweep_gpdb_elastic_instances))
    return registry


def build_default_registry() -> SweeperRegistry:
    """Return a fresh registry populated by register_default_sweepers."""
    return register_default_sweepers(SweeperRegistry())
