"""
Lifecycle test driver.

Applies an ordered list of configuration steps through an apply engine and,
after each one, describes the live resource and checks the accumulated
expected attributes. Import steps re-import the resource by id and require
the imported state to equal the last applied state exactly. Once every step
passed, the resource is destroyed and must describe as not found.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Mapping, Optional, Sequence

from aliyunsdkcore.acs_exception.exceptions import ClientException, ServerException

from gpdb_toolkit.acceptance.config_steps import ConfigStep, render_configuration
from gpdb_toolkit.acceptance.expectations import (
    AttributeMismatch,
    Exact,
    ExpectedAttributeSet,
)
from gpdb_toolkit.acceptance.terraform_engine import ApplyEngine
from gpdb_toolkit.common.exceptions import ApplyError, LifecycleFailure, ResourceNotFoundError

DescribeFunc = Callable[[str], Mapping[str, str]]


@dataclass(frozen=True)
class LifecycleRun:
    """A resource address, its ordered steps, and how to describe it remotely."""

    resource_address: str
    steps: Sequence[ConfigStep]
    describe: DescribeFunc
    dependencies: str = ""


@dataclass(frozen=True)
class LifecycleResult:
    """Outcome of a completed lifecycle run."""

    resource_id: str
    steps_run: int
    destroy_verified: bool


def state_differences(expected: Mapping[str, str], actual: Mapping[str, str]) -> list[AttributeMismatch]:
    """Return every key whose value differs between two flat attribute maps."""
    mismatches = []
    for key in sorted(set(expected) | set(actual)):
        if expected.get(key) != actual.get(key):
            mismatches.append(AttributeMismatch(key, Exact(expected.get(key, "")), actual.get(key)))
    return mismatches


class LifecycleDriver:
    """Runs lifecycle steps strictly in order against one apply engine."""

    def __init__(self, engine: ApplyEngine):
        self.engine = engine

    def run(self, run: LifecycleRun) -> LifecycleResult:
        """
        Execute every step, then destroy and confirm the resource is gone.

        Raises:
            LifecycleFailure: On the first apply error, mismatch, or failed destroy check
        """
        try:
            resource_id = self._run_steps(run)
        except LifecycleFailure as failure:
            self._cleanup_after_failure(failure.resource_id)
            raise

        step_index = len(run.steps) + 1
        logging.info("Destroying %s (%s)", run.resource_address, resource_id)
        try:
            self.engine.destroy()
        except ApplyError as exc:
            raise LifecycleFailure(step_index, resource_id, f"destroy failed: {exc}") from exc
        self._check_destroyed(run, resource_id, step_index)
        return LifecycleResult(resource_id=resource_id, steps_run=len(run.steps), destroy_verified=True)

    def _run_steps(self, run: LifecycleRun) -> str:
        config: dict = {}
        configuration = ""
        expected = ExpectedAttributeSet()
        last_state: dict[str, str] = {}
        resource_id: Optional[str] = None

        for index, step in enumerate(run.steps, start=1):
            label = step.name or f"step {index}"
            if step.import_verify:
                logging.info("[%d] %s: importing %s", index, label, resource_id)
                self._verify_import(run, index, resource_id, last_state, configuration)
                continue

            config = {**config, **step.overrides}
            configuration = render_configuration(run.resource_address, config, run.dependencies)
            logging.info("[%d] %s: applying %d key(s)", index, label, len(step.overrides))
            try:
                self.engine.apply(configuration)
                last_state = self.engine.state_attributes(run.resource_address)
            except (ApplyError, ResourceNotFoundError) as exc:
                raise LifecycleFailure(index, resource_id, f"apply failed: {exc}") from exc

            resource_id = last_state.get("id")
            if not resource_id:
                raise LifecycleFailure(index, None, "applied resource has no id in state")

            expected = expected.merged(step.expected)
            try:
                observed = run.describe(resource_id)
            except ResourceNotFoundError as exc:
                raise LifecycleFailure(index, resource_id, "resource not found after apply") from exc
            except (ServerException, ClientException) as exc:
                raise LifecycleFailure(index, resource_id, f"describe failed: {exc}") from exc

            mismatches = expected.check(observed)
            if mismatches:
                raise LifecycleFailure(index, resource_id, "attribute check failed", mismatches)
            logging.info("[%d] %s: %d attribute(s) verified", index, label, len(expected))

        if resource_id is None:
            raise LifecycleFailure(len(run.steps), None, "no step applied a configuration")
        return resource_id

    def _verify_import(self, run, index, resource_id, last_state, configuration):
        if resource_id is None:
            raise LifecycleFailure(index, None, "import step before any apply")
        try:
            imported = self.engine.import_attributes(run.resource_address, resource_id, configuration)
        except (ApplyError, ResourceNotFoundError) as exc:
            raise LifecycleFailure(index, resource_id, f"import failed: {exc}") from exc
        mismatches = state_differences(last_state, imported)
        if mismatches:
            raise LifecycleFailure(index, resource_id, "imported state differs from applied state", mismatches)

    def _check_destroyed(self, run, resource_id, step_index):
        try:
            run.describe(resource_id)
        except ResourceNotFoundError:
            logging.info("✅ %s no longer exists", resource_id)
            return
        except (ServerException, ClientException) as exc:
            raise LifecycleFailure(step_index, resource_id, f"describe after destroy failed: {exc}") from exc
        raise LifecycleFailure(step_index, resource_id, "resource still exists after destroy")

    def _cleanup_after_failure(self, resource_id):
        logging.warning("Run failed; destroying %s before reporting", resource_id or "partial state")
        try:
            self.engine.destroy()
        except ApplyError as exc:
            logging.error("Cleanup destroy failed: %s", exc)
