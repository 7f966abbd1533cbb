"""
Terraform CLI apply engine.

Runs ``terraform`` in a working directory to apply configurations, read the
resulting state, verify imports, and destroy what was created.
"""

from __future__ import annotations

import json
import logging
import os
import shutil
import subprocess
import tempfile
from pathlib import Path
from typing import Mapping, Optional, Protocol

from gpdb_toolkit.acceptance.expectations import flatten_attributes
from gpdb_toolkit.common.exceptions import ApplyError, ResourceNotFoundError
from gpdb_toolkit.common.settings import TERRAFORM_BINARY, TERRAFORM_TIMEOUT_SECONDS

CONFIG_FILE_NAME = "main.tf"


class ApplyEngine(Protocol):
    """What the lifecycle driver needs from an apply engine."""

    def apply(self, configuration: str) -> None: ...

    def state_attributes(self, resource_address: str) -> dict[str, str]: ...

    def import_attributes(self, resource_address: str, resource_id: str, configuration: str) -> dict[str, str]: ...

    def destroy(self) -> None: ...


def find_resource_values(show_document: dict, resource_address: str) -> Optional[dict]:
    """Return the ``values`` of a resource in ``terraform show -json`` output."""
    root = (show_document.get("values") or {}).get("root_module") or {}
    for resource in root.get("resources") or []:
        if resource.get("address") == resource_address:
            return resource.get("values") or {}
    return None


class TerraformEngine:
    """Apply engine backed by the Terraform CLI."""

    def __init__(
        self,
        working_dir: Optional[str] = None,
        binary: str = TERRAFORM_BINARY,
        env: Optional[Mapping[str, str]] = None,
        timeout: int = TERRAFORM_TIMEOUT_SECONDS,
    ):
        self.working_dir = Path(working_dir or tempfile.mkdtemp(prefix="gpdb-acc-"))
        self.working_dir.mkdir(parents=True, exist_ok=True)
        self.binary = binary
        self.env = {**os.environ, **(env or {}), "TF_IN_AUTOMATION": "1"}
        self.timeout = timeout
        self._initialized = False

    def _run(self, args: list[str], cwd: Optional[Path] = None) -> str:
        command = [self.binary, *args]
        logging.debug("Running %s in %s", " ".join(command), cwd or self.working_dir)
        try:
            result = subprocess.run(
                command,
                cwd=str(cwd or self.working_dir),
                env=self.env,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as exc:
            raise ApplyError(command, f"timed out after {self.timeout}s") from exc
        except OSError as exc:
            raise ApplyError(command, str(exc)) from exc
        if result.returncode != 0:
            raise ApplyError(command, result.stderr.strip() or result.stdout.strip())
        return result.stdout

    def _write_configuration(self, directory: Path, configuration: str) -> None:
        (directory / CONFIG_FILE_NAME).write_text(configuration, encoding="utf-8")

    def _init(self, directory: Path) -> None:
        self._run(["init", "-input=false", "-no-color"], cwd=directory)

    def apply(self, configuration: str) -> None:
        """Write the configuration and apply it."""
        self._write_configuration(self.working_dir, configuration)
        if not self._initialized:
            self._init(self.working_dir)
            self._initialized = True
        self._run(["apply", "-auto-approve", "-input=false", "-no-color"])

    def _show(self, directory: Path) -> dict:
        return json.loads(self._run(["show", "-json", "-no-color"], cwd=directory) or "{}")

    def state_attributes(self, resource_address: str) -> dict[str, str]:
        """
        Return the flat attributes of a resource in the current state.

        Raises:
            ResourceNotFoundError: If the address is not in state
        """
        values = find_resource_values(self._show(self.working_dir), resource_address)
        if values is None:
            raise ResourceNotFoundError(resource_address)
        return flatten_attributes(values)

    def import_attributes(self, resource_address: str, resource_id: str, configuration: str) -> dict[str, str]:
        """
        Import a resource by id into a scratch state and return its flat attributes.

        The scratch directory is removed afterwards; the main state is untouched.
        """
        scratch = Path(tempfile.mkdtemp(prefix="import-", dir=self.working_dir))
        try:
            self._write_configuration(scratch, configuration)
            self._init(scratch)
            self._run(["import", "-input=false", "-no-color", resource_address, resource_id], cwd=scratch)
            values = find_resource_values(self._show(scratch), resource_address)
        finally:
            shutil.rmtree(scratch, ignore_errors=True)
        if values is None:
            raise ResourceNotFoundError(resource_id)
        return flatten_attributes(values)

    def destroy(self) -> None:
        """Destroy everything in the working directory's state."""
        if not self._initialized:
            return
        self._run(["destroy", "-auto-approve", "-input=false", "-no-color"])
