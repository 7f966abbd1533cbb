"""
Exceptions shared by the sweeper and the lifecycle acceptance harness.
"""


class ClientSetupError(Exception):
    """Raised when an API client for a region cannot be built"""

    def __init__(self, region, original_error):
        super().__init__(f"Failed to create API client for region {region}: {original_error}")
        self.region = region


class SweepListingError(Exception):
    """Raised when enumerating instances for a sweep fails"""

    def __init__(self, action, original_error):
        super().__init__(f"Listing failed during {action}: {original_error}")
        self.action = action


class ResourceNotFoundError(LookupError):
    """Raised when a described resource does not exist"""

    def __init__(self, resource_id):
        super().__init__(f"Resource {resource_id} not found")
        self.resource_id = resource_id


class ApplyError(RuntimeError):
    """Raised when the apply engine fails to run a command"""

    def __init__(self, command, detail):
        super().__init__(f"Command {' '.join(command)!r} failed: {detail}")
        self.command = list(command)
        self.detail = detail


class PreCheckError(RuntimeError):
    """Raised when the environment is not ready for an acceptance run"""


class LifecycleFailure(AssertionError):
    """Raised when a lifecycle step fails; carries the step context."""

    def __init__(self, step_index, resource_id, reason, mismatches=()):
        self.step_index = step_index
        self.resource_id = resource_id
        self.reason = reason
        self.mismatches = list(mismatches)
        lines = [f"Step {step_index} ({resource_id or 'no resource id'}): {reason}"]
        for mismatch in self.mismatches:
            lines.append(f"  {mismatch}")
        super().__init__("\n".join(lines))
