"""Naming conventions shared by sweepers and acceptance tests."""

# Description / name prefixes of resources created by acceptance runs
SWEEP_PREFIXES = ("tf-testAcc", "tf_testAcc")

# Prefix for names generated by the lifecycle scenario; must match SWEEP_PREFIXES
ACCEPTANCE_NAME_PREFIX = "tf-testAccGpdbInstance"


def has_sweep_prefix(name, prefixes=SWEEP_PREFIXES):
    """Return True when name starts with any prefix, ignoring case."""
    lowered = (name or "").lower()
    return any(lowered.startswith(prefix.lower()) for prefix in prefixes)
