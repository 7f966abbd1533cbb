"""Scripts package for the GPDB toolkit."""

# Import shared operation modules to make them discoverable
from . import gpdb_operations  # noqa: F401
from . import vpc_operations  # noqa: F401
