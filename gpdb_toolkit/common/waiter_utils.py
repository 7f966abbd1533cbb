"""
Wait helpers.

Waits go through a module-level Event so they stay interruptible and can be
patched out in tests.
"""

import logging
from threading import Event

from gpdb_toolkit.common.settings import SETTLE_DELAY_SECONDS

_WAIT_EVENT = Event()


def settle(seconds=SETTLE_DELAY_SECONDS):
    """Block for the settle delay so the remote service can converge."""
    logging.info("⏳ Waiting %d seconds for deletions to settle", seconds)
    _WAIT_EVENT.wait(seconds)
