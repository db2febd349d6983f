"""Body-sensor permission gate.

The monitor must not touch the sensor until the host platform confirms the
body-sensor permission.  The gate starts the monitor when permission is
granted and stops it when permission is revoked.
"""

from __future__ import annotations

import logging

from heartlink.relay.monitor import HeartRateMonitor
from heartlink.relay.status import EMPTY_STATUS, permission_required_status

logger = logging.getLogger("heartlink.permissions")


class PermissionGate:
    def __init__(self, monitor: HeartRateMonitor) -> None:
        self._monitor = monitor
        self._granted = False

    @property
    def granted(self) -> bool:
        return self._granted

    async def set_granted(self, granted: bool) -> None:
        """Record the host's answer and start or stop the monitor accordingly."""
        self._granted = granted
        if granted:
            if not self._monitor.running:
                logger.info("Body sensor permission granted")
                self._monitor.set_status(EMPTY_STATUS)
                self._monitor.start()
            return

        logger.warning("Body sensor permission not granted; heart rate collection disabled")
        await self._monitor.stop()
        self._monitor.set_status(permission_required_status())
