"""Service check status enumeration."""

from enum import IntEnum


class ServiceCheckStatus(IntEnum):
    """Status codes accepted by the check_run endpoint."""

    OK = 0
    WARNING = 1
    CRITICAL = 2
    UNKNOWN = 3

    @classmethod
    def from_result(cls, result: str) -> "ServiceCheckStatus":
        """
        Map a build result onto a service check status.

        Only "SUCCESS" is healthy; every other result (FAILURE, UNSTABLE,
        ABORTED, ...) is reported as CRITICAL.

        Args:
            result: Build result string from the orchestrator

        Returns:
            ServiceCheckStatus: OK or CRITICAL
        """
        return cls.OK if result == "SUCCESS" else cls.CRITICAL
