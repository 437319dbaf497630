from __future__ import annotations


class PollenError(RuntimeError):
    pass


class PrivilegeError(PollenError):
    pass


class NoInteractiveTerminal(PollenError):
    pass


class AcquisitionError(PollenError):
    pass


class PolicyNotFound(AcquisitionError):
    pass


class NoTransferToolAvailable(AcquisitionError):
    pass


class FetchFailed(AcquisitionError):
    pass


class ReadOnlyTarget(AcquisitionError):
    pass


class ApplyError(PollenError):
    pass


class CopyFailed(ApplyError):
    pass


class MountFailed(ApplyError):
    pass


class WriteFailed(ApplyError):
    pass


class ToolError(PollenError):
    pass


class ToolNotFound(ToolError):
    pass


class ToolFailed(ToolError):
    def __init__(self, partition: int, returncode: int) -> None:
        super().__init__(f"vboot tool failed on partition {partition} (exit={returncode})")
        self.partition = partition
        self.returncode = returncode
