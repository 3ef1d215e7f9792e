"""
runtime status codes and the fatal error path

every accelerator call either succeeds or ends the run: there is no retry
and no partial recovery, only the outermost entry point catches
"""

import enum
from contextlib import contextmanager
from typing import Iterator

from gemm_bench.log import get_logger

logger = get_logger(__name__)


class Status(enum.Enum):
    SUCCESS = 0
    INVALID_VALUE = 1
    MEMORY_ALLOCATION = 2
    INVALID_CONFIGURATION = 9  # cudaErrorInvalidConfiguration
    LAUNCH_FAILURE = 719
    TRANSFER_FAILURE = 900
    TIMER_FAILURE = 901


_DESCRIPTIONS = {
    Status.INVALID_VALUE: "invalid argument",
    Status.MEMORY_ALLOCATION: "out of memory",
    Status.INVALID_CONFIGURATION: "invalid configuration argument",
    Status.LAUNCH_FAILURE: "unspecified launch failure",
    Status.TRANSFER_FAILURE: "memory copy failed",
    Status.TIMER_FAILURE: "timing event failed",
}


class GemmBenchError(Exception):
    """Base exception for benchmark failures."""


class FatalRuntimeError(GemmBenchError):
    """An accelerator runtime call did not succeed."""

    def __init__(self, status: Status, message: str):
        super().__init__(message)
        self.status = status


class VerificationError(GemmBenchError):
    """Parallel result disagrees with the sequential reference."""

    def __init__(self, row: int, col: int, expected: float, actual: float):
        super().__init__(f"mismatch at ({row}, {col}): expected {expected}, got {actual}")
        self.row = row
        self.col = col
        self.expected = expected
        self.actual = actual


def describe(status: Status) -> str:
    return _DESCRIPTIONS.get(status, "no error")


def check_status(status: Status, what: str = "") -> None:
    if status is Status.SUCCESS:
        return

    where = f" in {what}" if what else ""
    if status is Status.INVALID_CONFIGURATION:
        message = (
            f"Invalid launch configuration{where}: the grid or block dimensions "
            f"are not valid for this device ({describe(status)})"
        )
    else:
        message = f"Runtime error{where}: {describe(status)} (status {status.value})"
    raise FatalRuntimeError(status, message)


@contextmanager
def runtime_call(status: Status, what: str = "") -> Iterator[None]:
    """
    maps any torch / triton exception raised inside the block to `status`
    and fails through check_status
    """
    try:
        yield
    except GemmBenchError:
        raise
    except Exception as e:
        logger.debug("%s raised %r", what or "runtime call", e)
        check_status(status, what)
