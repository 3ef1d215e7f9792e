import time

import torch

from gemm_bench.buffers import MatrixBuffers
from gemm_bench.kernel import launch_matmul, tiling_geometry
from gemm_bench.log import get_logger
from gemm_bench.status import Status, check_status, runtime_call

logger = get_logger(__name__)


class HostEvent:
    """
    host clock stand in for torch.cuda.Event when the kernel runs on cpu

    launches are synchronous there, so record() is already the completion point
    """

    def __init__(self):
        self._t = None

    def record(self) -> None:
        self._t = time.perf_counter()

    def synchronize(self) -> None:
        if self._t is None:
            raise RuntimeError("event was never recorded")

    def elapsed_time(self, end: "HostEvent") -> float:
        if self._t is None or end._t is None:
            raise RuntimeError("both events must be recorded before elapsed_time")
        return (end._t - self._t) * 1000


def create_event(device: torch.device):
    if device.type == "cuda":
        return torch.cuda.Event(enable_timing=True)
    return HostEvent()


def run_trial(host: MatrixBuffers, device: MatrixBuffers, nbytes: int, tile_width: int) -> float:
    """
    one timed round trip: copy A, B in, launch, copy C out

    returns elapsed ms between the start and stop markers. the host output
    buffer is overwritten; buffers are borrowed, never freed here
    """
    assert host.width == device.width, f"host and device widths diverged: {host.width=} {device.width=}"
    width = host.width

    with runtime_call(Status.TIMER_FAILURE, "event create"):
        start = create_event(device.device)
        stop = create_event(device.device)

    with runtime_call(Status.TIMER_FAILURE, "event record"):
        start.record()

    if nbytes != host.nbytes or nbytes != device.nbytes:
        check_status(Status.INVALID_VALUE, f"copy of {nbytes} bytes into {device.nbytes} byte buffers")

    with runtime_call(Status.TRANSFER_FAILURE, "host to device copy"):
        device.left.copy_(host.left)
        device.right.copy_(host.right)

    grid, block = tiling_geometry(width, tile_width)
    logger.debug("trial geometry: grid=%s block=%s", grid, block)

    status = launch_matmul(device.left, device.right, device.out, width, tile_width)
    # a bad launch stops the trial here, before anything comes back
    check_status(status, "kernel launch")

    with runtime_call(Status.TRANSFER_FAILURE, "device to host copy"):
        host.out.copy_(device.out)

    with runtime_call(Status.TIMER_FAILURE, "event synchronize"):
        stop.record()
        stop.synchronize()

    with runtime_call(Status.TIMER_FAILURE, "elapsed time"):
        elapsed_ms = start.elapsed_time(stop)
    del start, stop

    print(f"Elapsed time: {elapsed_ms:.6f} ms")
    return elapsed_ms
