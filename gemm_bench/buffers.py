from typing import Optional

import torch

from gemm_bench.log import get_logger
from gemm_bench.status import Status, runtime_call

logger = get_logger(__name__)


class MatrixBuffers:
    """
    left / right / output operands of one width, flat and row major, all on one device

    allocated once, contents overwritten per trial, released once
    """

    def __init__(self, width: int, device: torch.device):
        self.width = width
        self.device = torch.device(device)
        n = width * width
        with runtime_call(Status.MEMORY_ALLOCATION, f"allocation on {self.device}"):
            self.left: Optional[torch.Tensor] = torch.empty(n, dtype=torch.float32, device=self.device)
            self.right: Optional[torch.Tensor] = torch.empty(n, dtype=torch.float32, device=self.device)
            self.out: Optional[torch.Tensor] = torch.empty(n, dtype=torch.float32, device=self.device)
        logger.debug("allocated 3 x %d bytes on %s", self.nbytes, self.device)

    def __repr__(self) -> str:
        state = "released" if self.released else f"{self.nbytes} bytes each"
        return f"MatrixBuffers(width={self.width}, device={self.device}, {state})"

    @property
    def nbytes(self) -> int:
        return self.width * self.width * 4

    @property
    def released(self) -> bool:
        return self.left is None

    def release(self) -> None:
        if self.released:
            return
        self.left = self.right = self.out = None
        if self.device.type == "cuda":
            torch.cuda.empty_cache()
        logger.debug("released buffers on %s", self.device)


def ramp(n: int, ramp_block: int) -> torch.Tensor:
    """
    element i is i - cor, where cor jumps to i every ramp_block elements

    values stay in [0, ramp_block); with the default block of 2048 every
    product of two of them is an exact float32 integer
    """
    idx = torch.arange(n, dtype=torch.int64)
    cor = (idx // ramp_block) * ramp_block
    return (idx - cor).to(torch.float32)


def fill_ramp(buf: torch.Tensor, ramp_block: int) -> torch.Tensor:
    buf.copy_(ramp(buf.numel(), ramp_block))
    return buf
