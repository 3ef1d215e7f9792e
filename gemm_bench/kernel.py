from typing import Tuple

import torch
import triton
import triton.language as tl

from gemm_bench.log import get_logger
from gemm_bench.status import Status

logger = get_logger(__name__)

MAX_THREADS_PER_BLOCK = 1024
MAX_GRID_DIM = (2**31 - 1, 65535)


@triton.jit
def matmul_tile_kernel(
    A,
    B,
    C,
    width,
    TILE_WIDTH: tl.constexpr,
) -> None:
    """
    one program per TILE_WIDTH x TILE_WIDTH tile of C, one lane per output element

    every element is a plain dot product over k, accumulated in registers
    and written once. no k tiling, no shared mem staging

    mem layout (row major, square):
        X[row, col] = row * width + col
    """

    # 2d launch grid over output tiles
    tile_row = tl.program_id(axis=0)
    tile_col = tl.program_id(axis=1)

    # row/col of every element this tile owns
    rows = tile_row * TILE_WIDTH + tl.arange(0, TILE_WIDTH)  # (TILE_WIDTH,)
    cols = tile_col * TILE_WIDTH + tl.arange(0, TILE_WIDTH)  # (TILE_WIDTH,)

    # lanes past the matrix edge (last tile row/col) do nothing
    row_in = rows < width
    col_in = cols < width

    acc = tl.zeros((TILE_WIDTH, TILE_WIDTH), dtype=tl.float32)

    for k in range(0, width):
        # A[row, k] for every row of the tile, B[k, col] for every col
        a = tl.load(A + rows * width + k, mask=row_in, other=0.0)
        b = tl.load(B + k * width + cols, mask=col_in, other=0.0)
        acc += a[:, None] * b[None, :]

    c_ptrs = C + rows[:, None] * width + cols[None, :]
    tl.store(c_ptrs, acc, mask=row_in[:, None] & col_in[None, :])


def tiling_geometry(width: int, tile_width: int) -> Tuple[Tuple[int, int], Tuple[int, int]]:
    """
    (grid, block) covering a width x width output

    grid is ceil divided, so the last tile row/col may hang over the edge
    """
    grid_dim = triton.cdiv(width, tile_width) if tile_width > 0 else 0
    return (grid_dim, grid_dim), (tile_width, tile_width)


def launch_status(grid: Tuple[int, int], block: Tuple[int, int]) -> Status:
    """what the runtime would say about this launch before running it"""
    tile_width = block[0]
    if tile_width <= 0 or block[0] != block[1]:
        return Status.INVALID_CONFIGURATION
    # tl.arange needs a power of two extent
    if tile_width & (tile_width - 1):
        return Status.INVALID_CONFIGURATION
    if tile_width * tile_width > MAX_THREADS_PER_BLOCK:
        return Status.INVALID_CONFIGURATION
    for dim, limit in zip(grid, MAX_GRID_DIM):
        if dim <= 0 or dim > limit:
            return Status.INVALID_CONFIGURATION
    return Status.SUCCESS


def _check_input(A: torch.Tensor, B: torch.Tensor, C: torch.Tensor, width: int):
    assert A.dtype == B.dtype == C.dtype == torch.float32, "kernel is float32 only"
    assert A.device == B.device == C.device, f"operands must share a device: {A.device=} {B.device=} {C.device=}"
    n = width * width
    assert A.numel() >= n and B.numel() >= n and C.numel() >= n, f"buffers too small for {width=}"
    assert A.is_contiguous() and B.is_contiguous() and C.is_contiguous(), "row major contiguous buffers only"


def launch_matmul(A: torch.Tensor, B: torch.Tensor, C: torch.Tensor, width: int, tile_width: int) -> Status:
    """
    C = A @ B on device buffers, returns the launch status

    an invalid geometry is rejected without launching anything
    """
    _check_input(A, B, C, width)
    grid, block = tiling_geometry(width, tile_width)

    status = launch_status(grid, block)
    if status is not Status.SUCCESS:
        logger.debug("rejected launch: grid=%s block=%s", grid, block)
        return status

    logger.debug("launch: width=%d grid=%s block=%s", width, grid, block)
    try:
        matmul_tile_kernel[grid](
            A,
            B,
            C,
            width,
            TILE_WIDTH=tile_width,
        )
    except Exception as e:
        logger.debug("kernel launch raised %r", e)
        return Status.LAUNCH_FAILURE
    return Status.SUCCESS
