import os
from dataclasses import dataclass, field

import torch

NUM_TRIALS = 10
TILE_WIDTH = 16  # execution units per tile, per dimension
MATRIX_WIDTH = 1024
INTERPRETED_MATRIX_WIDTH = 128  # default when kernels run through the triton interpreter
RAMP_BLOCK = 2048  # input ramp restarts every RAMP_BLOCK elements


def default_device() -> torch.device:
    return torch.device("cuda" if torch.cuda.is_available() else "cpu")


def triton_interpreted() -> bool:
    return os.environ.get("TRITON_INTERPRET", "0") == "1"


def default_width() -> int:
    return INTERPRETED_MATRIX_WIDTH if triton_interpreted() else MATRIX_WIDTH


@dataclass(frozen=True)
class BenchConfig:
    """
    explicit run parameters, defaults are the compiled-in constants

    tile_width is not checked here: a bad tile must surface as an invalid
    launch configuration from the runtime, not as a config error
    """

    num_trials: int = NUM_TRIALS
    tile_width: int = TILE_WIDTH
    width: int = field(default_factory=default_width)
    ramp_block: int = RAMP_BLOCK
    device: torch.device = field(default_factory=default_device)

    def __post_init__(self):
        if self.width <= 0:
            raise ValueError(f"matrix width must be positive: {self.width=}")
        if self.num_trials <= 0:
            raise ValueError(f"need at least one trial: {self.num_trials=}")
        if self.ramp_block <= 0:
            raise ValueError(f"ramp block must be positive: {self.ramp_block=}")

    @property
    def nbytes(self) -> int:
        # float32 elements
        return self.width * self.width * 4
