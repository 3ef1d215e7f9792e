import os

import pytest
import torch

# without a gpu the kernel runs through triton's interpreter on cpu tensors,
# which must be switched on before gemm_bench.kernel is imported
if not torch.cuda.is_available():
    os.environ.setdefault("TRITON_INTERPRET", "1")

from gemm_bench.config import default_device  # noqa: E402


@pytest.fixture
def device() -> torch.device:
    return default_device()
