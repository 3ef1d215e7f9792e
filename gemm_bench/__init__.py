"""
tiled triton matmul micro-benchmark: timed trials, verified against a host reference
"""

from gemm_bench.config import BenchConfig
from gemm_bench.status import FatalRuntimeError, GemmBenchError, Status, VerificationError

__version__ = "0.1.0"

__all__ = [
    "BenchConfig",
    "FatalRuntimeError",
    "GemmBenchError",
    "Status",
    "VerificationError",
    "__version__",
]
