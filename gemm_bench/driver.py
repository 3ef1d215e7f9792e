import sys
from dataclasses import dataclass
from typing import Optional

from gemm_bench.buffers import MatrixBuffers, fill_ramp
from gemm_bench.config import INTERPRETED_MATRIX_WIDTH, BenchConfig, triton_interpreted
from gemm_bench.log import get_logger
from gemm_bench.reference import verify_result
from gemm_bench.status import FatalRuntimeError, VerificationError
from gemm_bench.trial import run_trial

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_RUNTIME_ERROR = 1
EXIT_VERIFICATION_FAILED = 2


@dataclass
class BenchResult:
    num_trials: int
    width: int
    total_ms: float

    @property
    def average_ms(self) -> float:
        return self.total_ms / self.num_trials

    @property
    def gflops(self) -> float:
        # 2 * W^3 flops per product (mul + add per k per element)
        seconds = self.average_ms / 1000
        return 2 * self.width**3 / (seconds * 1e9) if seconds > 0 else float("inf")


def run_benchmark(config: BenchConfig) -> BenchResult:
    """
    allocate, fill, time `num_trials` trials, verify the last one, release

    raises FatalRuntimeError / VerificationError, buffers are released either way
    """
    print(f"Using device: {config.device}")
    if triton_interpreted() and config.width > INTERPRETED_MATRIX_WIDTH:
        logger.warning("width %d through the triton interpreter will be very slow", config.width)
    host = MatrixBuffers(config.width, "cpu")
    device = None
    try:
        device = MatrixBuffers(config.width, config.device)

        fill_ramp(host.left, config.ramp_block)
        fill_ramp(host.right, config.ramp_block)

        total_ms = 0.0
        for trial in range(config.num_trials):
            logger.debug("trial %d/%d", trial + 1, config.num_trials)
            total_ms += run_trial(host, device, config.nbytes, config.tile_width)

        result = BenchResult(config.num_trials, config.width, total_ms)
        print(f"throughput: {result.gflops:.3f} GFLOP/s")
        print(
            f"{result.num_trials} trials: average elapsed time {result.average_ms:.6f} ms "
            f"for matrix width {result.width}"
        )

        verify_result(host.left, host.right, host.out, config.width)
        return result
    finally:
        if device is not None:
            device.release()
        host.release()


def main(config: Optional[BenchConfig] = None) -> int:
    config = config if config is not None else BenchConfig()
    try:
        run_benchmark(config)
    except FatalRuntimeError as e:
        print(f"FATAL: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    except VerificationError as e:
        print(f"VERIFICATION FAILED: {e}", file=sys.stderr)
        return EXIT_VERIFICATION_FAILED
    return EXIT_OK
