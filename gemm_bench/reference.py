import torch

from gemm_bench.log import get_logger
from gemm_bench.status import VerificationError

logger = get_logger(__name__)

# largest integer a float32 holds exactly
EXACT_FLOAT32_LIMIT = 2**24
# up to this width the verifier runs the literal triple loop
LOOP_REFERENCE_MAX_WIDTH = 16


def matmul_cpu(A: torch.Tensor, B: torch.Tensor) -> torch.Tensor:
    """literal triple loop, the ground truth every other product is held to"""
    assert len(A.size()) == 2 and len(B.size()) == 2
    assert A.size(1) == B.size(0)

    a_row, _ = A.size()
    b_row, b_col = B.size()

    C = torch.zeros((a_row, b_col), dtype=torch.float32)

    for row in range(a_row):
        for col in range(b_col):
            sum_ = 0.0
            for k in range(b_row):
                sum_ += A[row][k] * B[k][col]
            C[row][col] = sum_
    return C


def reference_matmul(A: torch.Tensor, B: torch.Tensor) -> torch.Tensor:
    """
    same per element accumulation as the triple loop (float32, k ascending),
    with the row and col loops done as one tensor op per k
    """
    assert len(A.size()) == 2 and len(B.size()) == 2
    assert A.size(1) == B.size(0), f"shape size assertion failed for inner dims: {A.size()=} | {B.size()=}"

    A = A.to(device="cpu", dtype=torch.float32)
    B = B.to(device="cpu", dtype=torch.float32)
    C = torch.zeros((A.size(0), B.size(1)), dtype=torch.float32)

    for k in range(A.size(1)):
        # separate mul and add, rounding once each, like the loop body
        C += A[:, k : k + 1] * B[k : k + 1, :]
    return C


def exact_products(A: torch.Tensor, B: torch.Tensor) -> bool:
    """
    true when every a * b is an integer float32 holds exactly

    then a fused multiply add and a separate mul + add round the same way,
    so any two k ascending accumulations agree bit for bit
    """
    integral = torch.equal(A, A.round()) and torch.equal(B, B.round())
    return integral and A.abs().max().item() * B.abs().max().item() <= EXACT_FLOAT32_LIMIT


def verify_result(A: torch.Tensor, B: torch.Tensor, C: torch.Tensor, width: int, tolerance: float = 0.0) -> None:
    """
    recompute A @ B on the host and compare against C element by element

    A, B, C are flat row major host buffers of width * width elements.
    raises VerificationError on the first (row major) element that is off by
    more than `tolerance`; the default is exact equality, which holds as
    long as every product is an exactly representable integer
    """
    n = width * width
    a = A[:n].view(width, width)
    b = B[:n].view(width, width)
    c = C[:n].view(width, width).to(device="cpu")

    if tolerance == 0.0 and not exact_products(a, b):
        logger.warning("inputs are not small integers, exact comparison may report rounding differences")

    if width <= LOOP_REFERENCE_MAX_WIDTH:
        ref = matmul_cpu(a.cpu(), b.cpu())
    else:
        ref = reference_matmul(a, b)
    # NaN never compares <= tolerance, so it counts as a mismatch
    bad = ~((c - ref).abs() <= tolerance)
    if bool(bad.any()):
        first = int(torch.nonzero(bad.flatten())[0].item())
        row, col = divmod(first, width)
        raise VerificationError(row, col, ref[row, col].item(), c[row, col].item())
    logger.info("verified %dx%d result against host reference", width, width)
