import pytest
import torch

from gemm_bench import reference
from gemm_bench.buffers import ramp
from gemm_bench.reference import exact_products, matmul_cpu, reference_matmul, verify_result
from gemm_bench.status import VerificationError


def _product(width):
    A = ramp(width * width, 2048)
    B = ramp(width * width, 2048).flip(0).contiguous()
    C = reference_matmul(A.view(width, width), B.view(width, width)).flatten()
    return A, B, C


def test_vectorised_reference_matches_triple_loop():
    A = ramp(36, 2048).view(6, 6)
    B = (ramp(36, 7) - 3).view(6, 6)
    assert torch.equal(reference_matmul(A, B), matmul_cpu(A, B))


def test_triple_loop_identity():
    A = ramp(9, 2048).view(3, 3)
    assert torch.equal(matmul_cpu(A, torch.eye(3)), A)


def test_verify_accepts_exact_product():
    A, B, C = _product(12)
    verify_result(A, B, C, 12)


def test_verify_reports_first_mismatch_row_major():
    width = 12
    A, B, C = _product(width)
    expected = C[3 * width + 7].item()
    C[3 * width + 7] += 1.0
    C[9 * width + 1] -= 1.0

    with pytest.raises(VerificationError) as excinfo:
        verify_result(A, B, C, width)

    err = excinfo.value
    assert (err.row, err.col) == (3, 7)
    assert err.expected == expected
    assert err.actual == expected + 1.0


def test_verify_has_zero_tolerance_by_default():
    A, B, C = _product(4)
    C[0] = torch.nextafter(C[0], torch.tensor(float("inf")))
    with pytest.raises(VerificationError):
        verify_result(A, B, C, 4)
    verify_result(A, B, C, 4, tolerance=1.0)


def test_verify_flags_nan():
    A, B, C = _product(4)
    C[5] = float("nan")
    with pytest.raises(VerificationError) as excinfo:
        verify_result(A, B, C, 4, tolerance=1e6)
    assert (excinfo.value.row, excinfo.value.col) == (1, 1)


def test_exact_products():
    A = ramp(64, 2048).view(8, 8)
    assert exact_products(A, A)
    assert not exact_products(A + 0.5, A)
    assert not exact_products(A * 4096, A * 4096)


def test_small_widths_verify_with_triple_loop(monkeypatch):
    def unused(A, B):
        raise AssertionError("vectorised reference used for a small width")

    monkeypatch.setattr(reference, "reference_matmul", unused)
    A, B, C = _product(reference.LOOP_REFERENCE_MAX_WIDTH)
    verify_result(A, B, C, reference.LOOP_REFERENCE_MAX_WIDTH)


def test_large_widths_verify_with_vectorised_reference(monkeypatch):
    def unused(A, B):
        raise AssertionError("triple loop used for a large width")

    monkeypatch.setattr(reference, "matmul_cpu", unused)
    width = reference.LOOP_REFERENCE_MAX_WIDTH + 4
    A, B, C = _product(width)
    verify_result(A, B, C, width)
