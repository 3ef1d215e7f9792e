import pytest

from gemm_bench.status import (
    FatalRuntimeError,
    GemmBenchError,
    Status,
    VerificationError,
    check_status,
    runtime_call,
)


def test_success_is_silent():
    assert check_status(Status.SUCCESS, "anything") is None


def test_invalid_configuration_has_its_own_message():
    with pytest.raises(FatalRuntimeError) as excinfo:
        check_status(Status.INVALID_CONFIGURATION, "kernel launch")
    assert excinfo.value.status is Status.INVALID_CONFIGURATION
    assert str(excinfo.value).startswith("Invalid launch configuration in kernel launch")


@pytest.mark.parametrize("status", [s for s in Status if s not in (Status.SUCCESS, Status.INVALID_CONFIGURATION)])
def test_other_failures_are_fatal(status):
    with pytest.raises(FatalRuntimeError, match=f"status {status.value}") as excinfo:
        check_status(status)
    assert excinfo.value.status is status
    assert isinstance(excinfo.value, GemmBenchError)


def test_runtime_call_maps_exceptions():
    with pytest.raises(FatalRuntimeError) as excinfo:
        with runtime_call(Status.MEMORY_ALLOCATION, "alloc"):
            raise RuntimeError("CUDA out of memory")
    assert excinfo.value.status is Status.MEMORY_ALLOCATION
    assert isinstance(excinfo.value.__context__, RuntimeError)


def test_runtime_call_passes_benchmark_errors_through():
    with pytest.raises(VerificationError):
        with runtime_call(Status.TRANSFER_FAILURE):
            raise VerificationError(0, 0, 1.0, 2.0)


def test_runtime_call_without_error():
    with runtime_call(Status.TIMER_FAILURE):
        pass
