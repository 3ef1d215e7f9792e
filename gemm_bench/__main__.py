import os
import sys

import torch

# triton picks interpreter vs compiled at decoration time, so before the kernel import
if not torch.cuda.is_available():
    os.environ.setdefault("TRITON_INTERPRET", "1")

from gemm_bench.driver import main  # noqa: E402

if __name__ == "__main__":
    sys.exit(main())
