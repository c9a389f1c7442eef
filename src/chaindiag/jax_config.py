"""
JAX Configuration - MUST be imported before any JAX imports.

This module sets environment variables read by JAX at import time:
- Double precision
- XLA C++ log verbosity
"""
import os

# --- PRECISION ---
# float32 loses the divide-by-N vs divide-by-(N-1) distinction on long chains
os.environ.setdefault("JAX_ENABLE_X64", "True")

# --- LOG NOISE ---
# Suppress CUDA/XLA C++ warnings; does not affect Python-side logging
os.environ.setdefault("TF_CPP_MIN_LOG_LEVEL", "2")
