"""
Diagnostic Configuration.

All config keys use lowercase with underscores. Defaults are filled in with
``setdefault`` so a caller's explicit values always win.

Precision is process-wide in JAX, so it is not a per-call config key: call
``configure_precision`` once at startup if float32 is wanted.
"""

from typing import Any, Dict, Optional

import jax

from ..error_handling import validate_diagnostic_config

import logging
logger = logging.getLogger('chaindiag')


def clean_config(config: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Fill in defaults and validate. Has no side effects on global state.

    Args:
        config: User configuration (not modified); None for all defaults

    Returns:
        A new dict with every key present

    Raises:
        ValueError: If any value is invalid
    """
    config = dict(config) if config else {}

    config.setdefault('autocov_method', 'fft')
    config.setdefault('n_workers', 1)
    config.setdefault('rhat_threshold', 1.01)
    config.setdefault('min_ess', 400.0)

    validate_diagnostic_config(config)
    return config


def configure_precision(use_double: bool = True) -> None:
    """
    Switch JAX between float64 and float32 arithmetic for the whole process.

    Call once before running diagnostics; float64 is already on by default.
    """
    if use_double:
        jax.config.update("jax_enable_x64", True)
    else:
        logger.warning("WARNING: Running diagnostics in float32; results may differ in late digits.")
        jax.config.update("jax_enable_x64", False)
