"""
Error Handling and Validation Utilities for Chain Diagnostics

This module provides the error taxonomy raised by the diagnostic core,
configuration validation, and summary reporting for batch results.
"""

from typing import Any, Dict

import numpy as np

import logging
logger = logging.getLogger('chaindiag')


class ChainDiagnosticError(Exception):
    """Base class for every failure raised by the diagnostic core."""


class InvalidParameterIndexError(ChainDiagnosticError, IndexError):
    """Requested parameter index is outside the simulation record."""


class InvalidChainIndexError(ChainDiagnosticError, IndexError):
    """Requested chain index is outside the simulation record."""


class DegenerateVarianceError(ChainDiagnosticError, ArithmeticError):
    """
    A within-chain or pooled variance is zero or cannot be computed.

    Raised for constant chains and for chains (or split halves) too short
    to carry an unbiased variance estimate.
    """


class InconsistentChainLengthsError(ChainDiagnosticError, ValueError):
    """Chain metadata disagrees with the number of draws actually supplied."""


class InvalidSimulationRecordError(ChainDiagnosticError, ValueError):
    """Simulation record is missing fields or its chain counts do not agree."""


def check_variance(value: float, name: str) -> float:
    """
    Ensure a variance used as a divisor is finite and strictly positive.

    Args:
        value: Variance estimate
        name: Label used in the error message

    Returns:
        value as a Python float

    Raises:
        DegenerateVarianceError: If value is NaN, infinite, zero or negative
    """
    value = float(value)
    if not np.isfinite(value):
        raise DegenerateVarianceError(f"{name} is not finite ({value})")
    if value <= 0.0:
        raise DegenerateVarianceError(
            f"{name} is {value}; chains are constant or too short to estimate variance"
        )
    return value


def _is_real(value: Any) -> bool:
    return isinstance(value, (int, float, np.integer, np.floating)) and not isinstance(value, bool)


def validate_diagnostic_config(config: Dict[str, Any]) -> None:
    """
    Validates that a diagnostic configuration is sensible.

    Args:
        config: Configuration dictionary (lowercase keys)

    Raises:
        ValueError: If configuration is invalid
    """
    errors = []

    if 'autocov_method' in config:
        if config['autocov_method'] not in ('fft', 'direct'):
            errors.append(
                f"autocov_method must be 'fft' or 'direct', got {config['autocov_method']!r}"
            )

    if 'n_workers' in config:
        n_workers = config['n_workers']
        if not isinstance(n_workers, (int, np.integer)) or isinstance(n_workers, bool):
            errors.append(f"n_workers must be an integer, got {type(n_workers).__name__}")
        elif n_workers < 1:
            errors.append(f"n_workers must be >= 1, got {n_workers}")

    if 'rhat_threshold' in config:
        rhat_threshold = config['rhat_threshold']
        if not _is_real(rhat_threshold):
            errors.append(f"rhat_threshold must be a number, got {type(rhat_threshold).__name__}")
        elif not rhat_threshold > 1.0:
            errors.append(f"rhat_threshold must be > 1, got {rhat_threshold}")

    if 'min_ess' in config:
        min_ess = config['min_ess']
        if not _is_real(min_ess):
            errors.append(f"min_ess must be a number, got {type(min_ess).__name__}")
        elif not min_ess >= 0:
            errors.append(f"min_ess must be >= 0, got {min_ess}")

    if 'use_double' in config:
        errors.append(
            "use_double is not a per-call setting; call "
            "chaindiag.configure_precision() once at startup instead"
        )

    if errors:
        raise ValueError("Invalid diagnostic configuration:\n  " + "\n  ".join(errors))


def print_diagnostic_summary(results: Dict[Any, Any], rhat_threshold: float, min_ess: float) -> bool:
    """
    Log summary statistics for a batch of per-parameter diagnostics.

    Args:
        results: Mapping of parameter -> ParameterDiagnostics
        rhat_threshold: Split R-hat values below this count as converged
        min_ess: ESS values at or above this count as sufficient

    Returns:
        True if every parameter was estimable and passed both checks
    """
    failed = [r for r in results.values() if r.error is not None]
    ok = [r for r in results.values() if r.error is None]

    logger.info(f"\n--- Convergence Diagnostics ({len(ok)} estimable, {len(failed)} failed) ---")

    if failed:
        logger.warning(f"[WARN] {len(failed)} parameter(s) could not be diagnosed:")
        for r in failed:
            logger.warning(f"  - {r.param}: {r.error}")

    if not ok:
        logger.warning("  Not Converged (no estimable parameters)")
        return False

    rhats = np.array([r.rhat for r in ok])
    esses = np.array([r.ess for r in ok])

    logger.info(f"  Split R-hat  Max: {np.max(rhats):.4f}  Median: {np.median(rhats):.4f}")
    logger.info(f"  ESS          Min: {np.min(esses):.1f}  Median: {np.median(esses):.1f}")

    high_rhat = [r.param for r in ok if r.rhat >= rhat_threshold]
    low_ess = [r.param for r in ok if r.ess < min_ess]

    if high_rhat:
        logger.warning(f"  WARNING: {len(high_rhat)} parameter(s) have split R-hat >= {rhat_threshold}")
        if len(high_rhat) <= 10:
            logger.warning(f"    High R-hat: {', '.join(str(p) for p in high_rhat)}")
    if low_ess:
        logger.warning(f"  WARNING: {len(low_ess)} parameter(s) have ESS < {min_ess}")
        if len(low_ess) <= 10:
            logger.warning(f"    Low ESS: {', '.join(str(p) for p in low_ess)}")

    converged = not failed and not high_rhat and not low_ess
    if converged:
        logger.info(f"  Converged (max R-hat < {rhat_threshold}, min ESS >= {min_ess})")
    else:
        logger.info("  Not Converged")
    return converged
