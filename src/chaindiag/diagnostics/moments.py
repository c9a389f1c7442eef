"""
Chain Moments.

Mean and unbiased variance of a chain, and the same moments for the two
contiguous halves used by split diagnostics. The variance convention is
always spelled out (ddof=1) rather than left to the library default.
"""

from typing import Tuple

import jax.numpy as jnp
import numpy as np

from ..error_handling import DegenerateVarianceError


def _as_chain(draws) -> jnp.ndarray:
    x = jnp.asarray(np.asarray(draws, dtype=np.float64))
    if x.ndim != 1:
        raise ValueError(f"chain draws must be 1-D, got shape {x.shape}")
    return x


def chain_mean(draws) -> float:
    """Arithmetic mean of a chain."""
    x = _as_chain(draws)
    if x.shape[0] == 0:
        raise ValueError("cannot take the mean of an empty chain")
    return float(jnp.mean(x))


def chain_variance(draws) -> float:
    """Unbiased sample variance (divide by N-1) of a chain."""
    x = _as_chain(draws)
    if x.shape[0] < 2:
        raise DegenerateVarianceError(
            f"sample variance needs at least 2 draws, got {x.shape[0]}"
        )
    return float(jnp.var(x, ddof=1))


def split_halves(draws) -> Tuple[np.ndarray, np.ndarray]:
    """
    Partition a chain into two contiguous halves of equal length.

    An odd-length chain loses its final draw, so a chain of 7 yields
    halves x[0:3] and x[3:6].
    """
    x = np.asarray(draws, dtype=np.float64)
    half = x.shape[0] // 2
    return x[:half], x[half:2 * half]


def split_chain_moments(draws) -> Tuple[np.ndarray, np.ndarray]:
    """
    Means and unbiased variances of a chain's two halves.

    Returns:
        means: (2,) array [first half, second half]
        variances: (2,) array [first half, second half]

    Raises:
        DegenerateVarianceError: If each half has fewer than 2 draws
    """
    first, second = split_halves(draws)
    if first.shape[0] < 2:
        raise DegenerateVarianceError(
            f"split halves need at least 2 draws each, got {first.shape[0]}"
        )
    halves = jnp.stack([jnp.asarray(first), jnp.asarray(second)])
    means = jnp.mean(halves, axis=1)
    variances = jnp.var(halves, axis=1, ddof=1)
    return np.asarray(means), np.asarray(variances)
