"""
Split R-hat (split potential scale reduction).

Each chain is cut into two halves which are then treated as separate
chains, so a single trending chain is flagged as well as disagreeing ones.
"""

import numpy as np

from .moments import split_chain_moments
from .types import ChainSet
from ..error_handling import DegenerateVarianceError, check_variance


def _split_rhat(columns: np.ndarray) -> float:
    """
    Split R-hat of an (n_samples, n_chains) matrix, n_samples even.

    The classical [(n-1)*W/n + B/n] / W is evaluated as (n - 1 + B/W) / n
    with n the half length.
    """
    n_samples = columns.shape[0]
    half = n_samples // 2
    if half < 2:
        raise DegenerateVarianceError(
            f"split R-hat needs at least 4 draws per chain, got {n_samples}"
        )

    split_means = []
    split_vars = []
    for k in range(columns.shape[1]):
        means, variances = split_chain_moments(columns[:, k])
        split_means.extend(means)
        split_vars.extend(variances)

    var_between = half * np.var(np.array(split_means), ddof=1)
    var_within = check_variance(np.mean(split_vars), "var_within")

    return float(np.sqrt((var_between / var_within + half - 1) / half))


def _even(n: int) -> int:
    return n - 1 if n % 2 == 1 else n


def split_rhat_from_chain_set(chain_set: ChainSet) -> float:
    """
    Split R-hat for one parameter across possibly jagged chains.

    Every chain is truncated to the first n draws, where n is the shortest
    chain length rounded down to an even number.

    Raises:
        DegenerateVarianceError: If n < 4 or the chains are constant
    """
    n_samples = _even(chain_set.min_length)
    return _split_rhat(chain_set.truncated_matrix(n_samples))


def split_rhat_from_matrix(matrix) -> float:
    """
    Split R-hat for an already extracted (n_samples, n_chains) matrix.

    An odd trailing row is dropped.

    Raises:
        DegenerateVarianceError: If fewer than 4 usable rows or constant chains
    """
    draws = np.asarray(matrix, dtype=np.float64)
    if draws.ndim != 2:
        raise ValueError(f"matrix must be 2-D (n_samples, n_chains), got shape {draws.shape}")
    if draws.shape[1] == 0:
        raise ValueError("matrix has no chains")
    n_samples = _even(draws.shape[0])
    return _split_rhat(draws[:n_samples])
