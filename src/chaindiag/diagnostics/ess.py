"""
Effective Sample Size.

Two estimators sharing the same variance decomposition (BDA3 p. 286-287):
- ess_from_chain_set: jagged chains, Geyer's initial positive sequence on
  pairs of autocorrelations followed by the initial monotone sequence
- ess_from_matrix: rectangular (n_samples, n_chains) input, stops at the
  first negative autocorrelation and has no monotone pass

The two stopping rules differ on purpose; unifying them would change the
numbers existing callers get back.
"""

from typing import Tuple

import numpy as np

from .autocovariance import compute_autocovariance, batched_autocovariance
from .moments import chain_mean
from .types import ChainSet
from ..error_handling import DegenerateVarianceError, check_variance


def _combined_variance(
    chain_vars: np.ndarray,
    chain_means: np.ndarray,
    n_samples: int,
) -> Tuple[float, float]:
    """
    Pooled within-chain variance and the marginal posterior variance estimate.

    Returns:
        mean_var: Average of the per-chain unbiased variances
        var_plus: mean_var * (n-1)/n, plus the variance of chain means if M > 1
    """
    # Stuck chains at different values leave var_plus > 0 but mean_var == 0
    mean_var = check_variance(np.mean(chain_vars), "mean_var")
    var_plus = mean_var * (n_samples - 1) / n_samples
    if chain_means.shape[0] > 1:
        var_plus += float(np.var(chain_means, ddof=1))
    check_variance(var_plus, "var_plus")
    return mean_var, var_plus


def _finish(ess: float) -> float:
    if not np.isfinite(ess):
        raise DegenerateVarianceError(f"effective sample size is not finite ({ess})")
    return float(ess)


def ess_from_chain_set(chain_set: ChainSet, method: str = 'fft') -> float:
    """
    Effective sample size for one parameter across possibly jagged chains.

    Autocovariances and means come from each chain's full kept draws; the
    shortest chain's length is the common sample count n used to combine
    them.

    Args:
        chain_set: Chains for a single parameter
        method: Autocovariance method ('fft' or 'direct')

    Returns:
        ESS as a float. It may exceed M * n when autocorrelation is negative.

    Raises:
        DegenerateVarianceError: If a chain has fewer than 2 draws or the
            within-chain or pooled variance is zero (constant chains)
    """
    m = chain_set.n_chains
    n_samples = chain_set.min_length
    if n_samples < 2:
        raise DegenerateVarianceError(
            f"ESS needs at least 2 draws per chain, shortest chain has {n_samples}"
        )

    # (m, n_samples): each chain's own sequence, truncated to the common length
    acov = np.stack([
        compute_autocovariance(chain.draws, method)[:n_samples] for chain in chain_set
    ])
    chain_means = np.array([chain_mean(chain.draws) for chain in chain_set])
    n_kept = np.array(chain_set.lengths, dtype=np.float64)
    chain_vars = acov[:, 0] * n_kept / (n_kept - 1)

    mean_var, var_plus = _combined_variance(chain_vars, chain_means, n_samples)
    rho_hat = 1.0 - (mean_var - np.mean(acov, axis=0)) / var_plus

    # rho_hat_t[0] stays 0: lag 0 is accounted for by the leading 1 in 1 + 2*sum
    rho_hat_t = np.zeros(n_samples)
    rho_hat_even = 1.0
    rho_hat_odd = rho_hat[1]
    rho_hat_t[1] = rho_hat_odd

    # Geyer's initial positive sequence
    max_t = 1
    t = 1
    while t < n_samples - 2 and rho_hat_even + rho_hat_odd >= 0:
        rho_hat_even = rho_hat[t + 1]
        rho_hat_odd = rho_hat[t + 2]
        if rho_hat_even + rho_hat_odd >= 0:
            rho_hat_t[t + 1] = rho_hat_even
            rho_hat_t[t + 2] = rho_hat_odd
        max_t = t + 2
        t += 2

    # Geyer's initial monotone sequence
    for t in range(3, max_t - 1, 2):
        if rho_hat_t[t + 1] + rho_hat_t[t + 2] > rho_hat_t[t - 1] + rho_hat_t[t]:
            rho_hat_t[t + 1] = (rho_hat_t[t - 1] + rho_hat_t[t]) / 2
            rho_hat_t[t + 2] = rho_hat_t[t + 1]

    ess = m * n_samples / (1 + 2 * np.sum(rho_hat_t))
    return _finish(ess)


def ess_from_matrix(matrix, method: str = 'fft') -> float:
    """
    Effective sample size for an already extracted (n_samples, n_chains) matrix.

    Sums autocorrelations from lag 1 until the first negative one.

    Raises:
        DegenerateVarianceError: If n_samples < 2 or the chains are constant
    """
    draws = np.asarray(matrix, dtype=np.float64)
    if draws.ndim != 2:
        raise ValueError(f"matrix must be 2-D (n_samples, n_chains), got shape {draws.shape}")
    n_samples, m = draws.shape
    if n_samples < 2:
        raise DegenerateVarianceError(f"ESS needs at least 2 draws per chain, got {n_samples}")

    acov = batched_autocovariance(draws, method)  # (m, n_samples)
    chain_means = np.mean(draws, axis=0)
    chain_vars = acov[:, 0] * n_samples / (n_samples - 1)

    mean_var, var_plus = _combined_variance(chain_vars, chain_means, n_samples)
    rho_hat = 1.0 - (mean_var - np.mean(acov, axis=0)) / var_plus

    kept = []
    last = 0.0
    t = 1
    while t < n_samples and last >= 0:
        last = rho_hat[t]
        if last >= 0:
            kept.append(last)
        t += 1

    ess = float(m * n_samples)
    if kept:
        ess /= 1 + 2 * np.sum(kept)
    return _finish(ess)
