"""
Autocovariance Estimation.

Lag-indexed autocovariance of a single chain:

    acov[t] = (1/N) * sum_{i=0}^{N-1-t} (x[i] - mean) * (x[i+t] - mean)

so acov[0] is the biased (divide-by-N) variance. Two JAX kernels compute it:
- fft: zero-padded FFT, O(N log N)
- direct: explicit correlation, O(N^2), kept as a reference
"""

import jax
import jax.numpy as jnp
import numpy as np

AUTOCOV_METHODS = ('fft', 'direct')


@jax.jit
def _autocovariance_fft(x: jnp.ndarray) -> jnp.ndarray:
    n = x.shape[0]
    centered = x - jnp.mean(x)

    # Padding to 2N turns the circular correlation into a linear one
    freq = jnp.fft.rfft(centered, n=2 * n)
    raw = jnp.fft.irfft(freq * jnp.conj(freq), n=2 * n)[:n]

    # Normalise by the FFT's own lag 0, then rescale by the exact biased
    # variance so acov[0] matches the direct formula bit for bit
    var = jnp.mean(centered * centered)
    safe_lag0 = jnp.where(raw[0] > 0, raw[0], 1.0)
    acf = jnp.where(raw[0] > 0, raw / safe_lag0, jnp.zeros_like(raw))
    return acf * var


@jax.jit
def _autocovariance_direct(x: jnp.ndarray) -> jnp.ndarray:
    n = x.shape[0]
    centered = x - jnp.mean(x)
    # 'full' correlation puts lag 0 at index n-1
    return jnp.correlate(centered, centered, mode='full')[n - 1:] / n


def _kernel(method: str):
    if method == 'fft':
        return _autocovariance_fft
    if method == 'direct':
        return _autocovariance_direct
    raise ValueError(f"Unknown autocovariance method '{method}'. Must be one of {AUTOCOV_METHODS}.")


def compute_autocovariance(samples, method: str = 'fft') -> np.ndarray:
    """
    Autocovariance sequence of one chain's draws.

    Args:
        samples: 1-D sequence of draws
        method: 'fft' (default) or 'direct'

    Returns:
        (N,) float array; element t is the autocovariance at lag t

    Raises:
        ValueError: For empty or non 1-D input, or an unknown method
    """
    kernel = _kernel(method)
    x = np.asarray(samples, dtype=np.float64)
    if x.ndim != 1:
        raise ValueError(f"samples must be 1-D, got shape {x.shape}")
    if x.shape[0] == 0:
        raise ValueError("cannot compute autocovariance of an empty chain")
    return np.asarray(jax.device_get(kernel(jnp.asarray(x))))


def batched_autocovariance(matrix, method: str = 'fft') -> np.ndarray:
    """
    Autocovariance of every column of an (n_samples, n_chains) matrix.

    Returns:
        (n_chains, n_samples) array; row k is chain k's sequence
    """
    kernel = _kernel(method)
    m = np.asarray(matrix, dtype=np.float64)
    if m.ndim != 2:
        raise ValueError(f"matrix must be 2-D (n_samples, n_chains), got shape {m.shape}")
    if m.shape[0] == 0 or m.shape[1] == 0:
        raise ValueError(f"matrix must have at least one draw and one chain, got shape {m.shape}")
    acov = jax.vmap(kernel, in_axes=1)(jnp.asarray(m))
    return np.asarray(jax.device_get(acov))
