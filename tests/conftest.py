"""
Pytest configuration and shared fixtures for chaindiag tests.
"""

import pytest
import numpy as np

# chaindiag must load before JAX so its precision settings apply
import chaindiag  # noqa: F401


@pytest.fixture
def rng_seed():
    """Default RNG seed for reproducible tests."""
    return 42


@pytest.fixture
def rng(rng_seed):
    return np.random.default_rng(rng_seed)


@pytest.fixture
def trending_chain():
    """Single chain 1..8: strongly trending, hand-checkable moments."""
    return np.arange(1.0, 9.0)


@pytest.fixture
def iid_matrix(rng):
    """Four independent standard normal chains, (n_samples, n_chains)."""
    return rng.normal(size=(2000, 4))


@pytest.fixture
def basic_config():
    """Diagnostic configuration used by orchestrator tests."""
    return {
        'autocov_method': 'fft',
        'n_workers': 1,
        'rhat_threshold': 1.01,
        'min_ess': 100.0,
    }


@pytest.fixture
def make_ar1(rng):
    """
    Factory for AR(1) chains x[t] = phi * x[t-1] + eps, started at stationarity.

    Returns:
        make(phi, n_samples, n_chains, offset=0.0) -> (n_samples, n_chains) array
    """
    def make(phi, n_samples, n_chains, offset=0.0):
        scale = 1.0 / np.sqrt(1.0 - phi ** 2)
        out = np.empty((n_samples, n_chains))
        out[0] = rng.normal(size=n_chains) * scale
        eps = rng.normal(size=(n_samples, n_chains))
        for t in range(1, n_samples):
            out[t] = phi * out[t - 1] + eps[t]
        return out + offset
    return make


@pytest.fixture
def make_sim(rng):
    """
    Factory for plain-mapping simulation records with normal draws.

    Warmup draws are shifted far away so any failure to drop them shows up
    in the diagnostics.
    """
    def make(n_chains=3, n_params=2, warmup=50, n_save=250):
        samples = []
        for _ in range(n_chains):
            chain = []
            for _ in range(n_params):
                draws = rng.normal(size=n_save)
                draws[:warmup] += 1000.0
                chain.append(draws)
            samples.append(chain)
        return {
            'chains': n_chains,
            'n_flatnames': n_params,
            'n_save': [n_save] * n_chains,
            'warmup2': [warmup] * n_chains,
            'samples': samples,
        }
    return make
