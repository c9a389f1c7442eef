"""
chaindiag - Convergence Diagnostics for Sampling Chains

Public API:
    Diagnostics:
        compute_effective_sample_size - ESS of one parameter (matrix or per-chain draws)
        compute_split_rhat - Split R-hat of one parameter
        compute_autocovariance - Lag-indexed autocovariance of one chain
        diagnose_parameters - ESS and split R-hat for every parameter, failures scoped per parameter
        diagnose_and_print - diagnose_parameters plus a logged convergence summary
        configure_precision - One-time process-wide float64/float32 switch

    Chain Inputs:
        ChainLayout - Per-chain kept lengths and warmup offsets
        ChainSample - Read-only post-warmup draws of one chain
        ChainSet - Chains of one parameter
        SimulationRecord - Typed record of every chain and parameter

    Deprecated Record Path:
        effective_sample_size_from_record - ESS of a parameter index in a SimulationRecord
        split_rhat_from_record - Split R-hat of a parameter index in a SimulationRecord
        chain_mean_from_record - Mean of one chain's kept draws

    Errors:
        ChainDiagnosticError - Base class
        DegenerateVarianceError - Zero or uncomputable variance
        InconsistentChainLengthsError - Metadata disagrees with the draws
        InvalidParameterIndexError / InvalidChainIndexError - Index out of range
        InvalidSimulationRecordError - Malformed simulation record

Example:
    import numpy as np
    from chaindiag import compute_effective_sample_size, compute_split_rhat

    draws = np.random.default_rng(0).normal(size=(1000, 4))  # (n_samples, n_chains)
    ess = compute_effective_sample_size(draws)
    rhat = compute_split_rhat(draws)
"""
# CRITICAL: Import jax_config FIRST to set environment variables before JAX loads
from . import jax_config  # noqa: F401

from .error_handling import (
    ChainDiagnosticError,
    DegenerateVarianceError,
    InconsistentChainLengthsError,
    InvalidChainIndexError,
    InvalidParameterIndexError,
    InvalidSimulationRecordError,
    validate_diagnostic_config,
)
from .diagnostics import (
    ChainLayout,
    ChainSample,
    ChainSet,
    SimulationRecord,
    ParameterDiagnostics,
    clean_config,
    configure_precision,
    compute_autocovariance,
    compute_effective_sample_size,
    compute_split_rhat,
    diagnose_parameters,
    diagnose_and_print,
    effective_sample_size_from_record,
    split_rhat_from_record,
    chain_mean_from_record,
)
