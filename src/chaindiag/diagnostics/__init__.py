"""
Diagnostics Subpackage - Convergence diagnostics for sampling chains.

This package contains the numerical core:
- types: Chain input structures (ChainLayout, ChainSample, ChainSet, SimulationRecord)
- config: Configuration defaults and precision control
- autocovariance: Per-chain autocovariance (FFT and direct kernels)
- moments: Chain and split-half means and variances
- ess: Effective sample size (jagged-chain and matrix variants)
- rhat: Split potential scale reduction
- backend: Public entry points and batch orchestration
"""

# Import types first (needed by other modules)
from .types import (
    ChainLayout,
    ChainSample,
    ChainSet,
    SimulationRecord,
    ParameterDiagnostics,
)

from .config import clean_config, configure_precision
from .autocovariance import compute_autocovariance, batched_autocovariance
from .moments import chain_mean, chain_variance, split_halves, split_chain_moments
from .ess import ess_from_chain_set, ess_from_matrix
from .rhat import split_rhat_from_chain_set, split_rhat_from_matrix

# Main entry points
from .backend import (
    compute_effective_sample_size,
    compute_split_rhat,
    effective_sample_size_from_record,
    split_rhat_from_record,
    chain_mean_from_record,
    diagnose_parameters,
    diagnose_and_print,
)

__all__ = [
    # Main entry points
    'compute_effective_sample_size',
    'compute_split_rhat',
    'compute_autocovariance',
    'diagnose_parameters',
    'diagnose_and_print',
    # Deprecated record path
    'effective_sample_size_from_record',
    'split_rhat_from_record',
    'chain_mean_from_record',
    # Types
    'ChainLayout',
    'ChainSample',
    'ChainSet',
    'SimulationRecord',
    'ParameterDiagnostics',
    # Config
    'clean_config',
    'configure_precision',
    # Calculators
    'batched_autocovariance',
    'chain_mean',
    'chain_variance',
    'split_halves',
    'split_chain_moments',
    'ess_from_chain_set',
    'ess_from_matrix',
    'split_rhat_from_chain_set',
    'split_rhat_from_matrix',
]
