"""
Diagnostic Orchestrator.

Entry points that accept raw per-chain draws and dispatch to the ESS and
split R-hat calculators:
- compute_effective_sample_size / compute_split_rhat: a 2-D array with no
  layout takes the matrix path, everything else is extracted into a ChainSet
- *_from_record: deprecated path reading from a SimulationRecord
- diagnose_parameters: batch run over many parameters with per-parameter
  failure scoping
"""

import time
import warnings
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, Mapping, Optional, Tuple, Union

import jax
import numpy as np

from .config import clean_config
from .ess import ess_from_chain_set, ess_from_matrix
from .moments import chain_mean
from .rhat import split_rhat_from_chain_set, split_rhat_from_matrix
from .types import ChainLayout, ChainSet, ParameterDiagnostics, SimulationRecord
from ..error_handling import ChainDiagnosticError, print_diagnostic_summary

import logging
logger = logging.getLogger('chaindiag')


def _is_matrix(chains) -> bool:
    return isinstance(chains, (np.ndarray, jax.Array)) and chains.ndim == 2


def _as_chain_set(chains, layout: Optional[ChainLayout]) -> ChainSet:
    if isinstance(chains, ChainSet):
        if layout is not None:
            raise ValueError("layout cannot be combined with an already extracted ChainSet")
        return chains
    if _is_matrix(chains):
        chains = np.asarray(chains).T
    return ChainSet.from_draws(chains, layout)


def compute_effective_sample_size(
    chains,
    layout: Optional[ChainLayout] = None,
    config: Optional[Dict[str, Any]] = None,
) -> float:
    """
    Effective sample size of one parameter.

    Args:
        chains: Either an (n_samples, n_chains) array of post-warmup draws,
            a ChainSet, or a sequence of per-chain draw sequences
        layout: Kept lengths and warmup offsets for per-chain draws; when
            given, a 2-D array is read as raw draws with one column per chain
        config: Diagnostic configuration (see clean_config)

    Returns:
        ESS as a float

    Raises:
        DegenerateVarianceError: Constant or too-short chains
        InconsistentChainLengthsError: Layout disagrees with the draws
    """
    config = clean_config(config)
    method = config['autocov_method']
    if layout is None and _is_matrix(chains):
        return ess_from_matrix(chains, method)
    return ess_from_chain_set(_as_chain_set(chains, layout), method)


def compute_split_rhat(
    chains,
    layout: Optional[ChainLayout] = None,
    config: Optional[Dict[str, Any]] = None,
) -> float:
    """
    Split R-hat of one parameter.

    Accepts the same inputs as compute_effective_sample_size.

    Raises:
        DegenerateVarianceError: Constant chains or fewer than 4 usable draws
        InconsistentChainLengthsError: Layout disagrees with the draws
    """
    clean_config(config)
    if layout is None and _is_matrix(chains):
        return split_rhat_from_matrix(chains)
    return split_rhat_from_chain_set(_as_chain_set(chains, layout))


# =============================================================================
# SIMULATION RECORD PATH (deprecated)
# =============================================================================

def _as_record(record: Union[SimulationRecord, Mapping[str, Any]]) -> SimulationRecord:
    if isinstance(record, SimulationRecord):
        return record
    return SimulationRecord.from_mapping(record)


def _deprecated(name: str, replacement: str) -> None:
    warnings.warn(
        f"{name} is deprecated; extract the draws and call {replacement} instead",
        DeprecationWarning,
        stacklevel=3,
    )


def effective_sample_size_from_record(
    record: Union[SimulationRecord, Mapping[str, Any]],
    param: int,
    config: Optional[Dict[str, Any]] = None,
) -> float:
    """
    ESS of parameter ``param`` read from a simulation record.

    Raises:
        InvalidParameterIndexError: If param is out of range
        InvalidSimulationRecordError: If the record is malformed
    """
    _deprecated('effective_sample_size_from_record', 'compute_effective_sample_size')
    record = _as_record(record)
    record.validate_param_idx(param)
    config = clean_config(config)
    return ess_from_chain_set(record.chain_set(param), config['autocov_method'])


def split_rhat_from_record(
    record: Union[SimulationRecord, Mapping[str, Any]],
    param: int,
    config: Optional[Dict[str, Any]] = None,
) -> float:
    """
    Split R-hat of parameter ``param`` read from a simulation record.

    Raises:
        InvalidParameterIndexError: If param is out of range
        InvalidSimulationRecordError: If the record is malformed
    """
    _deprecated('split_rhat_from_record', 'compute_split_rhat')
    record = _as_record(record)
    record.validate_param_idx(param)
    clean_config(config)
    return split_rhat_from_chain_set(record.chain_set(param))


def chain_mean_from_record(
    record: Union[SimulationRecord, Mapping[str, Any]],
    chain: int,
    param: int,
) -> float:
    """
    Mean of the kept draws of one parameter in one chain.

    Raises:
        InvalidChainIndexError: If chain is out of range
        InvalidParameterIndexError: If param is out of range
    """
    _deprecated('chain_mean_from_record', 'chain_mean')
    record = _as_record(record)
    record.validate_chain_idx(chain)
    record.validate_param_idx(param)
    return chain_mean(record.kept_samples(chain, param).draws)


# =============================================================================
# BATCH DIAGNOSTICS
# =============================================================================

def _diagnose_one(
    source: Union[SimulationRecord, Mapping[Any, ChainSet]],
    param: Any,
    method: str,
) -> ParameterDiagnostics:
    # Extraction happens here so a bad chain only fails its own parameter
    try:
        if isinstance(source, SimulationRecord):
            chain_set = source.chain_set(param)
        else:
            chain_set = source[param]
        ess = ess_from_chain_set(chain_set, method)
        rhat = split_rhat_from_chain_set(chain_set)
    except ChainDiagnosticError as e:
        logger.warning(f"Parameter {param}: not estimable ({type(e).__name__}: {e})")
        return ParameterDiagnostics(param=param, error=f"{type(e).__name__}: {e}")
    return ParameterDiagnostics(param=param, ess=ess, rhat=rhat)


def diagnose_parameters(
    source: Union[SimulationRecord, Mapping[Any, ChainSet]],
    config: Optional[Dict[str, Any]] = None,
) -> Dict[Any, ParameterDiagnostics]:
    """
    ESS and split R-hat for every parameter.

    Parameters are independent, so with ``n_workers > 1`` they are spread
    over a thread pool. A failure for one parameter is recorded on its
    result and never stops the others.

    Args:
        source: SimulationRecord (keyed by parameter index) or a mapping of
            parameter name -> ChainSet
        config: Diagnostic configuration (see clean_config)

    Returns:
        Dict of parameter -> ParameterDiagnostics, in input order
    """
    config = clean_config(config)
    method = config['autocov_method']
    n_workers = config['n_workers']
    if isinstance(source, SimulationRecord):
        params = list(range(source.num_params))
    else:
        params = list(source.keys())

    logger.info(f"\n--- Computing diagnostics for {len(params)} parameter(s) ---")
    start = time.perf_counter()

    if n_workers > 1 and len(params) > 1:
        with ThreadPoolExecutor(max_workers=n_workers) as executor:
            futures = {
                param: executor.submit(_diagnose_one, source, param, method)
                for param in params
            }
            results = {param: future.result() for param, future in futures.items()}
    else:
        results = {param: _diagnose_one(source, param, method) for param in params}

    logger.info(f"Diagnostics complete in {time.perf_counter() - start:.4f}s")
    return results


def diagnose_and_print(
    source: Union[SimulationRecord, Mapping[Any, ChainSet]],
    config: Optional[Dict[str, Any]] = None,
) -> Tuple[Dict[Any, ParameterDiagnostics], bool]:
    """
    Run diagnose_parameters and log a convergence summary.

    Returns:
        (results, converged)
    """
    config = clean_config(config)
    results = diagnose_parameters(source, config)
    converged = print_diagnostic_summary(results, config['rhat_threshold'], config['min_ess'])
    return results, converged
