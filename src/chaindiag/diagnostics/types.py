"""
Chain Data Structures and Type Definitions.

This module contains the input structures consumed by the diagnostic core:
- ChainLayout: Per-chain kept lengths and warmup offsets
- ChainSample: Read-only view of one chain's post-warmup draws
- ChainSet: Ordered collection of ChainSamples for one parameter
- SimulationRecord: Typed host record holding every chain and parameter
- ParameterDiagnostics: Per-parameter result of a batch run
"""

import numpy as np
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence, Tuple

from ..error_handling import (
    InconsistentChainLengthsError,
    InvalidChainIndexError,
    InvalidParameterIndexError,
    InvalidSimulationRecordError,
)


@dataclass(frozen=True)
class ChainLayout:
    """
    Kept-draw metadata for every chain of a run.

    Replaces the loosely typed ``n_save`` / ``warmup2`` pair: chain k keeps
    ``kept_lengths[k]`` draws starting at index ``warmup_offsets[k]`` of its
    raw saved draws.
    """
    kept_lengths: Tuple[int, ...]
    warmup_offsets: Tuple[int, ...]

    def __post_init__(self):
        kept = tuple(int(n) for n in self.kept_lengths)
        warmup = tuple(int(w) for w in self.warmup_offsets)
        if len(kept) != len(warmup):
            raise InconsistentChainLengthsError(
                f"layout has {len(kept)} kept lengths but {len(warmup)} warmup offsets"
            )
        if any(n < 0 for n in kept) or any(w < 0 for w in warmup):
            raise InconsistentChainLengthsError("kept lengths and warmup offsets must be >= 0")
        object.__setattr__(self, 'kept_lengths', kept)
        object.__setattr__(self, 'warmup_offsets', warmup)

    @classmethod
    def from_saved(cls, n_save: Sequence[int], warmup: Sequence[int]) -> 'ChainLayout':
        """Build a layout from total saved iterations and warmup counts per chain."""
        if len(n_save) != len(warmup):
            raise InconsistentChainLengthsError(
                f"got {len(n_save)} saved counts but {len(warmup)} warmup counts"
            )
        kept = []
        for k, (saved, w) in enumerate(zip(n_save, warmup)):
            if w > saved:
                raise InconsistentChainLengthsError(
                    f"chain {k}: warmup ({w}) exceeds saved iterations ({saved})"
                )
            kept.append(saved - w)
        return cls(tuple(kept), tuple(warmup))

    @property
    def n_chains(self) -> int:
        return len(self.kept_lengths)


@dataclass(frozen=True, eq=False)
class ChainSample:
    """
    Post-warmup scalar draws of one chain for one parameter.

    The draws are copied to a read-only float64 array on construction, so
    later writes to the caller's buffer never reach them. Use ``from_raw``
    to build one from raw saved draws; it checks the metadata against the
    actual number of draws.
    """
    draws: np.ndarray
    warmup_offset: int = 0

    def __post_init__(self):
        draws = np.array(self.draws, dtype=np.float64)
        if draws.ndim != 1:
            raise InconsistentChainLengthsError(f"chain draws must be 1-D, got shape {draws.shape}")
        if draws.shape[0] < 1:
            raise InconsistentChainLengthsError("chain has no post-warmup draws")
        draws.setflags(write=False)
        object.__setattr__(self, 'draws', draws)
        object.__setattr__(self, 'warmup_offset', int(self.warmup_offset))

    @classmethod
    def from_raw(
        cls,
        raw: Sequence[float],
        warmup_offset: int = 0,
        kept_length: Optional[int] = None,
    ) -> 'ChainSample':
        """
        Extract the kept draws from a chain's raw saved draws.

        Args:
            raw: All saved draws of the chain, warmup included
            warmup_offset: Number of leading warmup draws to discard
            kept_length: Expected number of post-warmup draws (None = the rest)

        Raises:
            InconsistentChainLengthsError: If the draws are not 1-D, the offset
                is out of range, or offset + kept_length != len(raw)
        """
        raw = np.asarray(raw, dtype=np.float64)
        if raw.ndim != 1:
            raise InconsistentChainLengthsError(f"chain draws must be 1-D, got shape {raw.shape}")
        n_raw = raw.shape[0]
        if warmup_offset < 0 or warmup_offset > n_raw:
            raise InconsistentChainLengthsError(
                f"warmup offset {warmup_offset} out of range for {n_raw} draws"
            )
        if kept_length is None:
            kept_length = n_raw - warmup_offset
        if warmup_offset + kept_length != n_raw:
            raise InconsistentChainLengthsError(
                f"metadata expects {warmup_offset} warmup + {kept_length} kept draws "
                f"but chain has {n_raw}"
            )
        return cls(draws=raw[warmup_offset:], warmup_offset=warmup_offset)

    def __len__(self) -> int:
        return self.draws.shape[0]


@dataclass(frozen=True, eq=False)
class ChainSet:
    """
    Ordered ChainSamples for a single parameter, one per independent run.

    Chains may have different lengths; ``min_length`` is the common sample
    count used when chains are combined.
    """
    chains: Tuple[ChainSample, ...]

    def __post_init__(self):
        chains = tuple(self.chains)
        if not chains:
            raise InconsistentChainLengthsError("a chain set needs at least one chain")
        for k, chain in enumerate(chains):
            if not isinstance(chain, ChainSample):
                raise TypeError(
                    f"chain {k} is {type(chain).__name__}; use ChainSet.from_draws for raw draws"
                )
        object.__setattr__(self, 'chains', chains)

    @classmethod
    def from_draws(
        cls,
        chains: Sequence[Sequence[float]],
        layout: Optional[ChainLayout] = None,
    ) -> 'ChainSet':
        """
        Build a ChainSet from raw per-chain draws.

        Args:
            chains: One draw sequence per chain (warmup included when layout says so)
            layout: Kept lengths and warmup offsets; None keeps every draw

        Raises:
            InconsistentChainLengthsError: If the layout does not match the draws
        """
        chains = list(chains)
        if layout is None:
            return cls(tuple(ChainSample.from_raw(c) for c in chains))
        if layout.n_chains != len(chains):
            raise InconsistentChainLengthsError(
                f"layout describes {layout.n_chains} chains but {len(chains)} were supplied"
            )
        return cls(tuple(
            ChainSample.from_raw(c, warmup_offset=w, kept_length=n)
            for c, n, w in zip(chains, layout.kept_lengths, layout.warmup_offsets)
        ))

    @property
    def n_chains(self) -> int:
        return len(self.chains)

    @property
    def lengths(self) -> Tuple[int, ...]:
        return tuple(len(c) for c in self.chains)

    @property
    def min_length(self) -> int:
        return min(self.lengths)

    def truncated_matrix(self, n_samples: Optional[int] = None) -> np.ndarray:
        """First n_samples draws of every chain as an (n_samples, n_chains) array."""
        if n_samples is None:
            n_samples = self.min_length
        if n_samples > self.min_length:
            raise InconsistentChainLengthsError(
                f"cannot take {n_samples} draws; shortest chain has {self.min_length}"
            )
        return np.stack([c.draws[:n_samples] for c in self.chains], axis=1)

    def __iter__(self):
        return iter(self.chains)

    def __len__(self) -> int:
        return len(self.chains)

    def __getitem__(self, k: int) -> ChainSample:
        return self.chains[k]


_REQUIRED_FIELDS = ('chains', 'n_flatnames', 'n_save', 'warmup2', 'samples')


@dataclass(frozen=True, eq=False)
class SimulationRecord:
    """
    Typed simulation record holding every chain's raw draws.

    Fields:
        chains: Number of chains
        n_flatnames: Number of scalar parameters
        n_save: Saved iterations per chain (warmup included)
        warmup2: Warmup iterations per chain (after thinning)
        samples: samples[chain][param] -> raw draws of that parameter
    """
    chains: int
    n_flatnames: int
    n_save: Tuple[int, ...]
    warmup2: Tuple[int, ...]
    samples: Tuple[Tuple[np.ndarray, ...], ...]

    def __post_init__(self):
        object.__setattr__(self, 'n_save', tuple(int(n) for n in self.n_save))
        object.__setattr__(self, 'warmup2', tuple(int(w) for w in self.warmup2))
        object.__setattr__(self, 'samples', tuple(
            tuple(np.asarray(param, dtype=np.float64) for param in chain)
            for chain in self.samples
        ))
        self._validate()

    def _validate(self) -> None:
        errors = []
        if isinstance(self.chains, bool) or not isinstance(self.chains, (int, np.integer)):
            raise InvalidSimulationRecordError(
                f"wrong type of chains in record; found {type(self.chains).__name__}, but int needed"
            )
        if self.chains < 1:
            errors.append(f"chains must be >= 1, got {self.chains}")
        if len(self.samples) != self.chains:
            errors.append(
                "the number of chains specified is different from the one found in samples "
                f"({self.chains} vs {len(self.samples)})"
            )
        for name in ('n_save', 'warmup2'):
            if len(getattr(self, name)) != self.chains:
                errors.append(f"{name} has {len(getattr(self, name))} entries for {self.chains} chains")
        for k, chain in enumerate(self.samples):
            if len(chain) != self.n_flatnames:
                errors.append(f"chain {k} holds {len(chain)} parameters, expected {self.n_flatnames}")
        if errors:
            raise InvalidSimulationRecordError(
                "Invalid simulation record:\n  " + "\n  ".join(errors)
            )

    @classmethod
    def from_mapping(cls, sim: Mapping[str, Any]) -> 'SimulationRecord':
        """
        Build a record from a plain mapping with the host's field names.

        Raises:
            InvalidSimulationRecordError: If a required field is missing
        """
        for name in _REQUIRED_FIELDS:
            if name not in sim:
                raise InvalidSimulationRecordError(
                    f"the simulation results (sim) does not contain {name}"
                )
        chains = sim['chains']
        if isinstance(chains, float) and chains.is_integer():
            chains = int(chains)
        return cls(
            chains=chains,
            n_flatnames=int(sim['n_flatnames']),
            n_save=tuple(sim['n_save']),
            warmup2=tuple(sim['warmup2']),
            samples=tuple(tuple(chain) for chain in sim['samples']),
        )

    @property
    def num_chains(self) -> int:
        return int(self.chains)

    @property
    def num_params(self) -> int:
        return int(self.n_flatnames)

    @property
    def layout(self) -> ChainLayout:
        return ChainLayout.from_saved(self.n_save, self.warmup2)

    def validate_chain_idx(self, chain: int) -> None:
        if not 0 <= chain < self.num_chains:
            raise InvalidChainIndexError(
                f"chain must be less than number of chains; num chains={self.num_chains}; chain={chain}"
            )

    def validate_param_idx(self, param: int) -> None:
        if not 0 <= param < self.num_params:
            raise InvalidParameterIndexError(
                f"parameter index must be less than number of params; found n={param}"
            )

    def kept_samples(self, chain: int, param: int) -> ChainSample:
        """Post-warmup draws of one parameter in one chain."""
        self.validate_chain_idx(chain)
        self.validate_param_idx(param)
        warmup = self.warmup2[chain]
        return ChainSample.from_raw(
            self.samples[chain][param],
            warmup_offset=warmup,
            kept_length=self.n_save[chain] - warmup,
        )

    def chain_set(self, param: int) -> ChainSet:
        """Every chain's post-warmup draws for one parameter."""
        self.validate_param_idx(param)
        return ChainSet(tuple(self.kept_samples(k, param) for k in range(self.num_chains)))


@dataclass(frozen=True)
class ParameterDiagnostics:
    """
    Diagnostics for one parameter of a batch run.

    On success ess and rhat are set and error is None; on failure error
    holds the message and both values are None.
    """
    param: Any
    ess: Optional[float] = None
    rhat: Optional[float] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None
