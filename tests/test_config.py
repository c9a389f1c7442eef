"""
Configuration and Error Handling Tests

Tests for:
- clean_config defaults and immutability of the caller's dict
- Precision switching only through configure_precision
- validate_diagnostic_config error collection
- check_variance guard
- Error class hierarchy

Run with: pytest tests/test_config.py -v
"""

import jax
import numpy as np
import pytest

from chaindiag import compute_autocovariance, compute_effective_sample_size, compute_split_rhat
from chaindiag.diagnostics.config import clean_config, configure_precision
from chaindiag.error_handling import (
    ChainDiagnosticError,
    DegenerateVarianceError,
    InconsistentChainLengthsError,
    InvalidChainIndexError,
    InvalidParameterIndexError,
    InvalidSimulationRecordError,
    check_variance,
    validate_diagnostic_config,
)


class TestCleanConfig:

    def test_defaults(self):
        config = clean_config()
        assert config['autocov_method'] == 'fft'
        assert config['n_workers'] == 1
        assert config['rhat_threshold'] == 1.01
        assert config['min_ess'] == 400.0
        assert 'use_double' not in config

    def test_user_values_kept(self, basic_config):
        config = clean_config(basic_config)
        assert config['min_ess'] == 100.0

    def test_caller_dict_untouched(self):
        user = {'n_workers': 2}
        clean_config(user)
        assert user == {'n_workers': 2}

    def test_invalid_values_raise(self):
        with pytest.raises(ValueError, match="n_workers"):
            clean_config({'n_workers': 0})

    def test_use_double_key_rejected(self):
        with pytest.raises(ValueError, match="configure_precision"):
            clean_config({'use_double': False})


class TestPrecision:
    """Precision is a one-time process setting, never a side effect of a call."""

    @pytest.fixture
    def update_calls(self, monkeypatch):
        calls = []
        monkeypatch.setattr(jax.config, 'update', lambda *args: calls.append(args))
        return calls

    def test_clean_config_leaves_jax_alone(self, update_calls, basic_config):
        clean_config()
        clean_config(basic_config)
        assert update_calls == []

    def test_entry_points_leave_jax_alone(self, update_calls, iid_matrix):
        compute_effective_sample_size(iid_matrix[:200], config={'autocov_method': 'direct'})
        compute_split_rhat(iid_matrix[:200])
        assert update_calls == []

    def test_float64_is_default(self, trending_chain):
        acov = compute_autocovariance(trending_chain)
        assert acov.dtype == np.float64
        assert acov[0] == pytest.approx(np.var(trending_chain), rel=1e-12)

    def test_configure_precision_is_explicit(self, update_calls, caplog):
        configure_precision(False)
        configure_precision()
        assert update_calls == [("jax_enable_x64", False), ("jax_enable_x64", True)]
        assert 'float32' in caplog.text


class TestValidateDiagnosticConfig:

    def test_valid_config(self, basic_config):
        validate_diagnostic_config(basic_config)

    def test_all_errors_reported(self):
        bad = {
            'autocov_method': 'welch',
            'n_workers': 0,
            'rhat_threshold': 0.9,
            'min_ess': -1,
            'use_double': 'yes',
        }
        with pytest.raises(ValueError) as excinfo:
            validate_diagnostic_config(bad)
        message = str(excinfo.value)
        for key in bad:
            assert key in message

    def test_non_integer_workers(self):
        with pytest.raises(ValueError, match="integer"):
            validate_diagnostic_config({'n_workers': 2.5})
        with pytest.raises(ValueError, match="integer"):
            validate_diagnostic_config({'n_workers': True})

    def test_numpy_integer_workers(self):
        validate_diagnostic_config({'n_workers': np.int64(4)})

    @pytest.mark.parametrize("key", ['rhat_threshold', 'min_ess'])
    @pytest.mark.parametrize("value", ["1.05", None, True, [1.05]])
    def test_non_numeric_thresholds(self, key, value):
        with pytest.raises(ValueError, match=f"{key} must be a number"):
            validate_diagnostic_config({key: value})

    def test_nan_threshold_rejected(self):
        with pytest.raises(ValueError, match="rhat_threshold must be > 1"):
            validate_diagnostic_config({'rhat_threshold': float('nan')})

    def test_numpy_thresholds_accepted(self):
        validate_diagnostic_config({'rhat_threshold': np.float32(1.05), 'min_ess': np.int64(0)})


class TestCheckVariance:

    def test_positive_passes(self):
        assert check_variance(np.float64(2.5), "v") == 2.5

    @pytest.mark.parametrize("value", [0.0, -1.0, np.nan, np.inf])
    def test_degenerate_values(self, value):
        with pytest.raises(DegenerateVarianceError, match="var_within"):
            check_variance(value, "var_within")


class TestErrorHierarchy:

    @pytest.mark.parametrize("error, builtin", [
        (InvalidParameterIndexError, IndexError),
        (InvalidChainIndexError, IndexError),
        (DegenerateVarianceError, ArithmeticError),
        (InconsistentChainLengthsError, ValueError),
        (InvalidSimulationRecordError, ValueError),
    ])
    def test_subclasses(self, error, builtin):
        assert issubclass(error, ChainDiagnosticError)
        assert issubclass(error, builtin)
