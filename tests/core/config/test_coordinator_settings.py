# tests/core/config/test_coordinator_settings.py
"""Testes da leitura tipada das opções do coordinator."""

import pytest

try:
    from liquidity_graph.core.config.settings import CoordinatorSettings, coordinator_settings
    from liquidity_graph.core.config.errors import InvalidSettingError
    from liquidity_graph.core.config.loader import load_config
except Exception as e:
    coordinator_settings = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(f"Missing coordinator settings. Import error: {_IMPORT_ERR}")


def test_empty_config_yields_defaults():
    _require_imports()
    assert coordinator_settings({}) == CoordinatorSettings()


def test_bundled_defaults_match_dataclass_defaults():
    _require_imports()
    assert coordinator_settings(load_config()) == CoordinatorSettings()


def test_values_are_read_from_config():
    _require_imports()
    settings = coordinator_settings(
        {
            "coordinator": {
                "max_workers": 2,
                "circuit_breaker": {"enabled": False, "threshold": 5, "reset_after_s": 10},
            },
            "engines": {
                "tail-risk": {"enabled": False},
                "credit-stress": {"enabled": True},
                "net-liquidity": None,
            },
        }
    )

    assert settings.max_workers == 2
    assert settings.breaker_enabled is False
    assert settings.breaker_threshold == 5
    assert settings.breaker_reset_after_s == 10.0
    assert settings.disabled_engines == frozenset({"tail-risk"})
    assert settings.is_enabled("credit-stress")
    assert not settings.is_enabled("tail-risk")


@pytest.mark.parametrize(
    "config",
    [
        {"coordinator": {"max_workers": 0}},
        {"coordinator": {"max_workers": True}},
        {"coordinator": {"circuit_breaker": {"threshold": -1}}},
        {"coordinator": {"circuit_breaker": {"reset_after_s": -5}}},
        {"coordinator": {"circuit_breaker": "on"}},
        {"coordinator": {"engine_timeout_s": 0}},
        {"coordinator": {"engine_timeout_s": "30s"}},
        {"coordinator": {"retry": {"max_retries": -1}}},
        {"coordinator": {"retry": {"base_delay_s": -0.5}}},
        {"coordinator": {"retry": {"backoff_multiplier": 0.5}}},
        {"coordinator": {"retry": [1, 2]}},
        {"coordinator": []},
        {"engines": {"tail-risk": "off"}},
    ],
)
def test_out_of_domain_values_raise(config):
    _require_imports()
    with pytest.raises(InvalidSettingError):
        coordinator_settings(config)


def test_retry_and_timeout_are_read_from_config():
    _require_imports()
    settings = coordinator_settings(
        {
            "coordinator": {
                "engine_timeout_s": 2,
                "retry": {"max_retries": 3, "base_delay_s": 0.5, "backoff_multiplier": 2},
            }
        }
    )

    assert settings.engine_timeout_s == 2.0
    assert settings.max_retries == 3
    assert [settings.retry_delay_s(a) for a in (1, 2, 3)] == [0.5, 1.0, 2.0]


def test_null_timeout_disables_it():
    _require_imports()
    assert coordinator_settings({"coordinator": {"engine_timeout_s": None}}).engine_timeout_s is None


def test_default_backoff_schedule():
    _require_imports()
    settings = CoordinatorSettings()

    assert settings.max_retries == 2
    assert settings.retry_delay_s(1) == 1.0
    assert settings.retry_delay_s(2) == pytest.approx(1.5)
