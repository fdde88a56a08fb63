# tests/core/config/test_config_hashing.py
"""Testes do fingerprint canônico (SHA-256 sobre JSON ordenado)."""

import pytest

try:
    from liquidity_graph.core.config.hashing import canonical_json, compute_config_hash
except Exception as e:
    compute_config_hash = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(f"Missing config hashing. Import error: {_IMPORT_ERR}")


def test_hash_ignores_key_order():
    _require_imports()
    a = {"coordinator": {"max_workers": 8, "circuit_breaker": {"threshold": 3}}, "engines": {}}
    b = {"engines": {}, "coordinator": {"circuit_breaker": {"threshold": 3}, "max_workers": 8}}
    assert compute_config_hash(a) == compute_config_hash(b)


def test_hash_changes_with_values():
    _require_imports()
    assert compute_config_hash({"max_workers": 8}) != compute_config_hash({"max_workers": 4})


def test_hash_is_hex_sha256():
    _require_imports()
    digest = compute_config_hash({})
    assert len(digest) == 64
    int(digest, 16)


def test_canonical_json_is_compact_and_sorted():
    _require_imports()
    assert canonical_json({"b": 1, "a": "²"}) == '{"a":"²","b":1}'


def test_non_dict_raises_type_error():
    _require_imports()
    with pytest.raises(TypeError):
        compute_config_hash(["not", "a", "dict"])
