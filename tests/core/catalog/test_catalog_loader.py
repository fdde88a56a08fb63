# tests/core/catalog/test_catalog_loader.py
"""Testes de leitura de catálogos (lista, mapa, JSON, erros de formato)."""

import json
from pathlib import Path

import pytest

try:
    from liquidity_graph.core.catalog.loader import DEFAULT_CATALOG_PATH, load_catalog, parse_catalog
    from liquidity_graph.core.catalog.pillars import PILLAR_NAMES, pillar_name
    from liquidity_graph.core.config.errors import CatalogFormatError, CatalogNotFoundError
    from liquidity_graph.core.exceptions import InvalidDescriptorError
except Exception as e:
    load_catalog = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(f"Missing catalog loader. Import error: {_IMPORT_ERR}")


def test_bundled_catalog_has_all_engines():
    _require_imports()
    assert DEFAULT_CATALOG_PATH.exists()
    descriptors = load_catalog()

    ids = [d.id for d in descriptors]
    assert len(ids) == 29
    assert len(set(ids)) == 29
    assert ids[0] == "data-integrity"
    assert ids[-1] == "master-control"


def test_list_form_preserves_declaration_order(tmp_path: Path):
    _require_imports()
    path = tmp_path / "engines.yaml"
    path.write_text(
        "engines:\n"
        "  - id: b\n"
        "    dependencies: [a]\n"
        "  - id: a\n",
        encoding="utf-8",
    )

    assert [d.id for d in load_catalog(path)] == ["b", "a"]


def test_mapping_form_uses_keys_as_ids():
    _require_imports()
    descriptors = parse_catalog(
        {
            "engines": {
                "tail-risk": {"priority": 85, "dependencies": ["volatility-regime"]},
                "volatility-regime": {"id": "volatility-regime", "priority": 90},
            }
        }
    )

    assert [d.id for d in descriptors] == ["tail-risk", "volatility-regime"]
    assert descriptors[0].dependencies == frozenset({"volatility-regime"})


def test_mapping_form_rejects_mismatched_id():
    _require_imports()
    with pytest.raises(CatalogFormatError):
        parse_catalog({"engines": {"a": {"id": "b"}}})


def test_json_catalog(tmp_path: Path):
    _require_imports()
    path = tmp_path / "engines.json"
    path.write_text(json.dumps({"engines": [{"id": "a", "refreshIntervalMs": 1000}]}), encoding="utf-8")

    [d] = load_catalog(path)
    assert d.refresh_interval_ms == 1000


@pytest.mark.parametrize(
    "document",
    [
        {},
        {"engines": "data-integrity"},
        {"engines": {"a": ["not", "a", "mapping"]}},
    ],
)
def test_malformed_catalog_raises(document):
    _require_imports()
    with pytest.raises(CatalogFormatError):
        parse_catalog(document)


def test_null_engines_section_is_empty_catalog():
    _require_imports()
    assert parse_catalog({"engines": None}) == []


def test_invalid_entry_raises_descriptor_error():
    _require_imports()
    with pytest.raises(InvalidDescriptorError):
        parse_catalog({"engines": [{"id": "a", "refresh_interval_ms": -10}]})


def test_missing_catalog_file(tmp_path: Path):
    _require_imports()
    with pytest.raises(CatalogNotFoundError):
        load_catalog(tmp_path / "missing.yaml")


def test_pillar_names():
    _require_imports()
    assert pillar_name(0) == "Foundation Layer"
    assert pillar_name(4) == "Synthesis & Intelligence"
    assert pillar_name(99) == "Unknown"
    assert sorted(PILLAR_NAMES) == [0, 1, 2, 3, 4]


def test_repeated_id_in_yaml_mapping_form_is_rejected(tmp_path: Path):
    _require_imports()
    path = tmp_path / "engines.yaml"
    path.write_text(
        "engines:\n"
        "  a: {dependencies: []}\n"
        "  b: {dependencies: [a]}\n"
        "  a: {dependencies: [b], priority: 9}\n",
        encoding="utf-8",
    )

    with pytest.raises(CatalogFormatError) as exc_info:
        load_catalog(path)

    assert "'a'" in str(exc_info.value)


def test_repeated_id_in_json_mapping_form_is_rejected(tmp_path: Path):
    _require_imports()
    path = tmp_path / "engines.json"
    path.write_text('{"engines": {"a": {"priority": 1}, "a": {"priority": 2}}}', encoding="utf-8")

    with pytest.raises(CatalogFormatError):
        load_catalog(path)
