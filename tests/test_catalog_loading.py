"""Tests for building a CatalogManager from byte sources and files."""

import json
from pathlib import Path

import pytest

from useragent_service.core.errors import (
    CatalogConstructionError,
    CatalogSourceNotFoundError,
    CatalogValidationError,
)
from useragent_service.services.catalog import CatalogManager, default_sources, load, secure_random_index

VALID_UA = "Mozilla/5.0 (X11; Linux x86_64) Firefox/133.0"


def _dump(items: list[dict]) -> bytes:
    return json.dumps(items).encode()


def test_load_from_bytes(desktop_agents, mobile_agents) -> None:
    manager = load(_dump(desktop_agents), _dump(mobile_agents))

    assert [e.text for e in manager.all_desktop()] == [a["ua"] for a in desktop_agents]
    assert [e.weight for e in manager.all_mobile()] == [a["pct"] for a in mobile_agents]


def test_load_from_paths(tmp_path: Path, desktop_agents, mobile_agents) -> None:
    desktop = tmp_path / "desktop.json"
    mobile = tmp_path / "mobile.json"
    desktop.write_bytes(_dump(desktop_agents))
    mobile.write_bytes(_dump(mobile_agents))

    manager = CatalogManager.load(str(desktop), mobile)

    assert len(manager.all_desktop()) == len(desktop_agents)
    assert len(manager.all_mobile()) == len(mobile_agents)


def test_packaged_catalogs_load() -> None:
    manager = CatalogManager.load_default()

    sizes = manager.sizes()
    assert sizes["desktop"] > 0
    assert sizes["mobile"] > 0
    for entry in manager.all_desktop() + manager.all_mobile():
        assert 10 <= len(entry.text) <= 1000
        assert 0 <= entry.weight <= 100


def test_default_sources_are_readable() -> None:
    desktop, mobile = default_sources()

    assert json.loads(desktop.read_bytes())
    assert json.loads(mobile.read_bytes())


@pytest.mark.parametrize(
    ("entry", "field"),
    [
        ({"ua": "", "pct": 10}, "ua"),
        ({"ua": "short", "pct": 10}, "ua"),
        ({"ua": "x" * 1001, "pct": 10}, "ua"),
        ({"ua": VALID_UA, "pct": -1}, "pct"),
        ({"ua": VALID_UA, "pct": 101}, "pct"),
        ({"ua": VALID_UA}, "pct"),
        ({"ua": VALID_UA, "pct": "50"}, "pct"),
        ({"ua": VALID_UA, "pct": True}, "pct"),
        ({"ua": 1234567890123, "pct": 10}, "ua"),
    ],
)
def test_invalid_entry_fails_construction(desktop_agents, mobile_agents, entry: dict, field: str) -> None:
    desktop = desktop_agents + [entry]

    with pytest.raises(CatalogValidationError) as exc_info:
        load(_dump(desktop), _dump(mobile_agents))

    error = exc_info.value
    assert error.code == "catalog_invalid_entry"
    assert error.details == {"catalog": "desktop", "index": len(desktop_agents), "field": field}
    assert "desktop" in error.message


def test_invalid_mobile_entry_names_mobile_catalog(desktop_agents) -> None:
    with pytest.raises(CatalogValidationError) as exc_info:
        load(_dump(desktop_agents), _dump([{"ua": VALID_UA, "pct": 150}]))

    assert exc_info.value.details["catalog"] == "mobile"
    assert exc_info.value.details["index"] == 0


def test_boundary_values_are_accepted() -> None:
    manager = load(
        _dump([{"ua": "x" * 10, "pct": 0}, {"ua": "y" * 1000, "pct": 100}]),
        _dump([]),
    )

    assert len(manager.all_desktop()) == 2


@pytest.mark.parametrize("payload", [b"", b"not json", b'{"ua": "x"}', b"[1, 2]"])
def test_malformed_source_fails_construction(mobile_agents, payload: bytes) -> None:
    with pytest.raises(CatalogValidationError):
        load(payload, _dump(mobile_agents))


def test_both_catalogs_empty_fails_construction() -> None:
    with pytest.raises(CatalogValidationError) as exc_info:
        load(b"[]", b"[]")

    assert exc_info.value.code == "catalog_empty"


@pytest.mark.parametrize("path", ["", "   "])
def test_empty_path_is_source_not_found(mobile_agents, path: str) -> None:
    with pytest.raises(CatalogSourceNotFoundError):
        load(path, _dump(mobile_agents))


def test_missing_file_is_source_not_found(tmp_path: Path, desktop_agents) -> None:
    with pytest.raises(CatalogSourceNotFoundError) as exc_info:
        load(_dump(desktop_agents), tmp_path / "missing.json")

    assert exc_info.value.details["catalog"] == "mobile"
    assert isinstance(exc_info.value, CatalogConstructionError)


def test_source_not_found_is_distinguishable_from_validation(mobile_agents) -> None:
    with pytest.raises(CatalogConstructionError) as exc_info:
        load("", _dump(mobile_agents))

    assert not isinstance(exc_info.value, CatalogValidationError)


def test_secure_random_index_bounds() -> None:
    draws = {secure_random_index(3) for _ in range(300)}

    assert draws == {0, 1, 2}
    assert secure_random_index(1) == 0


@pytest.mark.parametrize("n", [0, -5])
def test_secure_random_index_rejects_non_positive(n: int) -> None:
    with pytest.raises(ValueError):
        secure_random_index(n)
