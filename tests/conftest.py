from __future__ import annotations

import pytest
from pyomo.environ import SolverFactory

import cardpairs.globals


def _highs_available() -> bool:
    for name in ("appsi_highs", "highs"):
        try:
            if SolverFactory(name).available(exception_flag=False):
                return True
        except Exception:
            continue
    return False


HIGHS_AVAILABLE = _highs_available()


def pytest_configure(config):
    config.addinivalue_line("markers", "solver: test needs a working HiGHS backend")


def pytest_collection_modifyitems(config, items):
    if HIGHS_AVAILABLE:
        return
    skip = pytest.mark.skip(reason="HiGHS solver not available (install highspy)")
    for item in items:
        if "solver" in item.keywords:
            item.add_marker(skip)


@pytest.fixture(autouse=True)
def isolated_paths(tmp_path, monkeypatch):
    """Keep exported files out of the working directory."""
    root = str(tmp_path) + "/"
    monkeypatch.setitem(cardpairs.globals.paths, "instances", root + "instances/")
    monkeypatch.setitem(cardpairs.globals.paths, "solvers", root + "solvers/")
    return root
