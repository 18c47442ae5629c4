import importlib
import pkgutil
from pathlib import Path

import solanumyield

DOCS = Path(__file__).resolve().parents[1] / "docs" / "source"


def _package_modules():
    return {
        m.name
        for m in pkgutil.walk_packages(
            solanumyield.__path__, prefix="solanumyield."
        )
        if not m.ispkg
    }


def _api_entries():
    lines = (DOCS / "api.rst").read_text(encoding="utf-8").splitlines()
    return {
        ln.strip() for ln in lines if ln.strip().startswith("solanumyield.")
    }


def test_index_links_api_page():
    index = (DOCS / "index.rst").read_text(encoding="utf-8")
    assert ".. toctree::" in index
    assert "api" in index.split(".. toctree::", 1)[1].split()


def test_api_page_lists_every_module():
    assert _api_entries() == _package_modules()
    for name in _api_entries():
        importlib.import_module(name)


def test_conf_references_only_existing_dirs():
    ns: dict = {}
    exec((DOCS / "conf.py").read_text(encoding="utf-8"), ns)
    for d in ns.get("templates_path", []) + ns.get("html_static_path", []):
        assert (DOCS / d).is_dir()
