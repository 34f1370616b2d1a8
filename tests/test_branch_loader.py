"""Tests for branch discovery and config generation."""
from pathlib import Path

import pytest
import yaml

from core.branch_loader import BranchLoader
from branches.tickets.branch import DEFAULT_CONFIG as TICKETS_DEFAULT_CONFIG

BRANCHES_DIR = Path(__file__).resolve().parent.parent / "branches"


@pytest.fixture
def branches_dir(tmp_path):
    root = tmp_path / "fakebranches"
    for name in ("alpha", "beta", "_private"):
        (root / name).mkdir(parents=True)
        (root / name / "__init__.py").write_text("", encoding="utf-8")
    (root / "no_init").mkdir()
    (root / "loose.py").write_text("", encoding="utf-8")
    return root


class TestDiscovery:
    def test_only_public_packages_are_branches(self, branches_dir):
        loader = BranchLoader(branches_dir, package="fakebranches")
        assert loader.discover_branches() == ["alpha", "beta"]

    def test_missing_directory(self, tmp_path):
        assert BranchLoader(tmp_path / "nothing").discover_branches() == []

    def test_project_branches(self):
        assert BranchLoader(BRANCHES_DIR).discover_branches() == ["control_api", "tickets"]

    def test_load_path(self, branches_dir):
        loader = BranchLoader(branches_dir, package="fakebranches")
        assert loader.get_load_path("alpha") == "fakebranches.alpha"
        assert loader.get_load_path("gamma") is None


class TestConfig:
    def test_default_config_is_generated(self, branches_dir):
        loader = BranchLoader(branches_dir, package="fakebranches")

        config = loader.load_config("alpha")

        assert config == {"enabled": True, "version": "1.0.0", "settings": {}}
        written = yaml.safe_load((branches_dir / "alpha" / "config.yml").read_text(encoding="utf-8"))
        assert written == config

    def test_existing_config_is_read(self, branches_dir):
        (branches_dir / "beta" / "config.yml").write_text(
            "enabled: false\nsettings:\n  title: Painel\n", encoding="utf-8"
        )
        loader = BranchLoader(branches_dir, package="fakebranches")

        assert loader.load_config("beta") == {"enabled": False, "settings": {"title": "Painel"}}

    def test_unknown_branch_gets_defaults_without_writing(self, branches_dir):
        loader = BranchLoader(branches_dir, package="fakebranches")

        assert loader.get_config_path("gamma") is None
        assert loader.load_config("gamma")["enabled"] is True
        assert not (branches_dir / "gamma").exists()

    def test_branch_defined_defaults(self):
        loader = BranchLoader(BRANCHES_DIR)
        assert loader.get_default_config("tickets") == TICKETS_DEFAULT_CONFIG
