"""
Branch loader for the tickets bot.

Discovers folder-based branches (discord.py extensions) and manages their
auto-generated config.yml files.
"""

import yaml
import logging
import importlib
from pathlib import Path
from typing import Optional, Dict, Any

from constants import BRANCH_CONFIG_FILE

logger = logging.getLogger(__name__)


class BranchLoader:
    """Manages loading branches with auto-generated configs."""

    def __init__(self, branches_dir="branches", package: str = "branches"):
        self.branches_dir = Path(branches_dir)
        self.package = package

    def discover_branches(self) -> list[str]:
        """
        Discover all folder-based branches.

        Returns sorted list of branch names.
        """
        branch_names = []

        if not self.branches_dir.is_dir():
            logger.warning(f"Branches directory {self.branches_dir} does not exist")
            return branch_names

        for item in self.branches_dir.iterdir():
            # Skip private files/folders
            if item.name.startswith("_") or item.name.startswith("."):
                continue

            if item.is_dir() and (item / "__init__.py").exists():
                branch_names.append(item.name)
                logger.debug(f"Discovered branch: {item.name}")

        return sorted(branch_names)

    def get_config_path(self, branch_name: str) -> Optional[Path]:
        """Get the config path for a branch."""
        branch_folder = self.branches_dir / branch_name
        if not branch_folder.is_dir():
            return None
        return branch_folder / BRANCH_CONFIG_FILE

    def load_config(self, branch_name: str) -> Dict[str, Any]:
        """Load config for a branch, generating default if it doesn't exist."""
        config_path = self.get_config_path(branch_name)

        if not config_path or not config_path.exists():
            default_config = self.get_default_config(branch_name)
            if config_path:
                self.save_config(branch_name, default_config)
            return default_config

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                config = yaml.safe_load(f) or {}
            logger.info(f"Loaded config for {branch_name}")
            return config
        except Exception as e:
            logger.error(f"Failed to load config for {branch_name}: {e}")
            return self.get_default_config(branch_name)

    def save_config(self, branch_name: str, config: Dict[str, Any]):
        """Save config for a branch."""
        config_path = self.get_config_path(branch_name)
        if not config_path:
            logger.error(f"Cannot save config for {branch_name}: no valid path")
            return

        try:
            with open(config_path, "w", encoding="utf-8") as f:
                yaml.safe_dump(config, f, default_flow_style=False, sort_keys=False, allow_unicode=True)

            logger.info(f"✅ Generated config for {branch_name} at {config_path}")
        except Exception as e:
            logger.error(f"Failed to save config for {branch_name}: {e}")

    def get_default_config(self, branch_name: str) -> Dict[str, Any]:
        """
        Get default config for a branch.

        Uses the DEFAULT_CONFIG defined in the branch's branch.py, or a
        minimal enabled config if the branch defines none.
        """
        try:
            module = importlib.import_module(f"{self.package}.{branch_name}.branch")
            if hasattr(module, "DEFAULT_CONFIG"):
                logger.info(f"Using branch-defined defaults for {branch_name}")
                return module.DEFAULT_CONFIG
        except Exception as e:
            logger.debug(f"Could not load branch-defined defaults for {branch_name}: {e}")

        return {
            "enabled": True,
            "version": "1.0.0",
            "settings": {}
        }

    def get_load_path(self, branch_name: str) -> Optional[str]:
        """Get the extension import path for a branch (loads through __init__.py)."""
        if not (self.branches_dir / branch_name).is_dir():
            return None
        return f"{self.package}.{branch_name}"
