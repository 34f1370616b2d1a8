"""
Ticket Rules Store
Read-through/write-through JSON storage for the panel and ticket rules.
"""

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Tuple

logger = logging.getLogger(__name__)


def _rule_list(data: Dict[str, Any], key: str) -> Tuple[str, ...]:
    """Extract one rule list from a raw document, validating its shape."""
    if key not in data:
        raise ValueError(f"Missing '{key}'")

    value = data[key]
    if not isinstance(value, list) or not all(isinstance(rule, str) for rule in value):
        raise ValueError(f"'{key}' must be a list of strings")

    return tuple(value)


@dataclass(frozen=True)
class RuleDocument:
    """The ordered rule lists shown on the panel and inside tickets."""
    panel_rules: Tuple[str, ...] = ()
    ticket_rules: Tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: Any) -> "RuleDocument":
        """
        Build a document from its JSON form.

        Args:
            data: Decoded JSON, expected as {"panelRules": [...], "ticketRules": [...]}

        Returns:
            RuleDocument

        Raises:
            ValueError: If the document does not have the expected shape
        """
        if not isinstance(data, dict):
            raise ValueError("Rules document must be a JSON object")

        return cls(
            panel_rules=_rule_list(data, "panelRules"),
            ticket_rules=_rule_list(data, "ticketRules")
        )

    def to_dict(self) -> Dict[str, list]:
        return {
            "panelRules": list(self.panel_rules),
            "ticketRules": list(self.ticket_rules)
        }


class RuleStore:
    """
    Rules persisted as a single pretty-printed JSON file.

    Nothing is cached: every load reads the file so a render always sees the
    latest saved rules. Concurrent saves are last-writer-wins.
    """

    def __init__(self, path):
        self.path = Path(path)

    def load(self) -> RuleDocument:
        """Load the rules, falling back to empty lists on any failure."""
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
            return RuleDocument.from_dict(data)
        except FileNotFoundError:
            logger.warning(f"Rules file {self.path} not found, using empty rules")
        except (OSError, ValueError) as e:
            logger.error(f"Failed to load rules from {self.path}: {e}")

        return RuleDocument()

    def save(self, rules: RuleDocument) -> bool:
        """
        Replace the stored rules with the given document.

        The document is written to a temporary sibling file and moved over
        the old one, so readers never see a half-written file.

        Returns:
            True if the rules were saved, False otherwise
        """
        tmp_path = self.path.with_name(f".{self.path.name}.tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(rules.to_dict(), f, indent=2, ensure_ascii=False)
            os.replace(tmp_path, self.path)
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Failed to save rules to {self.path}: {e}")
            return False

        logger.info(
            f"Saved rules to {self.path} "
            f"({len(rules.panel_rules)} panel, {len(rules.ticket_rules)} ticket)"
        )
        return True
