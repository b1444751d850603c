from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

import yaml

from .condition import evaluate_condition, validate_condition
from .models import AnalysisResult, Finding, Severity

logger = logging.getLogger(__name__)

DEFAULT_RULES_PATH = Path(__file__).resolve().parent.parent / "rules" / "default.yaml"

_REQUIRED_RULE_KEYS = {"id", "severity", "message", "condition"}


class CatalogLoadError(Exception):
    """Raised when a rules file is missing or malformed."""


@dataclass(frozen=True)
class Rule:
    id: str
    severity: Severity
    message: str
    condition: dict

    def matches(self, line: str) -> bool:
        return evaluate_condition(self.condition, line)


class RuleCatalog:
    """Ordered rules evaluated line by line against a script."""

    def __init__(self, rules: list[Rule], source: Path | None = None) -> None:
        self.rules = list(rules)
        self.source = source

    @classmethod
    def from_file(cls, path: Path) -> RuleCatalog:
        path = Path(path)
        if not path.is_file():
            raise CatalogLoadError(f"rules file not found: {path}")

        with open(path, encoding="utf-8") as f:
            try:
                document = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise CatalogLoadError(f"{path}: invalid YAML: {e}") from e

        if not isinstance(document, dict):
            raise CatalogLoadError(f"{path}: expected a YAML mapping at top level")

        raw_rules = document.get("rules", [])
        if not isinstance(raw_rules, list):
            raise CatalogLoadError(f"{path}: 'rules' must be a list")

        errors = _validate_rules(raw_rules)
        if errors:
            joined = "\n  ".join(errors)
            raise CatalogLoadError(f"{path}: rule validation failed:\n  {joined}")

        rules = [
            Rule(
                id=str(raw["id"]),
                severity=Severity.parse(raw["severity"]),
                message=str(raw["message"]),
                condition=raw["condition"],
            )
            for raw in raw_rules
        ]
        logger.debug("loaded %d rules from %s", len(rules), path)
        return cls(rules, source=path)

    @classmethod
    def default(cls) -> RuleCatalog:
        return cls.from_file(DEFAULT_RULES_PATH)

    def match_line(self, line: str) -> list[Rule]:
        """Return every rule matching the line, in catalog order."""
        return [rule for rule in self.rules if rule.matches(line)]

    def scan(self, script: str) -> AnalysisResult:
        """Evaluate every rule against every line of the script.

        Lines are split on '\\n' only; a trailing '\\r' stays part of the line.
        Line numbers start at 1.
        """
        result = AnalysisResult()
        for line_number, line in enumerate(script.split("\n"), start=1):
            for rule in self.match_line(line):
                result.add_finding(Finding(
                    severity=rule.severity,
                    message=rule.message,
                    line_number=line_number,
                    rule_id=rule.id,
                ))
        return result


def scan(script: str, catalog: RuleCatalog | None = None) -> AnalysisResult:
    """Scan a script with the given catalog, or the bundled one."""
    if catalog is None:
        catalog = RuleCatalog.default()
    return catalog.scan(script)


def _validate_rules(rules: list) -> list[str]:
    """Validate required keys, severities, ids and condition trees."""
    errors: list[str] = []
    seen_ids: set[str] = set()
    for i, rule in enumerate(rules):
        if not isinstance(rule, dict):
            errors.append(f"rules[{i}]: expected dict, got {type(rule).__name__}")
            continue
        rule_id = str(rule.get("id", "?"))
        missing = _REQUIRED_RULE_KEYS - rule.keys()
        if missing:
            errors.append(f"rules[{i}] (id={rule_id}): missing keys: {sorted(missing)}")
        if "id" in rule:
            if rule_id in seen_ids:
                errors.append(f"rules[{i}] (id={rule_id}): duplicate rule id")
            seen_ids.add(rule_id)
        if "severity" in rule:
            try:
                Severity.parse(rule["severity"])
            except ValueError as e:
                errors.append(f"rules[{i}] (id={rule_id}): {e}")
        if "condition" in rule:
            for err in validate_condition(rule["condition"]):
                errors.append(f"rules[{i}] (id={rule_id}): {err}")
    return errors
