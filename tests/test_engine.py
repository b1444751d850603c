from pathlib import Path

import pytest
import yaml

from safecurl.core.engine import (
    DEFAULT_RULES_PATH,
    CatalogLoadError,
    Rule,
    RuleCatalog,
    scan,
)
from safecurl.core.models import Severity

FIXTURES = Path(__file__).parent / "fixtures"


# --- default catalog ---

def test_default_catalog_order():
    catalog = RuleCatalog.default()
    assert [r.id for r in catalog.rules] == [
        "DEL-001", "EXEC-001", "OBF-001", "NET-001",
        "PRIV-001", "SYS-001", "SHELL-001", "NET-002", "PERM-001",
        "ENV-001", "NET-003", "GIT-001",
    ]
    assert catalog.source == DEFAULT_RULES_PATH


def test_default_catalog_severities():
    catalog = RuleCatalog.default()
    by_severity = {}
    for rule in catalog.rules:
        by_severity.setdefault(rule.severity, []).append(rule.id)
    assert len(by_severity[Severity.CRITICAL]) == 4
    assert len(by_severity[Severity.WARNING]) == 5
    assert len(by_severity[Severity.INFO]) == 3


def test_match_line_returns_rules_in_catalog_order():
    catalog = RuleCatalog.default()
    matched = catalog.match_line("chmod 755 /usr/local/bin/tool")
    assert [r.id for r in matched] == ["SYS-001", "PERM-001"]


def test_scan_uses_default_catalog():
    result = scan("sudo true")
    assert [f.rule_id for f in result.findings] == ["PRIV-001"]


def test_scan_with_in_memory_catalog():
    catalog = RuleCatalog([
        Rule(id="X-1", severity=Severity.INFO, message="mentions foo", condition={"contains": "foo"}),
    ])
    result = catalog.scan("bar\nfoo\nfoofoo")
    assert [(f.line_number, f.message) for f in result.findings] == [
        (2, "mentions foo"),
        (3, "mentions foo"),
    ]
    assert result.info_count == 2


def test_custom_catalog_from_file():
    catalog = RuleCatalog.from_file(FIXTURES / "rules_custom.yaml")
    result = catalog.scan("apt-get install nc\nnc -l 4444")
    assert [(f.rule_id, f.severity, f.line_number) for f in result.findings] == [
        ("APT-001", Severity.INFO, 1),
        ("NC-001", Severity.CRITICAL, 2),
    ]


def test_severity_names_are_case_insensitive(tmp_path):
    rules = tmp_path / "rules.yaml"
    rules.write_text(yaml.dump({"rules": [
        {"id": "A", "severity": "Warning", "message": "a", "condition": {"contains": "a"}},
    ]}))
    catalog = RuleCatalog.from_file(rules)
    assert catalog.rules[0].severity is Severity.WARNING


def test_empty_rules_list_is_allowed(tmp_path):
    rules = tmp_path / "rules.yaml"
    rules.write_text("rules: []\n")
    catalog = RuleCatalog.from_file(rules)
    assert catalog.scan("sudo rm -rf /").findings == []


# --- validation ---

def test_rejects_missing_file(tmp_path):
    with pytest.raises(CatalogLoadError, match="rules file not found"):
        RuleCatalog.from_file(tmp_path / "nope.yaml")


def test_rejects_invalid_yaml(tmp_path):
    rules = tmp_path / "bad.yaml"
    rules.write_text("rules: [unclosed\n")
    with pytest.raises(CatalogLoadError, match="invalid YAML"):
        RuleCatalog.from_file(rules)


def test_rejects_non_dict_document(tmp_path):
    rules = tmp_path / "bad.yaml"
    rules.write_text("just a string")
    with pytest.raises(CatalogLoadError, match="expected a YAML mapping"):
        RuleCatalog.from_file(rules)


def test_rejects_non_list_rules(tmp_path):
    rules = tmp_path / "bad.yaml"
    rules.write_text(yaml.dump({"rules": {"id": "X"}}))
    with pytest.raises(CatalogLoadError, match="'rules' must be a list"):
        RuleCatalog.from_file(rules)


def test_rejects_rule_missing_keys(tmp_path):
    rules = tmp_path / "bad.yaml"
    rules.write_text(yaml.dump({"rules": [{"id": "X"}]}))
    with pytest.raises(CatalogLoadError, match="missing keys"):
        RuleCatalog.from_file(rules)


def test_rejects_unknown_severity(tmp_path):
    rules = tmp_path / "bad.yaml"
    rules.write_text(yaml.dump({"rules": [
        {"id": "X", "severity": "fatal", "message": "x", "condition": {"contains": "x"}},
    ]}))
    with pytest.raises(CatalogLoadError, match="unknown severity 'fatal'"):
        RuleCatalog.from_file(rules)


def test_rejects_bad_condition(tmp_path):
    rules = tmp_path / "bad.yaml"
    rules.write_text(yaml.dump({"rules": [
        {"id": "X", "severity": "info", "message": "x", "condition": {"matches": "x"}},
    ]}))
    with pytest.raises(CatalogLoadError, match="expected one of"):
        RuleCatalog.from_file(rules)


def test_rejects_duplicate_ids(tmp_path):
    rule = {"id": "X", "severity": "info", "message": "x", "condition": {"contains": "x"}}
    rules = tmp_path / "bad.yaml"
    rules.write_text(yaml.dump({"rules": [rule, rule]}))
    with pytest.raises(CatalogLoadError, match="duplicate rule id"):
        RuleCatalog.from_file(rules)


def test_reports_every_error(tmp_path):
    rules = tmp_path / "bad.yaml"
    rules.write_text(yaml.dump({"rules": [
        {"id": "A"},
        {"id": "B", "severity": "nope", "message": "b", "condition": {"contains": 1}},
    ]}))
    with pytest.raises(CatalogLoadError) as excinfo:
        RuleCatalog.from_file(rules)
    message = str(excinfo.value)
    assert "id=A" in message
    assert "unknown severity" in message
    assert "requires a string value" in message


def test_scan_splits_on_line_feed_only():
    """A carriage return is part of the line; only '\\n' starts a new one."""
    catalog = RuleCatalog([
        Rule(id="CR-1", severity=Severity.INFO, message="carriage return", condition={"contains": "\r"}),
    ])
    result = catalog.scan("a\r\nb\rc\n")
    assert [f.line_number for f in result.findings] == [1, 2]
