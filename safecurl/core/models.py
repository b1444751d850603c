from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class Severity(str, Enum):
    """Closed set of finding severities."""

    CRITICAL = "CRITICAL"
    WARNING = "WARNING"
    INFO = "INFO"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]

    @classmethod
    def parse(cls, name: str) -> Severity:
        """Look up a severity by name, case-insensitively."""
        try:
            return cls(str(name).upper())
        except ValueError:
            valid = ", ".join(s.value.lower() for s in cls)
            raise ValueError(f"unknown severity '{name}' (valid: {valid})") from None


_SEVERITY_RANK = {Severity.INFO: 0, Severity.WARNING: 1, Severity.CRITICAL: 2}


class RiskLevel(str, Enum):
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"

    @property
    def advisory(self) -> str:
        return _RISK_ADVISORY[self]


_RISK_ADVISORY = {
    RiskLevel.HIGH: "This script contains potentially dangerous operations!",
    RiskLevel.MEDIUM: "This script requires elevated privileges or modifies system files.",
    RiskLevel.LOW: "No major issues detected, but always review scripts before running.",
}


# More than this many warnings (with no criticals) is MEDIUM risk.
MEDIUM_RISK_WARNING_THRESHOLD = 3


@dataclass(frozen=True)
class Finding:
    severity: Severity
    message: str
    line_number: int
    rule_id: str = ""


@dataclass
class AnalysisResult:
    """Findings of one scan plus per-severity tallies."""

    critical_count: int = 0
    warning_count: int = 0
    info_count: int = 0
    findings: list[Finding] = field(default_factory=list)

    def add_finding(self, finding: Finding) -> None:
        self.findings.append(finding)
        if finding.severity is Severity.CRITICAL:
            self.critical_count += 1
        elif finding.severity is Severity.WARNING:
            self.warning_count += 1
        else:
            self.info_count += 1

    @property
    def risk_level(self) -> RiskLevel:
        if self.critical_count > 0:
            return RiskLevel.HIGH
        if self.warning_count > MEDIUM_RISK_WARNING_THRESHOLD:
            return RiskLevel.MEDIUM
        return RiskLevel.LOW

    def to_dict(self) -> dict:
        return {
            "summary": {
                "critical": self.critical_count,
                "warning": self.warning_count,
                "info": self.info_count,
                "total": len(self.findings),
                "risk_level": self.risk_level.value,
            },
            "findings": [
                {
                    "rule_id": f.rule_id,
                    "severity": f.severity.value,
                    "message": f.message,
                    "line_number": f.line_number,
                }
                for f in self.findings
            ],
        }
