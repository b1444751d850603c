"""Terminal and JSON rendering of analysis results."""
from __future__ import annotations

import json

from rich.console import Console
from rich.text import Text

from . import __version__
from .config import AIProvider
from .core.models import AnalysisResult, Finding, RiskLevel, Severity

SCHEMA_VERSION = "0.1"

_TITLE_STYLE = "bold blue"
_SEVERITY_STYLE = {Severity.CRITICAL: "red", Severity.WARNING: "yellow", Severity.INFO: "blue"}
_RISK_STYLE = {RiskLevel.HIGH: "red", RiskLevel.MEDIUM: "yellow", RiskLevel.LOW: "green"}

# ESC is listed as "^[" so escape sequences in the script cannot restyle or hide lines.
_ESC = "\x1b"
_ESC_PLACEHOLDER = "^["


def make_console(stderr: bool = False) -> Console:
    # Script lines are printed verbatim and never wrapped.
    return Console(stderr=stderr, highlight=False, soft_wrap=True, emoji=False)


def print_header(console: Console, provider: AIProvider) -> None:
    console.print(Text(f"=== Safe Curl v{__version__} ===", style=_TITLE_STYLE))
    if provider is not AIProvider.NONE:
        console.print(Text(f"{provider.value} API key detected; using pattern-based analysis...", style="blue"))
    else:
        console.print(Text("Analyzing script for potentially malicious patterns...", style="blue"))
    console.print()


def print_fetching(console: Console, url: str) -> None:
    console.print(Text(f"Fetching script from: {url}", style="blue"))
    console.print()


def print_finding(console: Console, finding: Finding) -> None:
    console.print(Text.assemble(
        (f"[{finding.severity.value}]", _SEVERITY_STYLE[finding.severity]),
        " ",
        finding.message,
    ))
    console.print(f"  Line: {finding.line_number}", markup=False)
    console.print()


def print_summary(console: Console, result: AnalysisResult) -> None:
    console.print(Text("=== Analysis Summary ===", style=_TITLE_STYLE))
    console.print(Text.assemble("Critical issues: ", (str(result.critical_count), "red")))
    console.print(Text.assemble("Warnings: ", (str(result.warning_count), "yellow")))
    console.print(Text.assemble("Info: ", (str(result.info_count), "blue")))
    console.print()


def print_script(console: Console, script: str) -> None:
    console.print()
    console.print(Text("=== Script Content ===", style=_TITLE_STYLE))
    console.print()
    for line_number, line in enumerate(script.split("\n"), start=1):
        console.print(Text(f"{line_number:>6}\t{line.replace(_ESC, _ESC_PLACEHOLDER)}"))
    console.print()
    console.print(Text("=== End of Script ===", style=_TITLE_STYLE))
    console.print()


def print_risk(console: Console, result: AnalysisResult) -> None:
    risk = result.risk_level
    console.print(Text(f"RISK LEVEL: {risk.value}", style=f"bold {_RISK_STYLE[risk]}"))
    console.print(Text(risk.advisory, style=_RISK_STYLE[risk]))
    console.print()


def print_report(console: Console, script: str, result: AnalysisResult) -> None:
    """Findings, summary and the numbered script, in that order."""
    for finding in result.findings:
        print_finding(console, finding)
    print_summary(console, result)
    print_script(console, script)


def build_json_report(
    result: AnalysisResult,
    *,
    url: str,
    rules_path: str,
    provider: AIProvider,
    warnings: list[str] | None = None,
) -> dict:
    meta: dict = {
        "schema_version": SCHEMA_VERSION,
        "tool_version": __version__,
        "url": url,
        "rules_path": rules_path,
        "ai_provider": provider.value,
    }
    if warnings:
        meta["warnings"] = warnings
    return {"meta": meta, **result.to_dict()}


def render_json(report: dict) -> str:
    return json.dumps(report, indent=2, default=str)
