"""Entry point: safe-curl [--json] [--rules PATH] [--timeout SECONDS] <URL>"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from rich.logging import RichHandler
from rich.text import Text

from . import __version__
from .config import RULES_ENV, TIMEOUT_ENV, AIProvider, ConfigError, load_settings
from .core.engine import CatalogLoadError, RuleCatalog
from .fetchers.curl import fetch_script
from .report import (
    build_json_report,
    make_console,
    print_fetching,
    print_header,
    print_report,
    print_risk,
    render_json,
)
from .runtimes.bash import ScriptExecutionError, execute_script

_EPILOG = f"""\
examples:
  safe-curl https://example.com/install.sh
  safe-curl --json https://example.com/install.sh > findings.json

Fetches a shell script and checks it line by line for potentially malicious
patterns before offering to run it:
  - recursive file deletion (rm -rf)
  - code obfuscation (base64, eval)
  - downloading and executing additional scripts
  - privilege escalation (sudo)
  - system file and shell configuration changes

environment:
  {RULES_ENV}      path to a custom rules YAML (overridden by --rules)
  {TIMEOUT_ENV}    fetch timeout in seconds (overridden by --timeout)
  ANTHROPIC_API_KEY, OPENAI_API_KEY
                       detected and reported; analysis stays pattern-based
"""

_YES_ANSWERS = {"yes", "y"}


def main() -> int:
    parser = argparse.ArgumentParser(
        prog="safe-curl",
        description="Analyze shell scripts before executing them",
        epilog=_EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("url", nargs="?", help="URL of the script to analyze")
    parser.add_argument("--json", action="store_true", dest="json_output", help="Output findings as JSON and exit")
    parser.add_argument("--rules", type=Path, help="Path to a custom rules YAML")
    parser.add_argument("--timeout", type=float, help="Fetch timeout in seconds (default: 60)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug output to stderr")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    args = parser.parse_args()

    _configure_logging(args.verbose)
    err = make_console(stderr=True)

    if not args.url:
        err.print(Text("Error: No URL provided", style="red"))
        err.print("Usage: safe-curl <URL>", markup=False)
        err.print("       safe-curl --help", markup=False)
        return 1

    try:
        settings = load_settings(rules=args.rules, timeout=args.timeout)
        catalog = RuleCatalog.from_file(settings.rules_path)
    except (ConfigError, CatalogLoadError) as e:
        err.print(f"error: {e}", markup=False)
        return 1

    warnings: list[str] = []
    if settings.ai_provider is not AIProvider.NONE:
        warnings.append(
            f"{settings.ai_provider.value} API key found but AI analysis is not available; "
            "falling back to pattern-based detection"
        )

    out = make_console()
    if not args.json_output:
        print_header(out, settings.ai_provider)
        print_fetching(out, args.url)

    body, error = fetch_script(args.url, timeout=settings.timeout)
    if body is None:
        err.print(Text(f"Error: Failed to fetch script from {args.url}: {error}", style="red"))
        return 1
    if not body:
        err.print(Text("Error: Empty script received", style="red"))
        return 1

    script = body.decode("utf-8", errors="replace")
    result = catalog.scan(script)

    # Print warnings to stderr (all modes)
    for w in warnings:
        err.print(f"warning: {w}", markup=False)

    if args.json_output:
        report = build_json_report(
            result,
            url=args.url,
            rules_path=str(settings.rules_path),
            provider=settings.ai_provider,
            warnings=warnings,
        )
        print(render_json(report))
        return 0

    print_report(out, script, result)
    print_risk(out, result)

    if not _is_interactive():
        return 0

    if not _confirm_execution(out):
        out.print(Text("Execution cancelled.", style="yellow"))
        return 1

    out.print(Text("Executing script...", style="green"))
    out.print()
    try:
        # Run the fetched bytes, not the decoded text.
        return execute_script(body)
    except ScriptExecutionError as e:
        err.print(f"error: {e}", markup=False)
        return 1


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=make_console(stderr=True), show_time=False, show_path=False)],
    )


def _is_interactive() -> bool:
    return sys.stdout.isatty()


def _confirm_execution(console) -> bool:
    try:
        answer = console.input("Do you want to execute this script? (yes/no): ", markup=False)
    except EOFError:
        return False
    return answer.strip().lower() in _YES_ANSWERS


if __name__ == "__main__":
    sys.exit(main())
