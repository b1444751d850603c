"""Script fetcher: downloads the script body with the system curl binary."""
from __future__ import annotations

import logging
import subprocess

logger = logging.getLogger(__name__)

_STDERR_LIMIT = 200


def fetch_script(url: str, timeout: float = 60) -> tuple[bytes | None, str | None]:
    """Return (body, None) on success, or (None, reason) on failure."""
    logger.debug("fetching %s (timeout %ss)", url, timeout)
    try:
        result = _run_curl(url, timeout)
    except FileNotFoundError:
        return None, "curl binary not found"
    except subprocess.TimeoutExpired:
        return None, f"curl timed out after {timeout}s"
    except OSError as e:
        return None, f"OS error: {e}"

    if result.returncode != 0:
        stderr = result.stderr.decode("utf-8", errors="replace").strip()[:_STDERR_LIMIT]
        return None, f"curl exited with status {result.returncode} ({stderr or 'no output'})"

    logger.debug("fetched %d bytes from %s", len(result.stdout), url)
    return result.stdout, None


def _run_curl(url: str, timeout: float) -> subprocess.CompletedProcess:
    # -f: fail on HTTP errors, -sS: quiet but keep errors, -L: follow redirects
    return subprocess.run(
        ["curl", "-fsSL", url],
        capture_output=True, timeout=timeout,
    )
