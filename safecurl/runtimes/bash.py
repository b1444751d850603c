from __future__ import annotations

import logging
import subprocess

logger = logging.getLogger(__name__)


class ScriptExecutionError(Exception):
    """Raised when the shell interpreter cannot be started."""


def execute_script(script: bytes, shell: str = "bash") -> int:
    """Run the script with `<shell> -c`, attached to this terminal.

    Returns the interpreter's exit status.
    """
    logger.debug("executing %d byte script with %s", len(script), shell)
    try:
        returncode = subprocess.call([shell, "-c", script])
    except FileNotFoundError as e:
        raise ScriptExecutionError(f"{shell} binary not found") from e
    except (OSError, ValueError) as e:
        raise ScriptExecutionError(f"failed to start {shell}: {e}") from e
    logger.debug("%s exited with status %d", shell, returncode)
    return returncode
