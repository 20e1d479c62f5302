"""Execution utilities for external shell commands.

The proxy is validated, started and reloaded through operator-supplied
shell commands. This module runs them and folds every outcome, including
timeouts and missing executables, into a CommandResult so callers branch
on a value instead of catching exceptions.
"""

import subprocess
from dataclasses import dataclass

# Shell used to interpret command strings
DEFAULT_SHELL: str = "/bin/sh"

# Maximum output size in bytes
MAX_OUTPUT_BYTES: int = 102400  # 100KB


@dataclass(frozen=True, slots=True)
class CommandResult:
    """Result from command execution.

    Attributes:
        success: Whether the command was executed (regardless of exit code).
        exit_code: Process exit code, or None if execution failed.
        stdout: Standard output from the command.
        stderr: Standard error from the command.
        error: Error message if execution failed (timeout, not found, etc.).
        timed_out: Whether the command timed out.
        command_not_found: Whether the shell or command was not found.
    """

    success: bool
    exit_code: int | None = None
    stdout: str = ""
    stderr: str = ""
    error: str | None = None
    timed_out: bool = False
    command_not_found: bool = False

    @property
    def ok(self) -> bool:
        """Return True if the command ran and exited with status 0."""
        return self.success and self.exit_code == 0

    @property
    def message(self) -> str:
        """Return the most useful text describing the outcome."""
        if self.error:
            return self.error
        return (self.stderr.strip() or self.stdout.strip())


def truncate_output(output: str, max_bytes: int = MAX_OUTPUT_BYTES) -> str:
    """Truncate output to max bytes, preserving valid UTF-8.

    Args:
        output: The string to truncate.
        max_bytes: Maximum size in bytes.

    Returns:
        Truncated string with indicator if truncated.
    """
    if not output:
        return output

    encoded = output.encode("utf-8")
    if len(encoded) <= max_bytes:
        return output

    # Use 'ignore' to skip incomplete multi-byte sequences at the end
    truncated = encoded[:max_bytes].decode("utf-8", errors="ignore")

    return truncated + "\n... [output truncated]"


def run_command(
    command: str,
    *,
    timeout: float | None = None,
    shell: str = DEFAULT_SHELL,
) -> CommandResult:
    """Execute a shell command string.

    The call blocks until the command exits. No timeout is applied unless
    one is given.

    Args:
        command: Command line, interpreted by ``shell -c``.
        timeout: Optional timeout in seconds.
        shell: Shell used to interpret the command.

    Returns:
        CommandResult with execution outcome.
    """
    if not command:
        return CommandResult(success=False, error="No command specified")

    try:
        result = subprocess.run(  # noqa: S603
            [shell, "-c", command],
            capture_output=True,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired:
        return CommandResult(
            success=False,
            error=f"Command timed out after {timeout}s",
            timed_out=True,
        )
    except FileNotFoundError as e:
        return CommandResult(
            success=False,
            error=str(e),
            command_not_found=True,
        )
    except OSError as e:
        return CommandResult(success=False, error=str(e))

    return CommandResult(
        success=True,
        exit_code=result.returncode,
        stdout=truncate_output(result.stdout.decode("utf-8", errors="replace")),
        stderr=truncate_output(result.stderr.decode("utf-8", errors="replace")),
    )
