"""Change-gated writing of the generated configuration file."""

from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING, final

from synthproxy.utils import CommandResult, read_text_or_empty, run_command, write_text_atomic

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger

type CommandRunner = Callable[[str], CommandResult]


def strip_header(document: str) -> str:
    """Return a document without its first line.

    The first line carries the generation timestamp and never counts as a
    change. A document without a newline is all header.
    """
    _, _, body = document.partition("\n")
    return body


@final
class ChangeGatedWriter:
    """Writes the configuration file only when its content changed.

    A changed document is written in full and then validated with the
    check command. On a failed check the new file stays on disk, but the
    write is reported as unchanged so no reload is requested.
    """

    __slots__ = ("_logger", "_runner", "check_command", "path")

    def __init__(
        self,
        path: Path,
        check_command: str,
        *,
        logger: "FilteringBoundLogger",  # noqa: UP037
        runner: CommandRunner = run_command,
    ) -> None:
        """Initialize the writer.

        Args:
            path: Configuration file managed by this writer.
            check_command: Shell command validating the written file.
            logger: Logger for write and check events.
            runner: Executes shell commands.
        """
        self.path = path
        self.check_command = check_command
        self._logger = logger
        self._runner = runner

    def write(self, document: str) -> bool:
        """Write a document if it differs from the file on disk.

        Args:
            document: The freshly generated document.

        Returns:
            True if the file was rewritten and passed the check command.
        """
        try:
            old_document = read_text_or_empty(self.path)
        except OSError as e:
            self._logger.error("config_read_failed", path=str(self.path), error=str(e))
            return False

        if old_document is None:
            self._logger.info("config_file_missing", path=str(self.path))
            old_document = ""

        if strip_header(old_document) == strip_header(document):
            return False

        try:
            write_text_atomic(self.path, document)
        except OSError as e:
            self._logger.error("config_write_failed", path=str(self.path), error=str(e))
            return False

        check = self._runner(self.check_command)
        if not check.ok:
            self._logger.error(
                "config_check_failed",
                path=str(self.path),
                command=self.check_command,
                exit_code=check.exit_code,
                output=check.message,
            )
            self._logger.error("reload_skipped", reason="invalid configuration")
            return False

        self._logger.info("config_written", path=str(self.path))
        return True
