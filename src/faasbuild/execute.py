"""Run external build tools and collect their output."""

import logging
import subprocess
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import TextIO, cast

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ExecResult:
    """Outcome of a finished process."""

    exit_code: int
    stdout: str
    stderr: str


@dataclass(slots=True)
class ExecTask:
    """A command to run to completion inside ``cwd``.

    With ``stream_stdio`` the process writes its stdout straight to the
    terminal and every stderr line is echoed as it arrives; stderr is captured
    either way so failures can be reported.
    """

    command: str
    args: list[str]
    cwd: Path | None = None
    stream_stdio: bool = True

    def run(self) -> ExecResult:
        argv = [self.command, *self.args]
        logger.debug("Running %s in %s", " ".join(argv), self.cwd or ".")

        if not self.stream_stdio:
            completed = subprocess.run(
                argv,
                cwd=self.cwd,
                capture_output=True,
                text=True,
                errors="replace",
                check=False,
            )
            return ExecResult(
                exit_code=completed.returncode,
                stdout=completed.stdout,
                stderr=completed.stderr,
            )

        stderr_lines: list[str] = []
        with subprocess.Popen(
            argv, cwd=self.cwd, stderr=subprocess.PIPE, text=True, errors="replace"
        ) as process:
            for line in cast(TextIO, process.stderr):
                sys.stderr.write(line)
                stderr_lines.append(line)
            exit_code = process.wait()

        return ExecResult(exit_code=exit_code, stdout="", stderr="".join(stderr_lines))
