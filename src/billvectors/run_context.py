"""Run context for a vector build.

Wraps a pipeline run so that:
  - all print() output is also streamed to ``run_log.txt`` as it happens
  - ``run_info.json`` records git hash, timings, parameters, and whether the
    run failed

Usage:
    with RunContext(output_dir, params=vars(args)) as ctx:
        ...
        ctx.record("rows", total)
"""

from __future__ import annotations

import json
import subprocess
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from types import TracebackType
from typing import TextIO

from billvectors.config import _VERSION

RUN_LOG_FILE = "run_log.txt"
RUN_INFO_FILE = "run_info.json"


class _TeeStream:
    """Console stream that also writes every chunk to an open log file."""

    def __init__(self, console: TextIO, log: TextIO) -> None:
        self._console = console
        self._log = log

    def write(self, data: str) -> int:
        self._console.write(data)
        self._log.write(data)
        return len(data)

    def flush(self) -> None:
        self._console.flush()
        self._log.flush()


def _git_commit(cwd: Path | None = None) -> str | None:
    """Short commit hash of the checkout at *cwd*, or None outside a repo."""
    try:
        proc = subprocess.run(
            ["git", "rev-parse", "--short", "HEAD"],
            cwd=cwd,
            capture_output=True,
            text=True,
            timeout=5,
        )
    except (OSError, subprocess.TimeoutExpired):
        return None
    if proc.returncode != 0:
        return None
    return proc.stdout.strip() or None


def _format_elapsed(seconds: float) -> str:
    """H:MM:SS, rounded to the second."""
    return str(timedelta(seconds=round(seconds)))


class RunContext:
    """Context manager that logs console output and writes run metadata.

    Attributes:
        run_dir: Directory receiving run_log.txt and run_info.json.
        params: Parameters to record in run_info.json.
        results: Extra values recorded by the pipeline via :meth:`record`.
    """

    def __init__(self, run_dir: Path, params: dict | None = None) -> None:
        self.run_dir = run_dir
        self.params = params or {}
        self.results: dict[str, object] = {}
        self._log: TextIO | None = None
        self._console: TextIO | None = None
        self._started: datetime | None = None

    def __enter__(self) -> RunContext:
        self.setup()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.finalize(failed=exc_type is not None, error=exc_val)

    def record(self, key: str, value: object) -> None:
        self.results[key] = value

    def setup(self) -> None:
        """Create the run directory and start streaming stdout to the log."""
        self.run_dir.mkdir(parents=True, exist_ok=True)
        self._log = open(self.run_dir / RUN_LOG_FILE, "w", encoding="utf-8")
        self._console = sys.stdout
        sys.stdout = _TeeStream(self._console, self._log)  # type: ignore[assignment]
        self._started = datetime.now(timezone.utc)

    def finalize(self, *, failed: bool = False, error: BaseException | None = None) -> None:
        """Restore stdout, close the log, and write run_info.json."""
        if self._console is not None:
            sys.stdout = self._console
            self._console = None
        if self._log is not None:
            self._log.close()
            self._log = None

        finished = datetime.now(timezone.utc)
        elapsed = (finished - self._started).total_seconds() if self._started else 0.0
        run_info = {
            "version": _VERSION,
            "started": self._started.isoformat() if self._started else None,
            "finished": finished.isoformat(),
            "elapsed_seconds": round(elapsed, 1),
            "elapsed": _format_elapsed(elapsed),
            "git_commit": _git_commit(),
            "python_version": sys.version.split()[0],
            "failed": failed,
            "error": f"{type(error).__name__}: {error}" if error is not None else None,
            "params": self.params,
            "results": self.results,
        }
        with open(self.run_dir / RUN_INFO_FILE, "w") as f:
            json.dump(run_info, f, indent=2, default=str)

        status = "FAILED" if failed else "completed"
        print(f"\nVector build {status} in {run_info['elapsed']}")
