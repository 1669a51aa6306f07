"""Macro expansion — turn a crate into one fully expanded source text."""

from __future__ import annotations

import logging
import shutil
import subprocess
from pathlib import Path
from typing import Protocol

from idlgen.errors import ExpansionFailure

logger = logging.getLogger(__name__)


class Expander(Protocol):
    """Anything that can produce the expanded source of a crate."""

    def expand(self, manifest_path: Path) -> str:
        """Return the expanded library source, or raise ``ExpansionFailure``."""
        ...


class CargoExpander:
    """Runs ``cargo expand`` against the crate's library target.

    Standard output is captured in full before returning; there is no
    timeout or retry. On a non-zero exit the subprocess's stderr is carried
    on the raised ``ExpansionFailure``.
    """

    def __init__(self, cargo: str = "cargo"):
        self.cargo = cargo

    def command(self, manifest_path: Path) -> list[str]:
        return [self.cargo, "expand", "--manifest-path", str(manifest_path), "--lib"]

    def expand(self, manifest_path: Path) -> str:
        cmd = self.command(manifest_path)
        if shutil.which(self.cargo) is None:
            raise ExpansionFailure(f"'{self.cargo}' was not found on PATH; cannot expand macros")

        logger.debug("Running %s", " ".join(cmd))
        proc = subprocess.run(cmd, capture_output=True)

        stderr = proc.stderr.decode("utf-8", errors="replace")
        if proc.returncode != 0:
            raise ExpansionFailure(
                f"Failed to expand macros ({' '.join(cmd[:2])} exited with status {proc.returncode})",
                stderr=stderr,
            )

        stdout = proc.stdout.decode("utf-8", errors="replace")
        logger.debug("Expanded source is %d bytes", len(stdout))
        return stdout


class FileExpander:
    """Reads source that was expanded ahead of time (e.g. saved ``cargo expand`` output)."""

    def __init__(self, expanded_path: str | Path):
        self.expanded_path = Path(expanded_path)

    def expand(self, manifest_path: Path) -> str:
        try:
            return self.expanded_path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            raise ExpansionFailure(
                f"Cannot read expanded source {self.expanded_path}: {e}"
            ) from e
