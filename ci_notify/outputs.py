"""GitHub Actions output and workflow command helpers.

Step outputs are appended to the file named by ``$GITHUB_OUTPUT`` as
``key=value`` lines. Failures are additionally surfaced as ``::error::``
workflow commands so they show up as annotations on the run.
"""

from __future__ import annotations

import sys
import typing as typ

from ci_notify.logging import get_logger, log_debug, log_info, log_warning

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from pathlib import Path

logger = get_logger(__name__)


def _escape_command_data(value: str) -> str:
    """Escape a value for use in a workflow command.

    >>> _escape_command_data("50% done\\nnext")
    '50%25 done%0Anext'

    """
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


class ActionOutputs:
    """Append-only writer for step outputs.

    Parameters
    ----------
    path
        Path of the ``$GITHUB_OUTPUT`` file. When ``None`` outputs are only
        logged, which is the case for local runs.

    """

    def __init__(self, path: Path | None) -> None:
        """Initialise the writer with an optional output file path."""
        self._path = path
        self.written: dict[str, str] = {}

    def set_outputs(self, values: cabc.Mapping[str, str]) -> None:
        """Append ``values`` as ``key=value`` lines.

        Write errors are logged and swallowed: losing an output must not turn
        a delivered notification into a failed run.
        """
        for key, value in values.items():
            log_info(logger, "Setting output: %s = %s", key, value)
        self.written.update(values)

        if self._path is None:
            log_info(logger, "No $GITHUB_OUTPUT set, skipping output writing")
            return

        lines = "".join(f"{key}={value}\n" for key, value in values.items())
        try:
            with self._path.open("a", encoding="utf-8") as handle:
                handle.write(lines)
        except OSError as exc:
            log_warning(logger, "Could not write outputs to %s: %s", self._path, exc)
            return
        log_debug(logger, "Wrote %d outputs to %s", len(values), self._path)


def emit_error(message: str, *, stream: typ.TextIO | None = None) -> None:
    """Print an ``::error::`` workflow command for ``message``."""
    target = stream if stream is not None else sys.stdout
    print(f"::error::{_escape_command_data(message)}", file=target)


__all__ = ["ActionOutputs", "emit_error"]
