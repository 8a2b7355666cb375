# log_utils.py -- Logging and diagnostics for gitward
# Copyright (C) 2026 The gitward authors
#
# SPDX-License-Identifier: Apache-2.0 OR GPL-2.0-or-later
# gitward is dual-licensed under the Apache License, Version 2.0 and the GNU
# General Public License as published by the Free Software Foundation; version 2.0
# or (at your option) any later version. You can redistribute it and/or
# modify it under the terms of either of these two licenses.
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
# You should have received a copy of the licenses; if not, see
# <http://www.gnu.org/licenses/> for a copy of the GNU General Public License
# and <http://www.apache.org/licenses/LICENSE-2.0> for a copy of the Apache
# License, Version 2.0.
#

"""Logging utilities for gitward.

gitward is a library, so by default nothing is printed: a null handler is
installed on the ``gitward`` logger. Applications that want output call
default_logging_config(), which honors ``GIT_TRACE`` the way git does.

Besides logging, opening a repository has a number of best-effort steps that
must never fail the open but are worth reporting (a missing work tree, a
safe.directory entry that is not absolute, ...). Those are collected in a
Diagnostics object that travels with the open and ends up on the repository,
so callers and tests can tell "opened with warnings" from "opened cleanly".
"""

__all__ = [
    "Diagnostic",
    "Diagnostics",
    "default_logging_config",
    "getLogger",
    "remove_null_handler",
]

import logging
import os
import sys
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any, Optional, Union

getLogger = logging.getLogger


class _NullHandler(logging.Handler):
    """No-op logging handler to avoid unexpected logging warnings."""

    def emit(self, record: logging.LogRecord) -> None:
        pass


_NULL_HANDLER = _NullHandler()
_GITWARD_LOGGER = getLogger("gitward")
_GITWARD_LOGGER.addHandler(_NULL_HANDLER)

_diagnostics_logger = getLogger("gitward.diagnostics")


def _get_trace_target() -> Optional[Union[str, int]]:
    """Get the trace target from GIT_TRACE environment variable.

    Returns:
        - None if tracing is disabled
        - 2 for stderr output (values "1", "2", "true")
        - int (3-9) for file descriptor
        - str for an absolute file or directory path
    """
    trace_value = os.environ.get("GIT_TRACE", "")

    if not trace_value or trace_value.lower() in ("0", "false"):
        return None

    if trace_value.lower() in ("1", "2", "true"):
        return 2

    try:
        fd = int(trace_value)
        if 3 <= fd <= 9:
            return fd
    except ValueError:
        pass

    if os.path.isabs(trace_value):
        return trace_value

    return None


def _configure_logging_from_trace() -> bool:
    """Configure logging based on GIT_TRACE environment variable.

    Returns True if trace configuration was successful, False otherwise.
    """
    trace_target = _get_trace_target()
    if trace_target is None:
        return False

    trace_format = "%(asctime)s %(name)s %(levelname)s: %(message)s"

    if trace_target == 2:
        logging.basicConfig(level=logging.DEBUG, stream=sys.stderr, format=trace_format)
        return True

    if isinstance(trace_target, int):
        try:
            stream = os.fdopen(trace_target, "w", buffering=1)
        except OSError as e:
            sys.stderr.write(
                f"Warning: Failed to open GIT_TRACE fd {trace_target}: {e}\n"
            )
            return False
        logging.basicConfig(level=logging.DEBUG, stream=stream, format=trace_format)
        return True

    if os.path.isdir(trace_target):
        # One file per process, like git does for directories.
        filename = os.path.join(trace_target, f"trace.{os.getpid()}")
    else:
        filename = trace_target
    try:
        logging.basicConfig(
            level=logging.DEBUG, filename=filename, filemode="a", format=trace_format
        )
    except OSError as e:
        sys.stderr.write(f"Warning: Failed to open GIT_TRACE file {trace_target}: {e}\n")
        return False
    return True


def default_logging_config() -> None:
    """Set up the default gitward loggers.

    Respects the GIT_TRACE environment variable for trace output and falls
    back to warnings on stderr otherwise.
    """
    remove_null_handler()

    if not _configure_logging_from_trace():
        logging.basicConfig(
            level=logging.WARNING,
            stream=sys.stderr,
            format="%(levelname)s: %(message)s",
        )


def remove_null_handler() -> None:
    """Remove the null handler from the gitward loggers."""
    _GITWARD_LOGGER.removeHandler(_NULL_HANDLER)


@dataclass(frozen=True)
class Diagnostic:
    """A non-fatal problem noticed while opening a repository.

    Attributes:
      code: Short machine-readable identifier, e.g. ``worktree-missing``
      message: Human-readable description
      details: Extra values relevant to the problem (paths, keys, ...)
    """

    code: str
    message: str
    details: dict[str, Any] = field(default_factory=dict, compare=False)


class Diagnostics:
    """Collects warnings emitted by best-effort steps of an open."""

    def __init__(self) -> None:
        self._items: list[Diagnostic] = []

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self._items!r})"

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)

    def warn(self, code: str, message: str, **details: Any) -> Diagnostic:
        """Record a warning and log it.

        Args:
          code: Short identifier of the kind of problem
          message: Human-readable description
          **details: Values relevant to the problem
        Returns: The recorded Diagnostic
        """
        diagnostic = Diagnostic(code, message, details)
        self._items.append(diagnostic)
        _diagnostics_logger.warning("%s", message)
        return diagnostic

    def codes(self) -> list[str]:
        """Return the codes of all recorded diagnostics, in order."""
        return [d.code for d in self._items]
