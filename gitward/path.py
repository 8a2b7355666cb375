# path.py -- Path interpolation and normalization
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

"""Path interpolation and normalization helpers."""

__all__ = [
    "InterpolationContext",
    "install_dir",
    "interpolate",
    "is_relative_to",
    "normalize",
    "precompose_path",
    "realpath",
]

import os
import sys
import unicodedata
from dataclasses import dataclass
from pathlib import PurePath
from typing import Optional, Union

from .errors import InterpolationError

PREFIX_PLACEHOLDER = b"%(prefix)/"


@dataclass(frozen=True)
class InterpolationContext:
    """Values available when expanding placeholders in path values.

    Attributes:
      install_dir: Directory that ``%(prefix)/`` expands to
      home: Directory that ``~/`` expands to
    """

    install_dir: Optional[str] = None
    home: Optional[str] = None


def _home_of_user(user: str) -> str:
    if sys.platform == "win32":
        raise InterpolationError(f"~{user} is not supported on this platform")
    import pwd

    try:
        return pwd.getpwnam(user).pw_dir
    except KeyError:
        raise InterpolationError(f"unknown user {user!r}")


def interpolate(value: bytes, context: InterpolationContext) -> str:
    """Expand ``%(prefix)/``, ``~/`` and ``~user/`` at the start of a path.

    Args:
      value: Raw path value from a configuration file
      context: Directories to expand placeholders with
    Returns: The interpolated path
    Raises:
      InterpolationError: if the value is empty or a placeholder can not be
        expanded
    """
    if not value:
        raise InterpolationError("path is empty")
    if value.startswith(PREFIX_PLACEHOLDER):
        if context.install_dir is None:
            raise InterpolationError("%(prefix)/ used but the install dir is unknown")
        rest = os.fsdecode(value[len(PREFIX_PLACEHOLDER) :])
        return os.path.join(context.install_dir, rest)
    if value == b"~" or value.startswith(b"~/"):
        if context.home is None:
            raise InterpolationError("~ used but the home directory is unknown")
        rest = os.fsdecode(value[2:])
        return os.path.join(context.home, rest) if rest else context.home
    if value.startswith(b"~"):
        user, sep, rest = value[1:].partition(b"/")
        home = _home_of_user(os.fsdecode(user))
        return os.path.join(home, os.fsdecode(rest)) if sep else home
    return os.fsdecode(value)


def normalize(path: Union[str, os.PathLike[str]], current_dir: str) -> Optional[str]:
    """Make ``path`` absolute against ``current_dir`` and resolve ``.``/``..``.

    This is purely lexical; the filesystem is not consulted.

    Returns: The normalized path, or None if ``..`` would leave the root
    """
    path = os.fspath(path)
    if not os.path.isabs(path):
        path = os.path.join(current_dir, path)
    drive, rest = os.path.splitdrive(path)
    root = rest[: len(rest) - len(rest.lstrip("/\\"))][:1]
    parts: list[str] = []
    for component in rest.replace("\\", "/").split("/"):
        if component in ("", "."):
            continue
        if component == "..":
            if not parts:
                return None
            parts.pop()
            continue
        parts.append(component)
    return drive + (root or os.sep) + os.sep.join(parts)


def realpath(path: str, current_dir: str) -> str:
    """Resolve symlinks in ``path``, which must exist.

    Raises:
      OSError: if the path can not be resolved
    """
    if not os.path.isabs(path):
        path = os.path.join(current_dir, path)
    return os.path.realpath(path, strict=True)


def precompose_path(path: str) -> str:
    """Return ``path`` with decomposed unicode sequences composed (NFC)."""
    if path.isascii():
        return path
    return unicodedata.normalize("NFC", path)


def is_relative_to(path: str, base: str) -> bool:
    """Check whether ``path`` equals ``base`` or is nested below it.

    The comparison is by path component, so ``/ab`` is not below ``/a``.
    """
    return PurePath(path).is_relative_to(PurePath(base))


def install_dir() -> Optional[str]:
    """Return the directory ``%(prefix)/`` refers to.

    This is the directory containing the running interpreter.
    """
    if not sys.executable:
        return None
    return os.path.dirname(os.path.realpath(sys.executable))
