# safe_directory.py -- safe.directory matching and section trust elevation
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

"""Matching of ``safe.directory`` entries.

git refuses to fully trust a repository owned by another user unless the
repository is listed in ``safe.directory``. Entries are evaluated in order:

* ``*`` marks every directory safe;
* an empty value resets everything listed before it;
* ``/some/path`` marks exactly that directory safe;
* ``/some/path/*`` marks that directory and everything below it safe.

Only system, global and command-line configuration may list safe
directories; a repository can not declare itself safe.
"""

__all__ = [
    "check_safe_directories",
    "elevate_section_trust",
    "is_safe_directory",
    "safe_directory_filter",
]

import logging
import os
from collections.abc import Iterable, Sequence
from pathlib import PurePath
from typing import Optional

from .config import CascadedConfig, ConfigSourceKind, SectionMetadata
from .errors import InterpolationError, SharedConfigError, UnsafeGitDir
from .log_utils import Diagnostics
from .path import InterpolationContext, interpolate, is_relative_to, realpath
from .sec import TrustLevel

logger = logging.getLogger(__name__)

SAFE_DIRECTORY_SOURCES = frozenset(
    [
        ConfigSourceKind.SYSTEM,
        ConfigSourceKind.GLOBAL,
        ConfigSourceKind.CLI,
        ConfigSourceKind.API,
    ]
)


def safe_directory_filter(meta: SectionMetadata) -> bool:
    """Section filter for ``safe.directory``: only sources outside the repository."""
    return meta.source in SAFE_DIRECTORY_SOURCES


def _canonicalize(path: str, current_dir: Optional[str]) -> str:
    if current_dir is None:
        current_dir = os.getcwd()
    try:
        return realpath(path, current_dir)
    except (OSError, ValueError) as e:
        logger.debug("Could not canonicalize %s, using it as given: %s", path, e)
        return path


def is_safe_directory(
    test_path: str,
    patterns: Iterable[bytes],
    context: InterpolationContext,
    current_dir: Optional[str] = None,
    diagnostics: Optional[Diagnostics] = None,
) -> bool:
    """Evaluate ``safe.directory`` entries against a path.

    Args:
      test_path: Directory (or file) to check; symlinks are resolved when
        possible
      patterns: ``safe.directory`` values in configuration order
      context: Used to expand ``~`` and ``%(prefix)/`` in patterns
      current_dir: Directory a relative ``test_path`` is resolved against
      diagnostics: Receives a warning for each non-absolute pattern
    Returns: Whether the path is safe after the last entry
    """
    test = PurePath(_canonicalize(test_path, current_dir))
    safe = False
    for pattern in patterns:
        if pattern == b"*":
            safe = True
            continue
        if pattern == b"":
            safe = False
            continue
        if safe:
            continue
        try:
            interpolated = interpolate(pattern, context)
        except InterpolationError as e:
            logger.debug("Using safe.directory %r literally: %s", pattern, e)
            interpolated = os.fsdecode(pattern)
        if not os.path.isabs(interpolated):
            message = f"safe.directory {interpolated!r} is not absolute and is ignored"
            if diagnostics is not None:
                diagnostics.warn("safe-directory-relative", message, pattern=interpolated)
            else:
                logger.warning("%s", message)
            continue
        candidate = PurePath(interpolated)
        if candidate.name == "*":
            safe = is_relative_to(str(test), str(candidate.parent))
        else:
            safe = test == candidate
    return safe


def check_safe_directories(
    test_path: str,
    patterns: Sequence[bytes],
    context: InterpolationContext,
    current_dir: Optional[str] = None,
    diagnostics: Optional[Diagnostics] = None,
) -> None:
    """Like is_safe_directory(), but raise if the path is not safe.

    Raises:
      UnsafeGitDir: with the canonicalized path, if it is not safe
    """
    if not is_safe_directory(test_path, patterns, context, current_dir, diagnostics):
        raise UnsafeGitDir(_canonicalize(test_path, current_dir))


def elevate_section_trust(
    config: CascadedConfig,
    test_dir: str,
    git_dir_trust: TrustLevel,
    safe_dirs: Sequence[bytes],
    context: InterpolationContext,
    current_dir: Optional[str] = None,
    diagnostics: Optional[Diagnostics] = None,
    cache: Optional[dict[str, bool]] = None,
) -> int:
    """Upgrade the trust of configuration sections read from safe files.

    A section becomes fully trusted if the file it was read from lies inside
    ``test_dir`` while the repository itself is fully trusted, or if the file
    passes the ``safe.directory`` check on its own. Each distinct file is
    checked once; pass ``cache`` to share the results between calls.

    Args:
      config: The configuration, which must not be sealed yet
      test_dir: The directory that was checked for the repository as a whole
      git_dir_trust: The final trust of the repository
      safe_dirs: ``safe.directory`` values
      context: Used to expand placeholders in ``safe_dirs``
      current_dir: Directory relative paths are resolved against
      diagnostics: Receives warnings from the safe.directory check
      cache: Results of earlier checks, keyed by file path
    Returns: Number of sections whose trust was upgraded
    Raises:
      SharedConfigError: if ``config`` has been sealed
    """
    if config.sealed:
        raise SharedConfigError("trust elevation requires an unshared configuration")
    is_valid_by_path = cache if cache is not None else {}
    upgraded = 0
    for section in config:
        meta = section.meta
        if safe_directory_filter(meta) or meta.trust == TrustLevel.FULL:
            continue
        if meta.path is None:
            continue
        valid = is_valid_by_path.get(meta.path)
        if valid is None:
            valid = (
                is_relative_to(meta.path, test_dir) and git_dir_trust == TrustLevel.FULL
            ) or is_safe_directory(meta.path, safe_dirs, context, current_dir, diagnostics)
            is_valid_by_path[meta.path] = valid
        if valid:
            section.set_trust(TrustLevel.FULL)
            upgraded += 1
    if upgraded:
        logger.debug("Elevated the trust of %d configuration sections", upgraded)
    return upgraded
