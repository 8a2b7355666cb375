# worktree.py -- Resolving the work tree of a repository being opened
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

"""Resolve ``core.worktree`` for a repository being opened."""

__all__ = [
    "resolve_worktree_dir",
]

import logging
import os
from typing import Optional

from .config import CascadedConfig, SectionFilter, SectionMetadata
from .errors import ConfigPathInterpolationError, ConfigStringError, InterpolationError
from .log_utils import Diagnostics
from .path import InterpolationContext, interpolate, is_relative_to, normalize

logger = logging.getLogger(__name__)

WORKTREE_KEY = "core.worktree"


def _belongs_to(meta: SectionMetadata, git_dir: str, current_dir: str) -> bool:
    # Configuration of another repository, e.g. that of a submodule's work
    # tree, must not move our work tree.
    if meta.path is None:
        return meta.source.is_process_supplied
    config_path = normalize(meta.path, current_dir)
    return config_path is not None and is_relative_to(config_path, git_dir)


def resolve_worktree_dir(
    config: CascadedConfig,
    git_dir: str,
    current_dir: str,
    context: InterpolationContext,
    filter_config_section: SectionFilter,
    lenient: bool,
    diagnostics: Optional[Diagnostics] = None,
) -> Optional[str]:
    """Return the work tree configured with ``core.worktree``, if any.

    Only sections accepted by ``filter_config_section`` that belong to the
    repository at ``git_dir`` are considered. Values from the environment,
    the command line or the API are used as given; values from files are
    relative to ``git_dir``.

    Args:
      config: Full configuration of the repository
      git_dir: Absolute git directory
      current_dir: Directory relative paths are resolved against
      context: Used to expand ``~`` and ``%(prefix)/``
      filter_config_section: The caller's section filter
      lenient: Whether an unusable ``core.worktree`` is ignored
      diagnostics: Receives a warning if the work tree does not exist
    Returns: The normalized work tree, or None if not configured
    Raises:
      ConfigPathInterpolationError: if the value can not be interpolated
      ConfigStringError: if ``core.worktree`` is set but unusable and not
        lenient
    """

    def accept(meta: SectionMetadata) -> bool:
        return filter_config_section(meta) and _belongs_to(meta, git_dir, current_dir)

    found = config.path_filter(WORKTREE_KEY, accept)
    if found is None:
        if not lenient and config.raw_values_filter(WORKTREE_KEY, filter_config_section):
            # Set, but in configuration of another repository or without a value.
            raise ConfigStringError(WORKTREE_KEY)
        return None

    value, meta = found
    try:
        path = interpolate(value, context)
    except InterpolationError as e:
        raise ConfigPathInterpolationError(value, e)
    if not meta.source.is_process_supplied:
        path = os.path.join(git_dir, path)
    worktree = normalize(path, current_dir)
    if worktree is None:
        return None
    if not os.path.isdir(worktree):
        message = (
            f"The configured worktree path {worktree!r} is not a directory or "
            f"doesn't exist; {WORKTREE_KEY} may be misleading"
        )
        if diagnostics is not None:
            diagnostics.warn("worktree-missing", message, path=worktree)
        else:
            logger.warning("%s", message)
    logger.debug("Using work tree %s from %s", worktree, meta.source.value)
    return worktree
