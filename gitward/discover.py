# discover.py -- Classify paths as git directories
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

"""Classify a path as a git directory.

A git directory is recognized by its ``HEAD`` file and its ``objects`` and
``refs`` directories, which live in the common directory for linked work
trees. A ``.git`` *file* (as used by submodules and linked work trees) is
followed to the directory it names.
"""

__all__ = [
    "COMMONDIR",
    "DOT_GIT_DIR",
    "GITDIR",
    "DiscoveryError",
    "Kind",
    "RepositoryKind",
    "from_dot_git_dir",
    "is_git",
    "looks_like_git_dir",
    "read_gitfile",
    "read_plain_file",
]

import enum
import os
from dataclasses import dataclass
from typing import BinaryIO, Optional

from .path import normalize

DOT_GIT_DIR = ".git"
COMMONDIR = "commondir"
GITDIR = "gitdir"
OBJECTDIR = "objects"
REFSDIR = "refs"
HEAD = "HEAD"


class DiscoveryError(Exception):
    """A path is not a usable git directory."""


class Kind(enum.Enum):
    """What kind of git directory a path is."""

    BARE = "bare"
    WORK_TREE = "work-tree"
    LINKED_WORK_TREE = "linked-work-tree"
    SUBMODULE = "submodule"


@dataclass(frozen=True)
class RepositoryKind:
    """Result of classifying a path.

    Attributes:
      kind: The kind of git directory
      git_dir: The git directory itself, after following ``.git`` files
      work_dir: The work tree implied by the layout, if any
    """

    kind: Kind
    git_dir: str
    work_dir: Optional[str] = None


def read_gitfile(f: BinaryIO) -> str:
    """Read a ``.git`` file.

    The first line of the file should start with "gitdir: "

    Args:
      f: File-like object to read from
    Returns: A path
    """
    cs = f.read()
    if not cs.startswith(b"gitdir: "):
        raise ValueError("Expected file to start with 'gitdir: '")
    return os.fsdecode(cs[len(b"gitdir: ") :].rstrip(b"\r\n"))


def read_plain_file(path: str) -> Optional[str]:
    """Read a single-line file like ``commondir``.

    Returns: The first line without its line ending, or None if the file
        does not exist
    """
    try:
        with open(path, "rb") as f:
            contents = f.read()
    except FileNotFoundError:
        return None
    return os.fsdecode(contents.splitlines()[0] if contents else b"")


def looks_like_git_dir(path: str) -> bool:
    """Check whether a path's name marks it as a git directory."""
    name = os.path.basename(os.path.normpath(path))
    return name == DOT_GIT_DIR or name.endswith(".git")


def _common_dir(git_dir: str) -> str:
    common = read_plain_file(os.path.join(git_dir, COMMONDIR))
    if common is None:
        return git_dir
    return os.path.join(git_dir, common)


def _verify_git_dir(git_dir: str) -> None:
    if not os.path.isdir(git_dir):
        raise DiscoveryError(f"{git_dir} is not a directory")
    if not os.path.lexists(os.path.join(git_dir, HEAD)):
        raise DiscoveryError(f"{git_dir} has no {HEAD}")
    common = _common_dir(git_dir)
    for name in (OBJECTDIR, REFSDIR):
        if not os.path.isdir(os.path.join(common, name)):
            raise DiscoveryError(f"{common} has no {name} directory")


def _linked_work_dir(git_dir: str) -> Optional[str]:
    # worktrees/<name>/gitdir holds the path of the work tree's .git file.
    dot_git = read_plain_file(os.path.join(git_dir, GITDIR))
    if not dot_git:
        return None
    return os.path.dirname(os.path.join(git_dir, dot_git))


def is_git(path: str) -> RepositoryKind:
    """Classify ``path`` as a git directory.

    Args:
      path: A directory, or a ``.git`` file
    Returns: A RepositoryKind
    Raises:
      DiscoveryError: if ``path`` is not a git directory
    """
    if os.path.isfile(path):
        try:
            with open(path, "rb") as f:
                target = read_gitfile(f)
        except (OSError, ValueError) as e:
            raise DiscoveryError(f"{path} is not a valid .git file: {e}")
        git_dir = os.path.join(os.path.dirname(path), target)
        _verify_git_dir(git_dir)
        work_dir = os.path.dirname(path) or os.curdir
        if os.path.isfile(os.path.join(git_dir, COMMONDIR)):
            return RepositoryKind(Kind.LINKED_WORK_TREE, git_dir, work_dir)
        return RepositoryKind(Kind.SUBMODULE, git_dir, work_dir)

    if not os.path.exists(path):
        raise DiscoveryError(f"{path} does not exist")
    _verify_git_dir(path)
    if os.path.isfile(os.path.join(path, COMMONDIR)):
        return RepositoryKind(Kind.LINKED_WORK_TREE, path, _linked_work_dir(path))
    if os.path.basename(os.path.normpath(path)) == DOT_GIT_DIR:
        return RepositoryKind(
            Kind.WORK_TREE, path, os.path.dirname(os.path.normpath(path)) or os.curdir
        )
    return RepositoryKind(Kind.BARE, path)


def from_dot_git_dir(
    kind: RepositoryKind, current_dir: str
) -> tuple[str, Optional[str]]:
    """Turn a classification into absolute git and work tree directories.

    Args:
      kind: Result of is_git()
      current_dir: Directory relative paths are resolved against
    Returns: Tuple of (git_dir, work_dir)
    """
    git_dir = normalize(kind.git_dir, current_dir)
    if git_dir is None:
        raise DiscoveryError(f"{kind.git_dir} can not be normalized")
    work_dir = None
    if kind.work_dir is not None:
        work_dir = normalize(kind.work_dir, current_dir)
    return git_dir, work_dir
