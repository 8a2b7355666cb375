# utils.py -- Test utility functions
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

"""Utility functions common to gitward tests."""

import os
from typing import Optional

SHA_A = b"a" * 40
SHA_B = b"b" * 40
SHA_C = b"c" * 40


def write_file(path: str, contents: bytes) -> str:
    """Write ``contents`` to ``path``, creating parent directories."""
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "wb") as f:
        f.write(contents)
    return path


def make_git_dir(
    path: str, config: Optional[bytes] = None, head: bytes = b"ref: refs/heads/master\n"
) -> str:
    """Create the skeleton of a git directory at ``path``.

    Args:
      path: The git directory to create
      config: Contents of its config file; no config file if None
      head: Contents of HEAD
    Returns: ``path``
    """
    os.makedirs(os.path.join(path, "objects"), exist_ok=True)
    os.makedirs(os.path.join(path, "refs", "heads"), exist_ok=True)
    write_file(os.path.join(path, "HEAD"), head)
    if config is not None:
        write_file(os.path.join(path, "config"), config)
    return path


def make_work_tree_repo(path: str, config: bytes = b"[core]\n\tbare = false\n") -> str:
    """Create a non-bare repository with its work tree at ``path``.

    Returns: The ``.git`` directory
    """
    return make_git_dir(os.path.join(path, ".git"), config)


def make_bare_repo(path: str, config: bytes = b"[core]\n\tbare = true\n") -> str:
    """Create a bare repository at ``path``."""
    return make_git_dir(path, config)


def make_linked_worktree(common_dir: str, work_dir: str, name: str) -> str:
    """Add a linked work tree of the repository at ``common_dir``.

    Returns: The git directory of the linked work tree
    """
    git_dir = os.path.join(common_dir, "worktrees", name)
    os.makedirs(git_dir)
    write_file(os.path.join(git_dir, "HEAD"), b"ref: refs/heads/" + name.encode() + b"\n")
    write_file(os.path.join(git_dir, "commondir"), b"../..\n")
    dot_git = os.path.join(work_dir, ".git")
    write_file(os.path.join(git_dir, "gitdir"), os.fsencode(dot_git) + b"\n")
    write_file(dot_git, b"gitdir: " + os.fsencode(git_dir) + b"\n")
    return git_dir
