# sec.py -- Trust levels, ownership checks and permissions
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

"""Trust levels, ownership checks and permissions.

A repository that is not owned by the user opening it may contain
configuration that runs programs (hooks, pagers, filters) on their behalf.
Ownership therefore decides how much of a repository's own configuration is
honored: :attr:`TrustLevel.FULL` honors everything, :attr:`TrustLevel.REDUCED`
only a conservative subset.
"""

__all__ = [
    "AttributesPermissions",
    "ConfigPermissions",
    "EnvironmentPermissions",
    "Permissions",
    "TrustLevel",
    "is_path_owned_by_current_user",
    "trust_from_path_ownership",
]

import enum
import os
import sys
from dataclasses import dataclass, field
from typing import Optional


class TrustLevel(enum.IntEnum):
    """How much a repository, or a piece of its configuration, is trusted."""

    REDUCED = 0
    FULL = 1


def _current_uid() -> int:
    uid = os.geteuid()
    if uid == 0:
        # Running under sudo: judge ownership by the invoking user, like git.
        sudo_uid = os.environ.get("SUDO_UID")
        if sudo_uid is not None:
            try:
                return int(sudo_uid)
            except ValueError:
                pass
    return uid


def is_path_owned_by_current_user(path: str) -> bool:
    """Check whether ``path`` is owned by the effective user of this process.

    On Windows ownership can not be compared the same way and every path is
    considered owned.

    Raises:
      OSError: if the path can not be stat'ed
    """
    if sys.platform == "win32":
        return True
    st = os.stat(path)
    return st.st_uid == _current_uid()


def trust_from_path_ownership(path: str) -> TrustLevel:
    """Return FULL if ``path`` is owned by the current user, REDUCED otherwise."""
    if is_path_owned_by_current_user(path):
        return TrustLevel.FULL
    return TrustLevel.REDUCED


@dataclass(frozen=True)
class EnvironmentPermissions:
    """Which environment variables may be consulted.

    Attributes:
      home: use ``HOME`` for ``~`` expansion and the global config
      xdg_config_home: use ``XDG_CONFIG_HOME`` to locate the global config
      git_prefix: use ``GIT_*`` variables (``GIT_DIR``, ``GIT_WORK_TREE``,
        ``GIT_NAMESPACE``, ...)
    """

    home: bool = True
    xdg_config_home: bool = True
    git_prefix: bool = True

    def home_dir(self) -> Optional[str]:
        """Return the home directory if allowed and known."""
        if not self.home:
            return None
        home = os.environ.get("HOME")
        if home is None and sys.platform == "win32":
            home = os.environ.get("USERPROFILE")
        return home or None


@dataclass(frozen=True)
class ConfigPermissions:
    """Which configuration sources may be loaded.

    Attributes:
      system: the system-wide configuration file
      git: the XDG configuration file (``$XDG_CONFIG_HOME/git/config``)
      user: the user's ``~/.gitconfig``
      env: ``GIT_CONFIG_COUNT``/``GIT_CONFIG_KEY_n``/``GIT_CONFIG_VALUE_n``
        and environment overrides
      includes: follow ``include.path`` and ``includeIf.*.path``
    """

    system: bool = True
    git: bool = True
    user: bool = True
    env: bool = True
    includes: bool = True


@dataclass(frozen=True)
class AttributesPermissions:
    """Which attribute files later subsystems may load."""

    system: bool = True
    git: bool = True


@dataclass(frozen=True)
class Permissions:
    """Layered permissions governing what an open may read."""

    env: EnvironmentPermissions = field(default_factory=EnvironmentPermissions)
    config: ConfigPermissions = field(default_factory=ConfigPermissions)
    attributes: AttributesPermissions = field(default_factory=AttributesPermissions)

    @classmethod
    def secure(cls) -> "Permissions":
        """Permissions of a normal git invocation."""
        return cls()

    @classmethod
    def isolated(cls) -> "Permissions":
        """Permissions that ignore the environment and user/system files."""
        return cls(
            env=EnvironmentPermissions(home=False, xdg_config_home=False, git_prefix=False),
            config=ConfigPermissions(system=False, git=False, user=False, env=False),
            attributes=AttributesPermissions(system=False, git=False),
        )
