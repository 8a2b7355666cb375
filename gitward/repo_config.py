# repo_config.py -- Loading the configuration of a repository being opened
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

"""Loading the configuration of a repository being opened.

Configuration is loaded in two stages. Stage one reads only the repository's
own config file(s), leniently, for the handful of values needed before
anything else can happen: whether the repository is bare, the reflog policy,
unicode precomposition, the object hash and NTFS protection. Stage two loads
the full cascade of all sources, each section tagged with its trust.

See git-config(1) for details on the files searched.
"""

__all__ = [
    "RepoConfig",
    "StageOne",
    "condition_matchers",
    "env_config_items",
    "env_override_items",
    "global_config_paths",
    "lenient_value",
    "parse_reflog",
    "system_config_paths",
]

import logging
import os
import sys
from collections.abc import Callable, Iterable, Mapping, Sequence
from pathlib import Path
from typing import Optional, TypeVar

from .config import (
    CascadedConfig,
    ConditionMatcher,
    ConfigFile,
    ConfigSection,
    ConfigSourceKind,
    SectionFilter,
    SectionMetadata,
    _match_gitdir_pattern,
    match_glob_pattern,
    parse_boolean,
    sections_from_key_values,
)
from .errors import (
    ConfigParseError,
    ConfigStringError,
    ConfigTypedValueError,
    UnsupportedObjectFormat,
    UnsupportedRepositoryFormatVersion,
)
from .log_utils import Diagnostics
from .object_format import DEFAULT_OBJECT_FORMAT, ObjectFormat, get_object_format
from .path import InterpolationContext
from .refs import LOCAL_BRANCH_PREFIX, LOCAL_REPLACE_PREFIX, WriteReflog, namespace_prefix
from .sec import Permissions, TrustLevel

logger = logging.getLogger(__name__)

T = TypeVar("T")

CONFIG_FILENAME = "config"
WORKTREE_CONFIG_FILENAME = "config.worktree"

# Environment variables that are applied as configuration of highest
# precedence, and the keys they set.
ENV_OVERRIDES = (
    ("GIT_WORK_TREE", "core.worktree"),
    ("GIT_NO_REPLACE_OBJECTS", "gitoxide.objects.noReplace"),
    ("GIT_REPLACE_REF_BASE", "gitoxide.objects.replaceRefBase"),
    ("GIT_NAMESPACE", "gitoxide.core.refsNamespace"),
)


def lenient_value(
    get: Callable[[], T],
    lenient: bool,
    diagnostics: Diagnostics,
    default: T,
) -> T:
    """Run a typed configuration lookup with the configured leniency.

    Args:
      get: Performs the lookup; may raise ConfigTypedValueError
      lenient: If true, malformed values are treated as absent
      diagnostics: Receives a warning for each malformed value ignored
      default: Returned for ignored malformed values
    Raises:
      ConfigTypedValueError: if the value is malformed and not lenient
    """
    try:
        return get()
    except ConfigTypedValueError as e:
        if not lenient:
            raise
        diagnostics.warn("config-invalid-value", f"ignoring {e}", key=e.key)
        return default


def parse_reflog(key: str, value: Optional[bytes]) -> WriteReflog:
    """Interpret ``core.logAllRefUpdates``."""
    if value is not None and value.strip().lower() == b"always":
        return WriteReflog.ALWAYS
    if parse_boolean(key, value):
        return WriteReflog.NORMAL
    return WriteReflog.DISABLE


def _read_config_file(
    path: str,
    meta: SectionMetadata,
    lenient: bool,
    diagnostics: Diagnostics,
    **kwargs: object,
) -> list[ConfigSection]:
    try:
        cf = ConfigFile.from_path(path, meta, **kwargs)
    except FileNotFoundError:
        logger.debug("Config file not found: %s", path)
        return []
    except (OSError, ValueError) as e:
        if not lenient:
            raise ConfigParseError(path, e)
        diagnostics.warn(
            "config-unreadable", f"ignoring unreadable config {path}: {e}", path=path
        )
        return []
    logger.debug("Loaded config from %s", path)
    return cf.sections


class StageOne:
    """The values that must be known before the full configuration is loaded.

    Attributes:
      local: Sections of the repository's config file(s), unfiltered
      is_bare: ``core.bare``
      reflog: ``core.logAllRefUpdates``, or None if unset
      precompose_unicode: ``core.precomposeUnicode``
      object_format: from ``extensions.objectFormat``
      protect_windows: ``core.protectNTFS``
      worktree_config: ``extensions.worktreeConfig``
    """

    def __init__(
        self,
        common_dir: str,
        git_dir: str,
        git_dir_trust: TrustLevel,
        diagnostics: Optional[Diagnostics] = None,
    ) -> None:
        self.diagnostics = diagnostics if diagnostics is not None else Diagnostics()
        meta = SectionMetadata(ConfigSourceKind.LOCAL, trust=git_dir_trust)
        sections = self._read(os.path.join(common_dir, CONFIG_FILENAME), meta)
        config = CascadedConfig(sections)

        version = (
            self._get(lambda: config.integer_filter("core.repositoryFormatVersion"), None)
            or 0
        )
        if version not in (0, 1):
            raise UnsupportedRepositoryFormatVersion(version)

        self.worktree_config = version == 1 and bool(
            self._get(lambda: config.boolean_filter("extensions.worktreeConfig"), False)
        )
        if self.worktree_config:
            wt_meta = SectionMetadata(ConfigSourceKind.WORKTREE, trust=git_dir_trust)
            config.extend(self._read(os.path.join(git_dir, WORKTREE_CONFIG_FILENAME), wt_meta))

        self.object_format: ObjectFormat = DEFAULT_OBJECT_FORMAT
        if version == 1:
            name = self._get(lambda: config.string_filter("extensions.objectFormat"), None)
            if name is not None:
                try:
                    self.object_format = get_object_format(name.decode("ascii", "replace"))
                except ValueError:
                    raise UnsupportedObjectFormat(name.decode("ascii", "replace"))

        self.is_bare: bool = self._get(lambda: config.boolean_filter("core.bare"), None) or False
        self.reflog: Optional[WriteReflog] = self._get(
            lambda: self._reflog(config), None
        )
        self.precompose_unicode: bool = (
            self._get(lambda: config.boolean_filter("core.precomposeUnicode"), None) or False
        )
        protect = self._get(lambda: config.boolean_filter("core.protectNTFS"), None)
        self.protect_windows: bool = sys.platform == "win32" if protect is None else protect
        self.local = config

    def _read(self, path: str, meta: SectionMetadata) -> list[ConfigSection]:
        # Unreadable repository config is always fatal; only values are lenient.
        return _read_config_file(
            path, meta, False, self.diagnostics, follow_includes=False
        )

    def _get(self, lookup: Callable[[], T], default: T) -> T:
        return lenient_value(lookup, True, self.diagnostics, default)

    @staticmethod
    def _reflog(config: CascadedConfig) -> Optional[WriteReflog]:
        found = config.raw_value_filter("core.logAllRefUpdates")
        if found is None:
            return None
        return parse_reflog("core.logAllRefUpdates", found[0])


def system_config_paths(
    permissions: Permissions, environ: Optional[Mapping[str, str]] = None
) -> list[str]:
    """Return the system configuration files to load, honoring permissions."""
    if environ is None:
        environ = os.environ
    if not permissions.config.system:
        return []
    if permissions.env.git_prefix:
        if "GIT_CONFIG_SYSTEM" in environ:
            return [environ["GIT_CONFIG_SYSTEM"]]
        if "GIT_CONFIG_NOSYSTEM" in environ:
            return []
    return ["/etc/gitconfig"]


def global_config_paths(
    permissions: Permissions,
    home: Optional[str],
    environ: Optional[Mapping[str, str]] = None,
) -> list[str]:
    """Return the global configuration files to load, lowest precedence first."""
    if environ is None:
        environ = os.environ
    if permissions.env.git_prefix and "GIT_CONFIG_GLOBAL" in environ:
        if not permissions.config.user:
            return []
        return [environ["GIT_CONFIG_GLOBAL"]]
    paths = []
    if permissions.config.git:
        xdg_config_home = None
        if permissions.env.xdg_config_home:
            xdg_config_home = environ.get("XDG_CONFIG_HOME") or None
        if xdg_config_home is None and home is not None:
            xdg_config_home = os.path.join(home, ".config")
        if xdg_config_home is not None:
            paths.append(os.path.join(xdg_config_home, "git", "config"))
    if permissions.config.user and home is not None:
        paths.append(os.path.join(home, ".gitconfig"))
    return paths


def env_config_items(environ: Mapping[str, str]) -> list[tuple[str, Optional[bytes]]]:
    """Read ``GIT_CONFIG_COUNT``/``GIT_CONFIG_KEY_n``/``GIT_CONFIG_VALUE_n``.

    Raises:
      ValueError: if the count is malformed or a key or value is missing
    """
    count_str = environ.get("GIT_CONFIG_COUNT")
    if not count_str:
        return []
    count = int(count_str)
    items = []
    for i in range(count):
        try:
            key = environ[f"GIT_CONFIG_KEY_{i}"]
            value = environ[f"GIT_CONFIG_VALUE_{i}"]
        except KeyError as e:
            raise ValueError(f"missing {e.args[0]}")
        items.append((key, os.fsencode(value)))
    return items


def env_override_items(environ: Mapping[str, str]) -> list[tuple[str, Optional[bytes]]]:
    """Map git environment variables to the configuration keys they override."""
    items = []
    for var, key in ENV_OVERRIDES:
        value = environ.get(var)
        if value is None:
            continue
        if var == "GIT_NO_REPLACE_OBJECTS":
            # Presence alone disables replacement.
            items.append((key, b"true"))
        else:
            items.append((key, os.fsencode(value)))
    return items


def _parse_overrides(overrides: Iterable[str]) -> list[tuple[str, Optional[bytes]]]:
    items = []
    for override in overrides:
        key, sep, value = override.partition("=")
        items.append((key.strip(), value.encode("utf-8") if sep else None))
    return items


def condition_matchers(
    git_dir: str, head_ref: Optional[bytes], home: Optional[str]
) -> dict[str, ConditionMatcher]:
    """Build the ``includeIf`` matchers for a repository.

    Args:
      git_dir: The repository's git directory
      head_ref: The ref HEAD points to, if any
      home: Home directory used for ``~/`` in patterns
    """

    def match_gitdir(pattern: str, case_sensitive: bool = True) -> bool:
        # Relative patterns need the including file's directory, which is
        # not known here.
        if pattern.startswith("./"):
            return False
        try:
            repo_path = str(Path(git_dir).resolve())
        except (OSError, ValueError):
            return False
        if pattern.startswith("~/"):
            if home is None:
                return False
            pattern = home.rstrip("/") + pattern[1:]
        pattern = pattern.replace("\\", "/")
        if not pattern.startswith(("/", "**")) and not (
            len(pattern) >= 2 and pattern[1] == ":"
        ):
            pattern = "**/" + pattern
        if pattern.endswith("/"):
            pattern = pattern + "**"
        return _match_gitdir_pattern(
            repo_path.encode("utf-8", errors="replace"),
            pattern.encode("utf-8", errors="replace"),
            ignorecase=not case_sensitive,
        )

    def match_onbranch(pattern: str) -> bool:
        if head_ref is None or not head_ref.startswith(LOCAL_BRANCH_PREFIX):
            return False
        if pattern.endswith("/"):
            pattern = pattern + "**"
        branch = head_ref[len(LOCAL_BRANCH_PREFIX) :].decode("utf-8", errors="replace")
        return match_glob_pattern(branch, pattern)

    return {
        "onbranch:": match_onbranch,
        "gitdir:": lambda pattern: match_gitdir(pattern, True),
        "gitdir/i:": lambda pattern: match_gitdir(pattern, False),
    }


class RepoConfig:
    """The full configuration of a repository and the values derived from it.

    Attributes:
      resolved: All sections of all sources, with per-section trust
      is_bare: Whether the repository is bare
      reflog: The configured reflog policy, or None if unset
      object_format: Hash kind of the repository
      use_multi_pack_index: ``core.multiPackIndex``
      refs_namespace: Ref prefix of the active namespace, if any
      lenient_config: Whether malformed values are ignored
      filter_config_section: The caller's section filter
    """

    def __init__(
        self,
        resolved: CascadedConfig,
        stage_one: StageOne,
        filter_config_section: SectionFilter,
        lenient_config: bool,
        diagnostics: Diagnostics,
    ) -> None:
        self.resolved = resolved
        self.filter_config_section = filter_config_section
        self.lenient_config = lenient_config
        self.is_bare = stage_one.is_bare
        self.object_format = stage_one.object_format
        self.precompose_unicode = stage_one.precompose_unicode
        self.protect_windows = stage_one.protect_windows

        def get(lookup: Callable[[], T], default: T) -> T:
            return lenient_value(lookup, lenient_config, diagnostics, default)

        found = resolved.raw_value_filter("core.logAllRefUpdates", filter_config_section)
        self.reflog: Optional[WriteReflog] = stage_one.reflog
        if found is not None:
            self.reflog = get(
                lambda: parse_reflog("core.logAllRefUpdates", found[0]), self.reflog
            )

        use_midx = get(
            lambda: resolved.boolean_filter("core.multiPackIndex", filter_config_section),
            None,
        )
        self.use_multi_pack_index: bool = True if use_midx is None else use_midx

        self.refs_namespace: Optional[bytes] = get(
            lambda: self._namespace(resolved, filter_config_section), None
        )

    @staticmethod
    def _namespace(
        resolved: CascadedConfig, filter_config_section: SectionFilter
    ) -> Optional[bytes]:
        key = "gitoxide.core.refsNamespace"
        value = resolved.string_filter(key, filter_config_section)
        if value is None:
            return None
        try:
            namespace_prefix(value)
        except ValueError:
            raise ConfigStringError(key, value)
        return value

    @classmethod
    def load(
        cls,
        stage_one: StageOne,
        *,
        common_dir: str,
        git_dir: str,
        git_dir_trust: TrustLevel,
        head_ref: Optional[bytes],
        filter_config_section: SectionFilter,
        interpolation: InterpolationContext,
        permissions: Permissions,
        lenient_config: bool,
        api_config_overrides: Sequence[str] = (),
        cli_config_overrides: Sequence[str] = (),
        environ: Optional[Mapping[str, str]] = None,
        diagnostics: Optional[Diagnostics] = None,
    ) -> "RepoConfig":
        """Load all configuration sources of a repository.

        Sources are loaded lowest precedence first: system, global, local,
        worktree, environment, command line, API, environment overrides.
        Repository-local sections carry ``git_dir_trust``, all others are
        fully trusted.

        Raises:
          ConfigError: for unreadable files or malformed overrides, unless
            ``lenient_config`` is set
        """
        if environ is None:
            environ = os.environ
        if diagnostics is None:
            diagnostics = Diagnostics()
        read_kwargs = {
            "follow_includes": permissions.config.includes,
            "interpolation": interpolation,
            "condition_matchers": condition_matchers(git_dir, head_ref, interpolation.home),
        }

        def read(path: str, meta: SectionMetadata) -> list[ConfigSection]:
            return _read_config_file(path, meta, lenient_config, diagnostics, **read_kwargs)

        def from_items(
            describe: str,
            items: Callable[[], list[tuple[str, Optional[bytes]]]],
            meta: SectionMetadata,
        ) -> list[ConfigSection]:
            try:
                return sections_from_key_values(items(), meta)
            except ValueError as e:
                if not lenient_config:
                    raise ConfigParseError(None, ValueError(f"{describe}: {e}"))
                diagnostics.warn(
                    "config-unreadable", f"ignoring {describe}: {e}", source=meta.source
                )
                return []

        resolved = CascadedConfig()
        for path in system_config_paths(permissions, environ):
            resolved.extend(read(path, SectionMetadata(ConfigSourceKind.SYSTEM)))
        for path in global_config_paths(permissions, interpolation.home, environ):
            resolved.extend(read(path, SectionMetadata(ConfigSourceKind.GLOBAL)))
        resolved.extend(
            read(
                os.path.join(common_dir, CONFIG_FILENAME),
                SectionMetadata(ConfigSourceKind.LOCAL, trust=git_dir_trust),
            )
        )
        if stage_one.worktree_config:
            resolved.extend(
                read(
                    os.path.join(git_dir, WORKTREE_CONFIG_FILENAME),
                    SectionMetadata(ConfigSourceKind.WORKTREE, trust=git_dir_trust),
                )
            )
        use_env = permissions.config.env and permissions.env.git_prefix
        if use_env:
            resolved.extend(
                from_items(
                    "GIT_CONFIG_COUNT",
                    lambda: env_config_items(environ),
                    SectionMetadata(ConfigSourceKind.ENV),
                )
            )
        resolved.extend(
            from_items(
                "command line overrides",
                lambda: _parse_overrides(cli_config_overrides),
                SectionMetadata(ConfigSourceKind.CLI),
            )
        )
        resolved.extend(
            from_items(
                "API overrides",
                lambda: _parse_overrides(api_config_overrides),
                SectionMetadata(ConfigSourceKind.API),
            )
        )
        if use_env:
            resolved.extend(
                from_items(
                    "environment overrides",
                    lambda: env_override_items(environ),
                    SectionMetadata(ConfigSourceKind.ENV_OVERRIDE),
                )
            )
        return cls(resolved, stage_one, filter_config_section, lenient_config, diagnostics)

    def replace_refs_prefix(self, diagnostics: Diagnostics) -> Optional[bytes]:
        """Return the prefix of replacement refs, or None if replacement is off.

        Raises:
          ConfigBooleanError: for malformed switches, unless lenient
        """
        resolved = self.resolved
        flt = self.filter_config_section

        def get(lookup: Callable[[], T]) -> Optional[T]:
            return lenient_value(lookup, self.lenient_config, diagnostics, None)

        use_replace_refs = get(lambda: resolved.boolean_filter("core.useReplaceRefs", flt))
        no_replace = get(lambda: resolved.boolean_filter("gitoxide.objects.noReplace", flt))
        if use_replace_refs is False or no_replace:
            return None
        base = get(lambda: resolved.string_filter("gitoxide.objects.replaceRefBase", flt))
        if not base:
            return LOCAL_REPLACE_PREFIX
        return base


