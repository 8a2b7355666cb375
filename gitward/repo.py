# repo.py -- Opening repositories
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

"""Opening repositories.

:meth:`Repository.open` turns a path into an opened :class:`Repository`: it
finds the git directory, decides how much the repository is trusted, loads
its configuration with per-section trust, works out the work tree and sets up
handles on the object database and the refs.

A repository owned by someone else is only fully trusted if it is listed in
``safe.directory``; otherwise it is opened with reduced trust (or not at all,
with ``bail_if_untrusted``) and its own configuration is ignored wherever the
section filter says so.
"""

__all__ = [
    "EnvironmentOverrides",
    "OpenOptions",
    "Repository",
    "default_trust_map",
    "reflog_or_default",
]

import dataclasses
import logging
import os
from collections.abc import Mapping, Sequence
from typing import Optional

from . import sec
from .config import CascadedConfig, ConfigSourceKind, SectionFilter, is_trusted
from .discover import (
    COMMONDIR,
    DOT_GIT_DIR,
    DiscoveryError,
    from_dot_git_dir,
    is_git,
    looks_like_git_dir,
    read_plain_file,
)
from .errors import ConfigTypedValueError, NotGitRepository
from .log_utils import Diagnostics
from .object_format import ObjectFormat, ObjectID
from .object_store import DiskObjectStore
from .path import InterpolationContext, install_dir, normalize, precompose_path
from .refs import SYMREF, DiskRefStore, WriteReflog
from .repo_config import RepoConfig, StageOne
from .safe_directory import (
    check_safe_directories,
    elevate_section_trust,
    is_safe_directory,
    safe_directory_filter,
)
from .sec import Permissions, TrustLevel
from .worktree import resolve_worktree_dir

logger = logging.getLogger(__name__)

OBJECTDIR = "objects"


@dataclasses.dataclass(frozen=True)
class OpenOptions:
    """Parameters of opening a repository.

    Attributes:
      open_path_as_is: Do not probe ``<path>/.git``
      git_dir_trust: Trust of the git directory; computed from ownership if
        None
      object_store_slots: Pack slots for the object store, or None
      filter_config_section: Decides which configuration sections count;
        defaults to fully trusted sections only
      lenient_config: Treat malformed configuration values as absent
      bail_if_untrusted: Fail with UnsafeGitDir instead of reducing trust
      permissions: What the open may read from the environment and disk
      api_config_overrides: ``key=value`` settings of the calling program
      cli_config_overrides: ``key=value`` settings from ``-c`` options
      current_dir: Directory relative paths are resolved against; the
        process's current directory if None
    """

    open_path_as_is: bool = False
    git_dir_trust: Optional[TrustLevel] = None
    object_store_slots: Optional[int] = None
    filter_config_section: Optional[SectionFilter] = None
    lenient_config: bool = True
    bail_if_untrusted: bool = False
    permissions: Permissions = dataclasses.field(default_factory=Permissions)
    api_config_overrides: Sequence[str] = ()
    cli_config_overrides: Sequence[str] = ()
    current_dir: Optional[str] = None

    @classmethod
    def isolated(cls) -> "OpenOptions":
        """Options that ignore the environment, system and user configuration."""
        return cls(permissions=Permissions.isolated())


def default_trust_map() -> dict[TrustLevel, OpenOptions]:
    """Options by git directory trust, as used for environment overrides."""
    return {
        TrustLevel.FULL: OpenOptions(),
        TrustLevel.REDUCED: OpenOptions.isolated(),
    }


@dataclasses.dataclass(frozen=True)
class EnvironmentOverrides:
    """``GIT_DIR`` and ``GIT_WORK_TREE``, read once per open."""

    worktree_dir: Optional[str] = None
    git_dir: Optional[str] = None

    @classmethod
    def from_env(
        cls,
        permissions: Optional[Permissions] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "EnvironmentOverrides":
        if permissions is None:
            permissions = Permissions()
        if not permissions.env.git_prefix:
            return cls()
        if environ is None:
            environ = os.environ
        return cls(
            worktree_dir=environ.get("GIT_WORK_TREE") or None,
            git_dir=environ.get("GIT_DIR") or None,
        )


def reflog_or_default(reflog: Optional[WriteReflog], has_worktree: bool) -> WriteReflog:
    """Return the configured reflog policy, or git's default for the layout."""
    if reflog is not None:
        return reflog
    if has_worktree:
        return WriteReflog.NORMAL
    return WriteReflog.DISABLE


def _is_owned(path: str) -> bool:
    try:
        return sec.is_path_owned_by_current_user(path)
    except OSError:
        return False


class Repository:
    """An opened repository.

    Attributes:
      git_dir: The git directory (``.git`` or the bare repository)
      common_dir: The shared git directory of a linked work tree, or None
      work_tree: The work tree, or None for bare repositories
      config: Sealed configuration with per-section trust
      objects: Handle on the object database
      refs: Handle on the refs
      trust: Final trust of the git directory
      options: The options the repository was opened with, with trust and
        current directory filled in
      diagnostics: Warnings collected while opening
    """

    def __init__(
        self,
        git_dir: str,
        common_dir: Optional[str],
        work_tree: Optional[str],
        config: RepoConfig,
        objects: DiskObjectStore,
        refs: DiskRefStore,
        options: OpenOptions,
        diagnostics: Diagnostics,
    ) -> None:
        self.git_dir = git_dir
        self.common_dir = common_dir
        self.work_tree = work_tree
        self._config = config
        self.objects = objects
        self.refs = refs
        self.options = options
        self.diagnostics = diagnostics

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} for {self.path!r}>"

    @property
    def path(self) -> str:
        """The work tree, or the git directory of a bare repository."""
        return self.work_tree if self.work_tree is not None else self.git_dir

    @property
    def config(self) -> CascadedConfig:
        return self._config.resolved

    @property
    def trust(self) -> TrustLevel:
        assert self.options.git_dir_trust is not None
        return self.options.git_dir_trust

    @property
    def permissions(self) -> Permissions:
        return self.options.permissions

    @property
    def object_format(self) -> ObjectFormat:
        return self._config.object_format

    def is_bare(self) -> bool:
        """Check if this repository has no work tree."""
        return self.work_tree is None

    def common_dir_or_git_dir(self) -> str:
        return self.common_dir if self.common_dir is not None else self.git_dir

    @classmethod
    def open(cls, path: str, options: Optional[OpenOptions] = None) -> "Repository":
        """Open the repository at ``path``.

        ``path`` may be a work tree, a ``.git`` directory or file, or a bare
        repository. Unless ``open_path_as_is`` is set, ``path/.git`` is tried
        first when ``path`` does not look like a git directory itself.

        Args:
          path: Path to open
          options: How to open the repository
        Returns: The opened Repository
        Raises:
          NotGitRepository: if no repository is found at ``path``
          UnsafeGitDir: if the repository is not trusted and
            ``bail_if_untrusted`` is set
          ConfigError: if the configuration can not be used
        """
        if options is None:
            options = OpenOptions()
        path = os.fspath(path)
        if options.current_dir is not None and not os.path.isabs(path):
            path = os.path.join(options.current_dir, path)
        if options.open_path_as_is or looks_like_git_dir(path):
            candidate = path
        else:
            candidate = os.path.join(path, DOT_GIT_DIR)
        try:
            kind = is_git(candidate)
        except DiscoveryError as e:
            if options.open_path_as_is or candidate == path:
                raise NotGitRepository(candidate, e)
            try:
                kind = is_git(path)
            except DiscoveryError as err:
                raise NotGitRepository(path, err)

        # Precomposition is applied later, once the configuration says so.
        current_dir = options.current_dir or os.getcwd()
        try:
            git_dir, worktree_dir = from_dot_git_dir(kind, current_dir)
        except DiscoveryError as e:
            raise NotGitRepository(kind.git_dir, e)
        if options.git_dir_trust is None:
            options = dataclasses.replace(
                options, git_dir_trust=sec.trust_from_path_ownership(git_dir)
            )
        options = dataclasses.replace(options, current_dir=current_dir)
        return cls.open_from_paths(git_dir, worktree_dir, options)

    @classmethod
    def open_with_environment_overrides(
        cls,
        fallback_directory: str,
        trust_map: Optional[Mapping[TrustLevel, OpenOptions]] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "Repository":
        """Open the repository named by ``GIT_DIR``, or ``fallback_directory``.

        This is what hooks and other programs run by git need: git tells them
        about the repository through the environment. ``GIT_WORK_TREE`` is
        used if the git directory does not imply a work tree. The options are
        picked from ``trust_map`` by the ownership of the git directory.

        Raises:
          NotGitRepository: if the directory is not a git directory
        """
        if trust_map is None:
            trust_map = default_trust_map()
        overrides = EnvironmentOverrides.from_env(environ=environ)
        path = overrides.git_dir if overrides.git_dir is not None else fallback_directory
        path = os.fspath(path)
        try:
            kind = is_git(path)
        except DiscoveryError as e:
            raise NotGitRepository(path, e)

        current_dir = os.getcwd()
        try:
            git_dir, worktree_dir = from_dot_git_dir(kind, current_dir)
        except DiscoveryError as e:
            raise NotGitRepository(kind.git_dir, e)
        if worktree_dir is None and overrides.worktree_dir is not None:
            worktree_dir = normalize(overrides.worktree_dir, current_dir)
        git_dir_trust = sec.trust_from_path_ownership(git_dir)
        options = dataclasses.replace(
            trust_map[git_dir_trust],
            git_dir_trust=git_dir_trust,
            current_dir=current_dir,
        )
        return cls.open_from_paths(git_dir, worktree_dir, options)

    @classmethod
    def open_from_paths(
        cls,
        git_dir: str,
        worktree_dir: Optional[str],
        options: OpenOptions,
    ) -> "Repository":
        """Open a repository whose git directory is already known.

        Args:
          git_dir: Absolute git directory
          worktree_dir: Work tree implied by the layout, if any
          options: Options; ``git_dir_trust`` is computed if unset
        """
        diagnostics = Diagnostics()
        if options.git_dir_trust is None:
            options = dataclasses.replace(
                options, git_dir_trust=sec.trust_from_path_ownership(git_dir)
            )
        git_dir_trust = options.git_dir_trust
        assert git_dir_trust is not None
        current_dir = options.current_dir or os.getcwd()
        permissions = options.permissions

        common_dir = None
        common = read_plain_file(os.path.join(git_dir, COMMONDIR))
        if common is not None:
            common_dir = os.path.normpath(os.path.join(git_dir, common))

        stage_one = StageOne(common_dir or git_dir, git_dir, git_dir_trust, diagnostics)
        if stage_one.precompose_unicode:
            git_dir = precompose_path(git_dir)
            if common_dir is not None:
                common_dir = precompose_path(common_dir)
            if worktree_dir is not None:
                worktree_dir = precompose_path(worktree_dir)
            current_dir = precompose_path(current_dir)
        common_dir_ref = common_dir or git_dir

        ref_store_kwargs = {
            "write_reflog": stage_one.reflog or WriteReflog.DISABLE,
            "object_format": stage_one.object_format,
            "precompose_unicode": stage_one.precompose_unicode,
            "prohibit_windows_device_names": stage_one.protect_windows,
        }
        if common_dir is not None:
            refs = DiskRefStore.for_linked_worktree(git_dir, common_dir, **ref_store_kwargs)
        else:
            refs = DiskRefStore.at(git_dir, **ref_store_kwargs)
        head = refs.head_target()
        context = InterpolationContext(
            install_dir=install_dir(), home=permissions.env.home_dir()
        )

        filter_config_section = options.filter_config_section or is_trusted
        lenient_config = options.lenient_config
        config = RepoConfig.load(
            stage_one,
            common_dir=common_dir_ref,
            git_dir=git_dir,
            git_dir_trust=git_dir_trust,
            head_ref=head,
            filter_config_section=filter_config_section,
            interpolation=context,
            permissions=permissions,
            lenient_config=lenient_config,
            api_config_overrides=options.api_config_overrides,
            cli_config_overrides=options.cli_config_overrides,
            diagnostics=diagnostics,
        )

        if not config.is_bare:
            configured = resolve_worktree_dir(
                config.resolved,
                git_dir,
                current_dir,
                context,
                filter_config_section,
                lenient_config,
                diagnostics,
            )
            if configured is not None:
                worktree_dir = configured

        standard_git_dir = os.path.basename(refs.git_dir) == DOT_GIT_DIR
        if worktree_dir is None:
            if not config.is_bare and standard_git_dir:
                worktree_dir = os.path.dirname(git_dir)
        elif standard_git_dir and config.is_bare and _has_local_bare(config.resolved):
            # The layout implies a work tree but the repository says it is bare.
            worktree_dir = None

        if git_dir_trust != TrustLevel.FULL or (
            worktree_dir is not None and not _is_owned(worktree_dir)
        ):
            safe_dirs = (
                config.resolved.strings_filter("safe.directory", safe_directory_filter)
                or []
            )
            test_dir = worktree_dir if worktree_dir is not None else git_dir
            if _check_trust(
                test_dir,
                safe_dirs,
                context,
                current_dir,
                diagnostics,
                options.bail_if_untrusted,
            ):
                git_dir_trust = TrustLevel.FULL
            else:
                git_dir_trust = TrustLevel.REDUCED
            logger.debug(
                "Trust of %s after safe.directory check: %s", git_dir, git_dir_trust.name
            )
            elevate_section_trust(
                config.resolved,
                test_dir,
                git_dir_trust,
                safe_dirs,
                context,
                current_dir,
                diagnostics,
            )

        refs.write_reflog = reflog_or_default(config.reflog, worktree_dir is not None)
        refs.namespace = config.refs_namespace
        replacements = _find_replacements(refs, config, diagnostics)

        objects = DiskObjectStore(
            os.path.join(common_dir_ref, OBJECTDIR),
            replacements,
            slots=options.object_store_slots,
            object_format=config.object_format,
            use_multi_pack_index=config.use_multi_pack_index,
            current_dir=current_dir,
        )
        config.resolved.seal()
        options = dataclasses.replace(
            options, git_dir_trust=git_dir_trust, current_dir=current_dir
        )
        logger.debug(
            "Opened %s (work tree %s, trust %s)", git_dir, worktree_dir, git_dir_trust.name
        )
        return cls(
            git_dir,
            common_dir,
            worktree_dir,
            config,
            objects,
            refs,
            options,
            diagnostics,
        )


def _has_local_bare(config: CascadedConfig) -> bool:
    def is_local(meta) -> bool:
        return meta.source == ConfigSourceKind.LOCAL

    try:
        return config.boolean_filter("core.bare", is_local) is not None
    except ConfigTypedValueError:
        return False


def _check_trust(
    test_dir: str,
    safe_dirs: Sequence[bytes],
    context: InterpolationContext,
    current_dir: str,
    diagnostics: Diagnostics,
    bail_if_untrusted: bool,
) -> bool:
    if bail_if_untrusted:
        check_safe_directories(test_dir, safe_dirs, context, current_dir, diagnostics)
        return True
    return is_safe_directory(test_dir, safe_dirs, context, current_dir, diagnostics)


def _find_replacements(
    refs: DiskRefStore, config: RepoConfig, diagnostics: Diagnostics
) -> list[tuple[ObjectID, ObjectID]]:
    prefix = config.replace_refs_prefix(diagnostics)
    if prefix is None:
        return []
    object_format = config.object_format
    replacements = []
    try:
        for name, value in refs.iter_prefixed(prefix):
            if value.startswith(SYMREF):
                continue
            source = object_format.parse_hex(name[len(prefix) :])
            target = object_format.parse_hex(value.strip())
            if source is None or target is None:
                continue
            replacements.append((source, target))
    except (OSError, ValueError) as e:
        diagnostics.warn(
            "replace-refs-unreadable", f"ignoring replacement refs: {e}", prefix=prefix
        )
        return []
    if replacements:
        logger.debug("Found %d replacement objects", len(replacements))
    return replacements
