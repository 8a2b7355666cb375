# test_safe_directory.py -- Tests for safe_directory.py
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

"""Tests for gitward.safe_directory."""

import os
from unittest import mock

from gitward.config import (
    CascadedConfig,
    ConfigSection,
    ConfigSourceKind,
    SectionMetadata,
)
from gitward.errors import SharedConfigError, UnsafeGitDir
from gitward.log_utils import Diagnostics
from gitward.path import InterpolationContext
from gitward.safe_directory import (
    check_safe_directories,
    elevate_section_trust,
    is_safe_directory,
    safe_directory_filter,
)
from gitward.sec import TrustLevel

from . import TestCase

MISSING = "/nonexistent-gitward"


class IsSafeDirectoryTests(TestCase):
    def setUp(self) -> None:
        super().setUp()
        self.context = InterpolationContext(install_dir="/opt/git", home="/home/user")

    def is_safe(self, path, *patterns, diagnostics=None):
        return is_safe_directory(
            path, list(patterns), self.context, "/", diagnostics=diagnostics
        )

    def test_no_patterns(self) -> None:
        self.assertFalse(self.is_safe(MISSING + "/a"))

    def test_wildcard(self) -> None:
        self.assertTrue(self.is_safe(MISSING + "/a", b"*"))

    def test_reset_after_wildcard(self) -> None:
        self.assertFalse(self.is_safe(MISSING + "/a", b"*", b""))

    def test_wildcard_after_reset(self) -> None:
        self.assertTrue(self.is_safe(MISSING + "/a", b"", b"*"))
        self.assertTrue(self.is_safe(MISSING + "/a", b"*", b"", b"*"))

    def test_reset_revokes_literal_match(self) -> None:
        self.assertFalse(self.is_safe(MISSING + "/a", os.fsencode(MISSING + "/a"), b""))

    def test_literal(self) -> None:
        self.assertTrue(self.is_safe(MISSING + "/a", os.fsencode(MISSING + "/a")))

    def test_literal_trailing_slash(self) -> None:
        self.assertTrue(self.is_safe(MISSING + "/a", os.fsencode(MISSING + "/a/")))

    def test_literal_requires_equality(self) -> None:
        self.assertFalse(self.is_safe(MISSING + "/ab", os.fsencode(MISSING + "/a")))
        self.assertFalse(self.is_safe(MISSING + "/a/b", os.fsencode(MISSING + "/a")))
        self.assertFalse(self.is_safe(MISSING, os.fsencode(MISSING + "/a")))

    def test_prefix_wildcard(self) -> None:
        pattern = os.fsencode(MISSING + "/a/*")
        self.assertTrue(self.is_safe(MISSING + "/a", pattern))
        self.assertTrue(self.is_safe(MISSING + "/a/b", pattern))
        self.assertTrue(self.is_safe(MISSING + "/a/b/c", pattern))

    def test_prefix_wildcard_not_sibling(self) -> None:
        pattern = os.fsencode(MISSING + "/a/*")
        self.assertFalse(self.is_safe(MISSING + "/ab", pattern))
        self.assertFalse(self.is_safe(MISSING + "/b", pattern))

    def test_later_mismatch_keeps_safe(self) -> None:
        self.assertTrue(
            self.is_safe(MISSING + "/a", b"*", os.fsencode(MISSING + "/other"))
        )

    def test_relative_patterns_never_match(self) -> None:
        diagnostics = Diagnostics()
        self.assertFalse(self.is_safe("a", b"a", diagnostics=diagnostics))
        self.assertFalse(self.is_safe("/a", b"a/*", b"./a", diagnostics=diagnostics))
        self.assertEqual(
            ["safe-directory-relative"] * 3, diagnostics.codes()
        )

    def test_relative_pattern_does_not_stop_scan(self) -> None:
        self.assertTrue(
            self.is_safe(MISSING + "/a", b"relative", os.fsencode(MISSING + "/a"))
        )

    def test_home_interpolation(self) -> None:
        self.assertTrue(self.is_safe("/home/user/repo", b"~/repo"))
        self.assertTrue(self.is_safe("/home/user/work/repo", b"~/work/*"))

    def test_prefix_interpolation(self) -> None:
        self.assertTrue(self.is_safe("/opt/git/share/repo", b"%(prefix)/share/repo"))

    def test_failed_interpolation_used_literally(self) -> None:
        context = InterpolationContext()
        diagnostics = Diagnostics()
        self.assertFalse(
            is_safe_directory("/home/user/repo", [b"~/repo"], context, "/", diagnostics)
        )
        self.assertEqual(["safe-directory-relative"], diagnostics.codes())

    def test_symlinks_resolved(self) -> None:
        tmp = self.mkdtemp()
        real = os.path.join(tmp, "real")
        os.mkdir(real)
        link = os.path.join(tmp, "link")
        try:
            os.symlink(real, link)
        except (OSError, NotImplementedError):
            self.skipTest("symlinks not supported")
        self.assertTrue(is_safe_directory(link, [os.fsencode(real)], self.context))
        self.assertFalse(is_safe_directory(link, [os.fsencode(link)], self.context))

    def test_relative_test_path(self) -> None:
        tmp = self.mkdtemp()
        os.mkdir(os.path.join(tmp, "repo"))
        self.assertTrue(
            is_safe_directory(
                "repo", [os.fsencode(os.path.join(tmp, "repo"))], self.context, tmp
            )
        )

    def test_repeatable(self) -> None:
        patterns = (b"", os.fsencode(MISSING + "/a/*"))
        for _ in range(3):
            self.assertTrue(self.is_safe(MISSING + "/a/b", *patterns))


class CheckSafeDirectoriesTests(TestCase):
    def test_safe(self) -> None:
        check_safe_directories(MISSING, [b"*"], InterpolationContext(), "/")

    def test_unsafe(self) -> None:
        tmp = self.mkdtemp()
        with self.assertRaises(UnsafeGitDir) as cm:
            check_safe_directories(tmp, [b"", b"relative"], InterpolationContext())
        self.assertEqual(tmp, cm.exception.path)


class SafeDirectoryFilterTests(TestCase):
    def test_sources(self) -> None:
        allowed = {
            kind
            for kind in ConfigSourceKind
            if safe_directory_filter(SectionMetadata(kind))
        }
        self.assertEqual(
            {
                ConfigSourceKind.SYSTEM,
                ConfigSourceKind.GLOBAL,
                ConfigSourceKind.CLI,
                ConfigSourceKind.API,
            },
            allowed,
        )


class ElevateSectionTrustTests(TestCase):
    def setUp(self) -> None:
        super().setUp()
        self.context = InterpolationContext()
        self.test_dir = MISSING + "/repo"
        self.inside = self.test_dir + "/.git/config"
        self.outside = MISSING + "/elsewhere/config"

    def section(self, source, path, trust=TrustLevel.REDUCED, name=b"core"):
        meta = SectionMetadata(source, path=path, trust=trust)
        return ConfigSection(name, None, meta, [(b"bare", b"false")])

    def make_config(self):
        return CascadedConfig(
            [
                self.section(ConfigSourceKind.GLOBAL, MISSING + "/home/.gitconfig"),
                self.section(ConfigSourceKind.LOCAL, self.inside),
                self.section(ConfigSourceKind.LOCAL, self.inside, name=b"user"),
                self.section(ConfigSourceKind.LOCAL, self.outside),
                self.section(ConfigSourceKind.ENV, None),
                self.section(ConfigSourceKind.WORKTREE, self.inside, TrustLevel.FULL),
            ]
        )

    def trusts(self, config):
        return [section.meta.trust for section in config]

    def elevate(self, config, git_dir_trust, safe_dirs=(), cache=None):
        return elevate_section_trust(
            config,
            self.test_dir,
            git_dir_trust,
            list(safe_dirs),
            self.context,
            "/",
            Diagnostics(),
            cache=cache,
        )

    def test_inside_test_dir_with_full_trust(self) -> None:
        config = self.make_config()
        self.assertEqual(2, self.elevate(config, TrustLevel.FULL))
        R, F = TrustLevel.REDUCED, TrustLevel.FULL
        self.assertEqual([R, F, F, R, R, F], self.trusts(config))

    def test_inside_test_dir_with_reduced_trust(self) -> None:
        config = self.make_config()
        self.assertEqual(0, self.elevate(config, TrustLevel.REDUCED))
        self.assertEqual(
            [TrustLevel.REDUCED] * 5 + [TrustLevel.FULL], self.trusts(config)
        )

    def test_safe_directory_elevates(self) -> None:
        config = self.make_config()
        self.assertEqual(
            3,
            self.elevate(config, TrustLevel.REDUCED, [os.fsencode(MISSING + "/*")]),
        )
        R, F = TrustLevel.REDUCED, TrustLevel.FULL
        self.assertEqual([R, F, F, F, R, F], self.trusts(config))

    def test_memoized_per_path(self) -> None:
        config = self.make_config()
        with mock.patch(
            "gitward.safe_directory.is_safe_directory", wraps=is_safe_directory
        ) as check:
            self.elevate(config, TrustLevel.REDUCED)
        checked = [c.args[0] for c in check.call_args_list]
        self.assertEqual([self.inside, self.outside], checked)

    def test_idempotent(self) -> None:
        config = self.make_config()
        cache: dict[str, bool] = {}
        safe_dirs = [os.fsencode(self.test_dir + "/*")]
        with mock.patch(
            "gitward.safe_directory.is_safe_directory", wraps=is_safe_directory
        ) as check:
            self.assertEqual(
                2, self.elevate(config, TrustLevel.REDUCED, safe_dirs, cache)
            )
            before = self.trusts(config)
            self.assertEqual(
                0, self.elevate(config, TrustLevel.REDUCED, safe_dirs, cache)
            )
        self.assertEqual(before, self.trusts(config))
        self.assertEqual(2, check.call_count)
        self.assertEqual({self.inside: True, self.outside: False}, cache)

    def test_sealed(self) -> None:
        config = self.make_config().seal()
        self.assertRaises(SharedConfigError, self.elevate, config, TrustLevel.FULL)
