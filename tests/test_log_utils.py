# test_log_utils.py -- Tests for log_utils.py
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

"""Tests for gitward.log_utils."""

import logging
import os
from unittest import mock

from gitward.log_utils import (
    _GITWARD_LOGGER,
    _NULL_HANDLER,
    Diagnostic,
    Diagnostics,
    _configure_logging_from_trace,
    _get_trace_target,
    default_logging_config,
    remove_null_handler,
)

from . import TestCase


class LogUtilsTests(TestCase):
    """Tests for log_utils."""

    def setUp(self) -> None:
        super().setUp()
        self.addCleanup(self._restore_logging)
        self._old_handlers = list(logging.root.handlers)
        self._old_level = logging.root.level

    def _restore_logging(self) -> None:
        for handler in list(logging.root.handlers):
            if handler not in self._old_handlers:
                logging.root.removeHandler(handler)
                handler.close()
        logging.root.setLevel(self._old_level)
        if _NULL_HANDLER not in _GITWARD_LOGGER.handlers:
            _GITWARD_LOGGER.addHandler(_NULL_HANDLER)

    def test_null_handler(self) -> None:
        self.assertIn(_NULL_HANDLER, _GITWARD_LOGGER.handlers)

    def test_remove_null_handler(self) -> None:
        remove_null_handler()
        self.assertNotIn(_NULL_HANDLER, _GITWARD_LOGGER.handlers)

    def test_trace_target_disabled(self) -> None:
        self.assertIsNone(_get_trace_target())
        for value in ("0", "false", "FALSE", "relative/path"):
            self.overrideEnv("GIT_TRACE", value)
            self.assertIsNone(_get_trace_target())

    def test_trace_target_stderr(self) -> None:
        for value in ("1", "2", "true", "True"):
            self.overrideEnv("GIT_TRACE", value)
            self.assertEqual(2, _get_trace_target())

    def test_trace_target_fd(self) -> None:
        self.overrideEnv("GIT_TRACE", "5")
        self.assertEqual(5, _get_trace_target())
        self.overrideEnv("GIT_TRACE", "10")
        self.assertIsNone(_get_trace_target())

    def test_trace_target_file(self) -> None:
        path = os.path.join(self.mkdtemp(), "trace.log")
        self.overrideEnv("GIT_TRACE", path)
        self.assertEqual(path, _get_trace_target())

    def test_configure_disabled(self) -> None:
        self.assertFalse(_configure_logging_from_trace())

    def test_configure_file(self) -> None:
        path = os.path.join(self.mkdtemp(), "trace.log")
        self.overrideEnv("GIT_TRACE", path)
        with mock.patch("logging.basicConfig") as basic_config:
            self.assertTrue(_configure_logging_from_trace())
        self.assertEqual(path, basic_config.call_args.kwargs["filename"])
        self.assertEqual(logging.DEBUG, basic_config.call_args.kwargs["level"])

    def test_configure_directory(self) -> None:
        tmp = self.mkdtemp()
        self.overrideEnv("GIT_TRACE", tmp)
        with mock.patch("logging.basicConfig") as basic_config:
            self.assertTrue(_configure_logging_from_trace())
        self.assertEqual(
            os.path.join(tmp, f"trace.{os.getpid()}"),
            basic_config.call_args.kwargs["filename"],
        )

    def test_default_logging_config(self) -> None:
        with mock.patch("logging.basicConfig") as basic_config:
            default_logging_config()
        self.assertNotIn(_NULL_HANDLER, _GITWARD_LOGGER.handlers)
        self.assertEqual(logging.WARNING, basic_config.call_args.kwargs["level"])


class DiagnosticsTests(TestCase):
    def test_empty(self) -> None:
        diagnostics = Diagnostics()
        self.assertEqual(0, len(diagnostics))
        self.assertFalse(diagnostics)
        self.assertEqual([], diagnostics.codes())

    def test_warn(self) -> None:
        diagnostics = Diagnostics()
        with self.assertLogs("gitward.diagnostics", level="WARNING") as cm:
            diagnostic = diagnostics.warn("worktree-missing", "no such dir", path="/x")
        self.assertEqual(["no such dir"], [r.getMessage() for r in cm.records])
        self.assertEqual(Diagnostic("worktree-missing", "no such dir"), diagnostic)
        self.assertEqual({"path": "/x"}, diagnostic.details)
        self.assertEqual([diagnostic], list(diagnostics))
        self.assertTrue(diagnostics)
        self.assertEqual(["worktree-missing"], diagnostics.codes())
