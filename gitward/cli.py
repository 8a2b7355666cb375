# cli.py -- Command line interface for gitward
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

"""Simple command-line interface to gitward.

Mostly useful to see how gitward would open a repository: which directories
it finds, how much it trusts the repository and what it warned about.
"""

__all__ = [
    "Command",
    "cmd_help",
    "cmd_open",
    "cmd_safe_directory",
    "commands",
    "main",
]

import argparse
import logging
import os
import sys
from collections.abc import Sequence
from typing import Optional

from .errors import OpenError
from .log_utils import _configure_logging_from_trace, remove_null_handler
from .path import InterpolationContext, install_dir
from .repo import OpenOptions, Repository
from .safe_directory import is_safe_directory
from .sec import EnvironmentPermissions

logger = logging.getLogger(__name__)


class Command:
    """A gitward subcommand."""

    def run(self, args: Sequence[str]) -> Optional[int]:
        """Run the command."""
        raise NotImplementedError(self.run)


class cmd_open(Command):
    """Open a repository and show how it was resolved."""

    def run(self, args: Sequence[str]) -> Optional[int]:
        """Execute the open command.

        Args:
            args: Command line arguments
        """
        parser = argparse.ArgumentParser(prog="gitward open")
        parser.add_argument(
            "--as-is",
            action="store_true",
            help="Do not look for a .git directory below PATH.",
        )
        parser.add_argument(
            "--strict",
            action="store_true",
            help="Fail on malformed configuration values instead of ignoring them.",
        )
        parser.add_argument(
            "--bail-if-untrusted",
            action="store_true",
            help="Fail if the repository is not owned by us and not a safe directory.",
        )
        parser.add_argument(
            "-c",
            dest="config",
            action="append",
            default=[],
            metavar="KEY=VALUE",
            help="Set a configuration value for this invocation.",
        )
        parser.add_argument("path", nargs="?", default=os.curdir)
        parsed_args = parser.parse_args(args)

        options = OpenOptions(
            open_path_as_is=parsed_args.as_is,
            lenient_config=not parsed_args.strict,
            bail_if_untrusted=parsed_args.bail_if_untrusted,
            cli_config_overrides=tuple(parsed_args.config),
        )
        try:
            repo = Repository.open(parsed_args.path, options)
        except OpenError as e:
            logger.error("%s", e)
            return 1

        out = sys.stdout
        out.write(f"git dir: {repo.git_dir}\n")
        if repo.common_dir is not None:
            out.write(f"common dir: {repo.common_dir}\n")
        out.write(f"work tree: {repo.work_tree if repo.work_tree else '(bare)'}\n")
        out.write(f"trust: {repo.trust.name.lower()}\n")
        out.write(f"object format: {repo.object_format}\n")
        out.write(f"reflog: {repo.refs.write_reflog.value}\n")
        if repo.refs.namespace is not None:
            out.write(f"namespace: {repo.refs.namespace.decode('utf-8', 'replace')}\n")
        out.write(f"replacements: {len(repo.objects.replacements)}\n")
        for diagnostic in repo.diagnostics:
            out.write(f"warning: {diagnostic.message}\n")
        return 0


class cmd_safe_directory(Command):
    """Check a path against safe.directory patterns."""

    def run(self, args: Sequence[str]) -> Optional[int]:
        """Execute the safe-directory command.

        Exits with 0 if the path is safe and 1 otherwise.

        Args:
            args: Command line arguments
        """
        parser = argparse.ArgumentParser(prog="gitward safe-directory")
        parser.add_argument("path")
        parser.add_argument(
            "patterns",
            nargs="*",
            help="safe.directory values, in configuration order.",
        )
        parsed_args = parser.parse_args(args)
        context = InterpolationContext(
            install_dir=install_dir(), home=EnvironmentPermissions().home_dir()
        )
        patterns = [os.fsencode(p) for p in parsed_args.patterns]
        if is_safe_directory(parsed_args.path, patterns, context):
            sys.stdout.write("safe\n")
            return 0
        sys.stdout.write("unsafe\n")
        return 1


class cmd_help(Command):
    """Display help information."""

    def run(self, args: Sequence[str]) -> Optional[int]:
        """Execute the help command.

        Args:
            args: Command line arguments
        """
        parser = argparse.ArgumentParser(prog="gitward help")
        parser.add_argument(
            "-a",
            "--all",
            action="store_true",
            help="List all commands.",
        )
        parsed_args = parser.parse_args(args)

        if parsed_args.all:
            sys.stdout.write("Available commands:\n")
            for cmd in sorted(commands):
                sys.stdout.write(f"  {cmd}\n")
        else:
            sys.stdout.write(
                "gitward opens git repositories the way git does, deciding how far\n"
                "each one and its configuration can be trusted.\n"
                "\n"
                "For a list of supported commands, see 'gitward help -a'.\n"
            )
        return 0


commands: dict[str, type[Command]] = {
    "help": cmd_help,
    "open": cmd_open,
    "safe-directory": cmd_safe_directory,
}


def main(argv: Optional[Sequence[str]] = None) -> Optional[int]:
    """Main entry point for the gitward CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code or None
    """
    if argv is None:
        argv = sys.argv[1:]

    if not argv or argv[0] in ("-h", "--help"):
        parser = argparse.ArgumentParser(
            prog="gitward", description="Simple command-line interface to gitward"
        )
        parser.add_argument(
            "command",
            nargs="?",
            help=f"Command to run. Available: {', '.join(sorted(commands))}",
        )
        parser.print_help()
        return 1

    remove_null_handler()
    # Try to configure from GIT_TRACE, fall back to warnings on stderr
    if not _configure_logging_from_trace():
        logging.basicConfig(level=logging.WARNING, format="%(message)s")

    cmd = argv[0]
    try:
        cmd_kls = commands[cmd]
    except KeyError:
        logging.fatal("No such subcommand: %s", cmd)
        return 1
    return cmd_kls().run(argv[1:])


def _main() -> None:
    sys.exit(main())


if __name__ == "__main__":
    _main()
