# errors.py -- Exceptions raised while opening repositories
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

"""gitward-related exception classes."""

__all__ = [
    "ConfigBooleanError",
    "ConfigError",
    "ConfigIntegerError",
    "ConfigParseError",
    "ConfigPathError",
    "ConfigPathInterpolationError",
    "ConfigStringError",
    "ConfigTypedValueError",
    "InterpolationError",
    "NotGitRepository",
    "OpenError",
    "SharedConfigError",
    "UnsafeGitDir",
    "UnsupportedObjectFormat",
    "UnsupportedRepositoryFormatVersion",
]

from typing import Optional


class OpenError(Exception):
    """Base class for all errors that abort opening a repository."""


class NotGitRepository(OpenError):
    """Indicates that no Git repository was found."""

    def __init__(self, path: str, cause: Optional[BaseException] = None) -> None:
        """Initialize a NotGitRepository exception.

        Args:
            path: The path that was probed last.
            cause: The discovery failure for that path, if any.
        """
        self.path = path
        self.cause = cause
        message = f"No git repository was found at {path}"
        if cause is not None:
            message += f": {cause}"
        OpenError.__init__(self, message)


class UnsafeGitDir(OpenError):
    """The repository is not owned by us and no safe.directory entry allows it."""

    def __init__(self, path: str) -> None:
        """Initialize an UnsafeGitDir exception.

        Args:
            path: The canonicalized path that failed the safe.directory check.
        """
        self.path = path
        OpenError.__init__(
            self,
            f"The repository at {path!r} is owned by someone else; "
            "add it to safe.directory to trust it",
        )


class ConfigError(OpenError):
    """Base class for configuration values that could not be used."""


class ConfigParseError(ConfigError):
    """A configuration file could not be parsed."""

    def __init__(self, path: Optional[str], cause: BaseException) -> None:
        self.path = path
        self.cause = cause
        ConfigError.__init__(self, f"Invalid configuration file {path}: {cause}")


class ConfigPathInterpolationError(ConfigError):
    """A path value could not be interpolated."""

    def __init__(self, value: bytes, cause: BaseException) -> None:
        """Initialize a ConfigPathInterpolationError.

        Args:
            value: The raw, uninterpolated value.
            cause: The interpolation failure.
        """
        self.value = value
        self.cause = cause
        ConfigError.__init__(
            self,
            f"Could not interpolate path {value.decode('utf-8', 'replace')!r}: {cause}",
        )


class ConfigTypedValueError(ConfigError):
    """A configuration value could not be read as the type its key requires."""

    type_name = "value"

    def __init__(self, key: str, value: Optional[bytes] = None) -> None:
        """Initialize a ConfigTypedValueError.

        Args:
            key: The offending key, e.g. ``core.bare``.
            value: The raw value, or None if the key had no value.
        """
        self.key = key
        self.value = value
        if value is None:
            shown = "<no value>"
        else:
            shown = repr(value.decode("utf-8", "replace"))
        ConfigError.__init__(
            self, f"{key} = {shown} is not a valid {self.type_name}"
        )


class ConfigBooleanError(ConfigTypedValueError):
    """A value could not be read as boolean."""

    type_name = "boolean"


class ConfigStringError(ConfigTypedValueError):
    """A value could not be read as string."""

    type_name = "string"


class ConfigPathError(ConfigTypedValueError):
    """A value could not be read as path."""

    type_name = "path"


class ConfigIntegerError(ConfigTypedValueError):
    """A value could not be read as integer."""

    type_name = "integer"


class UnsupportedRepositoryFormatVersion(ConfigError):
    """core.repositoryFormatVersion is not one we understand."""

    def __init__(self, version: int) -> None:
        self.version = version
        ConfigError.__init__(self, f"Unsupported repository format version {version}")


class UnsupportedObjectFormat(ConfigError):
    """extensions.objectFormat names a hash we do not know."""

    def __init__(self, name: str) -> None:
        self.name = name
        ConfigError.__init__(self, f"Unsupported object format {name!r}")


class InterpolationError(ValueError):
    """A path could not be interpolated."""


class SharedConfigError(RuntimeError):
    """A configuration was mutated after it was shared as a snapshot.

    This is a programming error: trust elevation must happen while the
    pipeline is the only owner of the configuration.
    """
