# config.py -- Reading git configuration with per-section provenance
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

"""Reading git configuration.

Every section read from a file or from the process keeps track of where it
came from (:class:`SectionMetadata`): the kind of source, the file it was
read from and how much it is trusted. A :class:`CascadedConfig` holds the
sections of all sources in order of increasing precedence; all lookups take a
filter over that metadata, so a caller decides per lookup which sources count.
"""

__all__ = [
    "DEFAULT_MAX_INCLUDE_DEPTH",
    "CascadedConfig",
    "ConditionMatcher",
    "ConfigFile",
    "ConfigSection",
    "ConfigSourceKind",
    "SectionFilter",
    "SectionMetadata",
    "is_trusted",
    "match_glob_pattern",
    "parse_boolean",
    "parse_integer",
    "sections_from_key_values",
    "split_key",
]

import dataclasses
import enum
import fnmatch
import logging
import os
import re
from collections.abc import Callable, Iterable, Iterator, Mapping
from typing import IO, Optional, Union

from .errors import (
    ConfigBooleanError,
    ConfigIntegerError,
    ConfigStringError,
    InterpolationError,
    SharedConfigError,
)
from .path import InterpolationContext, interpolate
from .sec import TrustLevel

logger = logging.getLogger(__name__)

# Takes the condition value (e.g., "main" for onbranch:main) and returns bool
ConditionMatcher = Callable[[str], bool]

DEFAULT_MAX_INCLUDE_DEPTH = 10
MAX_INCLUDE_FILE_SIZE = 1024 * 1024

Value = Optional[bytes]


class ConfigSourceKind(enum.Enum):
    """Where a configuration section came from."""

    SYSTEM = "system"
    GLOBAL = "global"
    LOCAL = "local"
    WORKTREE = "worktree"
    ENV = "env"
    ENV_OVERRIDE = "env-override"
    CLI = "cli"
    API = "api"

    @property
    def is_process_supplied(self) -> bool:
        """Whether values come from the running process rather than a file.

        Relative paths from such sources are relative to the current
        directory, not to the git directory.
        """
        return self in _PROCESS_SUPPLIED


_PROCESS_SUPPLIED = frozenset(
    [
        ConfigSourceKind.ENV,
        ConfigSourceKind.ENV_OVERRIDE,
        ConfigSourceKind.CLI,
        ConfigSourceKind.API,
    ]
)


@dataclasses.dataclass(frozen=True)
class SectionMetadata:
    """Provenance of a configuration section.

    Attributes:
      source: Kind of source the section was read from
      path: File the section was read from, if any
      trust: How much the section is trusted
      level: Include depth; 0 for sections of the top-level file
    """

    source: ConfigSourceKind
    path: Optional[str] = None
    trust: TrustLevel = TrustLevel.FULL
    level: int = 0

    def with_trust(self, trust: TrustLevel) -> "SectionMetadata":
        return dataclasses.replace(self, trust=trust)


SectionFilter = Callable[[SectionMetadata], bool]


def is_trusted(meta: SectionMetadata) -> bool:
    """Default section filter: only fully trusted sections count."""
    return meta.trust == TrustLevel.FULL


def _accept_all(meta: SectionMetadata) -> bool:
    return True


_TRUE_VALUES = frozenset([b"true", b"yes", b"on"])
_FALSE_VALUES = frozenset([b"false", b"no", b"off", b""])


def parse_boolean(key: str, value: Value) -> bool:
    """Interpret a raw value as git boolean.

    A key without value (``[core] bare``) is true.

    Raises:
      ConfigBooleanError: if the value is not a boolean
    """
    if value is None:
        return True
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    try:
        return int(lowered) != 0
    except ValueError:
        raise ConfigBooleanError(key, value)


_INTEGER_SUFFIXES = {b"k": 1024, b"m": 1024**2, b"g": 1024**3}


def parse_integer(key: str, value: Value) -> int:
    """Interpret a raw value as git integer, with optional k/m/g suffix.

    Raises:
      ConfigIntegerError: if the value is not an integer
    """
    if value is None:
        raise ConfigIntegerError(key, value)
    stripped = value.strip()
    factor = _INTEGER_SUFFIXES.get(stripped[-1:].lower(), 1)
    if factor != 1:
        stripped = stripped[:-1]
    try:
        return int(stripped) * factor
    except ValueError:
        raise ConfigIntegerError(key, value)


def split_key(key: str) -> tuple[bytes, Optional[bytes], bytes]:
    """Split ``section[.subsection].name`` into its parts.

    The subsection may itself contain dots.

    Raises:
      ValueError: if the key has no section or no name
    """
    section, sep, rest = key.partition(".")
    if not sep or not section or not rest:
        raise ValueError(f"invalid config key {key!r}")
    subsection, sep, name = rest.rpartition(".")
    if not name:
        raise ValueError(f"invalid config key {key!r}")
    return (
        section.encode("utf-8"),
        subsection.encode("utf-8") if sep else None,
        name.encode("utf-8"),
    )


class ConfigSection:
    """A run of entries under one section header, with its provenance."""

    def __init__(
        self,
        name: bytes,
        subsection: Optional[bytes],
        meta: SectionMetadata,
        entries: Optional[list[tuple[bytes, Value]]] = None,
    ) -> None:
        self.name = name
        self.subsection = subsection
        self._meta = meta
        self.entries: list[tuple[bytes, Value]] = entries if entries is not None else []
        self._owner: Optional[CascadedConfig] = None

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}({self.name!r}, {self.subsection!r}, "
            f"{self._meta!r}, {self.entries!r})"
        )

    @property
    def meta(self) -> SectionMetadata:
        return self._meta

    def set_trust(self, trust: TrustLevel) -> None:
        """Change the trust of this section.

        Raises:
          SharedConfigError: if the configuration owning this section has
            already been sealed
        """
        if self._owner is not None and self._owner.sealed:
            raise SharedConfigError(
                "can not change the trust of a section of a sealed configuration"
            )
        self._meta = self._meta.with_trust(trust)

    def matches(self, name: bytes, subsection: Optional[bytes]) -> bool:
        """Check whether this section is ``[name "subsection"]``.

        Section names compare case-insensitively, subsections exactly.
        """
        return self.name.lower() == name.lower() and self.subsection == subsection

    def add(self, name: bytes, value: Value) -> None:
        self.entries.append((name, value))

    def get_all(self, name: bytes) -> Iterator[Value]:
        """Iterate over all values of ``name`` in this section, in order."""
        lowered = name.lower()
        for key, value in self.entries:
            if key.lower() == lowered:
                yield value

    def copy(self) -> "ConfigSection":
        return ConfigSection(self.name, self.subsection, self._meta, list(self.entries))


def _match_gitdir_pattern(path: bytes, pattern: bytes, ignorecase: bool = False) -> bool:
    """Match a git directory against an ``includeIf "gitdir:..."`` pattern.

    The pattern has already been normalized: relative patterns are prefixed
    with ``**/`` and a trailing ``/`` has become ``/**``.
    """
    path_str = path.decode("utf-8", errors="replace").replace("\\", "/")
    pattern_str = pattern.decode("utf-8", errors="replace").replace("\\", "/")
    if ignorecase:
        path_str = path_str.lower()
        pattern_str = pattern_str.lower()

    if pattern_str.startswith("**/") and pattern_str.endswith("/**"):
        dirname = pattern_str[3:-3]
        return ("/" + dirname + "/") in path_str or path_str.endswith("/" + dirname)
    if pattern_str.startswith("**/"):
        suffix = pattern_str[3:]
        return path_str == suffix or path_str.endswith("/" + suffix)
    if pattern_str.endswith("/**"):
        base = pattern_str[:-3]
        return path_str == base or path_str.startswith(base + "/")
    if pattern_str.count("**") == 1:
        prefix, suffix = pattern_str.split("**")
        return path_str.startswith(prefix) and path_str.endswith(suffix)
    if any(c in pattern_str for c in "*?["):
        return fnmatch.fnmatchcase(path_str, pattern_str)
    return path_str == pattern_str


def match_glob_pattern(value: str, pattern: str) -> bool:
    r"""Match a value against a glob pattern.

    Supports simple glob patterns like ``*`` and ``**``.

    Raises:
        ValueError: If the pattern is invalid
    """
    pattern_escaped = re.escape(pattern)
    pattern_escaped = pattern_escaped.replace(r"\*\*", ".*")
    pattern_escaped = pattern_escaped.replace(r"\*", "[^/]*")
    pattern_regex = f"^{pattern_escaped}$"

    try:
        return bool(re.match(pattern_regex, value))
    except re.error as e:
        raise ValueError(f"Invalid glob pattern {pattern!r}: {e}")


_ESCAPE_TABLE = {
    ord(b"\\"): ord(b"\\"),
    ord(b'"'): ord(b'"'),
    ord(b"n"): ord(b"\n"),
    ord(b"t"): ord(b"\t"),
    ord(b"b"): ord(b"\b"),
}
_COMMENT_CHARS = [ord(b"#"), ord(b";")]
_WHITESPACE_CHARS = [ord(b"\t"), ord(b" ")]


def _parse_string(value: bytes) -> bytes:
    value_array = bytearray(value.strip())
    ret = bytearray()
    whitespace = bytearray()
    in_quotes = False
    i = 0
    while i < len(value_array):
        c = value_array[i]
        if c == ord(b"\\"):
            i += 1
            if i >= len(value_array):
                if whitespace:
                    ret.extend(whitespace)
                    whitespace = bytearray()
                ret.append(ord(b"\\"))
            else:
                try:
                    v = _ESCAPE_TABLE[value_array[i]]
                    if whitespace:
                        ret.extend(whitespace)
                        whitespace = bytearray()
                    ret.append(v)
                except KeyError:
                    # Unknown escape: keep the backslash, reprocess the next char
                    if whitespace:
                        ret.extend(whitespace)
                        whitespace = bytearray()
                    ret.append(ord(b"\\"))
                    i -= 1
        elif c == ord(b'"'):
            in_quotes = not in_quotes
        elif c in _COMMENT_CHARS and not in_quotes:
            break
        elif c in _WHITESPACE_CHARS:
            whitespace.append(c)
        else:
            if whitespace:
                ret.extend(whitespace)
                whitespace = bytearray()
            ret.append(c)
        i += 1

    if in_quotes:
        raise ValueError("missing end quote")

    return bytes(ret)


def _check_variable_name(name: bytes) -> bool:
    for i in range(len(name)):
        c = name[i : i + 1]
        if not c.isalnum() and c != b"-":
            return False
    return True


def _check_section_name(name: bytes) -> bool:
    for i in range(len(name)):
        c = name[i : i + 1]
        if not c.isalnum() and c not in (b"-", b"."):
            return False
    return True


def _strip_comments(line: bytes) -> bytes:
    comment_bytes = {ord(b"#"), ord(b";")}
    quote = ord(b'"')
    string_open = False
    for i, character in enumerate(bytearray(line)):
        # Comment characters outside balanced quotes denote comment start
        if character == quote:
            string_open = not string_open
        elif not string_open and character in comment_bytes:
            return line[:i]
    return line


def _is_line_continuation(value: bytes) -> bool:
    """Check if a value ends with an unescaped line continuation backslash."""
    if not value.endswith((b"\\\n", b"\\\r\n")):
        return False

    if value.endswith(b"\\\r\n"):
        content = value[:-2]
    else:
        content = value[:-1]

    backslash_count = 0
    for i in range(len(content) - 1, -1, -1):
        if content[i : i + 1] == b"\\":
            backslash_count += 1
        else:
            break

    return backslash_count % 2 == 1


def _parse_section_header_line(line: bytes) -> tuple[bytes, Optional[bytes], bytes]:
    # Parse section header ("[bla]")
    line = _strip_comments(line).rstrip()
    in_quotes = False
    escaped = False
    for i, c in enumerate(line):
        if escaped:
            escaped = False
            continue
        if c == ord(b'"'):
            in_quotes = not in_quotes
        if c == ord(b"\\"):
            escaped = True
        if c == ord(b"]") and not in_quotes:
            last = i
            break
    else:
        raise ValueError("expected trailing ]")
    pts = line[1:last].split(b" ", 1)
    line = line[last + 1 :]
    if len(pts) == 2:
        if pts[1][:1] == b'"' and pts[1][-1:] == b'"':
            subsection = pts[1][1:-1].replace(b'\\"', b'"').replace(b"\\\\", b"\\")
        else:
            raise ValueError(f"Invalid subsection {pts[1]!r}")
        if not _check_section_name(pts[0]):
            raise ValueError(f"invalid section name {pts[0]!r}")
        return pts[0], subsection, line
    if not _check_section_name(pts[0]):
        raise ValueError(f"invalid section name {pts[0]!r}")
    # Deprecated [section.subsection] syntax
    name, sep, sub = pts[0].partition(b".")
    return name, (sub.lower() if sep else None), line


def _is_include(section: ConfigSection, setting: bytes) -> bool:
    if setting.lower() != b"path":
        return False
    name = section.name.lower()
    return (name == b"include" and section.subsection is None) or (
        name == b"includeif" and section.subsection is not None
    )


class ConfigFile:
    """The sections of one configuration file, including what it includes."""

    def __init__(
        self, sections: Optional[list[ConfigSection]] = None, path: Optional[str] = None
    ) -> None:
        self.sections: list[ConfigSection] = sections if sections is not None else []
        self.path = path

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(path={self.path!r}, sections={self.sections!r})"

    def __iter__(self) -> Iterator[ConfigSection]:
        return iter(self.sections)

    @classmethod
    def from_file(
        cls,
        f: IO[bytes],
        meta: SectionMetadata,
        *,
        config_dir: Optional[str] = None,
        follow_includes: bool = True,
        interpolation: Optional[InterpolationContext] = None,
        condition_matchers: Optional[Mapping[str, ConditionMatcher]] = None,
        max_include_depth: int = DEFAULT_MAX_INCLUDE_DEPTH,
        _included_paths: Optional[set[str]] = None,
    ) -> "ConfigFile":
        """Read configuration from a file-like object.

        Args:
          f: File-like object to read from
          meta: Metadata for the sections of this file
          config_dir: Directory relative include paths are resolved against
          follow_includes: Whether to process include directives
          interpolation: Context used to expand ``~`` in include paths
          condition_matchers: Matchers for ``includeIf`` conditions, keyed
            by prefix (e.g. ``"gitdir:"``)
          max_include_depth: Maximum nesting of include directives
        Raises:
          ValueError: if the file is not valid configuration
        """
        if meta.level > max_include_depth:
            raise ValueError(f"Maximum include depth ({max_include_depth}) exceeded")
        included_paths = _included_paths if _included_paths is not None else set()

        ret = cls(path=meta.path)
        section: Optional[ConfigSection] = None
        setting: Optional[bytes] = None
        continuation: Optional[bytes] = None

        def store(value: Value) -> None:
            nonlocal section
            assert section is not None and setting is not None
            section.add(setting, value)
            if value is None or not follow_includes or not _is_include(section, setting):
                return
            included = ret._process_include(
                section,
                value,
                meta,
                config_dir=config_dir,
                interpolation=interpolation or InterpolationContext(),
                condition_matchers=condition_matchers,
                max_include_depth=max_include_depth,
                included_paths=included_paths,
            )
            if included:
                # Entries after the directive take precedence over included ones.
                ret.sections.extend(included)
                section = ConfigSection(section.name, section.subsection, meta)
                ret.sections.append(section)

        for lineno, line in enumerate(f.readlines()):
            if lineno == 0 and line.startswith(b"\xef\xbb\xbf"):
                line = line[3:]
            if setting is None:
                line = line.lstrip()
                if len(line) > 0 and line[:1] == b"[":
                    name, subsection, line = _parse_section_header_line(line)
                    section = ConfigSection(name, subsection, meta)
                    ret.sections.append(section)
                if _strip_comments(line).strip() == b"":
                    continue
                if section is None:
                    raise ValueError(f"setting {line!r} without section")
                try:
                    setting, value = line.split(b"=", 1)
                except ValueError:
                    setting = _strip_comments(line).strip()
                    if not _check_variable_name(setting):
                        raise ValueError(f"invalid variable name {setting!r}")
                    store(None)
                    setting = None
                    continue
                setting = setting.strip()
                if not _check_variable_name(setting):
                    raise ValueError(f"invalid variable name {setting!r}")
                if _is_line_continuation(value):
                    if value.endswith(b"\\\r\n"):
                        continuation = value[:-3]
                    else:
                        continuation = value[:-2]
                else:
                    store(_parse_string(value))
                    setting = None
            else:
                assert continuation is not None
                if _is_line_continuation(line):
                    if line.endswith(b"\\\r\n"):
                        continuation += line[:-3]
                    else:
                        continuation += line[:-2]
                else:
                    continuation += line
                    store(_parse_string(continuation))
                    continuation = None
                    setting = None
        return ret

    def _process_include(
        self,
        section: ConfigSection,
        path_value: bytes,
        meta: SectionMetadata,
        *,
        config_dir: Optional[str],
        interpolation: InterpolationContext,
        condition_matchers: Optional[Mapping[str, ConditionMatcher]],
        max_include_depth: int,
        included_paths: set[str],
    ) -> list[ConfigSection]:
        if section.subsection is not None:
            condition = section.subsection.decode("utf-8", errors="replace")
            if not self._evaluate_includeif_condition(condition, condition_matchers):
                return []

        try:
            include_path = interpolate(path_value, interpolation)
        except InterpolationError as e:
            logger.debug("Invalid include path %r: %s", path_value, e)
            return []
        if not os.path.isabs(include_path):
            if not config_dir:
                # Relative includes are meaningless for sections without a file.
                return []
            include_path = os.path.join(config_dir, include_path)
        include_path = os.path.normpath(include_path)

        if include_path in included_paths:
            return []
        if meta.level >= max_include_depth:
            logger.debug("Not including %r: maximum include depth reached", include_path)
            return []

        try:
            f = open(include_path, "rb")
        except OSError as e:
            # Git silently ignores missing or unreadable include files
            logger.debug("Invalid include path %r: %s", include_path, e)
            return []
        with f:
            if os.fstat(f.fileno()).st_size > MAX_INCLUDE_FILE_SIZE:
                logger.debug("Included file %r is too large", include_path)
                return []
            included_paths.add(include_path)
            included = ConfigFile.from_file(
                f,
                dataclasses.replace(meta, path=include_path, level=meta.level + 1),
                config_dir=os.path.dirname(include_path),
                interpolation=interpolation,
                condition_matchers=condition_matchers,
                max_include_depth=max_include_depth,
                _included_paths=included_paths,
            )
        return included.sections

    def _evaluate_includeif_condition(
        self,
        condition: str,
        condition_matchers: Optional[Mapping[str, ConditionMatcher]],
    ) -> bool:
        if condition_matchers:
            # Longest prefix first, so "gitdir/i:" wins over "gitdir:".
            for prefix in sorted(condition_matchers, key=len, reverse=True):
                if condition.startswith(prefix):
                    return condition_matchers[prefix](condition[len(prefix) :])
        logger.debug("Unknown includeIf condition: %r", condition)
        return False

    @classmethod
    def from_path(
        cls,
        path: Union[str, os.PathLike[str]],
        meta: SectionMetadata,
        **kwargs: object,
    ) -> "ConfigFile":
        """Read configuration from a file on disk.

        The path is recorded in the metadata of every section read.

        Raises:
          FileNotFoundError: if the file does not exist
          ValueError: if the file is not valid configuration
        """
        abs_path = os.path.abspath(os.fspath(path))
        with open(abs_path, "rb") as f:
            return cls.from_file(
                f,
                dataclasses.replace(meta, path=abs_path),
                config_dir=os.path.dirname(abs_path),
                _included_paths={abs_path},
                **kwargs,  # type: ignore[arg-type]
            )


def sections_from_key_values(
    items: Iterable[tuple[str, Value]], meta: SectionMetadata
) -> list[ConfigSection]:
    """Build sections from ``(key, value)`` pairs such as ``-c`` arguments.

    Raises:
      ValueError: if a key is malformed
    """
    sections: list[ConfigSection] = []
    for key, value in items:
        name, subsection, variable = split_key(key)
        if not _check_section_name(name) or not _check_variable_name(variable):
            raise ValueError(f"invalid config key {key!r}")
        if sections and sections[-1].matches(name, subsection):
            sections[-1].add(variable, value)
        else:
            sections.append(ConfigSection(name, subsection, meta, [(variable, value)]))
    return sections


class CascadedConfig:
    """All configuration sections of a repository, lowest precedence first.

    Until seal() is called the configuration is owned by whoever built it and
    sections may have their trust changed. After sealing it is a read-only
    snapshot that may be shared freely.
    """

    def __init__(self, sections: Iterable[ConfigSection] = ()) -> None:
        self._sections: list[ConfigSection] = []
        self._sealed = False
        self.extend(sections)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} with {len(self._sections)} sections>"

    def __iter__(self) -> Iterator[ConfigSection]:
        return iter(self._sections)

    def __len__(self) -> int:
        return len(self._sections)

    @property
    def sealed(self) -> bool:
        return self._sealed

    def seal(self) -> "CascadedConfig":
        """Freeze this configuration into a shareable snapshot."""
        self._sealed = True
        return self

    def extend(self, sections: Iterable[ConfigSection]) -> None:
        """Append sections with higher precedence than the existing ones.

        Raises:
          SharedConfigError: if the configuration is sealed
        """
        if self._sealed:
            raise SharedConfigError("can not add sections to a sealed configuration")
        for section in sections:
            if section._owner is not None and section._owner is not self:
                section = section.copy()
            section._owner = self
            self._sections.append(section)

    def raw_values_filter(
        self, key: str, filter: Optional[SectionFilter] = None
    ) -> list[tuple[Value, SectionMetadata]]:
        """Return all values of ``key`` with their metadata, lowest precedence first."""
        name, subsection, variable = split_key(key)
        accept = filter if filter is not None else _accept_all
        ret = []
        for section in self._sections:
            if not section.matches(name, subsection) or not accept(section.meta):
                continue
            for value in section.get_all(variable):
                ret.append((value, section.meta))
        return ret

    def raw_value_filter(
        self, key: str, filter: Optional[SectionFilter] = None
    ) -> Optional[tuple[Value, SectionMetadata]]:
        """Return the effective value of ``key`` with its metadata, or None."""
        values = self.raw_values_filter(key, filter)
        if not values:
            return None
        return values[-1]

    def string_filter(
        self, key: str, filter: Optional[SectionFilter] = None
    ) -> Optional[bytes]:
        """Return the effective value of ``key`` as string.

        Raises:
          ConfigStringError: if the key is set without a value
        """
        found = self.raw_value_filter(key, filter)
        if found is None:
            return None
        value, _meta = found
        if value is None:
            raise ConfigStringError(key, value)
        return value

    def strings_filter(
        self, key: str, filter: Optional[SectionFilter] = None
    ) -> Optional[list[bytes]]:
        """Return all values of a multi-valued ``key`` in order.

        Entries without a value are skipped.
        """
        values = self.raw_values_filter(key, filter)
        if not values:
            return None
        return [value for value, _meta in values if value is not None]

    def boolean_filter(
        self, key: str, filter: Optional[SectionFilter] = None
    ) -> Optional[bool]:
        """Return the effective value of ``key`` as boolean.

        Raises:
          ConfigBooleanError: if the value is not a boolean
        """
        found = self.raw_value_filter(key, filter)
        if found is None:
            return None
        return parse_boolean(key, found[0])

    def integer_filter(
        self, key: str, filter: Optional[SectionFilter] = None
    ) -> Optional[int]:
        """Return the effective value of ``key`` as integer.

        Raises:
          ConfigIntegerError: if the value is not an integer
        """
        found = self.raw_value_filter(key, filter)
        if found is None:
            return None
        return parse_integer(key, found[0])

    def path_filter(
        self, key: str, filter: Optional[SectionFilter] = None
    ) -> Optional[tuple[bytes, SectionMetadata]]:
        """Return the effective, still uninterpolated path value of ``key``.

        Entries without a value can not be paths and are ignored.
        """
        for value, meta in reversed(self.raw_values_filter(key, filter)):
            if value is not None:
                return value, meta
        return None
