# refs.py -- Read-only access to a repository's references
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

"""Ref handling."""

__all__ = [
    "HEADREF",
    "LOCAL_REPLACE_PREFIX",
    "SYMREF",
    "DiskRefStore",
    "PackedRefsException",
    "WriteReflog",
    "check_ref_format",
    "is_per_worktree_ref",
    "namespace_prefix",
    "read_packed_refs",
]

import enum
import os
from collections.abc import Iterator
from typing import IO, Optional

from .object_format import DEFAULT_OBJECT_FORMAT, ObjectFormat
from .path import precompose_path

Ref = bytes

HEADREF = b"HEAD"
SYMREF = b"ref: "
LOCAL_BRANCH_PREFIX = b"refs/heads/"
LOCAL_REPLACE_PREFIX = b"refs/replace/"
BAD_REF_CHARS = set(b"\177 ~^:?*[")

WINDOWS_DEVICE_NAMES = frozenset(
    [b"con", b"prn", b"aux", b"nul"]
    + [b"com%d" % i for i in range(1, 10)]
    + [b"lpt%d" % i for i in range(1, 10)]
)


class PackedRefsException(ValueError):
    """Indicates an error parsing a packed-refs file."""


class WriteReflog(enum.Enum):
    """When ref updates are recorded in reflogs (``core.logAllRefUpdates``)."""

    ALWAYS = "always"
    NORMAL = "normal"
    DISABLE = "disable"


def check_ref_format(refname: Ref) -> bool:
    """Check if a refname is correctly formatted.

    Implements all the same rules as git-check-ref-format[1].

    [1]
    http://www.kernel.org/pub/software/scm/git/docs/git-check-ref-format.html

    Args:
      refname: The refname to check
    Returns: True if refname is valid, False otherwise
    """
    if b"/." in refname or refname.startswith(b"."):
        return False
    if b"/" not in refname:
        return False
    if b".." in refname:
        return False
    for i, c in enumerate(refname):
        if ord(refname[i : i + 1]) < 0o40 or c in BAD_REF_CHARS:
            return False
    if refname[-1] in b"/.":
        return False
    if refname.endswith(b".lock"):
        return False
    if b"@{" in refname:
        return False
    if b"\\" in refname:
        return False
    return True


def is_per_worktree_ref(ref: bytes) -> bool:
    """Returns whether a reference is stored per worktree or not.

    Per-worktree references are all pseudorefs (e.g. HEAD) and everything
    below "refs/bisect/", "refs/worktree/" and "refs/rewritten/".
    """
    return not ref.startswith(b"refs/") or ref.startswith(
        (b"refs/bisect/", b"refs/worktree/", b"refs/rewritten/")
    )


def namespace_prefix(namespace: bytes) -> bytes:
    """Return the ref prefix of a ``GIT_NAMESPACE`` value.

    Nested namespaces nest the prefix: ``a/b`` becomes
    ``refs/namespaces/a/refs/namespaces/b/``.

    Raises:
      ValueError: if the namespace is not a valid ref component
    """
    prefix = b""
    for part in namespace.strip(b"/").split(b"/"):
        if not part:
            continue
        prefix += b"refs/namespaces/" + part + b"/"
    if not prefix or not check_ref_format(prefix.rstrip(b"/")):
        raise ValueError(f"invalid namespace {namespace!r}")
    return prefix


def _split_ref_line(line: bytes) -> tuple[bytes, bytes]:
    """Split a single ref line into a tuple of SHA and name."""
    fields = line.rstrip(b"\n\r").split(b" ")
    if len(fields) != 2:
        raise PackedRefsException(f"invalid ref line {line!r}")
    sha, name = fields
    if not check_ref_format(name):
        raise PackedRefsException(f"invalid ref name {name!r}")
    return (sha, name)


def read_packed_refs(f: IO[bytes]) -> Iterator[tuple[bytes, bytes]]:
    """Read a packed refs file.

    Peeled lines (``^<sha>``) are skipped.

    Args:
      f: file-like object to read from
    Returns: Iterator over tuples with SHAs and ref names.
    """
    for line in f:
        if line.startswith((b"#", b"^")):
            continue
        if not line.strip():
            continue
        yield _split_ref_line(line)


class DiskRefStore:
    """Refs of a repository on disk, as configured by opening it.

    Shared refs live in the common directory; per-worktree refs (HEAD,
    refs/bisect/, ...) live in the git directory of the work tree.
    """

    def __init__(
        self,
        git_dir: str,
        common_dir: Optional[str] = None,
        *,
        write_reflog: WriteReflog = WriteReflog.DISABLE,
        object_format: ObjectFormat = DEFAULT_OBJECT_FORMAT,
        precompose_unicode: bool = False,
        prohibit_windows_device_names: bool = False,
        namespace: Optional[bytes] = None,
    ) -> None:
        self.worktree_path = git_dir
        self.path = common_dir if common_dir is not None else git_dir
        self.write_reflog = write_reflog
        self.object_format = object_format
        self.precompose_unicode = precompose_unicode
        self.prohibit_windows_device_names = prohibit_windows_device_names
        self.namespace = namespace
        self._packed_refs: Optional[dict[bytes, bytes]] = None

    @classmethod
    def for_linked_worktree(
        cls, git_dir: str, common_dir: str, **kwargs: object
    ) -> "DiskRefStore":
        return cls(git_dir, common_dir, **kwargs)  # type: ignore[arg-type]

    @classmethod
    def at(cls, git_dir: str, **kwargs: object) -> "DiskRefStore":
        return cls(git_dir, None, **kwargs)  # type: ignore[arg-type]

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.worktree_path!r}, {self.path!r})"

    @property
    def git_dir(self) -> str:
        return self.worktree_path

    @property
    def common_dir(self) -> str:
        return self.path

    def _namespaced(self, name: bytes) -> bytes:
        if self.namespace is None or name == HEADREF or not name.startswith(b"refs/"):
            return name
        return namespace_prefix(self.namespace) + name

    def is_valid_name(self, name: bytes) -> bool:
        """Check a ref name, including the device-name restriction if enabled."""
        if name != HEADREF and not check_ref_format(name):
            return False
        if self.prohibit_windows_device_names:
            for component in name.split(b"/"):
                if component.split(b".", 1)[0].lower() in WINDOWS_DEVICE_NAMES:
                    return False
        return True

    def refpath(self, name: bytes) -> str:
        """Return the disk path of a ref."""
        root_dir = self.worktree_path if is_per_worktree_ref(name) else self.path
        path = os.path.join(root_dir, os.fsdecode(name).replace("/", os.path.sep))
        if self.precompose_unicode:
            path = precompose_path(path)
        return path

    def get_packed_refs(self) -> dict[bytes, bytes]:
        """Get contents of the packed-refs file.

        Returns: Dictionary mapping ref names to SHAs; empty when no
            packed-refs file is present.
        """
        if self._packed_refs is None:
            self._packed_refs = {}
            path = os.path.join(self.path, "packed-refs")
            try:
                f = open(path, "rb")
            except FileNotFoundError:
                return {}
            with f:
                for sha, name in read_packed_refs(f):
                    self._packed_refs[name] = sha
        return self._packed_refs

    def read_loose_ref(self, name: bytes) -> Optional[bytes]:
        """Read a reference file and return its contents.

        If the reference file a symbolic reference, only read the first line of
        the file. Otherwise, only read as many bytes as a hex object id has.

        Returns: The contents of the ref file, or None if the file does not
            exist.
        """
        filename = self.refpath(name)
        try:
            with open(filename, "rb") as f:
                header = f.read(len(SYMREF))
                if header == SYMREF:
                    return header + next(iter(f), b"").rstrip(b"\r\n")
                return header + f.read(self.object_format.hex_length - len(SYMREF))
        except (OSError, UnicodeError):
            # don't assume anything specific about the error; in
            # particular, invalid or forbidden paths can raise weird
            # errors depending on the specific operating system
            return None

    def read_ref(self, name: bytes) -> Optional[bytes]:
        """Read the raw value of a ref: ``ref: <target>`` or a hex id."""
        if not self.is_valid_name(name):
            return None
        name = self._namespaced(name)
        contents = self.read_loose_ref(name)
        if contents is None:
            contents = self.get_packed_refs().get(name)
        return contents

    def head_target(self) -> Optional[bytes]:
        """Return the ref HEAD points to, or None if HEAD is detached or missing."""
        contents = self.read_ref(HEADREF)
        if contents is None or not contents.startswith(SYMREF):
            return None
        return contents[len(SYMREF) :]

    def _iter_loose_refs(self, base: bytes) -> Iterator[bytes]:
        root_dir = self.worktree_path if is_per_worktree_ref(base) else self.path
        directory, _, _ = base.rpartition(b"/")
        top = os.path.join(root_dir, os.fsdecode(directory).replace("/", os.path.sep))
        prefix_len = len(os.path.join(root_dir, ""))
        for root, dirs, files in os.walk(top):
            dirs.sort()
            relative = root[prefix_len:].replace(os.path.sep, "/")
            for filename in sorted(files):
                refname = os.fsencode(relative + "/" + filename)
                if refname.startswith(base) and check_ref_format(refname):
                    yield refname

    def iter_prefixed(self, prefix: bytes) -> Iterator[tuple[bytes, bytes]]:
        """Iterate over refs whose name starts with ``prefix``.

        Loose refs shadow packed refs of the same name. Names are returned
        without the namespace prefix.

        Returns: Iterator over (name, raw value) tuples, sorted by name
        """
        full_prefix = self._namespaced(prefix)
        found: dict[bytes, bytes] = {
            name: sha
            for name, sha in self.get_packed_refs().items()
            if name.startswith(full_prefix)
        }
        for name in self._iter_loose_refs(full_prefix):
            contents = self.read_loose_ref(name)
            if contents is not None:
                found[name] = contents
        strip = len(full_prefix) - len(prefix)
        for name in sorted(found):
            stripped = name[strip:]
            if self.is_valid_name(stripped):
                yield stripped, found[name]
