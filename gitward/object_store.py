# object_store.py -- Handle on a repository's object database
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

"""Handle on the object database of an opened repository.

Reading objects is not part of gitward; this handle records how the object
database was configured when the repository was opened, so an object reader
can be constructed from it later, and resolves replacement objects.
"""

__all__ = [
    "PACKDIR",
    "DiskObjectStore",
]

import os
from collections.abc import Iterable, Mapping
from typing import Optional

from .object_format import DEFAULT_OBJECT_FORMAT, ObjectFormat, ObjectID

PACKDIR = "pack"
MULTI_PACK_INDEX = "multi-pack-index"


class DiskObjectStore:
    """The object database below ``<common dir>/objects``.

    Attributes:
      path: The objects directory
      slots: Number of pack slots to reserve, or None to size by disk state
      object_format: Hash kind of all objects
      use_multi_pack_index: Whether a multi-pack-index may be used
      replacements: Mapping of replaced object ids to their replacements
      current_dir: Directory relative alternates are resolved against
    """

    def __init__(
        self,
        path: str,
        replacements: Iterable[tuple[ObjectID, ObjectID]] = (),
        *,
        slots: Optional[int] = None,
        object_format: ObjectFormat = DEFAULT_OBJECT_FORMAT,
        use_multi_pack_index: bool = True,
        current_dir: Optional[str] = None,
    ) -> None:
        if slots is not None and slots < 1:
            raise ValueError(f"slots must be positive, got {slots}")
        self.path = path
        self.slots = slots
        self.object_format = object_format
        self.use_multi_pack_index = use_multi_pack_index
        self.current_dir = current_dir
        self._replacements: dict[ObjectID, ObjectID] = dict(replacements)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}({self.path!r})>"

    @property
    def replacements(self) -> Mapping[ObjectID, ObjectID]:
        return self._replacements

    @property
    def pack_dir(self) -> str:
        return os.path.join(self.path, PACKDIR)

    def multi_pack_index_path(self) -> Optional[str]:
        """Return the multi-pack-index file to use, if enabled and present."""
        if not self.use_multi_pack_index:
            return None
        path = os.path.join(self.pack_dir, MULTI_PACK_INDEX)
        if not os.path.isfile(path):
            return None
        return path

    def resolve_replacement(self, sha: ObjectID) -> ObjectID:
        """Return the object that should be read in place of ``sha``.

        Replacements are followed transitively; a cycle stops at the first
        object seen twice.
        """
        seen = {sha}
        while sha in self._replacements:
            sha = self._replacements[sha]
            if sha in seen:
                break
            seen.add(sha)
        return sha

    def contains_loose(self, sha: ObjectID) -> bool:
        """Check if a particular object is present as a loose object."""
        hexsha = sha.decode("ascii")
        return os.path.isfile(os.path.join(self.path, hexsha[:2], hexsha[2:]))
