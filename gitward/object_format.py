# object_format.py -- Object format (hash kind) definitions
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

"""Object formats (hash algorithms) a repository may use.

Only what opening a repository needs lives here: the name recorded in
``extensions.objectFormat`` and the length of hex object ids, which is
required to tell a replacement ref name from garbage.
"""

__all__ = [
    "DEFAULT_OBJECT_FORMAT",
    "OBJECT_FORMATS",
    "SHA1",
    "SHA256",
    "ObjectFormat",
    "get_object_format",
]

import binascii
from typing import Optional

ObjectID = bytes


class ObjectFormat:
    """Object format (hash algorithm) used in Git."""

    def __init__(self, name: str, oid_length: int, hex_length: int) -> None:
        """Initialize an object format.

        Args:
            name: Name of the format (e.g., "sha1", "sha256")
            oid_length: Length of the binary object ID in bytes
            hex_length: Length of the hexadecimal object ID in characters
        """
        self.name = name
        self.oid_length = oid_length
        self.hex_length = hex_length

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"ObjectFormat({self.name!r})"

    def parse_hex(self, value: bytes) -> Optional[ObjectID]:
        """Parse a full hex object id of this format.

        Args:
          value: Candidate hex string
        Returns: The lowercased hex id, or None if ``value`` is not one
        """
        if len(value) != self.hex_length:
            return None
        try:
            binascii.unhexlify(value)
        except (TypeError, binascii.Error):
            return None
        return value.lower()


SHA1 = ObjectFormat("sha1", oid_length=20, hex_length=40)
SHA256 = ObjectFormat("sha256", oid_length=32, hex_length=64)

OBJECT_FORMATS = {
    "sha1": SHA1,
    "sha256": SHA256,
}

DEFAULT_OBJECT_FORMAT = SHA1


def get_object_format(name: Optional[str] = None) -> ObjectFormat:
    """Get an object format by name.

    Args:
        name: Format name ("sha1" or "sha256"). If None, returns default.

    Raises:
        ValueError: If the format name is not supported
    """
    if name is None:
        return DEFAULT_OBJECT_FORMAT
    try:
        return OBJECT_FORMATS[name.lower()]
    except KeyError:
        raise ValueError(f"Unsupported object format: {name}")
