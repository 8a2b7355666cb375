# __init__.py -- The gitward package
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

"""Open git repositories and decide how far they can be trusted."""

__version__ = (0, 1, 0)

__all__ = [
    "NotGitRepository",
    "OpenError",
    "OpenOptions",
    "Repository",
    "TrustLevel",
    "UnsafeGitDir",
    "__version__",
]

from .errors import NotGitRepository, OpenError, UnsafeGitDir
from .repo import OpenOptions, Repository
from .sec import TrustLevel
