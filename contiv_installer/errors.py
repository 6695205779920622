# /*
# Copyright 2026 The Contiv Authors.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# */

"""Installer error hierarchy. Every error is fatal and ends the run with exit status 1."""

from __future__ import annotations


class InstallerError(RuntimeError):
    """Base class for all installer failures."""


class UsageError(InstallerError):
    """Missing or invalid operator input, raised before any side effect."""


class PrivilegeError(InstallerError):
    """The installer is not running as root."""


class ExternalOperationFailure(InstallerError):
    """A command or filesystem operation the installer depends on failed."""


class ManifestError(InstallerError):
    """The composite manifest could not be assembled or still holds placeholders."""
