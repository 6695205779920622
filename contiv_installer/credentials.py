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

"""ACI key secret and auth proxy TLS material provisioning."""

from __future__ import annotations

import shutil
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from contiv_installer import console
from contiv_installer.config import InstallerConfig, InstallParameters
from contiv_installer.constants import (
    ACI_KEY_DUMMY_CONTENT,
    ACI_KEY_SECRET,
    AUTH_PROXY_CERT_FILE,
    AUTH_PROXY_KEY_FILE,
)
from contiv_installer.errors import ExternalOperationFailure


class SecretStore(Protocol):
    def create_secret(self, name: str, namespace: str, source: Path) -> None: ...


GenerateCertificate = Callable[[Path], tuple[Path, Path]]


@dataclass(frozen=True)
class CredentialArtifact:
    """A credential file to place on disk, from a source file or literal content.

    Attributes:
        destination: Where the file is written.
        source: File to copy, or None.
        content: Literal content used when there is no source.
    """

    destination: Path
    source: Path | None = None
    content: str | None = None

    def materialize(self) -> Path:
        """Write the artifact to its destination.

        Returns:
            The destination path.

        Raises:
            ExternalOperationFailure: If there is nothing to write or the copy fails.
        """
        try:
            if self.source is not None:
                shutil.copyfile(self.source, self.destination)
            elif self.content is not None:
                self.destination.write_text(self.content)
            else:
                raise ExternalOperationFailure(f"No source given for {self.destination}")
        except OSError as err:
            raise ExternalOperationFailure(f"Failed to write {self.destination}: {err}") from err
        return self.destination


def provision_fabric_key(params: InstallParameters, config: InstallerConfig, secrets: SecretStore) -> Path:
    """Place the ACI key and store it as a secret.

    Without a key file a placeholder key is written so the secret the
    workloads mount always exists. A given key file is stored whether or not
    fabric mode is enabled.

    Args:
        params: Resolved install parameters.
        config: Installer settings with the key path and namespace.
        secrets: Control plane client creating the secret.

    Returns:
        Path of the local key file.

    Raises:
        ExternalOperationFailure: If the key cannot be written or the secret
            cannot be created.
    """
    if params.aci_key:
        artifact = CredentialArtifact(destination=config.aci_key_path, source=Path(params.aci_key))
    else:
        artifact = CredentialArtifact(destination=config.aci_key_path, content=ACI_KEY_DUMMY_CONTENT)
    local_key = artifact.materialize()

    secrets.create_secret(ACI_KEY_SECRET, config.system_namespace, local_key)
    console.print(f"[green]\u2705 Secret {ACI_KEY_SECRET} created in {config.system_namespace}[/green]")
    return local_key


def provision_tls_pair(
    params: InstallParameters,
    config: InstallerConfig,
    generate_certificate: GenerateCertificate,
) -> tuple[Path, Path]:
    """Resolve the auth proxy certificate and key and install them.

    Args:
        params: Resolved install parameters.
        config: Installer settings with the local and system cert locations.
        generate_certificate: Produces a self-signed pair in the given directory.

    Returns:
        Tuple of (cert_path, key_path) in the auth proxy directory.

    Raises:
        ExternalOperationFailure: If generation or any copy fails.
    """
    try:
        config.auth_proxy_dir.mkdir(parents=True, exist_ok=True)
    except OSError as err:
        raise ExternalOperationFailure(f"Failed to create {config.auth_proxy_dir}: {err}") from err

    if params.tls_cert:
        cert = Path(params.tls_cert)
        key = Path(params.tls_key) if params.tls_key else None
    else:
        console.print("[yellow]\u2139\ufe0f  Generating local certs for Contiv Proxy[/yellow]")
        try:
            config.local_certs_dir.mkdir(parents=True, exist_ok=True)
        except OSError as err:
            raise ExternalOperationFailure(f"Failed to create {config.local_certs_dir}: {err}") from err
        cert, key = generate_certificate(config.local_certs_dir)

    installed = (
        CredentialArtifact(destination=config.auth_proxy_dir / AUTH_PROXY_CERT_FILE, source=cert).materialize(),
        CredentialArtifact(destination=config.auth_proxy_dir / AUTH_PROXY_KEY_FILE, source=key).materialize(),
    )
    console.print(f"[green]\u2705 Auth proxy certificate installed in {config.auth_proxy_dir}[/green]")
    return installed
