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

"""Cluster side install steps: hosts entry, netctl, manifest apply, post-install."""

from __future__ import annotations

import shutil
from collections.abc import Callable
from pathlib import Path
from typing import Protocol

import yaml
from rich.panel import Panel

from contiv_installer import console, logger
from contiv_installer.config import ForwardingMode, InstallParameters
from contiv_installer.constants import NETMASTER_HOSTNAME
from contiv_installer.errors import ExternalOperationFailure


class ControlPlane(Protocol):
    def apply(self, manifest: Path) -> None: ...

    def export(self, resource: str, namespace: str) -> dict: ...

    def delete(self, resource: str, namespace: str) -> None: ...


class ForwardingModeSetter(Protocol):
    def set_forwarding_mode(self, netmaster: str, mode: str) -> None: ...


Sleep = Callable[[float], None]


def _has_host_entry(hosts_text: str, hostname: str) -> bool:
    for line in hosts_text.splitlines():
        fields = line.split("#", 1)[0].split()
        if hostname in fields[1:]:
            return True
    return False


def ensure_hosts_entry(hosts_file: Path, address: str, hostname: str = NETMASTER_HOSTNAME) -> bool:
    """Map ``hostname`` to ``address`` unless the host name is already mapped.

    Args:
        hosts_file: Hosts file to update.
        address: Address the host name should resolve to.
        hostname: Host name to map.

    Returns:
        True if an entry was appended, False if one already existed.

    Raises:
        ExternalOperationFailure: If the hosts file cannot be read or written.
    """
    try:
        current = hosts_file.read_text() if hosts_file.exists() else ""
        if _has_host_entry(current, hostname):
            logger.info("%s already has an entry for %s", hosts_file, hostname)
            return False
        separator = "" if not current or current.endswith("\n") else "\n"
        with open(hosts_file, "a") as f:
            f.write(f"{separator}{address} {hostname}\n")
    except OSError as err:
        raise ExternalOperationFailure(f"Failed to update {hosts_file}: {err}") from err
    console.print(f"[green]  \u2713 Added '{address} {hostname}' to {hosts_file}[/green]")
    return True


def cancellation_window(manifest_path: Path, seconds: float, sleep: Sleep) -> None:
    """Give the operator a moment to abort before the cluster is modified."""
    console.print(f"[yellow]\u2139\ufe0f  To customize the installation press Ctrl+C and edit {manifest_path}.[/yellow]")
    sleep(seconds)


def install_netctl(source: Path, dest: Path) -> None:
    """Install the netctl binary, replacing any previous version.

    Args:
        source: netctl binary shipped with the release.
        dest: Install location.

    Raises:
        ExternalOperationFailure: If the binary is missing or cannot be copied.
    """
    if not source.is_file():
        raise ExternalOperationFailure(f"netctl binary not found: {source}")
    try:
        dest.unlink(missing_ok=True)
        shutil.copyfile(source, dest)
        dest.chmod(0o755)
    except OSError as err:
        raise ExternalOperationFailure(f"Failed to install netctl to {dest}: {err}") from err
    console.print(f"[green]  \u2713 Installed netctl to {dest}[/green]")


def submit_manifest(control_plane: ControlPlane, manifest_path: Path) -> None:
    """Apply the composite manifest."""
    console.print("[yellow]\u2139\ufe0f  Applying Contiv installation...[/yellow]")
    control_plane.apply(manifest_path)
    console.print("[green]\u2705 Contiv manifest applied[/green]")


def configure_forwarding(
    params: InstallParameters,
    netctl: ForwardingModeSetter,
    settle_seconds: float,
    sleep: Sleep,
) -> bool:
    """Switch the cluster to routing mode when requested.

    Bridge mode is the netmaster default, so nothing is done for it.

    Args:
        params: Resolved install parameters.
        netctl: Client running ``netctl global set``.
        settle_seconds: Fixed wait for the Contiv workloads to start.
        sleep: Sleep function.

    Returns:
        True if the forwarding mode was set.
    """
    if params.fwd_mode is not ForwardingMode.ROUTING:
        return False
    console.print(f"[yellow]\u2139\ufe0f  Waiting {settle_seconds}s for Contiv to start before enabling routing...[/yellow]")
    sleep(settle_seconds)
    netctl.set_forwarding_mode(params.netmaster, ForwardingMode.ROUTING.value)
    console.print("[green]\u2705 Forwarding mode set to routing[/green]")
    return True


def replace_dns_deployment(
    control_plane: ControlPlane,
    deployment: str,
    namespace: str,
    backup_path: Path,
) -> None:
    """Back up and delete the DNS deployment superseded by Contiv.

    There is no rollback: the backup file is the only way to restore it.

    Args:
        control_plane: Control plane client.
        deployment: DNS deployment name.
        namespace: Namespace of the deployment.
        backup_path: Where the exported definition is written as YAML.

    Raises:
        ExternalOperationFailure: If the export, backup or deletion fails.
    """
    resource = f"deployment/{deployment}"
    definition = control_plane.export(resource, namespace)
    try:
        with open(backup_path, "w") as f:
            yaml.safe_dump(definition, f, default_flow_style=False)
    except OSError as err:
        raise ExternalOperationFailure(f"Failed to back up {resource} to {backup_path}: {err}") from err
    logger.info("Saved %s to %s", resource, backup_path)

    control_plane.delete(resource, namespace)
    console.print(f"[green]\u2705 Removed {resource} (backup in {backup_path})[/green]")


def print_summary(netmaster: str, ui_port: int) -> None:
    """Print the post-install hints for the operator."""
    console.print(Panel.fit("Installation is complete", style="bold green"))
    console.print(f"Contiv UI is available at https://{netmaster}:{ui_port}")
    console.print("Please use the first run wizard or configure the setup as follows:")
    console.print(" Configure forwarding mode (optional, default is bridge).")
    console.print("  netctl global set --fwd-mode routing")
    console.print(" Configure ACI mode (optional)")
    console.print("  netctl global set --fabric-mode aci --vlan-range <start>-<end>")
    console.print(" Create a default network")
    console.print("  netctl net create -t default --subnet=<CIDR> default-net")
    console.print("  For example, netctl net create -t default --subnet=20.1.1.0/24 default-net")
