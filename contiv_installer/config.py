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

"""Installer settings and the resolved install parameters."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from rich.panel import Panel

from contiv_installer import console
from contiv_installer.constants import (
    DEFAULT_ACI_KEY_PATH,
    DEFAULT_AUTH_PROXY_DIR,
    DEFAULT_CANCEL_WAIT_SECONDS,
    DEFAULT_CERT_SCRIPT,
    DEFAULT_CONTRACTS_UNRESTRICTED_MODE,
    DEFAULT_DNS_BACKUP_PATH,
    DEFAULT_DNS_DEPLOYMENT,
    DEFAULT_EPG_BRIDGE_DOMAIN,
    DEFAULT_HOSTS_FILE,
    DEFAULT_LOCAL_CERTS_DIR,
    DEFAULT_MANIFEST_PATH,
    DEFAULT_NETCTL_DEST,
    DEFAULT_NETCTL_SOURCE,
    DEFAULT_NETMASTER_PORT,
    DEFAULT_ROUTING_SETTLE_SECONDS,
    DEFAULT_TEMPLATE_DIR,
    DEFAULT_UI_PORT,
    NS_KUBE_SYSTEM,
)
from contiv_installer.errors import UsageError


# ============================================================================
# Installer settings
# ============================================================================

class InstallerConfig(BaseSettings):
    """Fixed paths and timings, auto-loaded from CONTIV_* env vars.

    Relative paths are resolved against the working directory, which is
    expected to be the root of an unpacked Contiv release.

    Attributes:
        template_dir: Directory holding the manifest template fragments.
        cert_script: Script generating a self-signed auth proxy certificate.
        manifest_path: Where the composite manifest is written.
        aci_key_path: Where the ACI key is placed before it becomes a secret.
        local_certs_dir: Output directory of the certificate script.
        auth_proxy_dir: System directory read by the auth proxy at runtime.
        netctl_source: netctl binary shipped with the release.
        netctl_dest: Install location of netctl.
        hosts_file: Hosts file receiving the netmaster entry.
        system_namespace: Namespace of the ACI key secret and the DNS deployment.
        dns_deployment: Deployment superseded by the Contiv install.
        dns_backup_path: Where the DNS deployment definition is saved.
        netmaster_port: Netmaster REST port used by netctl.
        ui_port: Port of the Contiv UI behind the auth proxy.
        cancel_wait_seconds: Pause before the cluster is modified.
        routing_settle_seconds: Pause before switching to routing mode.
    """

    model_config = SettingsConfigDict(env_prefix="CONTIV_", extra="ignore")

    template_dir: Path = Path(DEFAULT_TEMPLATE_DIR)
    cert_script: Path = Path(DEFAULT_CERT_SCRIPT)
    manifest_path: Path = Path(DEFAULT_MANIFEST_PATH)
    aci_key_path: Path = Path(DEFAULT_ACI_KEY_PATH)
    local_certs_dir: Path = Path(DEFAULT_LOCAL_CERTS_DIR)
    auth_proxy_dir: Path = Path(DEFAULT_AUTH_PROXY_DIR)
    netctl_source: Path = Path(DEFAULT_NETCTL_SOURCE)
    netctl_dest: Path = Path(DEFAULT_NETCTL_DEST)
    hosts_file: Path = Path(DEFAULT_HOSTS_FILE)
    system_namespace: str = NS_KUBE_SYSTEM
    dns_deployment: str = DEFAULT_DNS_DEPLOYMENT
    dns_backup_path: Path = Path(DEFAULT_DNS_BACKUP_PATH)
    netmaster_port: int = Field(default=DEFAULT_NETMASTER_PORT, ge=1, le=65535)
    ui_port: int = Field(default=DEFAULT_UI_PORT, ge=1, le=65535)
    cancel_wait_seconds: int = Field(default=DEFAULT_CANCEL_WAIT_SECONDS, ge=0)
    routing_settle_seconds: int = Field(default=DEFAULT_ROUTING_SETTLE_SECONDS, ge=0)


# ============================================================================
# Install parameters
# ============================================================================

class ForwardingMode(str, Enum):
    """Cluster-wide data plane forwarding mode."""

    BRIDGE = "bridge"
    ROUTING = "routing"


@dataclass(frozen=True)
class FabricParameters:
    """ACI fabric controller settings, present only in fabric mode.

    Attributes:
        apic_url: APIC URL, e.g. ``https://apic:443``.
        username: APIC user name.
        password: APIC password, may be empty when an ACI key is given.
        leaf_node: APIC leaf node, e.g. ``topology/pod-1/node-101``.
        phys_domain: APIC physical domain.
        epg_bridge_domain: EPG bridge domain.
        contracts_unrestricted_mode: ``yes`` or ``no``.
    """

    apic_url: str
    username: str
    password: str
    leaf_node: str
    phys_domain: str
    epg_bridge_domain: str = DEFAULT_EPG_BRIDGE_DOMAIN
    contracts_unrestricted_mode: str = DEFAULT_CONTRACTS_UNRESTRICTED_MODE

    def __post_init__(self) -> None:
        required = {
            "apic_url": self.apic_url,
            "username": self.username,
            "leaf_node": self.leaf_node,
            "phys_domain": self.phys_domain,
        }
        missing = [name for name, value in required.items() if not value]
        if missing:
            raise UsageError(f"Missing APIC settings: {', '.join(missing)}")


@dataclass(frozen=True)
class InstallParameters:
    """Operator inputs for one install run. Built once, never mutated.

    Attributes:
        netmaster: DNS name or IP address of the netmaster service VIP.
        cluster_store: External etcd/consul URL, or empty to run etcd in-cluster.
        vlan_if: Data plane interface.
        fwd_mode: Forwarding mode.
        contiv_config: netplugin configuration file, recorded as given.
        tls_cert: Auth proxy certificate, or empty to generate one.
        tls_key: Auth proxy key matching ``tls_cert``.
        aci_key: ACI private key stored as the ``aci.key`` secret, or empty.
        apic_cert_dn: Certificate DN for ``aci_key``, or empty.
        fabric: ACI settings, or None outside fabric mode.
    """

    netmaster: str
    cluster_store: str = ""
    vlan_if: str = ""
    fwd_mode: ForwardingMode = ForwardingMode.BRIDGE
    contiv_config: str = ""
    tls_cert: str = ""
    tls_key: str = ""
    aci_key: str = ""
    apic_cert_dn: str = ""
    fabric: FabricParameters | None = None

    def __post_init__(self) -> None:
        if self.fabric is not None and not self.fabric.password and not self.aci_key:
            raise UsageError("An APIC password or ACI key is required")

    @property
    def fabric_mode(self) -> bool:
        return self.fabric is not None


def display_parameters(params: InstallParameters) -> None:
    """Print the resolved parameters, masking the APIC password.

    Args:
        params: Resolved install parameters.
    """
    console.print(Panel.fit("Configuration", style="bold blue"))
    console.print("[yellow]Contiv:[/yellow]")
    console.print(f"  netmaster       : {params.netmaster}")
    console.print(f"  cluster_store   : {params.cluster_store or '(in-cluster etcd)'}")
    console.print(f"  vlan_if         : {params.vlan_if or '(none)'}")
    console.print(f"  fwd_mode        : {params.fwd_mode.value}")
    if params.contiv_config:
        console.print(f"  config          : {params.contiv_config}")
    console.print(f"  tls_cert        : {params.tls_cert or '(generated)'}")
    if params.aci_key:
        console.print(f"  aci_key         : {params.aci_key}")
    if params.apic_cert_dn:
        console.print(f"  cert_dn         : {params.apic_cert_dn}")

    fabric = params.fabric
    if fabric is not None:
        console.print("[yellow]ACI:[/yellow]")
        console.print(f"  apic_url        : {fabric.apic_url}")
        console.print(f"  username        : {fabric.username}")
        console.print(f"  password        : {'********' if fabric.password else '(key based)'}")
        console.print(f"  leaf_node       : {fabric.leaf_node}")
        console.print(f"  phys_domain     : {fabric.phys_domain}")
        console.print(f"  bridge_domain   : {fabric.epg_bridge_domain}")
        console.print(f"  unrestricted    : {fabric.contracts_unrestricted_mode}")
