"""Shared fixtures: temporary release layout, installer settings, and recording fakes."""

from __future__ import annotations

from pathlib import Path

import pytest

from contiv_installer.config import InstallerConfig
from contiv_installer.constants import (
    FRAGMENT_ACI_GW,
    FRAGMENT_AUTH_PROXY,
    FRAGMENT_CONFIG,
    FRAGMENT_CORE,
    FRAGMENT_ETCD,
    LOCAL_CERT_FILE,
    LOCAL_KEY_FILE,
)
from contiv_installer.orchestrator import Collaborators

FRAGMENTS = {
    FRAGMENT_CONFIG: (
        "# contiv config\n"
        "kind: ConfigMap\n"
        "data:\n"
        "  cluster_store: etcd://__NETMASTER_IP__:6666\n"
        "  vlan_if: __VLAN_IF__\n"
    ),
    FRAGMENT_ETCD: "---\n# contiv etcd\nkind: DaemonSet\nhost: __NETMASTER_IP__\n",
    FRAGMENT_CORE: "---\n# contiv netplugin\nkind: DaemonSet\nnetmaster: __NETMASTER_IP__\n",
    FRAGMENT_ACI_GW: (
        "---\n"
        "# contiv aci gw\n"
        "kind: Deployment\n"
        "env:\n"
        "  APIC_URL: __APIC_URL__\n"
        "  APIC_USERNAME: __APIC_USERNAME__\n"
        "  APIC_PASSWORD: __APIC_PASSWORD__\n"
        "  APIC_LEAF_NODE: __APIC_LEAF_NODE__\n"
        "  APIC_PHYS_DOMAIN: __APIC_PHYS_DOMAIN__\n"
        "  APIC_EPG_BRIDGE_DOMAIN: __APIC_EPG_BRIDGE_DOMAIN__\n"
        "  APIC_CONTRACTS_UNRESTRICTED_MODE: __APIC_CONTRACTS_UNRESTRICTED_MODE__\n"
        "  APIC_CERT_DN: __APIC_CERT_DN__\n"
    ),
    FRAGMENT_AUTH_PROXY: "---\n# contiv auth proxy\nkind: Deployment\nnetmaster: __NETMASTER_IP__:9999\n",
}


class FakeKubectl:
    """Records control plane calls instead of running kubectl."""

    def __init__(self, dns_definition: dict | None = None) -> None:
        self.calls: list[tuple] = []
        self.secrets: dict[str, str] = {}
        self.applied: list[str] = []
        self.dns_definition = dns_definition or {
            "kind": "Deployment",
            "metadata": {"name": "kube-dns", "namespace": "kube-system"},
        }

    def create_secret(self, name: str, namespace: str, source: Path) -> None:
        self.calls.append(("create_secret", name, namespace))
        self.secrets[name] = source.read_text()

    def apply(self, manifest: Path) -> None:
        self.calls.append(("apply", str(manifest)))
        self.applied.append(manifest.read_text())

    def export(self, resource: str, namespace: str) -> dict:
        self.calls.append(("export", resource, namespace))
        return self.dns_definition

    def delete(self, resource: str, namespace: str) -> None:
        self.calls.append(("delete", resource, namespace))


class FakeNetctl:
    def __init__(self) -> None:
        self.calls: list[tuple[str, str]] = []

    def set_forwarding_mode(self, netmaster: str, mode: str) -> None:
        self.calls.append((netmaster, mode))


class FakeCertificateGenerator:
    def __init__(self) -> None:
        self.calls: list[Path] = []

    def __call__(self, output_dir: Path) -> tuple[Path, Path]:
        self.calls.append(output_dir)
        cert, key = output_dir / LOCAL_CERT_FILE, output_dir / LOCAL_KEY_FILE
        cert.write_text("generated cert\n")
        key.write_text("generated key\n")
        return cert, key


class RecordingSleep:
    def __init__(self) -> None:
        self.calls: list[float] = []

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


@pytest.fixture
def template_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "install" / "k8s"
    directory.mkdir(parents=True)
    for name, content in FRAGMENTS.items():
        (directory / name).write_text(content)
    return directory


@pytest.fixture
def installer_config(tmp_path: Path, template_dir: Path) -> InstallerConfig:
    netctl = tmp_path / "netctl"
    netctl.write_text("#!/bin/sh\n")
    hosts = tmp_path / "hosts"
    hosts.write_text("127.0.0.1 localhost\n")
    return InstallerConfig(
        template_dir=template_dir,
        cert_script=tmp_path / "install" / "generate-certificate.sh",
        manifest_path=tmp_path / ".contiv.yaml",
        aci_key_path=tmp_path / "aci.key",
        local_certs_dir=tmp_path / "local_certs",
        auth_proxy_dir=tmp_path / "var" / "contiv",
        netctl_source=netctl,
        netctl_dest=tmp_path / "bin" / "netctl",
        hosts_file=hosts,
        dns_backup_path=tmp_path / "kube-dns.yaml",
        cancel_wait_seconds=5,
        routing_settle_seconds=60,
    )


@pytest.fixture
def fake_kubectl() -> FakeKubectl:
    return FakeKubectl()


@pytest.fixture
def fake_netctl() -> FakeNetctl:
    return FakeNetctl()


@pytest.fixture
def fake_certs() -> FakeCertificateGenerator:
    return FakeCertificateGenerator()


@pytest.fixture
def fake_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def tools(
    fake_kubectl: FakeKubectl,
    fake_netctl: FakeNetctl,
    fake_certs: FakeCertificateGenerator,
    fake_sleep: RecordingSleep,
    installer_config: InstallerConfig,
) -> Collaborators:
    installer_config.netctl_dest.parent.mkdir(parents=True, exist_ok=True)
    return Collaborators(
        kubectl=fake_kubectl,
        netctl=fake_netctl,
        generate_certificate=fake_certs,
        sleep=fake_sleep,
    )
