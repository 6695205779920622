from __future__ import annotations

import pytest

from contiv_installer.config import InstallerConfig
from contiv_installer.constants import (
    ALL_PLACEHOLDERS,
    FABRIC_PLACEHOLDERS,
    FRAGMENT_ACI_GW,
    FRAGMENT_ETCD,
)
from contiv_installer.errors import ExternalOperationFailure, ManifestError
from contiv_installer.orchestrator import run_pipeline
from contiv_installer.resolver import PresuppliedPassword, resolve_parameters


def test_bridge_install_with_self_hosted_store(installer_config: InstallerConfig, tools, fake_kubectl, fake_netctl):
    params = resolve_parameters(netmaster="10.0.0.1", cluster_store="", vlan_if="eth1", fwd_mode="bridge")

    state = run_pipeline(params, installer_config, tools)

    assert state.completed == ("assembling", "provisioning", "substituting", "installing")
    assert FRAGMENT_ETCD in state.document.fragments
    assert FRAGMENT_ACI_GW not in state.document.fragments
    final = installer_config.manifest_path.read_text()
    assert not any(token in final for token in ALL_PLACEHOLDERS)
    assert "vlan_if: eth1" in final
    assert fake_kubectl.applied == [final]
    assert fake_netctl.calls == []
    assert state.forwarding_configured is False


def test_fabric_install_substitutes_apic_settings(installer_config: InstallerConfig, tools, fake_kubectl):
    params = resolve_parameters(
        netmaster="10.0.0.1",
        apic_url="https://apic:443",
        apic_username="u",
        apic_phys_domain="d",
        apic_leaf_node="l",
        apic_password="p",
    )

    state = run_pipeline(params, installer_config, tools)

    assert FRAGMENT_ACI_GW in state.document.fragments
    final = installer_config.manifest_path.read_text()
    for token in FABRIC_PLACEHOLDERS:
        assert token not in final
    assert "APIC_URL: https://apic:443" in final
    assert "APIC_PASSWORD: p" in final
    assert "APIC_EPG_BRIDGE_DOMAIN: not_specified" in final
    assert "APIC_CONTRACTS_UNRESTRICTED_MODE: no" in final
    assert "APIC_CERT_DN" not in final


def test_side_effects_run_in_order(installer_config: InstallerConfig, tools, fake_kubectl, fake_sleep):
    params = resolve_parameters(netmaster="10.0.0.1", fwd_mode="routing")

    state = run_pipeline(params, installer_config, tools)

    assert [call[0] for call in fake_kubectl.calls] == ["create_secret", "apply", "export", "delete"]
    assert fake_sleep.calls == [5, 60]
    assert state.forwarding_configured is True
    assert state.hosts_entry_added is True
    assert installer_config.netctl_dest.is_file()
    assert (installer_config.auth_proxy_dir / "auth_proxy_cert.pem").is_file()


def test_prompted_password_reaches_manifest(installer_config: InstallerConfig, tools):
    provider = PresuppliedPassword("typed-secret")
    params = resolve_parameters(
        netmaster="10.0.0.1",
        apic_url="https://apic:443",
        apic_username="u",
        apic_phys_domain="d",
        apic_leaf_node="topology/pod-1/node-101",
        password_provider=provider,
    )

    run_pipeline(params, installer_config, tools)

    final = installer_config.manifest_path.read_text()
    assert "APIC_PASSWORD: typed-secret" in final
    assert "APIC_LEAF_NODE: topology/pod-1/node-101" in final


def test_rerun_does_not_duplicate_hosts_entry(installer_config: InstallerConfig, tools):
    params = resolve_parameters(netmaster="10.0.0.1")

    run_pipeline(params, installer_config, tools)
    second = run_pipeline(params, installer_config, tools)

    assert second.hosts_entry_added is False
    assert installer_config.hosts_file.read_text().count("netmaster") == 1


def test_secret_failure_stops_before_apply(installer_config: InstallerConfig, tools, fake_kubectl):
    def fail(name, namespace, source):
        raise ExternalOperationFailure("connection refused")

    fake_kubectl.create_secret = fail
    params = resolve_parameters(netmaster="10.0.0.1")

    with pytest.raises(ExternalOperationFailure):
        run_pipeline(params, installer_config, tools)
    assert fake_kubectl.applied == []
    assert "netmaster" not in installer_config.hosts_file.read_text()


def test_unresolved_placeholder_stops_before_install(installer_config: InstallerConfig, tools, fake_kubectl):
    core = installer_config.template_dir / "contiv.yaml"
    core.write_text(core.read_text() + "apic: __APIC_URL__\n")
    params = resolve_parameters(netmaster="10.0.0.1")

    with pytest.raises(ManifestError):
        run_pipeline(params, installer_config, tools)
    assert fake_kubectl.applied == []
