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

"""Install pipeline: named stages run in a fixed order, stopping at the first failure."""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass, replace
from pathlib import Path
from typing import NamedTuple

from rich.panel import Panel

from contiv_installer import console, logger
from contiv_installer.clients import CertificateGenerator, KubectlClient, NetctlClient
from contiv_installer.config import InstallerConfig, InstallParameters
from contiv_installer.credentials import GenerateCertificate, provision_fabric_key, provision_tls_pair
from contiv_installer.errors import ManifestError
from contiv_installer.installer import (
    cancellation_window,
    configure_forwarding,
    ensure_hosts_entry,
    install_netctl,
    print_summary,
    replace_dns_deployment,
    submit_manifest,
)
from contiv_installer.manifest import (
    ManifestDocument,
    append_auth_proxy,
    assemble_manifest,
    substitute_manifest,
)


# ============================================================================
# Pipeline model
# ============================================================================

@dataclass(frozen=True)
class Collaborators:
    """External tools the pipeline drives.

    Attributes:
        kubectl: Control plane client.
        netctl: Client for post-install netctl commands.
        generate_certificate: Produces a self-signed cert/key pair.
        sleep: Sleep function used for the fixed pauses.
    """

    kubectl: KubectlClient
    netctl: NetctlClient
    generate_certificate: GenerateCertificate
    sleep: Callable[[float], None] = time.sleep

    @classmethod
    def from_config(cls, config: InstallerConfig) -> Collaborators:
        return cls(
            kubectl=KubectlClient(),
            netctl=NetctlClient(config.netctl_dest, config.netmaster_port),
            generate_certificate=CertificateGenerator(config.cert_script),
        )


@dataclass(frozen=True)
class InstallContext:
    """Read-only inputs shared by every stage."""

    params: InstallParameters
    config: InstallerConfig
    tools: Collaborators


@dataclass(frozen=True)
class PipelineState:
    """Results accumulated by the stages.

    Attributes:
        completed: Names of the stages that finished.
        document: The manifest, once assembled.
        fabric_key: Local ACI key file.
        tls_pair: Installed auth proxy (cert, key).
        hosts_entry_added: Whether a netmaster hosts entry was written.
        forwarding_configured: Whether routing mode was set after install.
    """

    completed: tuple[str, ...] = ()
    document: ManifestDocument | None = None
    fabric_key: Path | None = None
    tls_pair: tuple[Path, Path] | None = None
    hosts_entry_added: bool = False
    forwarding_configured: bool = False

    def require_document(self) -> ManifestDocument:
        if self.document is None:
            raise ManifestError("Manifest has not been assembled")
        return self.document


StageFn = Callable[[InstallContext, PipelineState], PipelineState]


class Stage(NamedTuple):
    name: str
    title: str
    run: StageFn


# ============================================================================
# Stages
# ============================================================================

def _assemble(ctx: InstallContext, state: PipelineState) -> PipelineState:
    document = assemble_manifest(ctx.params, ctx.config.template_dir)
    document.write(ctx.config.manifest_path)
    return replace(state, document=document)


def _provision(ctx: InstallContext, state: PipelineState) -> PipelineState:
    document = state.require_document()
    fabric_key = provision_fabric_key(ctx.params, ctx.config, ctx.tools.kubectl)
    append_auth_proxy(document, ctx.config.template_dir)
    document.write(ctx.config.manifest_path)
    tls_pair = provision_tls_pair(ctx.params, ctx.config, ctx.tools.generate_certificate)
    return replace(state, fabric_key=fabric_key, tls_pair=tls_pair)


def _substitute(ctx: InstallContext, state: PipelineState) -> PipelineState:
    document = state.require_document()
    substitute_manifest(document, ctx.params)
    document.write(ctx.config.manifest_path)
    return state


def _install(ctx: InstallContext, state: PipelineState) -> PipelineState:
    params, config, tools = ctx.params, ctx.config, ctx.tools
    added = ensure_hosts_entry(config.hosts_file, params.netmaster)
    cancellation_window(config.manifest_path, config.cancel_wait_seconds, tools.sleep)
    install_netctl(config.netctl_source, config.netctl_dest)
    submit_manifest(tools.kubectl, config.manifest_path)
    configured = configure_forwarding(params, tools.netctl, config.routing_settle_seconds, tools.sleep)
    replace_dns_deployment(tools.kubectl, config.dns_deployment, config.system_namespace, config.dns_backup_path)
    return replace(state, hosts_entry_added=added, forwarding_configured=configured)


STAGES: tuple[Stage, ...] = (
    Stage("assembling", "Assembling manifest", _assemble),
    Stage("provisioning", "Provisioning credentials", _provision),
    Stage("substituting", "Setting installation parameters", _substitute),
    Stage("installing", "Installing Contiv", _install),
)


# ============================================================================
# Driver
# ============================================================================

def run_pipeline(
    params: InstallParameters,
    config: InstallerConfig,
    tools: Collaborators | None = None,
    stages: tuple[Stage, ...] = STAGES,
) -> PipelineState:
    """Run every stage in order, stopping at the first exception.

    Args:
        params: Resolved install parameters.
        config: Installer settings.
        tools: External tool clients, or None for the real ones.
        stages: Stages to run.

    Returns:
        The final pipeline state.

    Raises:
        InstallerError: If any stage fails. Nothing is rolled back.
    """
    ctx = InstallContext(params=params, config=config, tools=tools or Collaborators.from_config(config))
    state = PipelineState()
    for stage in stages:
        console.print(Panel.fit(stage.title, style="bold blue"))
        logger.info("Stage %s started", stage.name)
        state = stage.run(ctx, state)
        state = replace(state, completed=(*state.completed, stage.name))
    print_summary(params.netmaster, config.ui_port)
    return state
