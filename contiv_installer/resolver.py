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

"""Turn raw operator options into validated InstallParameters."""

from __future__ import annotations

from typing import Protocol

import typer

from contiv_installer import logger
from contiv_installer.config import FabricParameters, ForwardingMode, InstallParameters
from contiv_installer.constants import (
    DEFAULT_CONTRACTS_UNRESTRICTED_MODE,
    DEFAULT_EPG_BRIDGE_DOMAIN,
)
from contiv_installer.errors import UsageError


# ============================================================================
# Password providers
# ============================================================================

class PasswordProvider(Protocol):
    """Source of the APIC password when none was passed on the command line."""

    def __call__(self) -> str: ...


class PresuppliedPassword:
    """Non-interactive provider returning a fixed value."""

    def __init__(self, value: str = "") -> None:
        self.value = value
        self.calls = 0

    def __call__(self) -> str:
        self.calls += 1
        return self.value


class TerminalPassword:
    """Interactive provider reading the password from the terminal without echo."""

    def __init__(self, prompt: str = "Enter the APIC password") -> None:
        self.prompt = prompt

    def __call__(self) -> str:
        return typer.prompt(self.prompt, default="", show_default=False, hide_input=True)


# ============================================================================
# Resolution
# ============================================================================

def parse_forwarding_mode(value: ForwardingMode | str) -> ForwardingMode:
    """Convert a raw forwarding mode value.

    Raises:
        UsageError: If the value is neither ``bridge`` nor ``routing``.
    """
    if isinstance(value, ForwardingMode):
        return value
    try:
        return ForwardingMode(value.lower())
    except ValueError:
        raise UsageError(f"Invalid forwarding mode '{value}', expected 'bridge' or 'routing'") from None


def _resolve_fabric(
    *,
    apic_url: str,
    apic_username: str,
    apic_password: str,
    apic_leaf_node: str,
    apic_phys_domain: str,
    apic_epg_bridge_domain: str,
    apic_contracts_unrestricted_mode: str,
    aci_key: str,
    password_provider: PasswordProvider,
) -> FabricParameters | None:
    """Build the fabric group, prompting for the password if needed."""
    if not apic_url:
        ignored = [apic_username, apic_password, apic_leaf_node, apic_phys_domain]
        if any(ignored):
            logger.warning("APIC options ignored because no APIC URL was given")
        return None

    if not apic_password and not aci_key:
        apic_password = password_provider()
        if not apic_password:
            raise UsageError("An APIC password is required when no ACI key is given")

    missing = [
        flag for flag, value in (
            ("--apic-username", apic_username),
            ("--apic-phys-domain", apic_phys_domain),
            ("--apic-leaf-node", apic_leaf_node),
        ) if not value
    ]
    if missing:
        raise UsageError(f"ACI mode requires {', '.join(missing)}")

    return FabricParameters(
        apic_url=apic_url,
        username=apic_username,
        password=apic_password,
        leaf_node=apic_leaf_node,
        phys_domain=apic_phys_domain,
        epg_bridge_domain=apic_epg_bridge_domain,
        contracts_unrestricted_mode=apic_contracts_unrestricted_mode,
    )


def resolve_parameters(
    *,
    netmaster: str,
    cluster_store: str = "",
    vlan_if: str = "",
    fwd_mode: ForwardingMode | str = ForwardingMode.BRIDGE,
    contiv_config: str = "",
    tls_cert: str = "",
    tls_key: str = "",
    apic_url: str = "",
    apic_username: str = "",
    apic_password: str = "",
    apic_leaf_node: str = "",
    apic_phys_domain: str = "",
    apic_epg_bridge_domain: str = DEFAULT_EPG_BRIDGE_DOMAIN,
    apic_contracts_unrestricted_mode: str = DEFAULT_CONTRACTS_UNRESTRICTED_MODE,
    aci_key: str = "",
    apic_cert_dn: str = "",
    password_provider: PasswordProvider | None = None,
) -> InstallParameters:
    """Validate operator options and apply defaults.

    The netmaster address is checked first, so a missing address is reported
    before any prompt is shown.

    Args:
        netmaster: DNS name or IP address of the netmaster VIP (mandatory).
        cluster_store: External cluster store URL, or empty.
        vlan_if: Data plane interface.
        fwd_mode: ``bridge`` (default) or ``routing``.
        contiv_config: netplugin configuration file.
        tls_cert: Auth proxy certificate path, or empty to generate one.
        tls_key: Auth proxy key path.
        apic_url: APIC URL; enables ACI fabric mode when set.
        apic_username: APIC user name.
        apic_password: APIC password.
        apic_leaf_node: APIC leaf node.
        apic_phys_domain: APIC physical domain.
        apic_epg_bridge_domain: EPG bridge domain, substituted as given.
        apic_contracts_unrestricted_mode: Contracts unrestricted mode, substituted as given.
        aci_key: ACI private key file stored as the key secret; replaces the
            password in fabric mode.
        apic_cert_dn: Certificate DN for the ACI key.
        password_provider: Asked for the APIC password when fabric mode has
            neither a password nor a key. Defaults to a terminal prompt.

    Returns:
        The immutable install parameters.

    Raises:
        UsageError: If a mandatory value is missing or invalid.
    """
    if not netmaster:
        raise UsageError("The netmaster address (-n) is required")

    mode = parse_forwarding_mode(fwd_mode)
    fabric = _resolve_fabric(
        apic_url=apic_url,
        apic_username=apic_username,
        apic_password=apic_password,
        apic_leaf_node=apic_leaf_node,
        apic_phys_domain=apic_phys_domain,
        apic_epg_bridge_domain=apic_epg_bridge_domain,
        apic_contracts_unrestricted_mode=apic_contracts_unrestricted_mode,
        aci_key=aci_key,
        password_provider=password_provider or TerminalPassword(),
    )

    return InstallParameters(
        netmaster=netmaster,
        cluster_store=cluster_store,
        vlan_if=vlan_if,
        fwd_mode=mode,
        contiv_config=contiv_config,
        tls_cert=tls_cert,
        tls_key=tls_key,
        aci_key=aci_key,
        apic_cert_dn=apic_cert_dn,
        fabric=fabric,
    )
