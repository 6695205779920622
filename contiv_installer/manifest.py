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

"""Composite manifest assembly from template fragments and placeholder substitution."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path

from contiv_installer import console, logger
from contiv_installer.config import InstallParameters
from contiv_installer.constants import (
    ALL_PLACEHOLDERS,
    CERT_DN_MARKER,
    FRAGMENT_ACI_GW,
    FRAGMENT_AUTH_PROXY,
    FRAGMENT_CONFIG,
    FRAGMENT_CORE,
    FRAGMENT_ETCD,
    FRAGMENT_ORDER,
    PH_APIC_CERT_DN,
    PH_APIC_CONTRACTS_UNRESTRICTED_MODE,
    PH_APIC_EPG_BRIDGE_DOMAIN,
    PH_APIC_LEAF_NODE,
    PH_APIC_PASSWORD,
    PH_APIC_PHYS_DOMAIN,
    PH_APIC_URL,
    PH_APIC_USERNAME,
    PH_NETMASTER_IP,
    PH_VLAN_IF,
)
from contiv_installer.errors import ManifestError


# ============================================================================
# Document model
# ============================================================================

@dataclass
class ManifestDocument:
    """Ordered fragments concatenated into one mutable text buffer.

    Attributes:
        fragments: Names of the fragments appended so far.
        text: Current document contents.
    """

    fragments: list[str] = field(default_factory=list)
    text: str = ""

    def append(self, name: str, content: str) -> None:
        """Append a fragment, enforcing the canonical fragment order.

        Args:
            name: Fragment file name, one of ``FRAGMENT_ORDER``.
            content: Raw fragment contents.

        Raises:
            ManifestError: If the fragment is unknown, repeated, or would
                precede a fragment already in the document.
        """
        if name not in FRAGMENT_ORDER:
            raise ManifestError(f"Unknown manifest fragment '{name}'")
        if self.fragments and FRAGMENT_ORDER.index(name) <= FRAGMENT_ORDER.index(self.fragments[-1]):
            raise ManifestError(f"Fragment '{name}' cannot follow '{self.fragments[-1]}'")
        if content and not content.endswith("\n"):
            content += "\n"
        self.fragments.append(name)
        self.text += content

    def write(self, path: Path) -> None:
        """Write the document, replacing any previous file."""
        path.write_text(self.text)


def load_fragment(template_dir: Path, name: str) -> str:
    """Read one template fragment.

    Raises:
        ManifestError: If the fragment file does not exist.
    """
    path = template_dir / name
    try:
        return path.read_text()
    except FileNotFoundError:
        raise ManifestError(f"Template fragment not found: {path}") from None


# ============================================================================
# Assembly
# ============================================================================

def plan_fragments(params: InstallParameters) -> list[str]:
    """Select the fragments assembled before credentials are provisioned.

    The in-cluster etcd fragment is only used without an external cluster
    store; the ACI gateway fragment only in fabric mode. The auth proxy
    fragment is appended later by ``append_auth_proxy``.

    Args:
        params: Resolved install parameters.

    Returns:
        Fragment names in concatenation order.
    """
    fragments = [FRAGMENT_CONFIG]
    if not params.cluster_store:
        fragments.append(FRAGMENT_ETCD)
    fragments.append(FRAGMENT_CORE)
    if params.fabric_mode:
        fragments.append(FRAGMENT_ACI_GW)
    return fragments


def assemble_manifest(params: InstallParameters, template_dir: Path) -> ManifestDocument:
    """Concatenate the selected fragments into a new document.

    Args:
        params: Resolved install parameters.
        template_dir: Directory holding the fragment files.

    Returns:
        The assembled document, still carrying placeholders.

    Raises:
        ManifestError: If a fragment is missing.
    """
    document = ManifestDocument()
    for name in plan_fragments(params):
        document.append(name, load_fragment(template_dir, name))
    logger.info("Assembled fragments: %s", ", ".join(document.fragments))
    return document


def append_auth_proxy(document: ManifestDocument, template_dir: Path) -> None:
    """Append the auth proxy fragment, which closes the document."""
    document.append(FRAGMENT_AUTH_PROXY, load_fragment(template_dir, FRAGMENT_AUTH_PROXY))


# ============================================================================
# Substitution
# ============================================================================

def substitution_map(params: InstallParameters) -> dict[str, str]:
    """Map placeholder tokens to their resolved values.

    APIC tokens are only included in fabric mode. The certificate DN token is
    included only when a DN was given; otherwise its lines are removed by
    ``substitute_manifest``.

    Args:
        params: Resolved install parameters.

    Returns:
        Dictionary of token to replacement value.
    """
    mapping = {
        PH_NETMASTER_IP: params.netmaster,
        PH_VLAN_IF: params.vlan_if,
    }
    if params.apic_cert_dn:
        mapping[PH_APIC_CERT_DN] = params.apic_cert_dn
    fabric = params.fabric
    if fabric is not None:
        mapping.update({
            PH_APIC_URL: fabric.apic_url,
            PH_APIC_USERNAME: fabric.username,
            PH_APIC_PASSWORD: fabric.password,
            PH_APIC_LEAF_NODE: fabric.leaf_node,
            PH_APIC_PHYS_DOMAIN: fabric.phys_domain,
            PH_APIC_EPG_BRIDGE_DOMAIN: fabric.epg_bridge_domain,
            PH_APIC_CONTRACTS_UNRESTRICTED_MODE: fabric.contracts_unrestricted_mode,
        })
    return mapping


def apply_substitutions(text: str, mapping: dict[str, str]) -> str:
    """Replace every token in ``mapping`` in a single pass.

    Values are inserted literally: separators such as ``/`` or ``#`` and
    regex escapes carry no meaning, and a value containing another token is
    not expanded again.

    Args:
        text: Document text.
        mapping: Token to value mapping.

    Returns:
        The rewritten text.
    """
    if not mapping:
        return text
    pattern = re.compile("|".join(re.escape(token) for token in sorted(mapping, key=len, reverse=True)))
    return pattern.sub(lambda match: mapping[match.group(0)], text)


def remove_marked_lines(text: str, marker: str) -> str:
    """Drop every line containing ``marker``, including its line break."""
    return "".join(line for line in text.splitlines(keepends=True) if marker not in line)


def unresolved_placeholders(text: str) -> list[str]:
    """Return the known placeholder tokens still present in ``text``."""
    return [token for token in ALL_PLACEHOLDERS if token in text]


def substitute_manifest(document: ManifestDocument, params: InstallParameters) -> None:
    """Resolve all placeholders of the document in place.

    Args:
        document: Assembled manifest document.
        params: Resolved install parameters.

    Raises:
        ManifestError: If any placeholder survives substitution.
    """
    console.print("[yellow]\u2139\ufe0f  Setting installation parameters...[/yellow]")
    text = document.text
    if not params.apic_cert_dn:
        text = remove_marked_lines(text, CERT_DN_MARKER)
    text = apply_substitutions(text, substitution_map(params))

    leftover = unresolved_placeholders(text)
    if leftover:
        raise ManifestError(f"Unresolved placeholders in manifest: {', '.join(leftover)}")
    document.text = text
