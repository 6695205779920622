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

"""
cli.py - Contiv installer for kubeadm based Kubernetes setups.

Run from the root of an unpacked Contiv release, as root, on the kubeadm
master host.

Environment Variables:
    Fixed paths and timings can be overridden via CONTIV_* environment
    variables (see InstallerConfig), e.g.:
    - CONTIV_TEMPLATE_DIR (default: install/k8s)
    - CONTIV_MANIFEST_PATH (default: .contiv.yaml)
    - CONTIV_CANCEL_WAIT_SECONDS (default: 5)
    - CONTIV_ROUTING_SETTLE_SECONDS (default: 60)

Examples:
    # Install using the given DNS name/IP for netmaster
    contiv-install -n <netmaster DNS/IP>

    # Install in ACI mode
    contiv-install -n <netmaster DNS/IP> -a https://apic_host:443 -u apic_user -p apic_password \\
        -l topology/pod-xxx/node-xxx -d phys_domain -e not_specified -m no
"""

from __future__ import annotations

import logging
import os
import sys

import typer

from contiv_installer import console
from contiv_installer.clients import require_command
from contiv_installer.config import ForwardingMode, InstallerConfig, display_parameters
from contiv_installer.constants import DEFAULT_CONTRACTS_UNRESTRICTED_MODE, DEFAULT_EPG_BRIDGE_DOMAIN, PROG_NAME
from contiv_installer.errors import PrivilegeError, UsageError
from contiv_installer.orchestrator import run_pipeline
from contiv_installer.resolver import TerminalPassword, resolve_parameters

EPILOG = """\
Advanced usage: the installer writes the Kubernetes application manifest
to .contiv.yaml. To customize it, edit the file and re-install with
'kubectl delete -f .contiv.yaml' followed by 'kubectl apply -f .contiv.yaml'.
"""

app = typer.Typer(
    help="Contiv installer for kubeadm based setups.",
    add_completion=False,
    rich_markup_mode=None,
)


def check_privileges() -> None:
    """Raise PrivilegeError unless running as root."""
    if os.geteuid() != 0:
        raise PrivilegeError("Please run this installer as root user")


@app.command(epilog=EPILOG)
def install(
    netmaster: str = typer.Option(
        "", "-n", "--netmaster", help="DNS name/IP address of the host to be used as the net master service VIP (mandatory)"),
    cluster_store: str = typer.Option(
        "", "-s", "--cluster-store", help="External etcd or consul cluster store for Contiv data"),
    vlan_if: str = typer.Option(
        "", "-v", "--vlan-if", help="Data plane interface"),
    fwd_mode: ForwardingMode = typer.Option(
        ForwardingMode.BRIDGE, "-w", "--fwd-mode", case_sensitive=False, help="Forwarding mode"),
    contiv_config: str = typer.Option(
        "", "-c", "--config", help="Configuration file for netplugin"),
    tls_cert: str = typer.Option(
        "", "-t", "--tls-cert", help="Certificate to use for the auth proxy https endpoint"),
    tls_key: str = typer.Option(
        "", "-k", "--tls-key", help="Key to use for the auth proxy https endpoint"),
    # ACI
    apic_url: str = typer.Option(
        "", "-a", "--apic-url", help="APIC URL to use for ACI mode"),
    apic_username: str = typer.Option(
        "", "-u", "--apic-username", help="Username to connect to the APIC"),
    apic_password: str = typer.Option(
        "", "-p", "--apic-password", help="Password to connect to the APIC (prompted if omitted)"),
    apic_leaf_node: str = typer.Option(
        "", "-l", "--apic-leaf-node", help="APIC leaf node"),
    apic_phys_domain: str = typer.Option(
        "", "-d", "--apic-phys-domain", help="APIC physical domain"),
    apic_epg_bridge_domain: str = typer.Option(
        DEFAULT_EPG_BRIDGE_DOMAIN, "-e", "--apic-epg-bridge-domain", help="APIC EPG bridge domain"),
    apic_contracts_unrestricted_mode: str = typer.Option(
        DEFAULT_CONTRACTS_UNRESTRICTED_MODE, "-m", "--apic-contracts-unrestricted-mode",
        help="APIC contracts unrestricted mode"),
    aci_key: str = typer.Option(
        "", "-y", "--aci-key", help="ACI private key file, used instead of a password"),
    apic_cert_dn: str = typer.Option(
        "", "-z", "--apic-cert-dn", help="APIC certificate DN for the ACI key"),
) -> None:
    """Install Contiv on a kubeadm master host."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
    )

    try:
        check_privileges()
        params = resolve_parameters(
            netmaster=netmaster,
            cluster_store=cluster_store,
            vlan_if=vlan_if,
            fwd_mode=fwd_mode,
            contiv_config=contiv_config,
            tls_cert=tls_cert,
            tls_key=tls_key,
            apic_url=apic_url,
            apic_username=apic_username,
            apic_password=apic_password,
            apic_leaf_node=apic_leaf_node,
            apic_phys_domain=apic_phys_domain,
            apic_epg_bridge_domain=apic_epg_bridge_domain,
            apic_contracts_unrestricted_mode=apic_contracts_unrestricted_mode,
            aci_key=aci_key,
            apic_cert_dn=apic_cert_dn,
            password_provider=TerminalPassword(),
        )
    except UsageError as e:
        print_usage(str(e))
        raise typer.Exit(code=1)
    except PrivilegeError as e:
        console.print(f"[red]\u274c {e}[/red]")
        raise typer.Exit(code=1)

    display_parameters(params)
    console.print("[yellow]\u2139\ufe0f  Installing Contiv for Kubernetes[/yellow]")
    try:
        require_command("kubectl")
        run_pipeline(params, InstallerConfig())
    except Exception as e:
        console.print(f"[red]\u274c {e}[/red]")
        raise typer.Exit(code=1)


def print_usage(message: str | None = None) -> None:
    """Print the usage text to stdout, followed by the reason if given."""
    command = typer.main.get_command(app)
    ctx = command.context_class(command, info_name=PROG_NAME)
    help_text = command.get_help(ctx)
    if help_text:
        typer.echo(help_text)
    if message:
        typer.echo(f"\nError: {message}")


def main(argv: list[str] | None = None) -> None:
    """Console script entry point.

    Parse errors (unknown flags, missing option values, bad choices) print
    the usage text to stdout and exit with status 1.
    """
    command = typer.main.get_command(app)
    try:
        exit_code = command.main(args=argv, prog_name=PROG_NAME, standalone_mode=False)
    except typer.TyperException as e:
        print_usage(e.format_message())
        sys.exit(1)
    except typer.Abort:
        console.print("[yellow]Installation cancelled[/yellow]")
        sys.exit(1)
    sys.exit(exit_code or 0)


if __name__ == "__main__":
    main()
