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

"""Wrappers around kubectl, netctl, and the certificate generation script."""

from __future__ import annotations

import json
import stat
import subprocess
from pathlib import Path

import sh

from contiv_installer import logger
from contiv_installer.constants import KUBECTL_TIMEOUT_SECONDS, LOCAL_CERT_FILE, LOCAL_KEY_FILE
from contiv_installer.errors import ExternalOperationFailure


def _stderr_of(err: sh.ErrorReturnCode) -> str:
    return err.stderr.decode(errors="replace").strip()


def require_command(cmd: str) -> None:
    """Check if a command exists on the system PATH.

    Args:
        cmd: Name of the CLI command to check.

    Raises:
        ExternalOperationFailure: If the command is not found.
    """
    if sh.which(cmd) is None:
        raise ExternalOperationFailure(f"Required command '{cmd}' not found. Please install it first.")


def run_kubectl(args: list[str], timeout: int = KUBECTL_TIMEOUT_SECONDS) -> tuple[bool, str, str]:
    """Run a kubectl command via subprocess and return (success, stdout, stderr).

    Used where stdout is parsed, so it must not be mixed with stderr.

    Args:
        args: kubectl arguments (e.g. ``["get", "deployment/kube-dns", "-o", "json"]``).
        timeout: Maximum seconds to wait for the command to complete.

    Returns:
        Tuple of (success, stdout, stderr).
    """
    try:
        result = subprocess.run(
            ["kubectl", *args],
            capture_output=True,
            text=True,
            timeout=timeout,
        )
        return result.returncode == 0, result.stdout, result.stderr
    except (subprocess.SubprocessError, OSError) as exc:
        return False, "", str(exc)


# ============================================================================
# kubectl
# ============================================================================

class KubectlClient:
    """Control plane operations used by the installer."""

    def create_secret(self, name: str, namespace: str, source: Path) -> None:
        """Create or update a generic secret holding one file.

        The secret is rendered client side and applied, so reruns update the
        existing secret instead of failing.

        Args:
            name: Secret name.
            namespace: Secret namespace.
            source: File whose content becomes the secret data.

        Raises:
            ExternalOperationFailure: If the secret cannot be rendered or applied.
        """
        ok, rendered, stderr = run_kubectl([
            "create", "secret", "generic", name,
            f"--from-file={source}",
            "-n", namespace,
            "--dry-run=client", "-o", "yaml",
        ])
        if not ok:
            raise ExternalOperationFailure(f"Failed to render secret {name}: {stderr.strip()}")
        try:
            sh.kubectl("apply", "-f", "-", _in=rendered)
        except sh.ErrorReturnCode as err:
            raise ExternalOperationFailure(f"Failed to create secret {name}: {_stderr_of(err)}") from err

    def apply(self, manifest: Path) -> None:
        """Apply a manifest file.

        Raises:
            ExternalOperationFailure: If kubectl rejects the manifest.
        """
        try:
            sh.kubectl("apply", "-f", str(manifest))
        except sh.ErrorReturnCode as err:
            raise ExternalOperationFailure(f"Failed to apply {manifest}: {_stderr_of(err)}") from err

    def export(self, resource: str, namespace: str) -> dict:
        """Fetch a resource definition as a dictionary.

        Raises:
            ExternalOperationFailure: If the resource cannot be read or parsed.
        """
        ok, stdout, stderr = run_kubectl(["get", resource, "-n", namespace, "-o", "json"])
        if not ok:
            raise ExternalOperationFailure(f"Failed to read {resource}: {stderr.strip()}")
        try:
            return json.loads(stdout)
        except json.JSONDecodeError as err:
            raise ExternalOperationFailure(f"Unreadable definition of {resource}: {err}") from err

    def delete(self, resource: str, namespace: str) -> None:
        """Delete a resource.

        Raises:
            ExternalOperationFailure: If the deletion fails.
        """
        try:
            sh.kubectl("delete", resource, "-n", namespace)
        except sh.ErrorReturnCode as err:
            raise ExternalOperationFailure(f"Failed to delete {resource}: {_stderr_of(err)}") from err


# ============================================================================
# netctl
# ============================================================================

class NetctlClient:
    """Runs the installed netctl binary against a netmaster."""

    def __init__(self, binary: Path, port: int) -> None:
        self.binary = binary
        self.port = port

    def set_forwarding_mode(self, netmaster: str, mode: str) -> None:
        """Set the global forwarding mode.

        Args:
            netmaster: Netmaster address.
            mode: ``bridge`` or ``routing``.

        Raises:
            ExternalOperationFailure: If netctl fails.
        """
        netctl = sh.Command(str(self.binary))
        try:
            netctl("--netmaster", f"http://{netmaster}:{self.port}", "global", "set", "--fwd-mode", mode)
        except sh.ErrorReturnCode as err:
            raise ExternalOperationFailure(f"Failed to set forwarding mode to {mode}: {_stderr_of(err)}") from err


# ============================================================================
# Certificate generation
# ============================================================================

class CertificateGenerator:
    """Runs the release's certificate script to produce a self-signed pair.

    The script writes ``local_certs/cert.pem`` and ``local_certs/local.key``
    relative to its working directory, so it runs from the parent of the
    requested output directory.
    """

    def __init__(self, script: Path) -> None:
        self.script = script

    def __call__(self, output_dir: Path) -> tuple[Path, Path]:
        """Generate the certificate and key.

        Args:
            output_dir: Directory that receives ``cert.pem`` and ``local.key``.

        Returns:
            Tuple of (cert_path, key_path).

        Raises:
            ExternalOperationFailure: If the script is missing, fails, or does
                not produce both files.
        """
        script = self.script.resolve()
        if not script.is_file():
            raise ExternalOperationFailure(f"Certificate script not found: {script}")
        logger.info("Running %s", script)
        try:
            script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
            sh.Command(str(script))(_cwd=str(output_dir.resolve().parent))
        except OSError as err:
            raise ExternalOperationFailure(f"Cannot run {script}: {err}") from err
        except sh.ErrorReturnCode as err:
            raise ExternalOperationFailure(f"Certificate generation failed: {_stderr_of(err)}") from err

        cert, key = output_dir / LOCAL_CERT_FILE, output_dir / LOCAL_KEY_FILE
        if not cert.is_file() or not key.is_file():
            raise ExternalOperationFailure(f"Certificate script did not produce {cert} and {key}")
        return cert, key
