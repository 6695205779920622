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

"""Constants: default paths, placeholder tokens, fragment names and Kubernetes names."""

from __future__ import annotations

PROG_NAME = "contiv-install"

# -- Parameter defaults --
DEFAULT_EPG_BRIDGE_DOMAIN = "not_specified"
DEFAULT_CONTRACTS_UNRESTRICTED_MODE = "no"

# -- Relative paths (resolved against the working directory) --
DEFAULT_TEMPLATE_DIR = "install/k8s"
DEFAULT_CERT_SCRIPT = "install/generate-certificate.sh"
DEFAULT_MANIFEST_PATH = ".contiv.yaml"
DEFAULT_ACI_KEY_PATH = "aci.key"
DEFAULT_LOCAL_CERTS_DIR = "local_certs"
DEFAULT_NETCTL_SOURCE = "netctl"
DEFAULT_DNS_BACKUP_PATH = "kube-dns.yaml"

# -- System paths --
DEFAULT_AUTH_PROXY_DIR = "/var/contiv"
DEFAULT_NETCTL_DEST = "/usr/bin/netctl"
DEFAULT_HOSTS_FILE = "/etc/hosts"

# -- Template fragments, in the only order they may be concatenated --
FRAGMENT_CONFIG = "contiv_config.yaml"
FRAGMENT_ETCD = "etcd.yaml"
FRAGMENT_CORE = "contiv.yaml"
FRAGMENT_ACI_GW = "aci_gw.yaml"
FRAGMENT_AUTH_PROXY = "auth_proxy.yaml"
FRAGMENT_ORDER = (
    FRAGMENT_CONFIG,
    FRAGMENT_ETCD,
    FRAGMENT_CORE,
    FRAGMENT_ACI_GW,
    FRAGMENT_AUTH_PROXY,
)

# -- Placeholder tokens --
PH_NETMASTER_IP = "__NETMASTER_IP__"
PH_VLAN_IF = "__VLAN_IF__"
PH_APIC_URL = "__APIC_URL__"
PH_APIC_USERNAME = "__APIC_USERNAME__"
PH_APIC_PASSWORD = "__APIC_PASSWORD__"
PH_APIC_LEAF_NODE = "__APIC_LEAF_NODE__"
PH_APIC_PHYS_DOMAIN = "__APIC_PHYS_DOMAIN__"
PH_APIC_EPG_BRIDGE_DOMAIN = "__APIC_EPG_BRIDGE_DOMAIN__"
PH_APIC_CONTRACTS_UNRESTRICTED_MODE = "__APIC_CONTRACTS_UNRESTRICTED_MODE__"
PH_APIC_CERT_DN = "__APIC_CERT_DN__"
# Lines carrying this marker are dropped when no certificate DN is given.
CERT_DN_MARKER = "APIC_CERT_DN"

FABRIC_PLACEHOLDERS = (
    PH_APIC_URL,
    PH_APIC_USERNAME,
    PH_APIC_PASSWORD,
    PH_APIC_LEAF_NODE,
    PH_APIC_PHYS_DOMAIN,
    PH_APIC_EPG_BRIDGE_DOMAIN,
    PH_APIC_CONTRACTS_UNRESTRICTED_MODE,
)
ALL_PLACEHOLDERS = (PH_NETMASTER_IP, PH_VLAN_IF, *FABRIC_PLACEHOLDERS, PH_APIC_CERT_DN)

# -- Credentials --
ACI_KEY_SECRET = "aci.key"
ACI_KEY_DUMMY_CONTENT = "dummy\n"
LOCAL_CERT_FILE = "cert.pem"
LOCAL_KEY_FILE = "local.key"
AUTH_PROXY_CERT_FILE = "auth_proxy_cert.pem"
AUTH_PROXY_KEY_FILE = "auth_proxy_key.pem"

# -- Namespaces and resources --
NS_KUBE_SYSTEM = "kube-system"
DEFAULT_DNS_DEPLOYMENT = "kube-dns"

# -- Netmaster --
NETMASTER_HOSTNAME = "netmaster"
DEFAULT_NETMASTER_PORT = 9999
DEFAULT_UI_PORT = 10000

# -- Timing --
DEFAULT_CANCEL_WAIT_SECONDS = 5
DEFAULT_ROUTING_SETTLE_SECONDS = 60
KUBECTL_TIMEOUT_SECONDS = 120
