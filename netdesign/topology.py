"""Topology generator.

Turns business inputs (form data, departments, network type, redundancy) into
an ordered node/edge graph. The insertion order defines both the diagram
layout and the id assignment, so it must not change between runs.
"""

import logging
import math
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .devices import DEVICE_DATA, image_for
from .errors import TopologyError

logger = logging.getLogger(__name__)

NETWORK_TYPES = ("wifi", "lan", "both")
FORM_FIELDS = (
    "companySize",
    "budget",
    "officeUsers",
    "remoteUsers",
    "servers",
    "printers",
    "departments",
)
USERS_PER_ACCESS_POINT = 25
DEPARTMENT_SUBNET_BASE = 10
VPN_SUBNET = "192.168.20.0/24"

IP_PATTERN = re.compile(r"\d{1,3}\.\d{1,3}\.\d{1,3}\.\d{1,3}(/\d{1,2})?")
LEADING_INT = re.compile(r"\s*([+-]?\d+)")

# Request limits; within them every generated label stays a valid address
MAX_DEPARTMENTS = 20
MAX_DEPARTMENT_USERS = 50
MAX_TOTAL_SERVERS = 99
MAX_TOTAL_PRINTERS = 99
MAX_OFFICE_USERS = 5000
MAX_REMOTE_USERS = 10000
MAX_COMPANY_SIZE = 250
MAX_BUDGET = 10 ** 9


@dataclass
class Node:
    id: str
    label: str
    kind: str
    image: str

    def to_dict(self) -> Dict[str, str]:
        return {
            "id": self.id,
            "label": self.label,
            "kind": self.kind,
            "image": self.image,
            "title": describe_node(self),
        }


@dataclass
class Edge:
    source: str
    target: str
    dashed: bool = False

    def to_dict(self) -> Dict[str, object]:
        data = {"from": self.source, "to": self.target}
        if self.dashed:
            data["dashes"] = True
        return data


@dataclass
class NetworkGraph:
    nodes: List[Node] = field(default_factory=list)
    edges: List[Edge] = field(default_factory=list)
    _by_id: Dict[str, Node] = field(default_factory=dict, repr=False, compare=False)

    def add_node(self, node_id: str, label: str, kind: str) -> Node:
        if self.has_node(node_id):
            raise TopologyError(f"Duplicate node id: {node_id}")
        node = Node(id=node_id, label=label, kind=kind, image=image_for(kind))
        self.nodes.append(node)
        self._by_id[node_id] = node
        return node

    def add_edge(self, source: str, target: str, dashed: bool = False) -> Edge:
        for node_id in (source, target):
            if not self.has_node(node_id):
                raise TopologyError(f"Edge references unknown node: {node_id}")
        edge = Edge(source=source, target=target, dashed=dashed)
        self.edges.append(edge)
        return edge

    def has_node(self, node_id: str) -> bool:
        return node_id in self._by_id

    def get_node(self, node_id: str) -> Optional[Node]:
        return self._by_id.get(node_id)

    def node_ids(self) -> List[str]:
        return [n.id for n in self.nodes]

    def to_dict(self) -> Dict[str, list]:
        return {
            "nodes": [n.to_dict() for n in self.nodes],
            "edges": [e.to_dict() for e in self.edges],
        }


def to_count(value) -> int:
    """parseInt-style coercion: leading integer digits, anything else becomes 0."""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else 0
    match = LEADING_INT.match(str(value or ""))
    return int(match.group(1)) if match else 0


def normalize_form_data(form_data: Optional[dict]) -> Dict[str, int]:
    form_data = form_data or {}
    return {name: to_count(form_data.get(name, 0)) for name in FORM_FIELDS}


def normalize_department(dept: Optional[dict]) -> Dict[str, object]:
    dept = dept or {}
    return {
        "name": str(dept.get("name") or ""),
        "users": to_count(dept.get("users", 0)),
        "servers": to_count(dept.get("servers", 0)),
        "printers": to_count(dept.get("printers", 0)),
    }


def resize_departments(departments: List[dict], count: int) -> List[dict]:
    """Grow or truncate the department list to ``count`` entries.

    Existing entries keep their values; new ones are zero-valued with an
    empty name.
    """
    count = max(0, to_count(count))
    resized = [normalize_department(d) for d in departments[:count]]
    while len(resized) < count:
        resized.append(normalize_department(None))
    return resized


def has_wireless(network_type: str) -> bool:
    return network_type in ("wifi", "both")


def access_point_count(office_users: int) -> int:
    return math.ceil(max(0, office_users) / USERS_PER_ACCESS_POINT)


def department_subnet(index: int) -> str:
    return f"192.168.{DEPARTMENT_SUBNET_BASE + index}.0/24"


def ip_from_label(label: str) -> str:
    match = IP_PATTERN.search(label or "")
    return match.group(0) if match else "N/A"


def _add_core_tier(graph, node_id, title, octet, kind, upstream, redundancy):
    """Add a primary device and, with redundancy, its backup.

    ``upstream`` is a (primary, backup) pair; the backup device hangs off the
    backup upstream node, not the primary one.
    """
    graph.add_node(node_id, f"{title}\n192.168.{octet}.1", kind)
    graph.add_edge(upstream[0], node_id)
    if not redundancy:
        return node_id, None
    backup_id = f"{node_id}2"
    graph.add_node(backup_id, f"Backup {title}\n192.168.{octet}.2", kind)
    graph.add_edge(upstream[1], backup_id)
    graph.add_edge(node_id, backup_id, dashed=True)
    return node_id, backup_id


def _add_department(graph, index, dept, counters) -> Tuple[int, int]:
    """Add one department subtree.

    ``counters`` is the (server, printer) running pair shared by all
    departments; the advanced pair is returned for the next department.
    """
    server_counter, printer_counter = counters
    dept_id = f"dept{index}"
    octet = DEPARTMENT_SUBNET_BASE + index
    name = dept["name"]

    graph.add_node(dept_id, f"{name}\n{department_subnet(index)}", "department")
    graph.add_edge("coreSwitch", dept_id)

    for i in range(1, dept["servers"] + 1):
        server_id = f"server{server_counter}"
        graph.add_node(server_id, f"{name} Server {i}\n192.168.{octet}.{server_counter}", "server")
        graph.add_edge(dept_id, server_id)
        server_counter += 1

    for i in range(1, dept["printers"] + 1):
        printer_id = f"printer{printer_counter}"
        graph.add_node(printer_id, f"{name} Printer {i}\n192.168.{octet}.{100 + printer_counter}", "printer")
        graph.add_edge(dept_id, printer_id)
        printer_counter += 1

    for i in range(1, dept["users"] + 1):
        user_id = f"{dept_id}_user{i}"
        graph.add_node(user_id, f"{name} User {i}\n192.168.{octet}.{200 + i}", "user")
        graph.add_edge(dept_id, user_id)

    return server_counter, printer_counter


def build_network_graph(form_data, departments, network_type="both", redundancy=False) -> NetworkGraph:
    """Build the full topology graph from scratch."""
    form = normalize_form_data(form_data)
    depts = [normalize_department(d) for d in (departments or [])]
    graph = NetworkGraph()

    graph.add_node("internet", "Internet", "internet")
    upstream = ("internet", "internet")
    upstream = _add_core_tier(graph, "router", "Router", 1, "router", upstream, redundancy)
    upstream = _add_core_tier(graph, "firewall", "Firewall", 2, "firewall", upstream, redundancy)
    _add_core_tier(graph, "coreSwitch", "Core Switch", 3, "coreSwitch", upstream, redundancy)

    counters = (1, 1)
    for index, dept in enumerate(depts):
        counters = _add_department(graph, index, dept, counters)

    if has_wireless(network_type):
        graph.add_node("wirelessController", "Wireless Controller\n192.168.4.1", "wirelessController")
        graph.add_edge("coreSwitch", "wirelessController")
        for i in range(1, access_point_count(form["officeUsers"]) + 1):
            graph.add_node(f"ap{i}", f"AP {i}\n192.168.4.{i + 1}", "accessPoint")
            graph.add_edge("wirelessController", f"ap{i}")

    if form["remoteUsers"] > 0:
        if len(depts) > DEPARTMENT_SUBNET_BASE:
            logger.warning(
                "Department %d subnet %s overlaps the VPN block %s",
                DEPARTMENT_SUBNET_BASE, department_subnet(DEPARTMENT_SUBNET_BASE), VPN_SUBNET,
            )
        graph.add_node("vpnConcentrator", "VPN Concentrator\n192.168.20.1", "vpnConcentrator")
        graph.add_edge("firewall", "vpnConcentrator")
        graph.add_node("remoteUsers", f"Remote Users\n{VPN_SUBNET}", "remoteUsers")
        graph.add_edge("vpnConcentrator", "remoteUsers")

    logger.info(f"Built network graph: {len(graph.nodes)} nodes, {len(graph.edges)} edges")
    return graph


def describe_node(node: Node) -> str:
    """Tooltip HTML for a node: label, address and catalogue details."""
    content = f"<strong>{node.label}</strong><br>IP: {ip_from_label(node.label)}<br>"
    info = DEVICE_DATA.get(node.kind)
    if info and "specs" in info:
        content += f"Model: {info['name']}<br>"
        content += f"Specs: {info['specs']}<br>"
        content += f"Ports: {info['ports']}"
    return content
