import pytest

from netdesign.designer import generate_network_design
from netdesign.errors import TopologyError
from netdesign.topology import (
    NetworkGraph,
    access_point_count,
    build_network_graph,
    describe_node,
    ip_from_label,
    resize_departments,
    to_count,
)

SALES_DEPARTMENT = {"name": "Sales", "users": 2, "servers": 1, "printers": 1}


def _labels(graph):
    return {n.id: n.label for n in graph.nodes}


def test_sales_example_lan_no_redundancy():
    graph = build_network_graph({"remoteUsers": 0}, [SALES_DEPARTMENT], network_type="lan")

    assert graph.node_ids() == [
        "internet", "router", "firewall", "coreSwitch", "dept0",
        "server1", "printer1", "dept0_user1", "dept0_user2",
    ]
    labels = _labels(graph)
    assert ip_from_label(labels["server1"]) == "192.168.10.1"
    assert ip_from_label(labels["printer1"]) == "192.168.10.101"
    assert ip_from_label(labels["dept0_user1"]) == "192.168.10.201"
    assert ip_from_label(labels["dept0_user2"]) == "192.168.10.202"
    assert labels["dept0"] == "Sales\n192.168.10.0/24"


def test_wifi_access_points_for_130_users():
    graph = build_network_graph({"officeUsers": 130}, [], network_type="wifi")
    aps = [n for n in graph.nodes if n.kind == "accessPoint"]
    assert access_point_count(130) == 6
    assert [n.id for n in aps] == [f"ap{i}" for i in range(1, 7)]
    assert ip_from_label(_labels(graph)["ap6"]) == "192.168.4.7"


def test_lan_has_no_wireless_nodes():
    graph = build_network_graph({"officeUsers": 130}, [], network_type="lan")
    assert not graph.has_node("wirelessController")
    assert not any(n.kind == "accessPoint" for n in graph.nodes)


def test_redundancy_adds_backups_with_dashed_links():
    graph = build_network_graph({}, [], network_type="lan", redundancy=True)
    for node_id in ("router2", "firewall2", "coreSwitch2"):
        assert graph.has_node(node_id)

    edges = {(e.source, e.target): e.dashed for e in graph.edges}
    assert edges[("router", "router2")] is True
    assert edges[("internet", "router2")] is False
    assert edges[("router2", "firewall2")] is False
    assert edges[("firewall2", "coreSwitch2")] is False
    assert ip_from_label(_labels(graph)["coreSwitch2"]) == "192.168.3.2"


def test_remote_users_add_vpn_branch():
    graph = build_network_graph({"remoteUsers": 3}, [], network_type="lan")
    edges = [(e.source, e.target) for e in graph.edges]
    assert ("firewall", "vpnConcentrator") in edges
    assert ("vpnConcentrator", "remoteUsers") in edges
    assert _labels(graph)["remoteUsers"] == "Remote Users\n192.168.20.0/24"


def test_server_and_printer_counters_run_across_departments():
    depts = [
        {"name": "A", "users": 0, "servers": 2, "printers": 1},
        {"name": "B", "users": 0, "servers": 1, "printers": 2},
    ]
    graph = build_network_graph({}, depts, network_type="lan")
    labels = _labels(graph)
    assert labels["server3"] == "B Server 1\n192.168.11.3"
    assert labels["printer2"] == "B Printer 1\n192.168.11.102"
    assert labels["printer3"] == "B Printer 2\n192.168.11.103"


def test_node_ids_unique_at_scale():
    depts = [{"name": f"D{i}", "users": 50, "servers": 3, "printers": 2} for i in range(10)]
    graph = build_network_graph({"officeUsers": 500, "remoteUsers": 10}, depts, "both", redundancy=True)
    ids = graph.node_ids()
    assert len(ids) == len(set(ids))
    for edge in graph.edges:
        assert graph.has_node(edge.source)
        assert graph.has_node(edge.target)


def test_duplicate_department_names_still_get_unique_ids():
    depts = [{"name": "Ops", "users": 1}, {"name": "Ops", "users": 1}]
    graph = build_network_graph({}, depts, "lan")
    assert graph.has_node("dept0_user1")
    assert graph.has_node("dept1_user1")


def test_generator_is_deterministic():
    args = (
        {"budget": 10000, "officeUsers": 60, "remoteUsers": 4},
        [SALES_DEPARTMENT, {"name": "HR", "users": 3, "servers": 0, "printers": 1}],
    )
    first = generate_network_design(*args, network_type="both", redundancy=True, security_level=3)
    second = generate_network_design(*args, network_type="both", redundancy=True, security_level=3)
    assert first.to_dict() == second.to_dict()


def test_unknown_network_type_is_rejected():
    with pytest.raises(ValueError):
        generate_network_design({}, [], network_type="fibre")


def test_graph_rejects_duplicates_and_dangling_edges():
    graph = NetworkGraph()
    graph.add_node("internet", "Internet", "internet")
    with pytest.raises(TopologyError):
        graph.add_node("internet", "Internet", "internet")
    with pytest.raises(TopologyError):
        graph.add_edge("internet", "router")


def test_edge_serialisation_marks_backup_links():
    graph = build_network_graph({}, [], "lan", redundancy=True)
    edges = graph.to_dict()["edges"]
    assert {"from": "internet", "to": "router"} in edges
    assert {"from": "router", "to": "router2", "dashes": True} in edges


@pytest.mark.parametrize("value,expected", [
    ("12", 12), ("", 0), (None, 0), ("abc", 0), ("7.9", 7), (5, 5), (" 3 ", 3),
    ("12abc", 12), ("1e3", 1), ("-4", -4), ("1e400", 1), (7.9, 7),
    (float("inf"), 0), (float("nan"), 0),
])
def test_to_count(value, expected):
    assert to_count(value) == expected


def test_resize_departments_keeps_existing_entries():
    depts = [{"name": "Sales", "users": "4"}]
    grown = resize_departments(depts, 3)
    assert grown[0] == {"name": "Sales", "users": 4, "servers": 0, "printers": 0}
    assert grown[2] == {"name": "", "users": 0, "servers": 0, "printers": 0}
    assert resize_departments(grown, 1) == [grown[0]]
    assert resize_departments(grown, "") == []


def test_describe_node_includes_catalogue_details():
    graph = build_network_graph({}, [], "lan")
    router = graph.get_node("router")
    tooltip = describe_node(router)
    assert "IP: 192.168.1.1" in tooltip
    assert "Cisco ISR 4321 Router" in tooltip
    assert "Ports:" in tooltip

    internet = describe_node(graph.get_node("internet"))
    assert "IP: N/A" in internet
    assert "Model:" not in internet
