"""HTML report fragments: IP allocation, device recommendations, cost estimate."""

import html
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .devices import device_name, device_price
from .topology import (
    VPN_SUBNET,
    access_point_count,
    department_subnet,
    has_wireless,
)

SECURITY_TIERS = {
    1: [
        "Implement strong password policies",
        "Enable firewall on all devices",
    ],
    2: [
        "Set up a VLAN for each department",
        "Implement network access control (NAC)",
    ],
    3: [
        "Deploy an intrusion detection/prevention system (IDS/IPS)",
        "Implement multi-factor authentication for all users",
    ],
}


def clamp_security_level(level) -> int:
    try:
        level = int(level)
    except (TypeError, ValueError):
        level = 1
    return min(max(level, 1), max(SECURITY_TIERS))


def format_amount(amount: int) -> str:
    return f"${amount:,}"


def _ul(lines: List[str]) -> str:
    # One <li> per line keeps the fragment line-splittable for tabular export
    items = "".join(f"<li>{line}</li>\n" for line in lines)
    return f"<ul>\n{items}</ul>"


def generate_ip_allocation(form, departments, redundancy=False) -> str:
    lines = [
        "Public IP (Router WAN): 203.0.113.1/24 (example)",
        "Internal Network: 192.168.0.0/16",
        "Router: 192.168.1.1",
    ]
    if redundancy:
        lines.append("Backup Router: 192.168.1.2")
    lines.append("Firewall: 192.168.2.1")
    if redundancy:
        lines.append("Backup Firewall: 192.168.2.2")
    lines.append("Core Switch: 192.168.3.1")
    if redundancy:
        lines.append("Backup Core Switch: 192.168.3.2")
    lines.append("Wireless Infrastructure: 192.168.4.0/24")
    for index, dept in enumerate(departments):
        lines.append(f"{html.escape(dept['name'])}: {department_subnet(index)}")
    if form["remoteUsers"] > 0:
        lines.append(f"VPN Users: {VPN_SUBNET}")
    return "<h3>IP Allocation:</h3>\n" + _ul(lines)


def security_recommendations(security_level) -> List[str]:
    level = clamp_security_level(security_level)
    lines = []
    for tier in sorted(SECURITY_TIERS):
        if level >= tier:
            lines.extend(SECURITY_TIERS[tier])
    return lines


def generate_recommendations(form, departments, network_type="both", redundancy=False,
                             security_level=1, ai_recommendations: Optional[List[str]] = None) -> str:
    prefix = "2x " if redundancy else ""
    total_servers = sum(d["servers"] for d in departments)
    total_printers = sum(d["printers"] for d in departments)

    devices = [
        f"Router: {prefix}{device_name('router')}",
        f"Firewall: {prefix}{device_name('firewall')}",
        f"Core Switch: {prefix}{device_name('coreSwitch')}",
        f"Servers: {total_servers}x {device_name('server')}",
        f"Printers: {total_printers}x {device_name('printer')}",
    ]
    if has_wireless(network_type):
        devices.append(f"Wireless: {device_name('wirelessController')}")
        devices.append(f"Access Points: {access_point_count(form['officeUsers'])}x {device_name('accessPoint')}")
    if form["remoteUsers"] > 0:
        devices.append(f"VPN: {device_name('vpnLicense')} (License per user)")

    text = "<h3>Device Recommendations:</h3>\n" + _ul(devices)
    text += "\n<h3>Security Recommendations:</h3>\n" + _ul(security_recommendations(security_level))
    if ai_recommendations:
        text += "\n<h3>AI-Generated Recommendations:</h3>\n" + _ul([html.escape(r) for r in ai_recommendations])
    return text


@dataclass
class CostEstimate:
    items: List[Tuple[str, int]] = field(default_factory=list)
    budget: int = 0

    @property
    def total(self) -> int:
        return sum(amount for _, amount in self.items)

    @property
    def over_budget(self) -> bool:
        return self.total > self.budget

    @property
    def difference(self) -> int:
        """Overage when over budget, remaining headroom otherwise."""
        return abs(self.total - self.budget)

    def to_dict(self) -> dict:
        return {
            "items": [{"label": label, "amount": amount} for label, amount in self.items],
            "total": self.total,
            "budget": self.budget,
            "overBudget": self.over_budget,
            "difference": self.difference,
        }


def estimate_cost(form, departments, network_type="both", redundancy=False) -> CostEstimate:
    multiplier = 2 if redundancy else 1
    estimate = CostEstimate(budget=form["budget"])
    estimate.items.append(("Router(s)", device_price("router") * multiplier))
    estimate.items.append(("Firewall(s)", device_price("firewall") * multiplier))
    estimate.items.append(("Core Switch(es)", device_price("coreSwitch") * multiplier))

    total_servers = sum(d["servers"] for d in departments)
    total_printers = sum(d["printers"] for d in departments)
    estimate.items.append(("Servers", total_servers * device_price("server")))
    estimate.items.append(("Printers", total_printers * device_price("printer")))

    if has_wireless(network_type):
        wireless = device_price("wirelessController") + access_point_count(form["officeUsers"]) * device_price("accessPoint")
        estimate.items.append(("Wireless Infrastructure", wireless))
    if form["remoteUsers"] > 0:
        estimate.items.append(("VPN Licenses", form["remoteUsers"] * device_price("vpnLicense")))
    return estimate


def render_cost_estimate(estimate: CostEstimate) -> str:
    lines = [f"{label}: {format_amount(amount)}" for label, amount in estimate.items]
    text = "<h3>Cost Estimate:</h3>\n" + _ul(lines)
    text += f"\n<p><strong>Total Estimated Cost: {format_amount(estimate.total)}</strong></p>"
    if estimate.over_budget:
        text += (
            '\n<p style="color: red;">Warning: The estimated cost exceeds your budget by '
            f"{format_amount(estimate.difference)}.</p>"
        )
    else:
        text += (
            '\n<p style="color: green;">Good news! The estimated cost is within your budget. '
            f"You have {format_amount(estimate.difference)} remaining.</p>"
        )
    return text
