"""Single entry point that runs the topology generator and all three reports."""

import logging
from dataclasses import dataclass
from typing import List, Optional

from .reports import (
    CostEstimate,
    clamp_security_level,
    estimate_cost,
    generate_ip_allocation,
    generate_recommendations,
    render_cost_estimate,
)
from .topology import (
    NETWORK_TYPES,
    NetworkGraph,
    build_network_graph,
    normalize_department,
    normalize_form_data,
)

logger = logging.getLogger(__name__)


@dataclass
class NetworkDesign:
    graph: NetworkGraph
    ip_allocation: str
    recommendations: str
    cost_estimate: str
    cost: CostEstimate

    def to_dict(self) -> dict:
        return {
            "graph": self.graph.to_dict(),
            "ipAllocation": self.ip_allocation,
            "recommendations": self.recommendations,
            "costEstimate": self.cost_estimate,
            "cost": self.cost.to_dict(),
        }


def generate_network_design(form_data, departments, network_type="both", redundancy=False,
                            security_level=1, ai_recommendations: Optional[List[str]] = None) -> NetworkDesign:
    """Generate the graph and the three report fragments.

    Identical inputs always give identical output; nothing here reads the
    clock or any shared state.
    """
    if network_type not in NETWORK_TYPES:
        raise ValueError(f"Unknown network type: {network_type}")
    form = normalize_form_data(form_data)
    depts = [normalize_department(d) for d in (departments or [])]
    security_level = clamp_security_level(security_level)
    redundancy = bool(redundancy)

    logger.info(
        f"Generating design: {len(depts)} departments, type={network_type}, "
        f"redundancy={redundancy}, security={security_level}"
    )
    graph = build_network_graph(form, depts, network_type, redundancy)
    cost = estimate_cost(form, depts, network_type, redundancy)
    return NetworkDesign(
        graph=graph,
        ip_allocation=generate_ip_allocation(form, depts, redundancy),
        recommendations=generate_recommendations(
            form, depts, network_type, redundancy, security_level, ai_recommendations
        ),
        cost_estimate=render_cost_estimate(cost),
        cost=cost,
    )
