from typing import List, Tuple

import networkx as nx

from .graph_builder import PipelineGraph
from .models import Job


def has_cycle(graph: PipelineGraph) -> bool:
    """True if the pipeline graph contains a directed cycle"""
    return not nx.is_directed_acyclic_graph(graph.graph)


def find_cycle(graph: PipelineGraph) -> List[Tuple[Job, Job]]:
    """Edges of one cycle reachable from the root, or [] if there is none"""
    try:
        return [(u, v) for u, v in nx.find_cycle(graph.graph, source=graph.root)]
    except nx.NetworkXNoCycle:
        return []


def describe_cycle(edges: List[Tuple[Job, Job]]) -> str:
    if not edges:
        return ""
    names = [edges[0][0].name] + [v.name for _, v in edges]
    return " --> ".join(names)
