import logging
from typing import Iterable, List, Set

import networkx as nx

from .models import Job
from ..repository.base import JobRepository


class PipelineGraph:
    """Directed graph of downstream build dependencies rooted at one job"""

    def __init__(self, root: Job):
        self.root = root
        self._graph = nx.DiGraph()
        self._graph.add_node(root)

    @property
    def graph(self) -> nx.DiGraph:
        return self._graph

    def add_vertex(self, job: Job):
        self._graph.add_node(job)

    def add_edge(self, parent: Job, child: Job) -> bool:
        """Add parent -> child. Returns False if the edge already existed."""
        if self._graph.has_edge(parent, child):
            return False
        self._graph.add_edge(parent, child, label=f"'{parent.name}' --> '{child.name}'")
        return True

    def vertices(self) -> List[Job]:
        return list(self._graph.nodes)

    def edges(self) -> List[tuple]:
        return list(self._graph.edges)

    def successors(self, job: Job) -> List[Job]:
        return list(self._graph.successors(job))

    def __contains__(self, job: Job) -> bool:
        return job in self._graph

    def __len__(self) -> int:
        return self._graph.number_of_nodes()

    def adjacency_listing(self) -> str:
        """One `name: {child, child}` line per vertex, in discovery order"""
        lines = []
        for job in self._graph.nodes:
            children = ", ".join(child.name for child in self._graph.successors(job))
            lines.append(f"{job.name}: {{{children}}}")
        return "\n".join(lines)


class PipelineGraphBuilder:
    """
    Materializes the pipeline graph by walking downstream relationships.

    The walk uses an explicit stack so arbitrarily deep pipelines do not
    hit the recursion limit. A child is pushed every time a new edge to it
    is found, including when the child was discovered before; this keeps
    every edge of a cyclic structure in the graph while guaranteeing the
    walk ends, since each edge is followed at most once.
    """

    def __init__(self, repository: JobRepository, verbose: bool = False):
        self.repository = repository
        self.verbose = verbose
        self.logger = logging.getLogger(__name__)

    def build(self, root: Job, exclusions: Iterable[str]) -> PipelineGraph:
        excluded: Set[str] = set(exclusions)
        graph = PipelineGraph(root)
        stack: List[Job] = [root]

        while stack:
            parent = stack.pop()
            for child in self.repository.downstream_of(parent):
                if child.disabled or child.name in excluded:
                    self.logger.debug(f"Skipping '{child.name}' downstream of '{parent.name}'")
                    continue
                graph.add_vertex(child)
                if graph.add_edge(parent, child):
                    stack.append(child)

        if self.verbose:
            self.logger.info(
                f"The build pipeline graph rooted at '{root.name}':\n{graph.adjacency_listing()}"
            )
        return graph
