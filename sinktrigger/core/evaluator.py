import logging

import networkx as nx

from .enums import BuildResult
from .fingerprint import fingerprint_entry
from .graph_builder import PipelineGraph
from .models import Job, EvaluationResult
from ..repository.base import JobRepository


class PipelineEvaluator:
    """Evaluates activity and health of every job in an acyclic pipeline graph"""

    def __init__(self, repository: JobRepository, unstable_threshold: BuildResult = BuildResult.UNSTABLE):
        self.repository = repository
        self.unstable_threshold = unstable_threshold
        self.logger = logging.getLogger(__name__)

    def evaluate(self, graph: PipelineGraph, root: Job, ignore_unstable: bool = False) -> EvaluationResult:
        """
        Walk the graph depth-first from `root`.

        Stops at the first job that is building or queued, since an active
        pipeline is never eligible. Otherwise every reachable job is visited
        once, recording unhealthy jobs and a fingerprint entry per job.
        """
        result = EvaluationResult(ignore_unstable=ignore_unstable)

        for job in nx.dfs_preorder_nodes(graph.graph, source=root):
            if self.repository.is_building(job) or self.repository.is_queued(job):
                self.logger.debug(f"Job '{job.name}' is building or queued")
                result.active = True
                result.active_node = job.name
                return result

            last_build = self.repository.last_build(job)
            if last_build is not None and last_build.result.is_worse_than(self.unstable_threshold):
                result.unhealthy_nodes.append(job.name)

            result.fingerprint_inputs.append(fingerprint_entry(job, last_build))

        return result
