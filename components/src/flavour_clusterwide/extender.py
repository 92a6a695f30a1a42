# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""HTTP scheduler extender exposing FlavourClusterWide to kube-scheduler.

kube-scheduler calls ``prioritize`` with the pod and the candidate nodes and
``bind`` once it picked a node; the bind is performed here so the placement
is recorded in the distribution cache as soon as it is committed.
"""

import logging
from typing import List, Optional, Protocol

from fastapi import FastAPI

from flavour_clusterwide.defaults import MAX_EXTENDER_PRIORITY, MAX_NODE_SCORE
from flavour_clusterwide.plugin import FlavourClusterWide
from flavour_clusterwide.protocol import (
    ExtenderArgs,
    ExtenderBindingArgs,
    ExtenderBindingResult,
    HostPriority,
)
from flavour_clusterwide.utils.exceptions import BindingError
from flavour_clusterwide.utils.logging import configure_flavour_logging

configure_flavour_logging()
logger = logging.getLogger(__name__)


class PodBinder(Protocol):
    def bind_workload(self, namespace: str, name: str, uid: str, node_name: str) -> dict:
        ...


def to_extender_priority(score: int) -> int:
    return score * MAX_EXTENDER_PRIORITY // MAX_NODE_SCORE


def create_extender_app(
    plugin: FlavourClusterWide, binder: Optional[PodBinder] = None
) -> FastAPI:
    app = FastAPI(title=f"{plugin.name()} scheduler extender")

    # Endpoints are plain functions so FastAPI serves them from its thread
    # pool; concurrent requests exercise the cache from several threads.

    @app.post("/prioritize", response_model=List[HostPriority], response_model_by_alias=True)
    def prioritize(args: ExtenderArgs):
        priorities = []
        for node_name in args.candidate_node_names():
            score, status = plugin.score(args.pod, node_name)
            if not status.is_success():
                logger.warning(f"Scoring node {node_name} failed: {status.message}")
                score = 0
            priorities.append(
                HostPriority(host=node_name, score=to_extender_priority(score))
            )
        return priorities

    @app.post("/bind", response_model=ExtenderBindingResult, response_model_by_alias=True)
    def bind(args: ExtenderBindingArgs):
        if binder is None:
            return ExtenderBindingResult(error="Binding is not enabled on this extender")
        try:
            labels = binder.bind_workload(
                args.pod_namespace, args.pod_name, args.pod_uid, args.node
            )
        except BindingError as e:
            logger.error(str(e))
            return ExtenderBindingResult(error=str(e))

        plugin.post_bind({"metadata": {"name": args.pod_name, "labels": labels}}, args.node)
        return ExtenderBindingResult()

    @app.get("/health")
    def health():
        return {
            "status": "healthy",
            "plugin": plugin.name(),
            "label_name": plugin.label_name,
            "cached_nodes": len(plugin.cache),
        }

    return app
