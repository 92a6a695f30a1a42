# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Cluster inventory consumed by the distribution cache."""

import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from kubernetes import client, config
from kubernetes.client.rest import ApiException
from kubernetes.config.config_exception import ConfigException
from urllib3.exceptions import HTTPError

from flavour_clusterwide.defaults import WORKER_NODE_SELECTOR
from flavour_clusterwide.utils.exceptions import (
    BindingError,
    InventoryConfigurationError,
    InventoryUnavailableError,
)
from flavour_clusterwide.utils.logging import configure_flavour_logging

configure_flavour_logging()
logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlacedWorkload:
    """A labelled pod and the node it runs on ("" while unscheduled)."""

    target: str
    category_value: str


class InventorySource(ABC):
    """Read-only view of the fleet.

    Implementations must either return complete results or raise
    InventoryUnavailableError; partial results are never returned.
    """

    @abstractmethod
    def list_eligible_targets(self) -> List[str]:
        """Names of the nodes workloads may be placed on."""

    @abstractmethod
    def list_labeled_workloads(self, label_name: str) -> List[PlacedWorkload]:
        """Every pod in every namespace that carries ``label_name``."""


class KubernetesInventory(InventorySource):
    """Inventory backed by the Kubernetes API server."""

    def __init__(
        self,
        core_api: client.CoreV1Api,
        node_selector: str = WORKER_NODE_SELECTOR,
        request_timeout: Optional[float] = 10.0,
    ):
        self.core_api = core_api
        self.node_selector = node_selector
        self.request_timeout = request_timeout

    @classmethod
    def from_config(
        cls,
        kubeconfig: Optional[str] = None,
        node_selector: str = WORKER_NODE_SELECTOR,
        request_timeout: Optional[float] = 10.0,
    ) -> "KubernetesInventory":
        """Build an inventory from a kubeconfig file, or in-cluster config when none is given."""
        try:
            if kubeconfig:
                config.load_kube_config(config_file=kubeconfig)
            else:
                config.load_incluster_config()
        except (ConfigException, OSError) as e:
            raise InventoryConfigurationError(
                f"Error getting cluster configuration: {e}"
            ) from e
        return cls(
            client.CoreV1Api(),
            node_selector=node_selector,
            request_timeout=request_timeout,
        )

    def _request_kwargs(self) -> dict:
        if self.request_timeout is None:
            return {}
        return {"_request_timeout": self.request_timeout}

    def list_eligible_targets(self) -> List[str]:
        try:
            nodes = self.core_api.list_node(
                label_selector=self.node_selector, **self._request_kwargs()
            )
        except (ApiException, HTTPError) as e:
            raise InventoryUnavailableError("list nodes", e) from e
        return [node.metadata.name for node in nodes.items]

    def list_labeled_workloads(self, label_name: str) -> List[PlacedWorkload]:
        # A bare key selector matches pods carrying the label with any value
        try:
            pods = self.core_api.list_pod_for_all_namespaces(
                label_selector=label_name, **self._request_kwargs()
            )
        except (ApiException, HTTPError) as e:
            raise InventoryUnavailableError("list pods", e) from e

        workloads = []
        for pod in pods.items:
            labels = pod.metadata.labels or {}
            workloads.append(
                PlacedWorkload(
                    target=pod.spec.node_name or "",
                    category_value=labels.get(label_name, ""),
                )
            )
        return workloads

    def bind_workload(
        self, namespace: str, name: str, uid: str, node_name: str
    ) -> Dict[str, str]:
        """Bind a pod to a node and return the pod's labels."""
        try:
            pod = self.core_api.read_namespaced_pod(
                name, namespace, **self._request_kwargs()
            )
            body = client.V1Binding(
                metadata=client.V1ObjectMeta(name=name, namespace=namespace, uid=uid or None),
                target=client.V1ObjectReference(kind="Node", name=node_name),
            )
            # The API server answers bindings with a Status object the client
            # cannot deserialize, so skip response parsing.
            self.core_api.create_namespaced_binding(
                namespace, body, _preload_content=False, **self._request_kwargs()
            )
        except (ApiException, HTTPError) as e:
            raise BindingError(
                f"Failed to bind {namespace}/{name} to {node_name}: {e}"
            ) from e
        logger.info(f"Bound {namespace}/{name} -> {node_name}")
        return dict(pod.metadata.labels or {})


class StaticInventory(InventorySource):
    """In-memory inventory for dry-runs and tests.

    Every stored workload is assumed to carry the queried label.
    ``failing`` makes every query raise; ``fail_next`` makes only the next
    query raise. ``query_count`` counts list_labeled_workloads calls.
    """

    def __init__(
        self,
        targets: Iterable[str] = (),
        workloads: Iterable[PlacedWorkload] = (),
    ):
        self._lock = threading.Lock()
        self.targets = list(targets)
        self.workloads = list(workloads)
        self.failing = False
        self.fail_next = False
        self.query_count = 0

    def _check_failure(self, operation: str) -> None:
        if self.failing or self.fail_next:
            self.fail_next = False
            raise InventoryUnavailableError(operation, "static inventory set to fail")

    def list_eligible_targets(self) -> List[str]:
        with self._lock:
            self._check_failure("list nodes")
            return list(self.targets)

    def list_labeled_workloads(self, label_name: str) -> List[PlacedWorkload]:
        with self._lock:
            self.query_count += 1
            self._check_failure("list pods")
            return list(self.workloads)

    def add_workload(self, target: str, category_value: str) -> None:
        with self._lock:
            self.workloads.append(PlacedWorkload(target, category_value))
