# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
FlavourClusterWide scheduler extender

Entry point serving the plugin to kube-scheduler over HTTP.

Usage:
    python -m flavour_clusterwide

Out of cluster:
    python -m flavour_clusterwide --kubeconfig ~/.kube/config --port 8888
"""

import logging

import uvicorn
from prometheus_client import start_http_server

from flavour_clusterwide.extender import create_extender_app
from flavour_clusterwide.inventory import KubernetesInventory
from flavour_clusterwide.plugin import FlavourClusterWide
from flavour_clusterwide.protocol import FlavourClusterWideArgs
from flavour_clusterwide.utils.argparse_config import (
    create_extender_parser,
    validate_extender_args,
)
from flavour_clusterwide.utils.logging import configure_flavour_logging
from flavour_clusterwide.utils.metrics import FlavourClusterWideMetrics

configure_flavour_logging()
logger = logging.getLogger(__name__)


def main(argv=None):
    parser = create_extender_parser()
    args = parser.parse_args(argv)
    validate_extender_args(args)

    logger.info("=" * 60)
    logger.info("Starting FlavourClusterWide scheduler extender")
    logger.info("=" * 60)
    logger.info(f"Label: {args.label_name}")
    logger.info(f"Scoring strategy: {args.scoring_strategy}")
    logger.info(f"Node selector: {args.node_selector}")
    logger.info(f"Cluster config: {args.kubeconfig or 'in-cluster'}")

    metrics = FlavourClusterWideMetrics()
    if args.metrics_port:
        start_http_server(args.metrics_port)
        logger.info(f"Prometheus metrics on port {args.metrics_port}")

    inventory = KubernetesInventory.from_config(
        kubeconfig=args.kubeconfig,
        node_selector=args.node_selector,
        request_timeout=args.request_timeout,
    )
    plugin = FlavourClusterWide.new(
        FlavourClusterWideArgs(
            label_name=args.label_name, scoring_strategy=args.scoring_strategy
        ),
        inventory=inventory,
        metrics=metrics,
    )
    app = create_extender_app(plugin, binder=inventory)

    logger.info(f"Serving extender on {args.host}:{args.port}")
    uvicorn.run(app, host=args.host, port=args.port, log_level="info")


if __name__ == "__main__":
    main()
