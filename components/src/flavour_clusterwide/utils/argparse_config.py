# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Argument parsing for the FlavourClusterWide scheduler extender."""

import argparse
import logging

from flavour_clusterwide.defaults import DEFAULT_LABEL_NAME, ExtenderDefaults
from flavour_clusterwide.scoring import SCORING_STRATEGIES
from flavour_clusterwide.utils.config_utils import add_argument
from flavour_clusterwide.utils.logging import configure_flavour_logging

configure_flavour_logging()
logger = logging.getLogger(__name__)


def create_extender_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser for the scheduler extender.

    Every flag can also be set through the FCW_* environment variable named
    in its help text; the command line wins.

    Returns:
        argparse.ArgumentParser: Configured argument parser
    """
    parser = argparse.ArgumentParser(
        description="FlavourClusterWide - cluster-wide label spreading scheduler extender",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # In-cluster, default "flavour" label
  python -m flavour_clusterwide

  # Out of cluster, balance on a different label with linear scores
  python -m flavour_clusterwide --kubeconfig ~/.kube/config \\
    --label-name tier --scoring-strategy linear
        """,
    )

    plugin_group = parser.add_argument_group("plugin")
    add_argument(
        plugin_group,
        flag_name="--label-name",
        env_var="FCW_LABEL_NAME",
        default=ExtenderDefaults.label_name,
        help="Pod label whose values are spread evenly across nodes",
    )
    add_argument(
        plugin_group,
        flag_name="--scoring-strategy",
        env_var="FCW_SCORING_STRATEGY",
        default=ExtenderDefaults.scoring_strategy,
        choices=sorted(SCORING_STRATEGIES),
        help="binary: 100 for the least loaded nodes, 0 otherwise; linear: interpolate between min and max",
    )

    cluster_group = parser.add_argument_group("cluster")
    add_argument(
        cluster_group,
        flag_name="--node-selector",
        env_var="FCW_NODE_SELECTOR",
        default=ExtenderDefaults.node_selector,
        help="Label selector choosing the nodes tracked in the distribution cache",
    )
    add_argument(
        cluster_group,
        flag_name="--kubeconfig",
        env_var="FCW_KUBECONFIG",
        default=ExtenderDefaults.kubeconfig,
        help="Path to a kubeconfig file (default: in-cluster configuration)",
    )
    add_argument(
        cluster_group,
        flag_name="--request-timeout",
        env_var="FCW_REQUEST_TIMEOUT",
        default=ExtenderDefaults.request_timeout,
        arg_type=float,
        help="Timeout in seconds for Kubernetes API requests",
    )

    server_group = parser.add_argument_group("server")
    add_argument(
        server_group,
        flag_name="--host",
        env_var="FCW_HOST",
        default=ExtenderDefaults.host,
        help="Address the extender listens on",
    )
    add_argument(
        server_group,
        flag_name="--port",
        env_var="FCW_PORT",
        default=ExtenderDefaults.port,
        arg_type=int,
        help="Port the extender listens on",
    )
    add_argument(
        server_group,
        flag_name="--metrics-port",
        env_var="FCW_METRICS_PORT",
        default=ExtenderDefaults.metrics_port,
        arg_type=int,
        help="Port for exposing Prometheus metrics (0 disables)",
    )

    return parser


def validate_extender_args(args: argparse.Namespace) -> None:
    """Validate and normalize extender arguments.

    Raises:
        ValueError: If argument constraints are violated
    """
    if not args.label_name:
        logger.warning(
            f"Empty label name given, falling back to '{DEFAULT_LABEL_NAME}'"
        )
        args.label_name = DEFAULT_LABEL_NAME

    # Defaults taken from the environment bypass argparse choices
    if args.scoring_strategy not in SCORING_STRATEGIES:
        raise ValueError(
            f"--scoring-strategy must be one of {sorted(SCORING_STRATEGIES)}, "
            f"got '{args.scoring_strategy}'"
        )

    if args.request_timeout <= 0:
        raise ValueError(
            f"--request-timeout must be positive, got {args.request_timeout}"
        )

    if not 0 < args.port < 65536:
        raise ValueError(f"--port must be in 1-65535, got {args.port}")

    if not 0 <= args.metrics_port < 65536:
        raise ValueError(
            f"--metrics-port must be in 0-65535 (0 disables), got {args.metrics_port}"
        )

    if args.metrics_port and args.metrics_port == args.port:
        raise ValueError("--metrics-port must differ from --port")
