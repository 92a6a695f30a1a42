# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

PLUGIN_NAME = "FlavourClusterWide"

DEFAULT_LABEL_NAME = "flavour"

# Distribution cache is rebuilt from the cluster at most once per TTL
CACHE_TTL_SECONDS = 60.0

MAX_NODE_SCORE = 100
MIN_NODE_SCORE = 0
# Floor of the linear strategy so the most loaded node is still schedulable
MIN_LINEAR_SCORE = 1

# kube-scheduler extenders report priorities in [0, MAX_EXTENDER_PRIORITY]
MAX_EXTENDER_PRIORITY = 10

WORKER_NODE_SELECTOR = "node-role.kubernetes.io/worker"


class ExtenderDefaults:
    label_name = DEFAULT_LABEL_NAME
    scoring_strategy = "binary"
    node_selector = WORKER_NODE_SELECTOR
    kubeconfig = None
    request_timeout = 10.0
    host = "0.0.0.0"
    port = 8888
    metrics_port = 0  # 0 disables the metrics server
