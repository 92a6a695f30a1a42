# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Exceptions raised by the FlavourClusterWide plugin."""


class FlavourClusterWideError(Exception):
    """Base class for all FlavourClusterWide errors."""


class InventoryUnavailableError(FlavourClusterWideError):
    """The inventory source could not list targets or workloads.

    Raised by inventory implementations; the distribution cache catches it,
    keeps its previous table and retries after the next TTL expiry.
    """

    def __init__(self, operation: str, cause: object = None):
        self.operation = operation
        self.cause = cause
        message = f"Inventory query '{operation}' failed"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


class InventoryConfigurationError(FlavourClusterWideError):
    """The cluster client backing the inventory could not be created."""


class UnknownScoringStrategyError(FlavourClusterWideError, ValueError):
    def __init__(self, name: str, available):
        self.name = name
        super().__init__(
            f"Unknown scoring strategy '{name}'. "
            f"Available strategies: {', '.join(sorted(available))}"
        )


class BindingError(FlavourClusterWideError):
    """A pod could not be bound to the selected node."""
