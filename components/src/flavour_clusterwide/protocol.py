# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Data structures exchanged with the placement pipeline and the kube-scheduler extender."""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from flavour_clusterwide.defaults import DEFAULT_LABEL_NAME


class StatusCode(str, Enum):
    """Status values returned alongside a score"""

    SUCCESS = "success"
    # Plugin does not apply to this pod (no label); the score is neutral
    SKIP = "skip"
    ERROR = "error"


class Status(BaseModel):
    code: StatusCode = StatusCode.SUCCESS
    message: str = ""

    def is_success(self) -> bool:
        return self.code in (StatusCode.SUCCESS, StatusCode.SKIP)

    def is_skip(self) -> bool:
        return self.code == StatusCode.SKIP


class FlavourClusterWideArgs(BaseModel):
    """Plugin configuration"""

    # Pod label whose value is balanced across nodes
    label_name: str = DEFAULT_LABEL_NAME
    scoring_strategy: str = "binary"

    @field_validator("label_name", mode="before")
    @classmethod
    def _default_label_name(cls, value):
        if value is None or value == "":
            return DEFAULT_LABEL_NAME
        return value


class NodeScore(BaseModel):
    name: str
    score: int


# kube-scheduler extender wire format (field names are fixed by the scheduler)


class ExtenderArgs(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    pod: Dict[str, Any] = Field(alias="Pod")
    nodes: Optional[Dict[str, Any]] = Field(default=None, alias="Nodes")
    node_names: Optional[List[str]] = Field(default=None, alias="NodeNames")

    def candidate_node_names(self) -> List[str]:
        if self.node_names is not None:
            return list(self.node_names)
        if self.nodes:
            names = [
                (item.get("metadata") or {}).get("name")
                for item in self.nodes.get("items") or []
            ]
            # Nameless entries cannot be scored or bound
            return [name for name in names if name]
        return []


class HostPriority(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    host: str = Field(alias="Host")
    score: int = Field(alias="Score")


class ExtenderBindingArgs(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    pod_name: str = Field(alias="PodName")
    pod_namespace: str = Field(alias="PodNamespace")
    pod_uid: str = Field(default="", alias="PodUID")
    node: str = Field(alias="Node")


class ExtenderBindingResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    error: str = Field(default="", alias="Error")
