# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Policies that turn per-node pod counts into a node score."""

from abc import ABC, abstractmethod
from typing import Mapping

from flavour_clusterwide.defaults import MAX_NODE_SCORE, MIN_LINEAR_SCORE, MIN_NODE_SCORE
from flavour_clusterwide.utils.exceptions import UnknownScoringStrategyError


class ScoringStrategy(ABC):
    name: str = ""

    @abstractmethod
    def score(self, count: int, counts: Mapping[str, int]) -> int:
        """Score a node hosting ``count`` pods of the label value.

        Args:
            count: Pods of the label value on the candidate node
            counts: Pods of the label value on every node, candidate included

        Returns:
            Score in [MIN_NODE_SCORE, MAX_NODE_SCORE]
        """


class BinaryScoringStrategy(ScoringStrategy):
    """Full score for the least loaded node(s), nothing for the rest."""

    name = "binary"

    def score(self, count: int, counts: Mapping[str, int]) -> int:
        minimum = min(counts.values(), default=count)
        if count == minimum:
            return MAX_NODE_SCORE
        return MIN_NODE_SCORE


class LinearScoringStrategy(ScoringStrategy):
    """Interpolate from MAX_NODE_SCORE at the minimum down to MIN_LINEAR_SCORE at the maximum.

    score = (max - count) * 100 / (max - min); when every node holds the same
    number of pods (or there is no data) every node gets MAX_NODE_SCORE.
    """

    name = "linear"

    def score(self, count: int, counts: Mapping[str, int]) -> int:
        minimum = min(counts.values(), default=count)
        maximum = max(counts.values(), default=count)
        if maximum == minimum:
            return MAX_NODE_SCORE
        score = (maximum - count) * MAX_NODE_SCORE // (maximum - minimum)
        return max(MIN_LINEAR_SCORE, min(MAX_NODE_SCORE, score))


SCORING_STRATEGIES = {
    BinaryScoringStrategy.name: BinaryScoringStrategy,
    LinearScoringStrategy.name: LinearScoringStrategy,
}


def get_scoring_strategy(name: str) -> ScoringStrategy:
    try:
        return SCORING_STRATEGIES[name]()
    except KeyError:
        raise UnknownScoringStrategyError(name, SCORING_STRATEGIES) from None
