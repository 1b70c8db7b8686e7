"""Best-path decoding over a bigram scoring model.

The :class:`Decoder` walks an observation sequence left to right and keeps a
single running-best path per prefix. Each prefix of length ``n`` is extended
from the cached result for the prefix of length ``n - 1`` only: the next label
is chosen by scoring transitions out of the *last label of that one path*,
not out of every state. This makes decoding ``O(n * |states|)`` rather than
the ``O(n * |states|^2)`` of full Viterbi, and it means the returned sequence
is the greedily extended running-best path, which is not guaranteed to be the
globally optimal one.

Results are memoized by the full prefix value, so tagging many sentences that
share an opening (or re-tagging the same sentence) only pays for the new
positions. The cache is only valid while the bound model's scores are
unchanged; models drop their decoder whenever they mutate.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Dict, Hashable, Optional, Sequence, Tuple

if TYPE_CHECKING:
    from .model import ScoringModel

__all__ = ["DecodeResult", "Decoder"]


@dataclass(frozen=True)
class DecodeResult:
    """The best cumulative score for a prefix and the labels that produce it.

    Attributes:
        score: Sum of start/transition and emission scores along the path.
               Negative infinity marks a prefix the model cannot produce.
        labels: One label per observation. Positions after the path became
                impossible hold ``None``.
    """
    score: float
    labels: Tuple[Optional[Hashable], ...]

    def __iter__(self):
        yield self.score
        yield self.labels


class Decoder:
    """Memoizing single-best-path decoder bound to one scoring model."""

    def __init__(self, model: "ScoringModel", logger: Optional[logging.Logger] = None):
        self.model = model
        self.logger = logger or logging.getLogger(__name__)
        self._memo: Dict[Tuple[Hashable, ...], DecodeResult] = {}

    def __len__(self) -> int:
        return len(self._memo)

    def clear(self) -> None:
        self._memo.clear()

    def _find_max(self, score_fn: Callable[[Hashable], float]) -> Tuple[float, Optional[Hashable]]:
        """Scans the model's states for the strictly highest score.

        Ties go to the state enumerated first. When every candidate scores
        negative infinity no state is selected.
        """
        best_score = -math.inf
        best_state = None
        for state in self.model.states():
            score = score_fn(state)
            if score > best_score:
                best_score = score
                best_state = state
        return best_score, best_state

    def _first(self, event: Hashable) -> DecodeResult:
        score, state = self._find_max(
            lambda st: self.model.start_score(st) + self.model.emission_score(event, st)
        )
        return DecodeResult(score=score, labels=(state,))

    def _extend(self, prior: DecodeResult, event: Hashable) -> DecodeResult:
        if prior.score == -math.inf:
            # No continuation of an impossible prefix is searched.
            return DecodeResult(score=-math.inf, labels=prior.labels + (None,))

        last = prior.labels[-1]
        score, state = self._find_max(
            lambda st: self.model.transition_score(last, st) + self.model.emission_score(event, st)
        )
        return DecodeResult(score=prior.score + score, labels=prior.labels + (state,))

    def decode(self, events: Sequence[Hashable]) -> DecodeResult:
        """
        Finds the running-best label sequence for ``events``.

        Args:
            events: Ordered observations. Each must be hashable.

        Returns:
            A :class:`DecodeResult` with exactly one label per event. An empty
            input yields a score of 0.0 and no labels.
        """
        key = tuple(events)
        if not key:
            return DecodeResult(score=0.0, labels=())

        cached = self._memo.get(key)
        if cached is not None:
            return cached

        # Every cached key has all of its prefixes cached, so the first
        # missing prefix marks where extension resumes.
        length = 0
        while length + 1 < len(key) and key[: length + 1] in self._memo:
            length += 1

        if length == 0:
            result = self._first(key[0])
            self._memo[key[:1]] = result
            length = 1
        else:
            result = self._memo[key[:length]]

        for i in range(length, len(key)):
            result = self._extend(result, key[i])
            self._memo[key[: i + 1]] = result

        self.logger.debug("Decoded %d events (score %s, %d prefixes cached)", len(key), result.score, len(self._memo))
        return result
