"""The Hidden Markov Model scoring variant.

:class:`HiddenMarkovModel` stores plain probabilities (start, transition and
emission) and exposes them to the decoder as log-probabilities, so path
scores combine by addition. A probability of zero becomes negative infinity,
which the decoder treats as an impossible path rather than an error.
"""
from __future__ import annotations

import logging
import random
from typing import Any, Dict, Hashable, List, Optional, Sequence

import numpy as np

from .model import Event, IdInUseError, ScoreTable, ScoringModel, State

__all__ = ["HiddenMarkovModel", "log_probability", "DEFAULT_TOLERANCE"]

# Wiggle room for comparing probability sums against 1.
DEFAULT_TOLERANCE = 2.0 ** -24

# Upper bound (exclusive) for generated state ids.
MAX_IDS = 1_000_000

STATE = "state"


def log_probability(p: float) -> float:
    """Natural log of ``p``, with ``log(0) == -inf`` instead of an error."""
    with np.errstate(divide="ignore"):
        return float(np.log(p))


class HiddenMarkovModel(ScoringModel):
    """
    A bigram HMM over opaque state and event identifiers.

    States are enumerated in registration order, which is also the order the
    decoder uses to break ties. Setting any probability registers the states
    it mentions on the fly.

    Attributes:
        unk_token: Fallback event substituted for events outside the known
                   vocabulary when scoring emissions. ``None`` disables the
                   substitution.
        tolerance: Allowed deviation from 1 when validating probability sums.
    """

    def __init__(
        self,
        unk_token: Optional[Event] = None,
        tolerance: float = DEFAULT_TOLERANCE,
        logger: Optional[logging.Logger] = None,
    ):
        super().__init__(logger)
        self.unk_token = unk_token
        self.tolerance = tolerance
        self._ids: Dict[Hashable, str] = {}
        self._events: Dict[Event, None] = {}
        self._start: ScoreTable[State] = ScoreTable()
        self._transition: Dict[State, ScoreTable[State]] = {}
        self._emission: Dict[State, ScoreTable[Event]] = {}

    # --- Registration ---------------------------------------------------

    def has_id(self, id_: Hashable) -> bool:
        return id_ in self._ids

    def has_state(self, id_: Hashable) -> bool:
        return self._ids.get(id_) == STATE

    def add_state(self, id_: State) -> State:
        """Registers a new state. Raises :class:`IdInUseError` if ``id_`` is taken."""
        if self.has_id(id_):
            raise IdInUseError(id_)
        self._ids[id_] = STATE
        self._transition[id_] = ScoreTable()
        self._emission[id_] = ScoreTable()
        self.invalidate_decoder()
        return id_

    def new_state(self) -> State:
        """Registers a state under a randomly generated, unused integer id."""
        while True:
            id_ = random.randrange(MAX_IDS)
            if not self.has_id(id_):
                return self.add_state(id_)

    def add_event(self, event: Event) -> None:
        self._events[event] = None

    def has_event(self, event: Event) -> bool:
        return event in self._events

    def states(self) -> List[State]:
        return [id_ for id_, role in self._ids.items() if role == STATE]

    def events(self) -> List[Event]:
        return list(self._events)

    def resolve_event(self, event: Event) -> Event:
        """Maps events outside the vocabulary onto the unknown token."""
        if self.unk_token is not None and not self.has_event(event):
            return self.unk_token
        return event

    def resolve_events(self, events: Sequence[Event]) -> List[Event]:
        return [self.resolve_event(e) for e in events]

    # --- Probabilities --------------------------------------------------

    def set_start_probability(self, state: State, p: float) -> None:
        if not self.has_state(state):
            self.add_state(state)
        self._start.set(state, p)
        self.invalidate_decoder()

    def get_start_probability(self, state: State) -> float:
        return self._start.score(state)

    def set_transition_probability(self, src: State, dst: State, p: float) -> None:
        if not self.has_state(src):
            self.add_state(src)
        if not self.has_state(dst):
            self.add_state(dst)
        self._transition[src].set(dst, p)
        self.invalidate_decoder()

    def get_transition_probability(self, src: State, dst: State) -> float:
        return self._transition[src].score(dst) if self.has_state(src) else 0.0

    def set_emission_probability(self, event: Event, state: State, p: float) -> None:
        if not self.has_state(state):
            self.add_state(state)
        self.add_event(event)
        self._emission[state].set(event, p)
        self.invalidate_decoder()

    def get_emission_probability(self, event: Event, state: State) -> float:
        return self._emission[state].score(event) if self.has_state(state) else 0.0

    # --- Scores ---------------------------------------------------------

    def start_score(self, state: State) -> float:
        if not self.has_state(state):
            self.logger.warning("unexpected: state %s not found.", state)
            return 0.0
        return log_probability(self._start.score(state))

    def transition_score(self, src: State, dst: State) -> float:
        if not self.has_state(src):
            self.logger.warning("unexpected: source state %s not found.", src)
            return 0.0
        if not self.has_state(dst):
            self.logger.warning("unexpected: destination state %s not found.", dst)
            return 0.0
        return log_probability(self._transition[src].score(dst))

    def emission_score(self, event: Event, state: State) -> float:
        if not self.has_state(state):
            self.logger.warning("unexpected: state %s not found.", state)
            return 0.0
        return log_probability(self._emission[state].score(self.resolve_event(event)))

    # --- Validation -----------------------------------------------------

    def validate(self) -> Dict[str, Any]:
        """
        Checks that every probability distribution in the model sums to one.

        Deviations larger than :attr:`tolerance` are logged as warnings and
        collected in the returned report; they never raise.

        Returns:
            A dictionary with the total ``issue_count`` and a list of
            ``issues``, each describing the offending distribution.
        """
        issues = []

        start_sum = sum(self._start.values())
        if abs(start_sum - 1.0) > self.tolerance:
            issues.append({
                "type": "start_sum",
                "sum": start_sum,
                "message": f"Start probabilities sum to {start_sum}",
            })

        for state, row in self._transition.items():
            row_sum = sum(row.values())
            if abs(row_sum - 1.0) > self.tolerance:
                issues.append({
                    "type": "exit_sum",
                    "state": state,
                    "sum": row_sum,
                    "message": f"Exit probabilities for {state} sum to {row_sum}",
                })

        for state, row in self._emission.items():
            row_sum = sum(row.values())
            if abs(row_sum - 1.0) > self.tolerance:
                issues.append({
                    "type": "emission_sum",
                    "state": state,
                    "sum": row_sum,
                    "message": f"Emission probabilities for {state} sum to {row_sum}",
                })

        for issue in issues:
            self.logger.warning(issue["message"])
        return {"issue_count": len(issues), "issues": issues}

    # --- Snapshots ------------------------------------------------------

    def to_snapshot(self) -> Dict[str, Any]:
        """Returns the model parameters as JSON-compatible data."""
        return {
            "states": self.states(),
            "events": self.events(),
            "unk_token": self.unk_token,
            "start": [[state, p] for state, p in self._start.items()],
            "transition": [
                [src, dst, p] for src, row in self._transition.items() for dst, p in row.items()
            ],
            "emission": [
                [state, event, p] for state, row in self._emission.items() for event, p in row.items()
            ],
        }

    @classmethod
    def from_snapshot(
        cls,
        data: Dict[str, Any],
        tolerance: float = DEFAULT_TOLERANCE,
        logger: Optional[logging.Logger] = None,
    ) -> "HiddenMarkovModel":
        model = cls(unk_token=data.get("unk_token"), tolerance=tolerance, logger=logger)
        for state in data["states"]:
            model.add_state(state)
        for event in data["events"]:
            model.add_event(event)
        for state, p in data["start"]:
            model.set_start_probability(state, p)
        for src, dst, p in data["transition"]:
            model.set_transition_probability(src, dst, p)
        for state, event, p in data["emission"]:
            model.set_emission_probability(event, state, p)
        return model

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, HiddenMarkovModel):
            return NotImplemented
        return self.to_snapshot() == other.to_snapshot()

    __hash__ = None  # type: ignore[assignment]
