"""Shared scaffolding for the scoring models that plug into the decoder.

Both tagging models (the HMM and the structured Perceptron) expose the same
four scoring operations. :class:`ScoringModel` declares that contract
explicitly and owns the lazily created :class:`~postag.decoder.Decoder` bound
to the model, so that any change to a model's scores can discard the decoder's
prefix cache in one place.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Dict, Generic, Hashable, Iterator, List, Optional, Sequence, Tuple, TypeVar

from .decoder import Decoder, DecodeResult

State = Hashable
Event = Hashable

K = TypeVar("K", bound=Hashable)

__all__ = ["State", "Event", "IdInUseError", "ScoreTable", "ScoringModel"]


class IdInUseError(ValueError):
    """Raised when a state identifier is registered twice in one model."""

    def __init__(self, id_: Hashable):
        super().__init__(f"ID {id_} already in use.")
        self.id = id_


class ScoreTable(Generic[K]):
    """A mapping of keys to real-valued scores with an explicit default.

    Missing keys are never materialized on lookup; :meth:`score` simply
    returns the table's default. Keys may be plain identifiers or tuples
    such as ``(state, event)``.
    """

    def __init__(self, default: float = 0.0):
        self.default = default
        self._values: Dict[K, float] = {}

    def score(self, key: K) -> float:
        return self._values.get(key, self.default)

    def set(self, key: K, value: float) -> None:
        self._values[key] = value

    def add(self, key: K, delta: float) -> None:
        self._values[key] = self._values.get(key, self.default) + delta

    def items(self) -> Iterator[Tuple[K, float]]:
        return iter(self._values.items())

    def values(self) -> List[float]:
        return list(self._values.values())

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __len__(self) -> int:
        return len(self._values)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ScoreTable):
            return NotImplemented
        return self.default == other.default and self._values == other._values

    def __repr__(self) -> str:
        return f"ScoreTable(default={self.default!r}, entries={len(self._values)})"


class ScoringModel(ABC):
    """Capability interface consumed by :class:`~postag.decoder.Decoder`.

    Subclasses provide the state set and the three score functions. All score
    functions must return a real number for any argument combination, falling
    back to a neutral value for unknown keys instead of raising.

    Attributes:
        logger: Logger used for diagnostics; injected so callers control
                verbosity without touching global state.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(type(self).__module__)
        self._decoder: Optional[Decoder] = None

    @abstractmethod
    def states(self) -> List[State]:
        """Returns the model's states in enumeration (tie-breaking) order."""

    @abstractmethod
    def start_score(self, state: State) -> float:
        ...

    @abstractmethod
    def transition_score(self, src: State, dst: State) -> float:
        ...

    @abstractmethod
    def emission_score(self, event: Event, state: State) -> float:
        ...

    @property
    def decoder(self) -> Decoder:
        """The decoder bound to this model, created on first use."""
        if self._decoder is None:
            self._decoder = Decoder(self, logger=self.logger)
        return self._decoder

    def invalidate_decoder(self) -> None:
        """Discards the bound decoder and every prefix it has memoized."""
        self._decoder = None

    def decode(self, events: Sequence[Event]) -> DecodeResult:
        return self.decoder.decode(events)

    def states_of_events(self, events: Sequence[Event]) -> List[Optional[State]]:
        """Finds the best label sequence for ``events``."""
        return list(self.decode(events).labels)

    def score_of_events(self, events: Sequence[Event]) -> float:
        """Returns the cumulative score of the best label sequence for ``events``."""
        return self.decode(events).score
