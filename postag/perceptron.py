"""The structured Perceptron scoring variant and its training loop.

Weights score ``(context, label)`` pairs directly and add up along a path in
linear space. Training decodes each labeled sentence with the current weights
and, whenever the predicted tag sequence differs from the true one, rewards
the features of the true sequence and penalizes those of the prediction.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from tqdm import tqdm

from .model import Event, IdInUseError, ScoreTable, ScoringModel, State

__all__ = ["Perceptron", "DEFAULT_NUM_PASSES"]

# Passes over the training data.
DEFAULT_NUM_PASSES = 10

TaggedExample = Sequence[Tuple[State, Event]]


class Perceptron(ScoringModel):
    """
    A bigram structured Perceptron.

    Attributes:
        initial_weights: Weight of starting a sentence with each tag.
        transition_weights: Weight of each ``(tag, next_tag)`` pair.
        emission_weights: Weight of each ``(tag, word)`` pair.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        super().__init__(logger)
        self.initial_weights: ScoreTable[State] = ScoreTable()
        self.transition_weights: ScoreTable[Tuple[State, State]] = ScoreTable()
        self.emission_weights: ScoreTable[Tuple[State, Event]] = ScoreTable()
        self._tags: Dict[State, None] = {}
        self._events: Dict[Event, None] = {}

    def states(self) -> List[State]:
        return list(self._tags)

    def events(self) -> List[Event]:
        return list(self._events)

    def has_state(self, state: State) -> bool:
        return state in self._tags

    def add_state(self, state: State) -> State:
        """Registers a tag. Raises :class:`IdInUseError` if it already exists."""
        if self.has_state(state):
            raise IdInUseError(state)
        self._tags[state] = None
        # The cached paths never considered the new tag.
        self.invalidate_decoder()
        return state

    def add_event(self, event: Event) -> None:
        self._events[event] = None

    def start_score(self, state: State) -> float:
        if not self.has_state(state):
            self.logger.warning("unexpected: state %s not found.", state)
            return 0.0
        return self.initial_weights.score(state)

    def transition_score(self, src: State, dst: State) -> float:
        if not (self.has_state(src) and self.has_state(dst)):
            self.logger.warning("unexpected: transition %s -> %s uses an unknown state.", src, dst)
            return 0.0
        return self.transition_weights.score((src, dst))

    def emission_score(self, event: Event, state: State) -> float:
        if not self.has_state(state):
            self.logger.warning("unexpected: state %s not found.", state)
            return 0.0
        return self.emission_weights.score((state, event))

    def split_tags_and_words(self, example: TaggedExample) -> Tuple[List[State], List[Event]]:
        """
        Splits ``[(DT, the), (NN, cat)]`` into ``([DT, NN], [the, cat])``.

        Tags and words not seen before are registered with the model.
        """
        tags, words = [], []
        for tag, word in example:
            if not self.has_state(tag):
                self.add_state(tag)
            self.add_event(word)
            tags.append(tag)
            words.append(word)
        return tags, words

    def update_weights(self, example: TaggedExample, wrong_guess: Sequence[Optional[State]]) -> None:
        """Applies a mistake-driven update for every position of ``example``."""
        self.invalidate_decoder()
        for index, (tag, word) in enumerate(example):
            wrong_tag = wrong_guess[index]
            if index == 0:
                self.initial_weights.add(tag, 1)
                self.initial_weights.add(wrong_tag, -1)
            else:
                prev_tag = example[index - 1][0]
                prev_wrong_tag = wrong_guess[index - 1]
                self.transition_weights.add((prev_wrong_tag, wrong_tag), -1)
                self.transition_weights.add((prev_tag, tag), 1)
            self.emission_weights.add((tag, word), 1)
            self.emission_weights.add((wrong_tag, word), -1)

    def train(self, training_examples: Iterable[TaggedExample], num_passes: int = DEFAULT_NUM_PASSES) -> List[int]:
        """
        Trains the weights over ``num_passes`` passes of the training data.

        Args:
            training_examples: Sentences as ordered ``(tag, word)`` pairs.
                               Empty sentences are skipped.
            num_passes: Number of passes over the full training set.

        Returns:
            The number of mistaken sentences in each pass.
        """
        examples = [list(example) for example in training_examples if example]
        mistakes_per_pass = []
        for iteration in range(num_passes):
            self.logger.info("Beginning iteration number %d...", iteration + 1)
            mistakes = 0
            for example in tqdm(examples, desc=f"Pass {iteration + 1}/{num_passes}", unit="sentence"):
                real_tags, words = self.split_tags_and_words(example)
                tags = self.states_of_events(words)
                if tags != real_tags:
                    mistakes += 1
                    self.update_weights(example, tags)
            self.logger.info("Iteration %d: %d of %d sentences mistagged", iteration + 1, mistakes, len(examples))
            mistakes_per_pass.append(mistakes)
        return mistakes_per_pass

    def to_snapshot(self) -> Dict[str, Any]:
        """Returns the weights as JSON-compatible data."""
        self.logger.info(
            "Serialization: saving %d tags, %d init weights, %d tag word weights, and %d tag tag weights",
            len(self._tags), len(self.initial_weights), len(self.emission_weights), len(self.transition_weights),
        )
        return {
            "states": self.states(),
            "events": self.events(),
            "start": [[state, w] for state, w in self.initial_weights.items()],
            "transition": [[src, dst, w] for (src, dst), w in self.transition_weights.items()],
            "emission": [[state, event, w] for (state, event), w in self.emission_weights.items()],
        }

    @classmethod
    def from_snapshot(cls, data: Dict[str, Any], logger: Optional[logging.Logger] = None) -> "Perceptron":
        model = cls(logger=logger)
        for state in data["states"]:
            model.add_state(state)
        for event in data["events"]:
            model.add_event(event)
        for state, w in data["start"]:
            model.initial_weights.set(state, w)
        for src, dst, w in data["transition"]:
            model.transition_weights.set((src, dst), w)
        for state, event, w in data["emission"]:
            model.emission_weights.set((state, event), w)
        model.logger.info(
            "Deserialization: restored %d tags, %d init weights, %d tag word weights, and %d tag tag weights",
            len(model._tags), len(model.initial_weights), len(model.emission_weights), len(model.transition_weights),
        )
        return model

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Perceptron):
            return NotImplemented
        return (
            self.states() == other.states()
            and self.events() == other.events()
            and self.initial_weights == other.initial_weights
            and self.transition_weights == other.transition_weights
            and self.emission_weights == other.emission_weights
        )

    __hash__ = None  # type: ignore[assignment]
