import math

import pytest

from postag.decoder import DecodeResult, Decoder
from postag.hmm import HiddenMarkovModel
from postag.model import ScoringModel


class TableModel(ScoringModel):
    """Scores looked up from plain dictionaries; unseen keys score 0."""

    def __init__(self, states, start=None, transition=None, emission=None):
        super().__init__()
        self._states = list(states)
        self.start = start or {}
        self.transition = transition or {}
        self.emission = emission or {}
        self.emission_calls = 0

    def states(self):
        return list(self._states)

    def start_score(self, state):
        return self.start.get(state, 0.0)

    def transition_score(self, src, dst):
        return self.transition.get((src, dst), 0.0)

    def emission_score(self, event, state):
        self.emission_calls += 1
        return self.emission.get((state, event), 0.0)


def test_single_event_picks_best_start_plus_emission(two_state_hmm):
    score, labels = two_state_hmm.decode(["y"])

    # A: 0.6 * 0.1 = 0.06, B: 0.4 * 0.8 = 0.32
    assert labels == ("B",)
    assert score == pytest.approx(math.log(0.4) + math.log(0.8))


def test_two_event_scenario_follows_running_best_path(two_state_hmm):
    result = two_state_hmm.decode(["x", "y"])

    # Step 1 picks A (0.54 vs 0.08); step 2 extends A: A->A*y = 0.07, A->B*y = 0.24.
    assert result.labels == ("A", "B")
    assert result.score == pytest.approx(
        math.log(0.6) + math.log(0.9) + math.log(0.3) + math.log(0.8)
    )


def test_extension_only_considers_the_running_best_label():
    model = HiddenMarkovModel()
    model.set_start_probability("A", 0.5)
    model.set_start_probability("B", 0.5)
    model.set_transition_probability("A", "A", 0.5)
    model.set_transition_probability("A", "B", 0.5)
    model.set_transition_probability("B", "B", 1.0)
    model.set_emission_probability("x", "A", 0.6)
    model.set_emission_probability("y", "A", 0.4)
    model.set_emission_probability("x", "B", 0.4)
    model.set_emission_probability("y", "B", 0.6)

    result = model.decode(["x", "y"])

    # The path B, B scores 0.5 * 0.4 * 1.0 * 0.6 = 0.12, but it is never
    # considered: after "x" only the path ending in A survives.
    assert result.labels == ("A", "B")
    assert result.score == pytest.approx(math.log(0.09))


def test_ties_go_to_the_first_enumerated_state():
    model = TableModel(["V", "N"])

    assert model.states_of_events(["a", "b", "c"]) == ["V", "V", "V"]


def test_label_sequence_matches_input_length(two_state_hmm):
    for n in range(1, 8):
        events = ["x", "y"] * 4
        assert len(two_state_hmm.decode(events[:n]).labels) == n


def test_empty_sequence_has_no_labels(two_state_hmm):
    assert two_state_hmm.decode([]) == DecodeResult(score=0.0, labels=())


def test_impossible_prefix_yields_null_labels_from_that_point(two_state_hmm):
    # Neither state ever emits "z".
    result = two_state_hmm.decode(["x", "z", "y", "x"])

    assert result.labels == ("A", None, None, None)
    assert result.score == -math.inf


def test_impossible_first_event():
    model = HiddenMarkovModel()
    model.set_start_probability("A", 1.0)
    model.set_emission_probability("x", "A", 1.0)

    result = model.decode(["y", "x"])

    assert result.labels == (None, None)
    assert result.score == -math.inf


def test_prefixes_are_memoized():
    model = TableModel(["A", "B"], emission={("A", "x"): 1.0})
    decoder = Decoder(model)

    decoder.decode(["x", "y", "z"])
    assert model.emission_calls == 6
    assert len(decoder) == 3

    decoder.decode(["x", "y"])
    assert model.emission_calls == 6

    decoder.decode(["x", "y", "z", "w"])
    assert model.emission_calls == 8
    assert len(decoder) == 4


def test_decode_resumes_after_shared_prefix_only():
    model = TableModel(["A", "B"], emission={("A", "x"): 1.0})
    decoder = Decoder(model)
    decoder.decode(["x", "y", "z"])

    decoder.decode(["x", "q", "r"])
    assert model.emission_calls == 10

    decoder.decode(["w", "y"])
    assert model.emission_calls == 14
    assert len(decoder) == 7


def test_memo_keys_on_prefix_value_not_identity():
    model = TableModel(["A", "B"])
    decoder = Decoder(model)

    first = decoder.decode(["x", "y"])
    second = decoder.decode(("x", "y"))

    assert first is second


def test_model_binds_one_decoder_until_invalidated(two_state_hmm):
    decoder = two_state_hmm.decoder
    assert two_state_hmm.decoder is decoder

    two_state_hmm.invalidate_decoder()

    assert two_state_hmm.decoder is not decoder


def test_changing_hmm_probabilities_discards_cached_paths(two_state_hmm):
    assert two_state_hmm.states_of_events(["x"]) == ["A"]

    two_state_hmm.set_emission_probability("x", "B", 0.99)
    two_state_hmm.set_start_probability("B", 0.9)

    assert two_state_hmm.states_of_events(["x"]) == ["B"]


def test_scoring_model_interface_is_enforced():
    class Incomplete(ScoringModel):
        def states(self):
            return []

    with pytest.raises(TypeError):
        Incomplete()
