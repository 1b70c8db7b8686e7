import logging

import pytest

from postag.model import IdInUseError
from postag.perceptron import Perceptron


def make_perceptron(*tags) -> Perceptron:
    model = Perceptron()
    for tag in tags:
        model.add_state(tag)
    return model


def test_unseen_weights_default_to_zero():
    model = make_perceptron("N", "V")

    assert model.start_score("N") == 0.0
    assert model.transition_score("N", "V") == 0.0
    assert model.emission_score("dog", "V") == 0.0


def test_unknown_state_scores_zero_and_warns(caplog):
    model = make_perceptron("N")

    with caplog.at_level(logging.WARNING):
        assert model.start_score("X") == 0.0
        assert model.transition_score("N", "X") == 0.0
        assert model.emission_score("dog", "X") == 0.0

    assert len(caplog.records) == 3


def test_duplicate_tag_registration_raises():
    model = make_perceptron("N")

    with pytest.raises(IdInUseError):
        model.add_state("N")


def test_split_tags_and_words_registers_new_tags_and_words():
    model = Perceptron()

    tags, words = model.split_tags_and_words([("DT", "the"), ("NN", "cat"), ("DT", "a")])

    assert tags == ["DT", "NN", "DT"]
    assert words == ["the", "cat", "a"]
    assert model.states() == ["DT", "NN"]
    assert model.events() == ["the", "cat", "a"]


def test_update_weights_rewards_truth_and_penalizes_guess():
    model = make_perceptron("N", "V")
    example = [("N", "dog"), ("V", "barks")]

    model.update_weights(example, ["N", "N"])

    assert model.initial_weights.score("N") == 0
    assert model.transition_weights.score(("N", "V")) == 1
    assert model.transition_weights.score(("N", "N")) == -1
    assert model.emission_weights.score(("N", "dog")) == 0
    assert model.emission_weights.score(("V", "barks")) == 1
    assert model.emission_weights.score(("N", "barks")) == -1


def test_update_discards_stale_decoder_cache():
    model = make_perceptron("N", "V")
    events = ["dog", "barks"]

    before = model.decode(events)
    assert before.labels == ("N", "N")
    assert before.score == 0

    model.update_weights([("N", "dog"), ("V", "barks")], list(before.labels))
    after = model.decode(events)

    assert after.labels == ("N", "V")
    assert after.score == 2


def test_new_tag_discards_decoder_cache():
    model = make_perceptron("N")
    model.emission_weights.set(("V", "barks"), 5)
    assert model.states_of_events(["barks"]) == ["N"]

    model.add_state("V")

    assert model.states_of_events(["barks"]) == ["V"]


def test_training_converges_on_a_single_separable_example():
    model = Perceptron()
    example = [("N", "dog"), ("V", "barks")]

    mistakes = model.train([example], num_passes=10)

    assert model.states_of_events(["dog", "barks"]) == ["N", "V"]
    assert mistakes[0] == 1
    assert mistakes[1:] == [0] * 9


def test_training_skips_empty_sentences():
    model = Perceptron()

    mistakes = model.train([[], [("N", "dog")]], num_passes=2)

    assert mistakes == [0, 0]
    assert model.states() == ["N"]


def test_zero_passes_leaves_weights_untouched():
    model = Perceptron()

    assert model.train([[("N", "dog")]], num_passes=0) == []
    assert len(model.initial_weights) == 0


def test_snapshot_round_trip_keeps_pair_keys():
    model = Perceptron()
    model.train([[("N", "dog"), ("V", "barks")], [("V", "run"), ("N", "home")]], num_passes=3)

    restored = Perceptron.from_snapshot(model.to_snapshot())

    assert restored == model
    assert restored.transition_weights.score(("N", "V")) == model.transition_weights.score(("N", "V"))
    assert restored.states_of_events(["dog", "barks"]) == model.states_of_events(["dog", "barks"])
