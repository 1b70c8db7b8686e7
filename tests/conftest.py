"""Shared fixtures and import-path setup for the test suite."""
from __future__ import annotations

import sys
from pathlib import Path

import pytest


def _ensure_project_root_on_path() -> None:
    project_root = Path(__file__).resolve().parents[1]
    if str(project_root) not in sys.path:
        sys.path.insert(0, str(project_root))


_ensure_project_root_on_path()

from postag.hmm import HiddenMarkovModel  # noqa: E402


TRAINING_CORPUS = """\
(DT the) (NN cat) (VBZ sleeps)
(DT the) (NN dog) (VBZ barks)

(NN dogs) (VBP bark)
"""


@pytest.fixture
def two_state_hmm() -> HiddenMarkovModel:
    """States A and B with hand-set probabilities over the events x and y."""
    model = HiddenMarkovModel()
    model.set_start_probability("A", 0.6)
    model.set_start_probability("B", 0.4)
    model.set_transition_probability("A", "A", 0.7)
    model.set_transition_probability("A", "B", 0.3)
    model.set_transition_probability("B", "A", 0.4)
    model.set_transition_probability("B", "B", 0.6)
    model.set_emission_probability("x", "A", 0.9)
    model.set_emission_probability("y", "A", 0.1)
    model.set_emission_probability("x", "B", 0.2)
    model.set_emission_probability("y", "B", 0.8)
    return model


@pytest.fixture
def training_corpus(tmp_path: Path) -> Path:
    path = tmp_path / "train.pos"
    path.write_text(TRAINING_CORPUS, encoding="utf-8")
    return path
