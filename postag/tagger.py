"""Part-of-speech taggers built on the two scoring models.

A tagger owns one trained model and knows how to build it from a training
corpus, restore it from a snapshot, save it, and score it against a held-out
corpus. :class:`HMMTagger` estimates a :class:`~postag.hmm.HiddenMarkovModel`
in closed form; :class:`PerceptronTagger` trains a
:class:`~postag.perceptron.Perceptron`.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Union

from tqdm import tqdm

from .config import Config
from .corpus import format_tagged_line, read_corpus, split_example
from .estimator import build_hmm
from .hmm import HiddenMarkovModel
from .io_utils import load_model, save_model
from .model import ScoringModel
from .perceptron import Perceptron

__all__ = ["EvaluationReport", "POSTagger", "HMMTagger", "PerceptronTagger", "make_tagger"]

PathLike = Union[str, Path]


@dataclass(frozen=True)
class EvaluationReport:
    """Token-level accuracy of a tagger on a labeled corpus."""
    num_right: int
    num_possible: int

    @property
    def accuracy(self) -> float:
        return self.num_right / self.num_possible if self.num_possible else 0.0


class POSTagger(ABC):
    """Common driver logic shared by the HMM and Perceptron taggers."""

    model_type: type = ScoringModel
    method_name = ""
    model_path_key = ""
    output_path_key = ""

    def __init__(self, model: ScoringModel, cfg: Config, logger: Optional[logging.Logger] = None):
        if not isinstance(model, self.model_type):
            raise TypeError(f"{type(self).__name__} requires a {self.model_type.__name__}, got {type(model).__name__}")
        self.model = model
        self.cfg = cfg
        self.logger = logger or logging.getLogger(__name__)

    @classmethod
    @abstractmethod
    def build_model(cls, examples: List[List[tuple]], cfg: Config, logger: logging.Logger) -> ScoringModel:
        ...

    @classmethod
    def from_corpus(cls, path: PathLike, cfg: Config, logger: Optional[logging.Logger] = None) -> "POSTagger":
        """Trains a new tagger from the corpus at ``path``."""
        logger = logger or logging.getLogger(__name__)
        logger.info("Method in use: %s", cls.method_name)
        examples = [example for example in read_corpus(path) if example]
        logger.info("Creating %s from %d sentences...", cls.method_name, len(examples))
        model = cls.build_model(examples, cfg, logger)
        logger.info("Successfully created %s!", cls.method_name)
        return cls(model, cfg, logger)

    @classmethod
    def from_snapshot(cls, path: PathLike, cfg: Config, logger: Optional[logging.Logger] = None) -> "POSTagger":
        """Restores a tagger from a snapshot written by :meth:`save`."""
        logger = logger or logging.getLogger(__name__)
        logger.info("Reading saved %s model from %s.", cls.method_name, path)
        model = load_model(path, tolerance=cfg.validation_tolerance, logger=logger)
        return cls(model, cfg, logger)

    def save(self, path: Optional[PathLike] = None) -> Path:
        """Writes the model snapshot, by default to the configured location."""
        target = Path(path or self.cfg.paths[self.model_path_key])
        save_model(target, self.model)
        return target

    def prepare_events(self, words: Sequence[str]) -> List[str]:
        return list(words)

    def tag(self, words: Sequence[str]) -> List[Optional[str]]:
        """Returns the predicted tag for each of ``words``."""
        return self.model.states_of_events(self.prepare_events(words))

    def evaluate(self, test_corpus: PathLike, output_path: Optional[PathLike] = None) -> EvaluationReport:
        """
        Tags every sentence of a labeled corpus and counts correct tags.

        The predictions, paired with the original words, are written to
        ``output_path`` (by default the configured output location) in corpus
        format, one sentence per line.

        Args:
            test_corpus: Path to a corpus in the `(TAG word)` format.
            output_path: Where to write the tagged output.

        Returns:
            An :class:`EvaluationReport` with the token-level counts.
        """
        self.logger.info("Evaluating model against %s", test_corpus)
        examples = [example for example in read_corpus(test_corpus) if example]

        outfile_name = Path(output_path or self.cfg.paths[self.output_path_key])
        outfile_name.parent.mkdir(parents=True, exist_ok=True)
        self.logger.info("Writing results to file %s.", outfile_name)

        num_right = 0
        num_possible = 0
        with open(outfile_name, "w", encoding="utf-8") as outfile:
            for example in tqdm(examples, desc="Evaluating", unit="sentence"):
                gold_tags, words = split_example(example)
                guess = self.tag(words)
                outfile.write(format_tagged_line(zip(guess, words)) + "\n")
                num_right += sum(1 for predicted, gold in zip(guess, gold_tags) if predicted == gold)
                num_possible += len(gold_tags)

        self.logger.info("Tagged %d correctly out of a possible %d.", num_right, num_possible)
        return EvaluationReport(num_right=num_right, num_possible=num_possible)


class HMMTagger(POSTagger):
    """A Laplace-smoothed bigram HMM tagger."""

    model_type = HiddenMarkovModel
    method_name = "Hidden Markov Model"
    model_path_key = "hmm_model"
    output_path_key = "hmm_output"

    @classmethod
    def build_model(cls, examples, cfg, logger):
        model = build_hmm(
            examples,
            unk_cutoff=cfg.unk_cutoff,
            unk_token=cfg.unk_token,
            tolerance=cfg.validation_tolerance,
            logger=logger,
        )
        if cfg.validate_model:
            model.validate()
        return model

    def prepare_events(self, words):
        return self.model.resolve_events(words)


class PerceptronTagger(POSTagger):
    """A structured Perceptron tagger."""

    model_type = Perceptron
    method_name = "Perceptron"
    model_path_key = "perceptron_model"
    output_path_key = "perceptron_output"

    @classmethod
    def build_model(cls, examples, cfg, logger):
        model = Perceptron(logger=logger)
        model.train(examples, num_passes=cfg.num_passes)
        return model


TAGGERS = {"HMM": HMMTagger, "PERCEPTRON": PerceptronTagger}


def make_tagger(
    cfg: Config,
    frozen_model: Optional[PathLike] = None,
    training_corpus: Optional[PathLike] = None,
    logger: Optional[logging.Logger] = None,
) -> POSTagger:
    """
    Builds the tagger selected by ``cfg.method``.

    Args:
        cfg: The active configuration.
        frozen_model: A saved snapshot to restore instead of training.
        training_corpus: Corpus to train on; defaults to the configured one.
        logger: Logger for the tagger and its model.

    Returns:
        A trained or restored tagger.
    """
    tagger_cls = TAGGERS[cfg.method.upper()]
    if frozen_model is not None:
        return tagger_cls.from_snapshot(frozen_model, cfg, logger)
    return tagger_cls.from_corpus(training_corpus or cfg.paths["training_corpus"], cfg, logger)
