"""Closed-form estimation of a bigram HMM from a tagged corpus.

Building the model takes three steps:

1.  **Counting**: :func:`count_corpus` tallies tags, words, ``(tag, word)``
    pairs and ``(tag, next_tag)`` bigrams within each sentence.
2.  **Rare-word folding**: :func:`fold_rare_words` merges every word seen fewer
    than ``cutoff`` times into a single unknown token, so the model has
    emission mass to give to words it never saw.
3.  **Estimation**: :func:`estimate_hmm` turns the counts into start,
    Laplace-smoothed transition and unsmoothed emission probabilities.
"""
from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import pandas as pd

from .hmm import DEFAULT_TOLERANCE, HiddenMarkovModel

__all__ = ["CorpusCounts", "count_corpus", "fold_rare_words", "estimate_hmm", "build_hmm"]

logger = logging.getLogger(__name__)

TaggedWord = Tuple[str, str]


@dataclass
class CorpusCounts:
    """
    Raw frequency tables gathered from a tagged corpus.

    Attributes:
        tag_counts: Occurrences of each tag, in the order tags were first seen.
        word_counts: Occurrences of each word.
        tagged_word_counts: Occurrences of each ``(tag, word)`` pair.
        tag_pair_counts: Occurrences of each ``(tag, next_tag)`` bigram.
    """
    tag_counts: Dict[str, int] = field(default_factory=dict)
    word_counts: Dict[str, int] = field(default_factory=dict)
    tagged_word_counts: Dict[TaggedWord, int] = field(default_factory=dict)
    tag_pair_counts: Dict[Tuple[str, str], int] = field(default_factory=dict)


def count_corpus(examples: Iterable[Sequence[TaggedWord]]) -> CorpusCounts:
    """Tallies the frequency tables needed to estimate an HMM."""
    tag_counts: Counter = Counter()
    word_counts: Counter = Counter()
    tagged_word_counts: Counter = Counter()
    tag_pair_counts: Counter = Counter()

    for example in examples:
        for tag, word in example:
            word_counts[word] += 1
            tag_counts[tag] += 1
            tagged_word_counts[(tag, word)] += 1
        tags = [tag for tag, _ in example]
        tag_pair_counts.update(zip(tags, tags[1:]))

    return CorpusCounts(
        tag_counts=dict(tag_counts),
        word_counts=dict(word_counts),
        tagged_word_counts=dict(tagged_word_counts),
        tag_pair_counts=dict(tag_pair_counts),
    )


def fold_rare_words(counts: CorpusCounts, cutoff: int, unk_token: str) -> CorpusCounts:
    """
    Merges words seen fewer than ``cutoff`` times into ``unk_token``.

    Tag and bigram counts are untouched, so every emission distribution still
    sums to one after folding.

    Args:
        counts: Counts produced by :func:`count_corpus`.
        cutoff: Minimum frequency for a word to keep its own identity.
        unk_token: The token that absorbs rare words.

    Returns:
        A new :class:`CorpusCounts` with rare words folded.
    """
    rare = {word for word, freq in counts.word_counts.items() if freq < cutoff}

    def unkify(word: str) -> str:
        return unk_token if word in rare else word

    word_counts: Counter = Counter()
    for word, count in counts.word_counts.items():
        word_counts[unkify(word)] += count

    tagged_word_counts: Counter = Counter()
    for (tag, word), count in counts.tagged_word_counts.items():
        tagged_word_counts[(tag, unkify(word))] += count

    logger.info("Folded %d rare word types into %s", len(rare), unk_token)
    return CorpusCounts(
        tag_counts=dict(counts.tag_counts),
        word_counts=dict(word_counts),
        tagged_word_counts=dict(tagged_word_counts),
        tag_pair_counts=dict(counts.tag_pair_counts),
    )


def _transition_table(counts: CorpusCounts, tags: List[str], tag_totals: pd.Series) -> pd.DataFrame:
    """Add-one smoothed P(next_tag | tag) over the full tag x tag product."""
    if counts.tag_pair_counts:
        pairs = pd.Series(counts.tag_pair_counts, dtype=float).unstack(fill_value=0.0)
        pairs = pairs.reindex(index=tags, columns=tags, fill_value=0.0)
    else:
        pairs = pd.DataFrame(0.0, index=tags, columns=tags)
    return (pairs + 1.0).div(tag_totals + len(tags), axis=0)


def _emission_table(counts: CorpusCounts, tag_totals: pd.Series) -> pd.Series:
    """Unsmoothed P(word | tag), indexed by ``(tag, word)``."""
    if not counts.tagged_word_counts:
        return pd.Series(dtype=float)
    tagged = pd.Series(counts.tagged_word_counts, dtype=float)
    totals = tag_totals.reindex(tagged.index.get_level_values(0)).to_numpy()
    return tagged / totals


def estimate_hmm(
    counts: CorpusCounts,
    unk_token: Optional[str] = None,
    tolerance: float = DEFAULT_TOLERANCE,
    logger: Optional[logging.Logger] = None,
) -> HiddenMarkovModel:
    """
    Builds a :class:`HiddenMarkovModel` from corpus counts.

    Start probabilities are relative tag frequencies, transitions use add-one
    smoothing over every tag pair and emissions are relative frequencies of
    ``(tag, word)`` within each tag. States are registered in the order tags
    were first seen, which fixes the decoder's tie-breaking order.

    Args:
        counts: Counts, usually already passed through :func:`fold_rare_words`.
        unk_token: Fallback event for words outside the vocabulary.
        tolerance: Probability-sum tolerance used by ``validate``.
        logger: Logger injected into the model.

    Returns:
        The estimated model.
    """
    model = HiddenMarkovModel(unk_token=unk_token, tolerance=tolerance, logger=logger)
    tags = list(counts.tag_counts)
    if not tags:
        return model

    tag_totals = pd.Series(counts.tag_counts, dtype=float).reindex(tags)

    start = tag_totals / tag_totals.sum()
    for tag, p in start.items():
        model.set_start_probability(tag, float(p))

    transitions = _transition_table(counts, tags, tag_totals)
    for src in tags:
        for dst, p in transitions.loc[src].items():
            model.set_transition_probability(src, dst, float(p))

    for (tag, word), p in _emission_table(counts, tag_totals).items():
        model.set_emission_probability(word, tag, float(p))

    return model


def build_hmm(
    examples: Iterable[Sequence[TaggedWord]],
    unk_cutoff: int,
    unk_token: str,
    tolerance: float = DEFAULT_TOLERANCE,
    logger: Optional[logging.Logger] = None,
) -> HiddenMarkovModel:
    """Counts, folds and estimates in one call."""
    counts = fold_rare_words(count_corpus(examples), unk_cutoff, unk_token)
    return estimate_hmm(counts, unk_token=unk_token, tolerance=tolerance, logger=logger)
