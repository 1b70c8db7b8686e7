"""Reading and writing part-of-speech corpora.

Each line of a corpus file holds one sentence written as a run of tagged
words, ``(DT the) (NN cat) (VBZ sleeps)``. Anything between the pairs is
ignored.
"""
from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable, List, Optional, Tuple, Union

__all__ = ["TAGGED_WORD_RE", "NULL_TAG", "parse_tagged_line", "read_corpus", "format_tagged_line", "split_example"]

logger = logging.getLogger(__name__)

# Format of a single tagged word within the corpus.
TAGGED_WORD_RE = re.compile(r"\((\S+)\s+(\S+)\)")

# Written in place of a label the decoder could not assign.
NULL_TAG = "-NULL-"

TaggedWord = Tuple[str, str]


def parse_tagged_line(line: str) -> List[TaggedWord]:
    """Extracts the ``(tag, word)`` pairs of one corpus line."""
    return TAGGED_WORD_RE.findall(line)


def read_corpus(path: Union[str, Path]) -> List[List[TaggedWord]]:
    """
    Loads every sentence of a corpus file.

    Args:
        path: Path to the corpus file.

    Returns:
        One list of ``(tag, word)`` pairs per line, in file order. Lines with
        no tagged words yield empty lists.

    Raises:
        FileNotFoundError: If the corpus file does not exist.
    """
    logger.info("Reading corpus %s...", path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            return [parse_tagged_line(line) for line in f]
    except FileNotFoundError:
        raise FileNotFoundError(f"Corpus file not found at: {path}")


def split_example(example: Iterable[TaggedWord]) -> Tuple[List[str], List[str]]:
    tags, words = [], []
    for tag, word in example:
        tags.append(tag)
        words.append(word)
    return tags, words


def format_tagged_line(pairs: Iterable[Tuple[Optional[str], str]]) -> str:
    """Renders ``(tag, word)`` pairs back into the corpus line format."""
    return " ".join(f"({NULL_TAG if tag is None else tag} {word})" for tag, word in pairs)
