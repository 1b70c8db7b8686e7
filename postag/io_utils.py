"""Saving and restoring model snapshots as JSON.

A snapshot records which model class it came from alongside that model's
parameters::

    {"json_class": "Perceptron", "data": {"states": [...], "events": [...],
     "start": [[state, w], ...], "transition": [[src, dst, w], ...],
     "emission": [[state, event, w], ...]}}

Score tables keyed by pairs are written as rows rather than as JSON objects,
so composite keys survive the round trip without being flattened to strings.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

from .hmm import DEFAULT_TOLERANCE, HiddenMarkovModel
from .model import ScoringModel
from .perceptron import Perceptron

__all__ = ["save_model", "load_model", "model_to_json", "model_from_json"]

logger = logging.getLogger(__name__)

_REQUIRED_KEYS = ("states", "events", "start", "transition", "emission")


def model_to_json(model: ScoringModel) -> Dict[str, Any]:
    if not isinstance(model, (HiddenMarkovModel, Perceptron)):
        raise TypeError(f"Cannot serialize model of type {type(model).__name__}")
    return {"json_class": type(model).__name__, "data": model.to_snapshot()}


def model_from_json(
    payload: Any,
    tolerance: float = DEFAULT_TOLERANCE,
    logger: Optional[logging.Logger] = None,
) -> ScoringModel:
    """
    Rebuilds a model from a decoded snapshot.

    Raises:
        TypeError: If the payload does not look like a snapshot or names an
                   unknown model class.
    """
    if not isinstance(payload, dict) or not isinstance(payload.get("data"), dict):
        raise TypeError("Expected an object with 'json_class' and 'data' keys.")

    data = payload["data"]
    missing = [key for key in _REQUIRED_KEYS if not isinstance(data.get(key), list)]
    if missing:
        raise TypeError(f"Snapshot data is missing list entries for: {', '.join(missing)}")

    json_class = payload.get("json_class")
    if json_class == "HiddenMarkovModel":
        return HiddenMarkovModel.from_snapshot(data, tolerance=tolerance, logger=logger)
    if json_class == "Perceptron":
        return Perceptron.from_snapshot(data, logger=logger)
    raise TypeError(f"Unknown model class in snapshot: {json_class!r}")


def save_model(path: Union[str, Path], model: ScoringModel) -> None:
    """
    Writes ``model`` to ``path`` as a JSON snapshot.

    Missing parent directories are created.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(model_to_json(model), f, ensure_ascii=False)
    logger.info("Saved %s model to %s", type(model).__name__, path)


def load_model(
    path: Union[str, Path],
    tolerance: float = DEFAULT_TOLERANCE,
    logger: Optional[logging.Logger] = None,
) -> ScoringModel:
    """
    Restores a model saved by :func:`save_model`.

    Args:
        path: The snapshot file.
        tolerance: Probability-sum tolerance for restored HMMs.
        logger: Logger injected into the restored model.

    Returns:
        A :class:`~postag.hmm.HiddenMarkovModel` or
        :class:`~postag.perceptron.Perceptron`.

    Raises:
        FileNotFoundError: If the snapshot does not exist.
        ValueError: If the file is not valid JSON.
        TypeError: If the JSON structure is not a model snapshot.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            payload = json.load(f)
    except FileNotFoundError:
        raise FileNotFoundError(f"Model file not found at: {path}")
    except json.JSONDecodeError as e:
        raise ValueError(f"Error decoding JSON from {path}: {e}")

    return model_from_json(payload, tolerance=tolerance, logger=logger)
