"""Loads the tagger configuration.

This module defines the `Config` dataclass, a single typed container for the
tagging method, the unknown-word policy, training passes and the default file
locations, and the `load_config` function that reads it from `config.yaml`.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional
import yaml

METHODS = ("HMM", "PERCEPTRON")

DEFAULT_PATHS = {
    "training_corpus": "data/f2-21.train.pos",
    "test_corpus": "data/f2-21.test.pos",
    "hmm_model": "data/saved-hmm-data.json",
    "perceptron_model": "data/saved-perceptron-data.json",
    "hmm_output": "data/output-hmm.txt",
    "perceptron_output": "data/output-perceptron.txt",
}


@dataclass
class Config:
    """
    A typed configuration object holding every setting of the tagger.

    Attributes:
        method: Tagging model to use, either "HMM" or "PERCEPTRON".
        unk_cutoff: Words seen fewer times than this in training are folded
                    into `unk_token` by the HMM.
        unk_token: The fallback token standing in for rare and unseen words.
        num_passes: Passes the Perceptron makes over the training data.
        validation_tolerance: Allowed deviation from 1 for HMM probability sums.
        validate_model: Run the HMM probability-sum validation after training.
        debug: Log at DEBUG level.
        paths: Default corpus, snapshot and output locations.
    """
    method: str = "HMM"
    unk_cutoff: int = 5
    unk_token: str = "<UNK>"
    num_passes: int = 10
    validation_tolerance: float = 2.0 ** -24
    validate_model: bool = True
    debug: bool = False
    paths: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_PATHS))

    def __post_init__(self) -> None:
        self.method = self.method.upper()
        if self.method not in METHODS:
            raise ValueError(f"{self.method} is not a valid method. Choose HMM or PERCEPTRON.")
        if self.unk_cutoff < 0:
            raise ValueError(f"unk_cutoff must be non-negative, got {self.unk_cutoff}")
        if self.num_passes < 0:
            raise ValueError(f"num_passes must be non-negative, got {self.num_passes}")


def load_config(path: Optional[str] = "config.yaml") -> Config:
    """
    Loads and validates the configuration file into a Config object.

    Keys missing from the file fall back to the `Config` defaults; the `paths`
    mapping is merged over `DEFAULT_PATHS` so a file may override only some
    locations.

    Args:
        path: The path to the `config.yaml` file, or None for pure defaults.

    Returns:
        A fully populated `Config` object.

    Raises:
        FileNotFoundError: If the specified file cannot be found.
        ValueError: If the YAML cannot be parsed or a setting is invalid.
        TypeError: If the root of the YAML file is not a dictionary.
    """
    if path is None:
        return Config()

    try:
        with open(path, "r", encoding="utf-8") as f:
            y = yaml.safe_load(f)
    except FileNotFoundError:
        raise FileNotFoundError(f"Configuration file not found at: {path}")
    except yaml.YAMLError as e:
        raise ValueError(f"Error parsing YAML file at {path}: {e}")

    if y is None:
        y = {}
    if not isinstance(y, dict):
        raise TypeError(f"Configuration file {path} must be a dictionary.")

    paths = y.get("paths") or {}
    if not isinstance(paths, dict):
        raise TypeError(f"'paths' in {path} must be a dictionary.")

    return Config(
        method=str(y.get("method", "HMM")),
        unk_cutoff=int(y.get("unk_cutoff", 5)),
        unk_token=str(y.get("unk_token", "<UNK>")),
        num_passes=int(y.get("num_passes", 10)),
        validation_tolerance=float(y.get("validation_tolerance", 2.0 ** -24)),
        validate_model=bool(y.get("validate_model", True)),
        debug=bool(y.get("debug", False)),
        paths={**DEFAULT_PATHS, **{str(k): str(v) for k, v in paths.items()}},
    )
