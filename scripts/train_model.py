import argparse
import logging
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from postag.config import Config, load_config
from postag.tagger import make_tagger


def main(argv=None):
    """
    Main entry point for the command-line model training script.

    Trains the configured model (HMM or Perceptron) on a training corpus and
    saves the resulting snapshot, without evaluating it. The snapshot can later
    be handed to `main.py --tagger-file` to skip training.
    """
    parser = argparse.ArgumentParser(
        description="Train a part-of-speech tagging model and save its snapshot.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--corpus", help="Path to the training corpus (defaults to the configured one).")
    parser.add_argument("--out", help="Output path for the model snapshot (defaults to the configured one).")
    parser.add_argument("--config", help="Path to the configuration YAML file. Defaults apply when omitted.")
    parser.add_argument("--method", help="HMM or PERCEPTRON (overrides config).")
    parser.add_argument("--passes", type=int, help="Perceptron passes over the training data (overrides config).")
    args = parser.parse_args(argv)

    try:
        cfg = load_config(args.config)
        overrides = {}
        if args.method is not None:
            overrides["method"] = args.method
        if args.passes is not None:
            overrides["num_passes"] = args.passes
        if overrides:
            cfg = Config(**{**cfg.__dict__, **overrides})

        logging.basicConfig(level=logging.DEBUG if cfg.debug else logging.INFO)

        corpus = args.corpus or cfg.paths["training_corpus"]
        print(f"Training {cfg.method} model on {corpus}...")
        tagger = make_tagger(cfg, training_corpus=corpus)
        saved_to = tagger.save(args.out)
        print(f"Successfully saved model to {saved_to}")

    except (FileNotFoundError, ValueError, TypeError, KeyError) as e:
        print(f"\nError: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
