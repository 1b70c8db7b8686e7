import argparse
import logging
import sys
from pathlib import Path

# Add project root to path for robust execution
project_root = Path(__file__).parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from postag.config import Config, load_config
from postag.tagger import make_tagger

DEFAULT_CONFIG = "config.yaml"


def configure_logging(debug: bool) -> None:
    if not logging.getLogger().handlers:
        logging.basicConfig(
            level=logging.DEBUG if debug else logging.INFO,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
    else:
        logging.getLogger().setLevel(logging.DEBUG if debug else logging.INFO)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="A Laplace-smoothed bigram HMM / structured Perceptron part-of-speech tagger.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--config", default=DEFAULT_CONFIG, help="Path to the configuration YAML file.")
    parser.add_argument("-r", "--training-corpus", help="Path to file containing the training corpus (overrides config).")
    parser.add_argument("-e", "--test-corpus", help="Path to file containing the test corpus (overrides config).")
    parser.add_argument("-m", "--method", help="Classification method, PERCEPTRON or HMM (overrides config).")
    parser.add_argument("-f", "--tagger-file", help="Use a stored model file instead of reading in a training corpus.")
    parser.add_argument("-o", "--output", help="Where to write the tagged test corpus (overrides config).")
    parser.add_argument("-d", "--debug", dest="debug", action="store_true", help="Set debug mode.")
    parser.add_argument("--no-debug", dest="debug", action="store_false", help="Unset debug mode regardless of config.")
    parser.set_defaults(debug=None)
    return parser


def resolve_config(args: argparse.Namespace) -> Config:
    # The default config file is optional; an explicitly named one is not.
    if args.config == DEFAULT_CONFIG and not Path(DEFAULT_CONFIG).exists():
        cfg = load_config(None)
    else:
        cfg = load_config(args.config)

    if args.method is not None:
        cfg = Config(**{**cfg.__dict__, "method": args.method})
    if args.debug is not None:
        cfg.debug = args.debug
    return cfg


def main(argv=None):
    """
    Main command-line interface for the part-of-speech tagger.

    This script orchestrates a full train-and-evaluate run:
    1.  Loads the configuration file and applies command-line overrides.
    2.  Either trains the selected model on the training corpus (saving a
        snapshot so later runs can skip training), or restores it from the
        file given with `--tagger-file`.
    3.  Tags the test corpus, writes the tagged output, and prints the
        fraction of tags predicted correctly.
    """
    args = build_parser().parse_args(argv)

    try:
        cfg = resolve_config(args)
        configure_logging(cfg.debug)

        training_corpus = args.training_corpus or cfg.paths["training_corpus"]
        test_corpus = args.test_corpus or cfg.paths["test_corpus"]

        if args.tagger_file is None and not Path(training_corpus).exists():
            raise FileNotFoundError(f"{training_corpus} does not exist.")
        if args.tagger_file is not None and not Path(args.tagger_file).exists():
            raise FileNotFoundError(f"{args.tagger_file} does not exist.")
        if not Path(test_corpus).exists():
            raise FileNotFoundError(f"{test_corpus} does not exist.")

        tagger = make_tagger(cfg, frozen_model=args.tagger_file, training_corpus=training_corpus)
        if args.tagger_file is None:
            # Save it in case we want to skip training in the future.
            saved_to = tagger.save()
            print(f"Saved trained model to {saved_to}")

        report = tagger.evaluate(test_corpus, args.output)
        print("Model evaluated %.4f%% of tags correctly." % (report.accuracy * 100.0))

    except (FileNotFoundError, ValueError, TypeError, KeyError) as e:
        print(f"\nError: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
