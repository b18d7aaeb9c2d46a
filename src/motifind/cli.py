import argparse
import json
import logging
import os
import sys
from typing import Any, Dict

from motifind.alphabet import Alphabet
from motifind.api import create_finder_config, find_motif_in_file
from motifind.io import write_problem
from motifind.scoring import registry as scoring_registry
from motifind.synthetic import make_problem


def setup_logging(verbose: bool):
    """Setup logging configuration."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    if verbose:
        logging.getLogger("numba").setLevel(logging.WARNING)


def _add_common_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("input", help="Path to a problem file: alphabet, probabilities, motif length, sequences.")

    scoring_group = parser.add_argument_group("Scoring Options")
    scoring_group.add_argument(
        "--scoring",
        choices=scoring_registry.available(),
        default="relative-information",
        help="Fitness function maximized by the search. (default: %(default)s)",
    )
    scoring_group.add_argument(
        "--pseudo-zero",
        type=float,
        help="Floor substituted for zero probabilities. Uses the scorer default when omitted.",
    )

    technical_group = parser.add_argument_group("Technical Options")
    technical_group.add_argument(
        "--trials",
        type=int,
        default=1,
        help="Number of independent trials; the best scoring one is reported. (default: %(default)s)",
    )
    technical_group.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging to standard output for detailed execution tracking.",
    )
    technical_group.add_argument(
        "--seed",
        type=int,
        help="Set a global random seed for reproducible results.",
    )
    technical_group.add_argument(
        "--jobs",
        type=int,
        default=1,
        help="Number of parallel jobs for trials. Set to -1 to use all available CPU cores. (default: %(default)s)",
    )


def create_arg_parser() -> argparse.ArgumentParser:
    """Create and configure argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        description="motifind: de novo motif discovery with greedy, Gibbs sampling and random projection searches",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
 Examples:
   # Gibbs sampling, best of 20 trials
   motifind gibbs problem.txt --threshold 1e-7 --trials 20 --seed 42

   # Randomized greedy search with batched updates
   motifind greedy problem.txt --batch --scoring frequency --trials 10

   # Random projection with 3-column templates
   motifind projection problem.txt --projection-size 3 --bin-threshold 4 --iterations 200

   # Synthetic problem with a planted motif
   motifind generate problem.txt --num-sequences 10 --seq-length 100 \\
     --motif-length 8 --mutation 0.1 --seed 1
         """,
    )

    subparsers = parser.add_subparsers(dest="mode", help="Operation mode", required=True)

    greedy_parser = subparsers.add_parser("greedy", help="Randomized greedy hill climb over alignment starts.")
    _add_common_options(greedy_parser)
    greedy_group = greedy_parser.add_argument_group("Greedy Options")
    greedy_group.add_argument(
        "--batch",
        action="store_true",
        help="Apply the new starts once per pass instead of after every sequence.",
    )
    greedy_group.add_argument(
        "--max-iterations",
        type=int,
        default=50000,
        help="Upper bound on improvement passes. (default: %(default)s)",
    )

    gibbs_parser = subparsers.add_parser("gibbs", help="Gibbs sampling over alignment starts.")
    _add_common_options(gibbs_parser)
    gibbs_group = gibbs_parser.add_argument_group("Gibbs Options")
    gibbs_group.add_argument(
        "--threshold",
        type=float,
        default=1e-7,
        help="Minimum score gain that accepts a sampled move. (default: %(default)s)",
    )
    gibbs_group.add_argument(
        "--max-sweeps",
        type=int,
        help="Stop after this many sweeps even when moves are still accepted.",
    )

    projection_parser = subparsers.add_parser("projection", help="Random projection voting.")
    _add_common_options(projection_parser)
    projection_group = projection_parser.add_argument_group("Projection Options")
    projection_group.add_argument(
        "--projection-size",
        type=int,
        default=3,
        help="Number of motif columns hashed per iteration; must be below the motif length. (default: %(default)s)",
    )
    projection_group.add_argument(
        "--bin-threshold",
        type=int,
        default=3,
        help="An l-mer gets a vote when its bin holds more entries than this. (default: %(default)s)",
    )
    projection_group.add_argument(
        "--iterations",
        type=int,
        default=100,
        help="Number of random templates. (default: %(default)s)",
    )

    generate_parser = subparsers.add_parser("generate", help="Write a synthetic problem file with a planted motif.")
    generate_parser.add_argument("output", help="Path of the problem file to write.")
    generate_group = generate_parser.add_argument_group("Generation Options")
    generate_group.add_argument(
        "--alphabet", default="ACGT", help="Single-character symbols of the alphabet. (default: %(default)s)"
    )
    generate_group.add_argument(
        "--probabilities",
        type=float,
        nargs="+",
        help="Background probability per symbol, in alphabet order. Uniform when omitted.",
    )
    generate_group.add_argument(
        "--num-sequences", type=int, default=10, help="Number of sequences. (default: %(default)s)"
    )
    generate_group.add_argument(
        "--seq-length",
        type=int,
        default=100,
        help="Background symbols per sequence, before the motif is inserted. (default: %(default)s)",
    )
    generate_group.add_argument(
        "--motif-length", type=int, default=8, help="Length of the planted motif. (default: %(default)s)"
    )
    generate_group.add_argument(
        "--mutation",
        type=float,
        default=0.0,
        help="Per-position substitution probability of each planted copy. (default: %(default)s)",
    )
    generate_technical_group = generate_parser.add_argument_group("Technical Options")
    generate_technical_group.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging to standard output for detailed execution tracking.",
    )
    generate_technical_group.add_argument("--seed", type=int, help="Set a global random seed for reproducible results.")

    return parser


def validate_inputs(args) -> None:
    """Validate input files and parameters."""
    if args.mode == "generate":
        return
    if not os.path.exists(args.input):
        raise FileNotFoundError(f"Problem file not found: {args.input}")


def map_args_to_finder_kwargs(args) -> Dict[str, Any]:
    """Map CLI arguments to algorithm keyword arguments."""
    if args.mode == "greedy":
        return {"update_each_step": not args.batch, "max_iterations": args.max_iterations}
    if args.mode == "gibbs":
        return {"optimization_threshold": args.threshold, "max_sweeps": args.max_sweeps}
    if args.mode == "projection":
        return {
            "projection_size": args.projection_size,
            "bin_threshold": args.bin_threshold,
            "num_iterations": args.iterations,
        }
    return {}


def run_generate(args) -> dict:
    alphabet = Alphabet.from_string(args.alphabet, probabilities=args.probabilities)
    problem = make_problem(
        alphabet,
        num_sequences=args.num_sequences,
        seq_length=args.seq_length,
        motif_length=args.motif_length,
        mutation_probability=args.mutation,
        seed=args.seed,
    )
    write_problem(args.output, alphabet, problem.motif_length, problem.sequences)
    return {"output": args.output, "motif": str(problem.motif), "starts": list(problem.starts)}


def run_search(args) -> dict:
    config = create_finder_config(
        algorithm=args.mode,
        scoring=args.scoring,
        pseudo_zero=args.pseudo_zero,
        trials=args.trials,
        seed=args.seed,
        n_jobs=args.jobs,
        params=map_args_to_finder_kwargs(args),
    )
    result = find_motif_in_file(args.input, config)
    return result.to_dict()


def main_cli():
    """Main CLI entry point."""
    parser = create_arg_parser()

    if len(sys.argv) == 1:
        parser.print_help(sys.stderr)
        sys.exit(1)

    args = parser.parse_args()

    setup_logging(args.verbose)

    if args.verbose:
        logger = logging.getLogger(__name__)
        logger.info("=" * 60)
        logger.info(f"motifind - {args.mode.capitalize()} Mode")
        logger.info("=" * 60)
        if args.mode != "generate":
            logger.info(f"Input: {args.input}")
            logger.info(f"Scoring: {args.scoring}")
            logger.info(f"Trials: {args.trials}")
        logger.info("=" * 60)

    try:
        validate_inputs(args)
        if args.mode == "generate":
            result = run_generate(args)
        else:
            result = run_search(args)

        json_string = json.dumps(result)
        print(json_string)

    except Exception as e:
        print(f"ERROR: Motif search failed: {e}")
        if args.verbose:
            import traceback

            traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main_cli()
