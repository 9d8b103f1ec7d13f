#!/usr/bin/env python3
"""Batch round simulation script.

Plays many rounds headlessly and compares the observed win rate and RTP
with the configured win probability.

Usage:
    python run_batch_simulation.py [--rounds N] [--probability P] [--blocks B] [--seed S]
"""

import argparse
import json
import logging
import sys
from datetime import datetime
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from stackwager.core.game import BOUGHT_BLOCK_OPTIONS
from stackwager.core.simulation import SimulationConfig, run_simulation

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger(__name__)


def print_summary(result, probability: float) -> None:
    """Print a human-readable summary table."""
    print("\n" + "=" * 60)
    print("BATCH SIMULATION SUMMARY")
    print("=" * 60)
    print(f"  Seed:               {result.seed}")
    print(f"  Rounds:             {result.total_rounds}")
    print(f"  Configured P(win):  {probability * 100:.1f}%")
    print(f"  Observed win rate:  {result.win_rate * 100:.1f}% ({result.wins} wins)")
    print(f"  Designated wins:    {result.designated_wins}")
    print(f"  Avg lines:          {result.avg_lines:.2f} (std {result.std_lines:.2f})")
    print(f"  Avg payout:         {result.avg_payout:.2f}")
    print(f"  Avg net:            {result.avg_net:+.2f}")
    print(f"  RTP:                {result.rtp * 100:.1f}%")
    print("=" * 60)


def main():
    parser = argparse.ArgumentParser(description="Run headless batch round simulations")
    parser.add_argument("--rounds", "-r", type=int, default=100,
                        help="Number of rounds (default: 100)")
    parser.add_argument("--probability", "-p", type=float, default=0.5,
                        help="Target win probability 0.0-1.0 (default: 0.5)")
    parser.add_argument("--blocks", "-b", type=int, choices=list(BOUGHT_BLOCK_OPTIONS),
                        default=30, help="Blocks bought per round (default: 30)")
    parser.add_argument("--seed", "-s", type=int, default=None,
                        help="Generator seed (default: from settings)")
    parser.add_argument("--output", "-o", type=str, default=None,
                        help="Output file for results (JSON)")
    parser.add_argument("--debug", "-d", action="store_true",
                        help="Log every engine decision")

    args = parser.parse_args()

    result = run_simulation(SimulationConfig(
        rounds=args.rounds,
        win_probability=args.probability,
        bought_blocks=args.blocks,
        seed=args.seed,
        debug_log=args.debug,
    ))
    print_summary(result, args.probability)

    if args.output:
        payload = {
            "generated_at": datetime.now().isoformat(),
            "config": {
                "rounds": args.rounds,
                "probability": args.probability,
                "blocks": args.blocks,
                "seed": result.seed,
            },
            "result": result.to_dict(),
        }
        with open(args.output, "w") as f:
            json.dump(payload, f, indent=2)
        logger.info(f"Results written to {args.output}")


if __name__ == "__main__":
    main()
