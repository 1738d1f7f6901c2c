"""Command-line interface for simulating and quoting dynamic-fee pools."""

import argparse
import logging
import sys
from typing import Optional

from dynamic_fee_amm.core.config import BASE_FEE, PRECISION, from_scale, to_scale
from dynamic_fee_amm.core.pool import get_amount_out
from dynamic_fee_amm.simulation.config import (
    BASELINE_SETTINGS,
    BASELINE_VARIANCE,
    NO_VARIANCE,
    resolve_n_workers,
)
from dynamic_fee_amm.simulation.runner import SimulationRunner


def run_simulate_command(args: argparse.Namespace) -> int:
    """Run seeded simulations and report fee behaviour."""
    try:
        settings = BASELINE_SETTINGS.with_overrides(
            n_simulations=args.simulations,
            n_steps=args.steps,
            initial_price=args.initial_price,
            gbm_sigma=args.volatility,
            retail_arrival_rate=args.retail_rate,
            retail_mean_size=args.retail_size,
        )
    except ValueError as e:
        print(f"Error: {e}")
        return 1

    # the reserve ratio must match the starting fair price
    if args.initial_price is not None:
        settings = settings.with_overrides(
            initial_b=settings.initial_a * args.initial_price
        )

    # Explicit market parameters pin the batch to those values
    pinned = args.volatility is not None or args.retail_rate is not None or args.retail_size is not None
    variance = NO_VARIANCE if pinned or args.no_variance else BASELINE_VARIANCE

    try:
        n_workers = args.workers if args.workers is not None else resolve_n_workers()
        runner = SimulationRunner(
            n_simulations=settings.n_simulations,
            settings=settings,
            n_workers=n_workers,
            variance=variance,
            base_seed=args.seed,
        )
    except ValueError as e:
        print(f"Error: {e}")
        return 1

    print(f"Running {settings.n_simulations} simulations of {settings.n_steps} steps...")
    batch = runner.run_batch()

    summary = batch.summary_frame()
    columns = ["arb_trades", "retail_trades", "fee_updates", "average_fee", "max_fee", "gbm_sigma"]
    print()
    print(summary[columns].to_string(float_format=lambda v: f"{v:.6f}"))
    print(f"\nAverage fee across runs: {batch.average_fee * 10_000:.2f} bps")

    if args.chart:
        from dynamic_fee_amm.simulation.charts import write_report

        write_report(batch, args.chart)
        print(f"Charts written to {args.chart}")

    return 0


def run_quote_command(args: argparse.Namespace) -> int:
    """Preview a single swap against the given reserves."""
    if (args.amount_a_in is None) == (args.amount_b_in is None):
        print("Error: pass exactly one of --amount-a-in / --amount-b-in")
        return 1
    if args.reserve_a <= 0 or args.reserve_b <= 0:
        print("Error: reserves must be positive")
        return 1

    reserve_a = to_scale(args.reserve_a)
    reserve_b = to_scale(args.reserve_b)
    fee = to_scale(args.fee) if args.fee is not None else BASE_FEE
    if not 0 <= fee < PRECISION:
        print("Error: fee must be in [0, 1)")
        return 1

    if args.amount_a_in is not None:
        amount_in = to_scale(args.amount_a_in)
        amount_out = get_amount_out(amount_in, reserve_a, reserve_b, fee)
        in_label, out_label = "A", "B"
        new_a, new_b = reserve_a + amount_in, reserve_b - amount_out
    else:
        amount_in = to_scale(args.amount_b_in)
        amount_out = get_amount_out(amount_in, reserve_b, reserve_a, fee)
        in_label, out_label = "B", "A"
        new_a, new_b = reserve_a - amount_out, reserve_b + amount_in

    print(f"Fee:        {from_scale(fee) * 100:.4f}%")
    print(f"Input:      {from_scale(amount_in):.6f} {in_label}")
    print(f"Output:     {from_scale(amount_out):.6f} {out_label}")
    print(f"Price:      {reserve_b / reserve_a:.6f} -> {new_b / new_a:.6f} B per A")
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Dynamic-fee AMM - simulate volatility-driven fees and quote swaps",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  dynamic-fee-amm simulate
  dynamic-fee-amm simulate --simulations 4 --steps 500 --volatility 0.004 --chart fees.html
  dynamic-fee-amm quote --reserve-a 1000 --reserve-b 1000 --amount-a-in 100
        """,
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    sim_parser = subparsers.add_parser("simulate", help="Simulate a pool under GBM prices")
    sim_parser.add_argument(
        "--simulations", type=int, default=None,
        help="Number of seeded simulations (defaults to baseline config)",
    )
    sim_parser.add_argument(
        "--steps", type=int, default=None,
        help="Steps per simulation (defaults to baseline config)",
    )
    sim_parser.add_argument("--seed", type=int, default=0, help="First seed of the batch")
    sim_parser.add_argument(
        "--initial-price", type=float, default=None,
        help="Initial fair price, B per A (defaults to baseline config)",
    )
    sim_parser.add_argument(
        "--volatility", type=float, default=None,
        help="Per-step GBM sigma (defaults to baseline config)",
    )
    sim_parser.add_argument(
        "--retail-rate", type=float, default=None,
        help="Retail arrival rate per step (defaults to baseline config)",
    )
    sim_parser.add_argument(
        "--retail-size", type=float, default=None,
        help="Mean retail order size in B (defaults to baseline config)",
    )
    sim_parser.add_argument(
        "--no-variance", action="store_true",
        help="Use identical market parameters for every seed",
    )
    sim_parser.add_argument(
        "--workers", type=int, default=None,
        help="Worker processes (defaults to N_WORKERS or CPU count)",
    )
    sim_parser.add_argument("--chart", default=None, help="Write HTML charts to this path")
    sim_parser.set_defaults(func=run_simulate_command)

    quote_parser = subparsers.add_parser("quote", help="Preview a swap against given reserves")
    quote_parser.add_argument("--reserve-a", type=float, required=True, help="Reserve of A")
    quote_parser.add_argument("--reserve-b", type=float, required=True, help="Reserve of B")
    quote_parser.add_argument("--amount-a-in", type=float, default=None, help="A paid in")
    quote_parser.add_argument("--amount-b-in", type=float, default=None, help="B paid in")
    quote_parser.add_argument(
        "--fee", type=float, default=None,
        help="Fee as a fraction, e.g. 0.005 (defaults to the base fee)",
    )
    quote_parser.set_defaults(func=run_quote_command)

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    if args.command is None:
        parser.print_help()
        return 1

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
