#!/usr/bin/env python3
"""CLI runner for a one-shot survivability simulation."""

import argparse
import json
import sys

sys.path.insert(0, ".")

from config.settings import INITIAL_CAPITAL, SIMULATION_MAX_WORKERS
from src.simulation.engine import simulate
from src.simulation.horizon import VolatilityLevel
from src.simulation.params import InvalidParametersError, SizingMode, build_parameters
from src.simulation.random_source import NumpyRandomSource
from src.utils.logger import setup_logging


def main():
    parser = argparse.ArgumentParser(description="Monte Carlo survivability simulation")
    parser.add_argument("--account-size", type=float, default=INITIAL_CAPITAL)
    parser.add_argument("--sizing-mode", default=SizingMode.PERCENT.value, choices=[m.value for m in SizingMode])
    parser.add_argument("--risk-pct", type=float, default=1.0, help="Percent of equity risked per trade")
    parser.add_argument("--fixed-risk-dollars", type=float, default=None)
    parser.add_argument("--win-rate-pct", type=float, default=50.0)
    parser.add_argument("--avg-r", type=float, default=None, help="Profit per unit risked on a win")
    parser.add_argument("--american-odds", type=float, default=-110)
    parser.add_argument("--volatility", default="MED", choices=[v.value for v in VolatilityLevel])
    parser.add_argument("--death-drawdown-pct", type=float, default=None)
    parser.add_argument("--trades", type=int, default=None, help="Override the derived horizon")
    parser.add_argument("--paths", type=int, default=None)
    parser.add_argument("--workers", type=int, default=SIMULATION_MAX_WORKERS)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--save-json", default=None, help="Save results to JSON file")
    args = parser.parse_args()

    setup_logging()

    try:
        params = build_parameters(
            account_size=args.account_size,
            win_rate_pct=args.win_rate_pct,
            volatility_level=args.volatility,
            risk_pct=args.risk_pct,
            fixed_risk_dollars=args.fixed_risk_dollars,
            sizing_mode=args.sizing_mode,
            avg_r=args.avg_r,
            american_odds=args.american_odds,
            death_drawdown_pct=args.death_drawdown_pct,
            num_trade_events=args.trades,
            num_paths=args.paths,
        )
    except InvalidParametersError as e:
        print(f"Invalid parameters: {e}")
        sys.exit(2)

    summary = simulate(params, NumpyRandomSource(args.seed), max_workers=args.workers)
    base = summary.base
    dist = base.distribution
    ruin = base.ruin

    print(f"\n{'='*70}")
    print(f"  SURVIVABILITY SIMULATION ({summary.num_paths} paths, {summary.num_trade_events} trades)")
    print(f"{'='*70}")
    print(f"  Risk/trade: {params.risk_per_trade:.2%}  Win prob: {params.win_probability:.1%}  "
          f"Payout: {params.payout_multiple:.3f}R  Death line: ${params.death_line:,.0f}")
    print(f"  Final Equity:")
    print(f"    p10:    ${dist.p10_final_equity:,.0f}")
    print(f"    median: ${dist.median_final_equity:,.0f}")
    print(f"    p90:    ${dist.p90_final_equity:,.0f}")
    print(f"  Max Drawdown:   median {dist.median_max_drawdown:.1%}  p90 {dist.p90_max_drawdown:.1%}")
    print(f"  Losing Streak:  median {dist.median_losing_streak:.0f}  p90 {dist.p90_losing_streak:.0f}")
    print(f"  Zero Ruin:      {ruin.zero_ruin_probability:.1%}")
    print(f"  Practical Ruin: {ruin.practical_ruin_probability:.1%}")
    if dist.median_steps_to_death is not None:
        print(f"  Median trades to death: {dist.median_steps_to_death:.0f}")
    print(f"  Kelly: {ruin.kelly_fraction:.2%}  Disciplined: {ruin.disciplined_risk_fraction:.2%}  "
          f"Expectancy: {ruin.expectancy_r:+.3f}R")
    print(f"{'-'*70}")
    print(f"  Stress (win prob {summary.stressed.parameters.win_probability:.1%}): "
          f"practical ruin {summary.stressed.ruin.practical_ruin_probability:.1%} "
          f"({summary.sensitivity.practical_ruin_delta:+.1%})")
    if summary.disciplined is not None:
        print(f"  Disciplined ({summary.disciplined.risk_per_trade:.2%}): "
              f"practical ruin {summary.disciplined.practical_ruin_probability:.1%} "
              f"({summary.disciplined.practical_ruin_delta:+.1%})")
    print(f"  Survival score: {summary.survival.score} ({summary.survival.label})  State: {summary.state}")
    print(f"  {summary.survival.message}")
    print(f"{'='*70}")

    if args.save_json:
        with open(args.save_json, "w") as f:
            json.dump(summary.to_dict(), f, indent=2)
        print(f"\nResults saved to {args.save_json}")


if __name__ == "__main__":
    main()
