"""Command line entry point for running an allocation.

Example:
  allocation-engine --covariance-csv cov.csv --method kelly --expected-returns AAPL=0.08 MSFT=0.05
  allocation-engine --prices-csv prices.csv --method risk-parity --max-weight 0.4 --save-plot weights.png
"""
import argparse
import json
import logging
import sys

from .config import load_settings
from .data import estimate_inputs, load_covariance_csv, load_prices_csv
from .errors import ComputationError, NotFoundError, ValidationError
from .service import OptimizationRequest, OptimizationService

logger = logging.getLogger(__name__)


def _parse_return(item):
    symbol, sep, value = item.partition("=")
    if not sep or not symbol:
        raise argparse.ArgumentTypeError(f"expected SYMBOL=VALUE, got {item!r}")
    try:
        return symbol, float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected a number after '=', got {value!r}")


def parse_args(argv=None):
    p = argparse.ArgumentParser(prog="allocation-engine")
    source = p.add_mutually_exclusive_group(required=True)
    source.add_argument("--covariance-csv", help="Labeled covariance matrix (first column and header are symbols)")
    source.add_argument("--prices-csv", help="Price history, one column per symbol; covariance and returns are estimated from it")
    p.add_argument("--method", default="markowitz", help="kelly, markowitz or risk-parity")
    p.add_argument("--expected-returns", nargs="+", type=_parse_return, metavar="SYMBOL=VALUE",
                   help="Per-symbol expected returns; overrides estimates from --prices-csv")
    p.add_argument("--risk-aversion", type=float, default=None)
    p.add_argument("--max-weight", type=float, default=None)
    p.add_argument("--returns-kind", choices=["simple", "log"], default="simple")
    p.add_argument("--save-plot", default=None, help="Write a bar chart of the weights to this path")
    return p.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    settings = load_settings()
    logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    service = OptimizationService(settings=settings)

    expected_returns = None
    try:
        if args.covariance_csv:
            symbols, cov = load_covariance_csv(args.covariance_csv)
        else:
            symbols, mu, cov = estimate_inputs(load_prices_csv(args.prices_csv), kind=args.returns_kind)
            expected_returns = [float(x) for x in mu]
    except (OSError, ValueError) as e:
        logger.error("Could not load inputs: %s", e)
        return 2
    if args.expected_returns:
        expected_returns = dict(args.expected_returns)

    try:
        record = service.upload(symbols, cov)
        result = service.optimize(OptimizationRequest(
            method=args.method,
            expected_returns=expected_returns,
            covariance_id=record.id,
            risk_aversion=args.risk_aversion,
            max_weight=args.max_weight,
        ))
    except (ValidationError, NotFoundError) as e:
        logger.error("%s", e)
        return 2
    except ComputationError as e:
        logger.error("Optimization failed: %s", e.cause)
        return 1

    print(json.dumps(result.to_dict(), indent=2))

    if args.save_plot:
        import matplotlib.pyplot as plt
        from .plots import plot_allocations
        fig = plot_allocations(result.symbols, result.weights, max_weight=args.max_weight, title=result.method)
        fig.savefig(args.save_plot)
        plt.close(fig)
    return 0


if __name__ == "__main__":
    sys.exit(main())
