from __future__ import annotations

import argparse
import logging
import sys

import numpy as np

from .colony import Colony
from .config import ACOConfig
from .errors import ConfigError
from .geometry import NodeSet

logger = logging.getLogger(__name__)


def build_argparser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="aco-tsp",
        description="Ant Colony Optimization for the Euclidean TSP on 2D points.",
    )
    src = p.add_argument_group("Points")
    src.add_argument("--points", type=str, default=None, help="CSV file with one 'x,y' row per city")
    src.add_argument("--n", type=int, default=20, help="Number of random cities (without --points)")
    src.add_argument("--seed", type=int, default=None, help="Seed for point placement and the colony")

    aco = p.add_argument_group("ACO parameters")
    aco.add_argument("--alpha", type=float, default=ACOConfig.alpha, help="Pheromone influence")
    aco.add_argument("--beta", type=float, default=ACOConfig.beta, help="Influence of 1/d")
    aco.add_argument("--rho", type=float, default=ACOConfig.rho, help="Evaporation rate [0, 1)")
    aco.add_argument("--q", type=float, default=ACOConfig.q, help="Deposit constant")
    aco.add_argument("--tau0", type=float, default=ACOConfig.tau0, help="Initial pheromone")
    aco.add_argument("--ant-factor", type=float, default=ACOConfig.ant_factor, help="Ants per city")
    aco.add_argument("--iters", type=int, default=ACOConfig.n_iterations, help="Number of iterations")
    aco.add_argument("--elite", type=float, default=ACOConfig.elite_weight,
                     help="Elitist deposit weight (0 disables it)")

    out = p.add_argument_group("Output")
    out.add_argument("--plot", nargs="?", const="", default=None, metavar="FILE",
                     help="Plot the result; saved to FILE if given, shown otherwise")
    out.add_argument("-v", "--verbose", action="store_true", help="Log every iteration")
    return p


def main(argv: list[str] | None = None) -> int:
    parser = build_argparser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
    )

    try:
        config = ACOConfig(alpha=args.alpha, beta=args.beta, rho=args.rho, q=args.q, tau0=args.tau0,
                           ant_factor=args.ant_factor, n_iterations=args.iters,
                           elite_weight=args.elite, seed=args.seed).validate()
    except ConfigError as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return 2

    if args.points:
        nodes = NodeSet.from_csv(args.points)
    else:
        nodes = NodeSet.random(args.n, np.random.default_rng(args.seed))

    colony = Colony(nodes, config)
    res = colony.run()

    if not res.best.found:
        print("No tour: the graph has no nodes.")
        return 0

    print("\nBest tour:", " -> ".join(map(str, nodes.ids_for(res.best.order))))
    print(f"Length: {res.best.length:.4f}")
    print("Iterations:", res.iterations)

    if args.plot is not None:
        from .plotting import show_result
        show_result(nodes, res, path=args.plot or None)
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
