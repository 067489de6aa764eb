"""
Command-line interface for contactgraph.

Provides commands for analysing contact traces, simulating Edge-Markovian
graphs and comparing a trace with a model fitted to it.

Examples
--------
    contactgraph analyse trace.txt
    contactgraph --save out/ --no-show simulate -D 1000 -n 20 --cp 0.01 --dp 0.2
    contactgraph --seed 7 compare 3 trace.txt
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from . import __version__
from .network.construction import load_trace
from .network.export import SUPPORTED_FORMATS, export_graph, export_series
from .timeseries.temporal_metrics import histogram_frame
from .workflows import DEFAULT_TRUNCATE, ModelKind, AnalysisReport, analyse_graph, compare, simulate_graph
from .common.exceptions import ConfigurationError, NetworkAnalysisError
from .common.logging_config import setup_logging, configure_external_library_logging, get_logger

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="contactgraph",
        description="Dynamic graphs analysis and simulation.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "-s", "--save", type=Path, default=None,
        help="Save figures (figure_<i>.png) and series (CSV) to this directory",
    )
    parser.add_argument("--no-show", action="store_true", help="Do not show the figures")
    parser.add_argument(
        "-t", "--truncate", type=float, default=DEFAULT_TRUNCATE,
        help="Where to truncate the inter-contacts histogram, as a fraction of its maximum",
    )
    parser.add_argument("--seed", type=int, default=None, help="Random seed for simulations")
    parser.add_argument(
        "--log-level", default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: CONTACTGRAPH_LOG_LEVEL or INFO)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # Analyse command
    analyse_parser = subparsers.add_parser(
        "analyse", help="Analyse a given graph and display its main characteristics"
    )
    analyse_parser.add_argument("file", type=Path, help="Contact trace, one 'n1 n2 ts te' per line")

    # Simulate command
    simulate_parser = subparsers.add_parser(
        "simulate", help="Generate a graph using an Edge-Markovian model"
    )
    simulate_parser.add_argument(
        "-D", "--duration", type=int, required=True, help="Number of time steps to generate"
    )
    simulate_parser.add_argument(
        "-n", "--n-nodes", type=int, required=True, help="Number of nodes in the graph"
    )
    simulate_parser.add_argument(
        "--cp", "--creation-probability", dest="creation_probability", type=float,
        required=True, help="Creation probability",
    )
    simulate_parser.add_argument(
        "--dp", "--deletion-probability", dest="deletion_probability", type=float,
        required=True, help="Deletion probability",
    )
    simulate_parser.add_argument(
        "-o", "--output", type=Path, default=None, help="Write the generated graph to this file"
    )
    simulate_parser.add_argument(
        "--format", choices=SUPPORTED_FORMATS, default="start_end",
        help="Format of the --output file",
    )
    simulate_parser.add_argument(
        "--overwrite", action="store_true", help="Replace an existing --output file"
    )

    # Compare command
    compare_parser = subparsers.add_parser(
        "compare",
        help="Analyse a graph and compare it to its modeled version using an Edge-Markovian model",
    )
    compare_parser.add_argument(
        "model", type=int, choices=[kind.value for kind in ModelKind],
        help="1: Edge Markovian model, 2: Time Dependent Edge Markovian model, "
             "3: Time Dependent Edge Markovian model with delayed nodes",
    )
    compare_parser.add_argument("file", type=Path, help="Contact trace, one 'n1 n2 ts te' per line")

    return parser


def run_analyse(args) -> List[AnalysisReport]:
    graph = load_trace(args.file)
    return [analyse_graph(graph, args.truncate)]


def run_simulate(args) -> List[AnalysisReport]:
    report = simulate_graph(
        duration=args.duration,
        number_of_nodes=args.n_nodes,
        creation_probability=args.creation_probability,
        deletion_probability=args.deletion_probability,
        truncate=args.truncate,
        random_state=args.seed,
    )

    if args.output is not None:
        export_graph(report.graph, args.output, format=args.format, overwrite=args.overwrite)

    return [report]


def run_compare(args) -> List[AnalysisReport]:
    graph = load_trace(args.file)
    result = compare(graph, args.model, args.truncate, random_state=args.seed)

    statistics = result.statistics()
    print(statistics)

    if args.save is not None:
        export_series(statistics, args.save / "statistics.csv", overwrite=True)

    return result.reports


COMMANDS = {
    "analyse": run_analyse,
    "simulate": run_simulate,
    "compare": run_compare,
}


def save_series(reports: List[AnalysisReport], directory: Path) -> None:
    """Write the summary and histogram of every report as CSV."""
    for i, report in enumerate(reports):
        export_series(report.summary(), directory / f"summary_{i}.csv", overwrite=True)
        export_series(histogram_frame(report.histogram), directory / f"histogram_{i}.csv", overwrite=True)


def render_figures(reports: List[AnalysisReport], save: Optional[Path], show: bool) -> None:
    """Draw the report figures, then save and/or show them."""
    try:
        import matplotlib
        if not show:
            matplotlib.use("Agg")
        from .visualization import plots
    except ImportError as e:
        raise ConfigurationError(
            "Plotting requires matplotlib, install contactgraph[viz]",
            parameter="save" if not show else "no_show",
            cause=e
        ) from e

    figures = []
    for report in reports:
        figures.extend(plots.report_figures(report))

    if save is not None:
        paths = plots.save_figures(figures, save)
        logger.info(f"Saved {len(paths)} figures to {save}")

    if show:
        plots.show_figures()

    plots.close_figures(figures)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(level=args.log_level, force_setup=True)
    configure_external_library_logging()

    try:
        reports = COMMANDS[args.command](args)

        if args.save is not None:
            save_series(reports, args.save)

        if args.save is not None or not args.no_show:
            render_figures(reports, args.save, show=not args.no_show)

    except NetworkAnalysisError as e:
        logger.error(str(e))
        return 1
    except OSError as e:
        logger.error(f"I/O error: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
