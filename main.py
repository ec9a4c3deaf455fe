import argparse
import logging
import math
import os
import sys
import inquirer

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from curves.builder import load_config, build_curve, build_flattener, build_offsets, build_fit_settings
from curves.clothoid import Clothoid2d
from solver.flattener import FlatteningError

DEFAULT_CONFIG = os.path.join(os.path.dirname(os.path.abspath(__file__)), "config", "default.yaml")


def print_header(title: str, width: int = 60):
    """Print a formatted section header."""
    print("\n" + "=" * width)
    print(f"  {title}")
    print("=" * width)


def print_subheader(title: str, width: int = 60):
    """Print a formatted subsection header."""
    print("\n" + "-" * width)
    print(f"  {title}")
    print("-" * width)


def print_curve_summary(name: str, curve, line, offset_line=None):
    """Print curve properties and flattening result in a formatted table."""
    print_header(f"CURVE: {name}")

    print(f"\n  Type:              {type(curve).__name__}")
    if isinstance(curve, Clothoid2d):
        print(f"  Applied shape:     {curve.applied_shape}")
        a = curve.get_a()
        print(f"  A-value:           {'inf' if math.isinf(a) else f'{a:.4f} m'}")

    print("\n  GEOMETRY")
    start = curve.get_point(0.0)
    end = curve.get_point(1.0)
    print(f"    Start:             ({start.x:.4f}, {start.y:.4f})")
    print(f"    End:               ({end.x:.4f}, {end.y:.4f})")
    print(f"    Length:            {curve.length:.4f} m")

    print("\n  CURVATURE               1/m          R [m]")
    for label, k in (("Start", curve.get_curvature(0.0)), ("End", curve.get_curvature(1.0))):
        radius = abs(1.0 / k) if k != 0.0 else math.inf
        print(f"    {label + ':':<20} {k:>9.5f}   {radius:>12.3f}")

    print_subheader("FLATTENING")
    print(f"    Points:            {line.size}")
    print(f"    Polyline length:   {line.length:.4f} m")
    if offset_line is not None:
        print(f"    Offset points:     {offset_line.size}")
        print(f"    Offset length:     {offset_line.length:.4f} m")


def select_curve(names: list[str]) -> str:
    """Prompt for a curve name."""
    question = [
        inquirer.List('curve',
                      message="Select curve",
                      choices=names,
                      ),
    ]
    answer = inquirer.prompt(question)
    return None if answer is None else answer['curve']


def run_curve(name: str, config: dict, plot: bool = False) -> dict:
    """Build, flatten and report one named curve from the configuration."""
    definition = config['curves'][name]
    curve = build_curve(definition, build_fit_settings(config.get('fit')))
    flattener = build_flattener(definition.get('flattener', config['flattener']))
    offsets = build_offsets(definition.get('offsets'))

    line = curve.to_polyline(flattener)
    offset_line = curve.to_polyline_offset(flattener, offsets) if offsets is not None else None

    print_curve_summary(name, curve, line, offset_line)

    if plot:
        from plots.plots import plot_polyline, plot_curvature
        plot_polyline(line, curve=curve, offset_line=offset_line, title=name)
        plot_curvature(curve, title=f"{name} curvature")

    return {'curve': curve, 'line': line, 'offset_line': offset_line}


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Flatten Bezier and clothoid curves into polylines")
    parser.add_argument("--config", default=DEFAULT_CONFIG, help="YAML configuration file")
    parser.add_argument("--curve", default=None,
                        help="Name of the curve to flatten ('all' for every curve). Prompts if omitted.")
    parser.add_argument("--list", action="store_true", help="List the configured curves and exit")
    parser.add_argument("--plot", action="store_true", help="Show plots of the result")
    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    return parser.parse_args(argv)


def main(argv=None):
    """Main entry point."""
    args = parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="%(levelname)s %(name)s: %(message)s")

    config = load_config(args.config)
    names = list(config['curves'])

    if args.list:
        print_header("CONFIGURED CURVES")
        for name in names:
            print(f"  {name:<20} {config['curves'][name]['type']}")
        return {}

    if args.curve is None:
        if not sys.stdin.isatty():
            print("\n  No curve selected (use --curve).\n")
            return {}
        name = select_curve(names + ['all'])
        if name is None:
            print("\n  Cancelled.\n")
            return {}
    else:
        name = args.curve

    selected = names if name == 'all' else [name]
    for n in selected:
        if n not in config['curves']:
            raise ValueError(f"Unknown curve: {n} (configured: {', '.join(names)})")

    results = {}
    for n in selected:
        try:
            results[n] = run_curve(n, config, plot=args.plot)
        except FlatteningError as e:
            logging.getLogger(__name__).error("Curve %s: %s", n, e)

    print("\n" + "=" * 60)
    print("  FLATTENING COMPLETE")
    print("=" * 60 + "\n")

    return results


if __name__ == "__main__":
    main()
