from __future__ import annotations
import argparse
import sys
import yaml
from ..config import CacheConfig, REPLACEMENT_POLICIES, MALFORMED_MODES
from ..runtime.simulator import run as run_sim
from ..trace.parser import TraceParser, MalformedTraceError
from ..utils.logging import set_verbose
from ..utils.reporting import format_summary, generate_report


def cmd_run(args) -> int:
    """Simulates one trace file and prints the hit/miss summary."""
    try:
        config = CacheConfig.from_args(args)
    except (ValueError, OSError, yaml.YAMLError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    trace = TraceParser(args.trace, on_malformed=config.on_malformed)
    try:
        stats = run_sim(trace, config)
    except OSError as e:
        print(f"{args.trace}: {e.strerror or e}", file=sys.stderr)
        return 1
    except MalformedTraceError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    print(format_summary(stats))

    if config.report_dir:
        try:
            generate_report(stats, config)
        except OSError as e:
            print(f"{config.report_dir}: {e.strerror or e}", file=sys.stderr)
            return 1
    return 0


def build_parser():
    p = argparse.ArgumentParser(
        prog="cachesim",
        description="Set-associative cache simulator",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    p.add_argument("trace", help='Trace file of "R: 0x<addr>" / "W: 0x<addr>" lines ("-" for stdin)')

    # Config file
    p.add_argument("-c", "--config", type=str, default=None,
                   help="Path to YAML config file to override defaults")

    # Geometry (default=None so YAML values are not clobbered)
    geo = p.add_argument_group('Cache Geometry')
    geo.add_argument("--memory-size", type=int, default=None, dest="memory_size_bytes",
                     help="Total cache capacity in bytes")
    geo.add_argument("--block-size", type=int, default=None, dest="block_size_bytes",
                     help="Block size in bytes (power of two)")
    geo.add_argument("--associativity", type=int, default=None,
                     help="Number of ways per set")

    # Behaviour
    p.add_argument("--prefetch", action=argparse.BooleanOptionalAction, default=None,
                   help="Prefetch the next block on every miss")
    p.add_argument("--policy", type=str, default=None, dest="replacement_policy",
                   choices=list(REPLACEMENT_POLICIES),
                   help="Replacement policy: fifo (hits do not refresh) or lru")
    p.add_argument("--on-malformed", type=str, default=None, dest="on_malformed",
                   choices=list(MALFORMED_MODES),
                   help="What to do at a malformed trace line")
    p.add_argument("--report", type=str, default=None, dest="report_dir",
                   help="Directory to save a JSON report")
    p.add_argument("-v", "--verbose", action="store_true",
                   help="Enable debug logging")

    p.set_defaults(func=cmd_run)
    return p


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    set_verbose(args.verbose)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
