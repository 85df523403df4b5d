#!/usr/bin/env python3
"""vizloop animation renderer.

Usage:
    python scripts/render_animation.py offline output/snapshots/tracer.nc tracer
    python scripts/render_animation.py offline data.nc T --config scripts/user_config.py --format gif
    python scripts/render_animation.py live --variable tracer --format gif

Note: User config in scripts/user_config.py, expert defaults in vizloop.schemas.param
"""

import sys
import argparse

from vizloop.cli.render import render_time_series, render_live


def main():
    parser = argparse.ArgumentParser(description="Render vizloop animations")
    sub = parser.add_subparsers(dest="command", required=True)

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--config", help="Path to user config file")
    common.add_argument("--base-dir", help="Output directory")
    common.add_argument("--format", choices=["mp4", "gif", "png"], help="Output format")
    common.add_argument("--framerate", type=int, help="Frames per second")
    common.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    offline = sub.add_parser("offline", parents=[common], help="Animate a stored NetCDF variable")
    offline.add_argument("netcdf", help="NetCDF file with a (time, ...) variable")
    offline.add_argument("variable", help="Variable to animate")
    offline.add_argument("--frame-start", type=int, help="First frame (1-based)")
    offline.add_argument("--frame-stop", type=int, help="Last frame (inclusive)")

    live = sub.add_parser("live", parents=[common], help="Record the diffusion simulation while it runs")
    live.add_argument("--variable", default="tracer", help="Stepper field to show")

    args = parser.parse_args()

    cli_args = {
        "base_dir": args.base_dir,
        "output_format": args.format,
        "framerate": args.framerate,
    }

    if args.command == "offline":
        cli_args.update(frame_start=args.frame_start, frame_stop=args.frame_stop)
        report = render_time_series(args.netcdf, args.variable, args.config, cli_args, args.verbose)
    else:
        report = render_live(args.variable, args.config, cli_args, args.verbose)

    print(report)
    return 0 if report.ok else 1


if __name__ == "__main__":
    sys.exit(main())
