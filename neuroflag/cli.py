"""
Command-line entry point.

Example usage:
    neuroflag export network -o media/network.gif --frames 240 --width 960 --height 540
    neuroflag export flag -o media/flag.mp4 --fps 60
    neuroflag export dither -o media/dither.png --frames 1
    neuroflag serve --port 5000
"""
from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from tqdm import tqdm

from neuroflag.config import ConfigError, load_config
from neuroflag.export import FORMATS, KINDS, ExportError, export_animation

logger = logging.getLogger("neuroflag")


def _progress(it, total):
    return tqdm(it, total=total, desc="Rendering frames", unit="frame")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="neuroflag", description="Render the network background and waving flag animations.")
    parser.add_argument('-v', '--verbose', action='store_true', help='Log debug output.')
    parser.add_argument('--config', type=str, default=None, help='JSON file overriding the scene defaults.')
    sub = parser.add_subparsers(dest='command', required=True)

    exp = sub.add_parser('export', help='Render frames to GIF, MP4 or a PNG sequence.')
    exp.add_argument('kind', choices=KINDS, help='Which animation to render.')
    exp.add_argument('-o', '--output', required=True, help='Output file; the extension picks the format.')
    exp.add_argument('--format', choices=FORMATS, default=None, help='Override the format implied by the extension.')
    exp.add_argument('--frames', type=int, default=120, help='Number of frames.')
    exp.add_argument('--fps', type=int, default=30, help='Playback rate of the exported file.')
    exp.add_argument('--width', type=int, default=960, help='Viewport width for the network background.')
    exp.add_argument('--height', type=int, default=540, help='Viewport height for the network background.')
    exp.add_argument('--seed', type=int, default=None, help='Seed for particle spawning.')

    srv = sub.add_parser('serve', help='Run the Flask preview page.')
    srv.add_argument('--host', default='127.0.0.1')
    srv.add_argument('--port', type=int, default=5000)
    srv.add_argument('--debug', action='store_true')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = load_config(args.config)
    except (OSError, ConfigError) as e:
        logger.error("could not load config: %s", e)
        return 2

    if args.command == 'export':
        if args.seed is not None:
            config.seed = args.seed
        try:
            written = export_animation(
                args.kind,
                args.output,
                frames=args.frames,
                fps=args.fps,
                config=config,
                width=args.width,
                height=args.height,
                fmt=args.format,
                progress=_progress,
            )
        except ExportError as e:
            logger.error("%s", e)
            return 1
        logger.info("done: %d file(s) written", len(written))
        return 0

    from neuroflag import web

    web.configure(config)
    web.serve(args.host, args.port, debug=args.debug)
    return 0


if __name__ == '__main__':
    sys.exit(main())
