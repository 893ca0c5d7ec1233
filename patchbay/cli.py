#!/usr/bin/env python3
"""
Patchbay CLI

Command-line interface for rendering cable artwork headlessly.

Usage:
    patchbay reconstruct <image> [options]
    patchbay synth [options]
    patchbay presets [mode]
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

LOG_FORMAT = "%(asctime)s %(levelname)s: %(message)s"


def setup_logging(verbose: bool = False):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
    )


def build_config(mode: str, preset: Optional[str], config_file: Optional[str]):
    """Preset first, then the user's YAML overrides on top."""
    from .config import get_preset, load_config_file

    config = get_preset(mode, preset or "default")
    if config_file:
        config = load_config_file(config_file, mode, base=config)
    return config


def cmd_reconstruct(args):
    """Rebuild an image from straight cables and write it as SVG."""
    from .imageio import load_image, resize_pixels
    from .reconstruction import ReconstructionSystem
    from .render.svg import encode_png, export_frames, write_svg

    config = build_config("reconstruction", args.preset, args.config)
    if args.cables is not None:
        config.update_setting("cable_count", args.cables)
    if args.show_jacks:
        config.update_setting("show_jacks", True)
    if args.show_image:
        config.update_setting("show_original_image", True)
    config.validate()

    pixels = load_image(args.image)
    width = args.width or pixels.shape[1]
    height = args.height or pixels.shape[0]

    print(f"Reconstructing {args.image} at {width}x{height}")
    system = ReconstructionSystem(config, seed=args.seed, resizer=resize_pixels)
    system.load_image(pixels)
    if not system.initialize(width, height):
        print("Error: Image could not be initialized")
        return 1

    print(f"  Jacks: {len(system.jacks)}")
    print(f"  Cables planned: {len(system.pending) + len(system.cables)}")

    backdrop = encode_png(system.analyzer.image) if config.show_original_image else None

    if args.frames:
        frames = []
        for _ in range(args.frames):
            system.update()
            frames.append(system.render())
        export_frames(frames, args.frames_dir, backdrop_png=backdrop)
        print(f"  Frames: {len(frames)} written to {args.frames_dir}")

    system.queue.reveal_all()
    output = write_svg(system.render(), args.output, backdrop_png=backdrop)
    print(f"Saved: {output}")
    return 0


def cmd_synth(args):
    """Run the patchbay animation and write one SVG per frame."""
    from .render.svg import export_frames
    from .synth import SynthVisualizer

    if args.fps <= 0:
        print("Error: --fps must be positive")
        return 1

    config = build_config("synth", args.preset, args.config)
    visualizer = SynthVisualizer(config, args.width, args.height, seed=args.seed)

    delta_ms = 1000.0 / args.fps
    frames = []
    for _ in range(args.frames):
        visualizer.update(delta_ms)
        frames.append(visualizer.render())

    written = export_frames(frames, args.output)
    print(f"Saved {len(written)} frames to {args.output}")
    return 0


def cmd_presets(args):
    """List preset names."""
    from .config import MODES, list_presets

    modes = [args.mode] if args.mode else list(MODES)
    for mode in modes:
        print(f"{mode}:")
        for name in list_presets(mode):
            print(f"  {name}")
    return 0


def main(argv: Optional[List[str]] = None):
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Patchbay - generative cable artwork",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  patchbay reconstruct photo.jpg -o photo.svg
  patchbay reconstruct photo.jpg --preset sketch --frames 60 --frames-dir out/
  patchbay synth -o frames/ --frames 300 --fps 30
  patchbay presets synth
        """,
    )

    parser.add_argument('--version', action='version', version='patchbay 0.1.0')

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    # Reconstruct command
    rec_parser = subparsers.add_parser('reconstruct', help='Rebuild an image from cables')
    rec_parser.add_argument('image', help='Path to the source image')
    rec_parser.add_argument('-o', '--output', default='reconstruction.svg',
                            help='Output SVG path (default: reconstruction.svg)')
    rec_parser.add_argument('--preset', help='Named preset (default: default)')
    rec_parser.add_argument('--config', help='YAML file of option overrides')
    rec_parser.add_argument('--seed', type=int, help='Random seed for reproducible output')
    rec_parser.add_argument('--width', type=int, help='Canvas width (default: image width)')
    rec_parser.add_argument('--height', type=int, help='Canvas height (default: image height)')
    rec_parser.add_argument('--cables', type=int, help='Target cable count')
    rec_parser.add_argument('--frames', type=int, default=0,
                            help='Also write N progressive frames')
    rec_parser.add_argument('--frames-dir', default='frames',
                            help='Directory for progressive frames (default: frames)')
    rec_parser.add_argument('--show-jacks', action='store_true', help='Draw jack points')
    rec_parser.add_argument('--show-image', action='store_true',
                            help='Paint the source image faintly behind the cables')
    rec_parser.add_argument('-v', '--verbose', action='store_true', help='Verbose output')

    # Synth command
    synth_parser = subparsers.add_parser('synth', help='Render the patchbay animation')
    synth_parser.add_argument('-o', '--output', default='synth_frames',
                              help='Output directory (default: synth_frames)')
    synth_parser.add_argument('--frames', type=int, default=120,
                              help='Number of frames (default: 120)')
    synth_parser.add_argument('--fps', type=float, default=30.0,
                              help='Frames per second (default: 30)')
    synth_parser.add_argument('--width', type=int, default=800, help='Canvas width (default: 800)')
    synth_parser.add_argument('--height', type=int, default=600, help='Canvas height (default: 600)')
    synth_parser.add_argument('--preset', help='Named preset (default: default)')
    synth_parser.add_argument('--config', help='YAML file of option overrides')
    synth_parser.add_argument('--seed', type=int, help='Random seed for reproducible output')
    synth_parser.add_argument('-v', '--verbose', action='store_true', help='Verbose output')

    # Presets command
    presets_parser = subparsers.add_parser('presets', help='List named presets')
    presets_parser.add_argument('mode', nargs='?', choices=['reconstruction', 'synth'],
                                help='Only list presets for this mode')

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    setup_logging(getattr(args, 'verbose', False))

    # Dispatch command
    commands = {
        'reconstruct': cmd_reconstruct,
        'synth': cmd_synth,
        'presets': cmd_presets,
    }

    try:
        return commands[args.command](args)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}")
        return 1


if __name__ == '__main__':
    sys.exit(main())
