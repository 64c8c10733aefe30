#!/usr/bin/env python3
"""
Firefly - Command Line Interface

Entry point for the firefly-rgb package.
"""

import argparse
import logging
import sys

from firefly.__version__ import __version__

log = logging.getLogger(__name__)


def _setup_logging(verbose=0):
    """Configure root logging from the -v count."""
    if verbose >= 2:
        logging.basicConfig(level=logging.DEBUG, format='[%(levelname)s] %(name)s: %(message)s')
    elif verbose == 1:
        logging.basicConfig(level=logging.INFO, format='[%(levelname)s] %(message)s')
    else:
        logging.basicConfig(level=logging.WARNING)

    # pyusb's own backend chatter only at -vvv
    if verbose < 3:
        logging.getLogger('usb').setLevel(logging.WARNING)


def _effect_type(value):
    """argparse type for --effect."""
    from firefly.effects import Effect
    from firefly.exceptions import InvalidEffect

    try:
        return Effect.from_name(value)
    except InvalidEffect as e:
        raise argparse.ArgumentTypeError(e.get_full_message()) from None


def _split_colors(values):
    """Flatten ``-c a,b c`` style input into a list of color strings."""
    from firefly.colors import parse_color_list

    colors = []
    for value in values or []:
        colors.extend(parse_color_list(value))
    return colors


def build_parser():
    from firefly.effects import effect_names

    parser = argparse.ArgumentParser(
        prog="firefly",
        description="Lighting control for the 04d9:a1cd RGB keyboard",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    firefly -e static                       Default palette, static
    firefly -e breathe --ci 0               Breathe zone 0 only
    firefly -e wave -c "#ff0000,#ff8000,#ffff00,#00ff00,#00ffff,#0000ff,#ff00ff"
    firefly -e neon --dry-run               Show packets, don't touch USB
    firefly --list-effects                  List effects and codes
        """
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v, -vv, -vvv)"
    )
    parser.add_argument(
        "-c", "--colors",
        nargs="*",
        default=[],
        metavar="COLOR",
        help="Exactly 7 hex colors (#rrggbb or rrggbb), comma-delimited, one per "
             "zone. If omitted, the default palette is used."
    )
    parser.add_argument(
        "-e", "--effect",
        type=_effect_type,
        metavar="EFFECT",
        help=f"Lighting effect: {', '.join(effect_names())}"
    )
    parser.add_argument(
        "--ci",
        type=int,
        default=7,
        metavar="INDEX",
        help="Index of the color to use for the effect. 0-6 for index of the "
             "colors, 7 for loop (default: 7)"
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the encoded packets instead of sending them"
    )
    parser.add_argument(
        "--list-effects",
        action="store_true",
        help="List available lighting effects"
    )
    parser.add_argument(
        "--config",
        metavar="PATH",
        help="Config file (default: ~/.config/firefly/config.json)"
    )
    return parser


def main(argv=None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    _setup_logging(args.verbose)

    if args.list_effects:
        return list_effects()

    if args.effect is None:
        parser.error("the following arguments are required: -e/--effect")

    return apply_lighting(
        colors=_split_colors(args.colors),
        effect=args.effect,
        color_index=args.ci,
        dry_run=args.dry_run,
        config_path=args.config,
    )


def list_effects():
    """Print effect names and firmware codes."""
    from firefly.effects import Effect

    print("Lighting effects:")
    for effect in Effect:
        print(f"  {effect.value:>2}  {effect.cli_name}")
    return 0


def _format_packet(name, payload):
    return f"{name:<7} ({len(payload):2d} bytes): {payload.hex(' ')}"


def apply_lighting(colors, effect, color_index=7, dry_run=False, config_path=None):
    """Validate, encode and send one lighting change.  Returns exit status."""
    from firefly.colors import resolve_colors
    from firefly.conf import load_settings
    from firefly.device import send_lighting
    from firefly.exceptions import FireflyError
    from firefly.protocol import encode_command

    try:
        settings = load_settings(config_path)
        log.info("Colors: %s", colors or list(settings.palette))
        color_set = resolve_colors(colors, settings.palette)

        if dry_run:
            command = encode_command(color_set, effect, color_index)
            print(f"Device: {settings.device.describe()}")
            for name, payload in command:
                print(_format_packet(name, payload))
            return 0

        send_lighting(color_set, effect, color_index, config=settings.device)
        target = "all zones" if color_index == 7 else f"zone {color_index}"
        print(f"Applied {effect.cli_name} ({target})")
        return 0
    except FireflyError as e:
        log.debug("%s", e.technical_message, exc_info=e.__cause__ is not None)
        print(f"Error: {e.get_full_message()}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
