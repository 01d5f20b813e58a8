"""
project: Zone Forge
module: run.py
License: MIT

Zone Forge CLI entry point.

Provides subcommands for running the Socket.IO server, generating a zone to
inspect its layout, and listing the authored zone templates. Accepts
configuration via flags and environment variables, with optional .env loading.

Run `python run.py --help` for details.
"""

import argparse
import json
import os
import signal
import sys
from textwrap import dedent

from colorama import Fore, Style
from colorama import init as _color_init
from dotenv import load_dotenv

_color_init()

# Disable colors if output is not a real terminal (e.g., during pytest capture)
try:
    _COLOR_ENABLED = sys.stdout.isatty()
except (AttributeError, ValueError):  # pragma: no cover - detached stdout
    _COLOR_ENABLED = False


def _load_version() -> str:
    try:
        with open("VERSION", "r", encoding="utf-8") as f:
            return f.read().strip()
    except OSError:
        return "0.1.0"


__version__ = _load_version()


def parse_args(argv: list[str]) -> argparse.Namespace:
    description = """
    Zone Forge Server

    Run the real-time Flask-SocketIO zone server, or generate a zone from one of
    the authored templates and print its map. Configuration can be provided via
    CLI flags or environment variables. If both are present, CLI flags take
    precedence.
    """

    epilog = dedent(
        """
        Environment variables:
          HOST                               Bind address for the web server (default: 0.0.0.0)
          PORT                               Port for the web server (default: 5000)
          ZONEFORGE_INSTANCE_MAX_AGE_MS      Instance expiry threshold (default: 900000)
          ZONEFORGE_ENABLE_GENERATION_METRICS  1/0 toggle generation metrics (default: 1)
          ZONEFORGE_LOG_LEVEL                debug|info|warn|error (default: info)
          ZONEFORGE_LOG_JSON                 1 to emit JSON log lines

        Examples:
          # Run the server on the default host and port
          python run.py server

          # Run the server on a custom port
          python run.py server --port 8080

          # Load variables from .env then run the server
          python run.py --env-file .env server

          # Print the layout of The Coast with seed 42, packs overlaid
          python run.py generate the_coast --seed 42 --spawns

          # List the authored zones for act 1
          python run.py templates --act 1
        """
    )

    parser = argparse.ArgumentParser(
        prog="ZoneForge",
        description=dedent(description),
        epilog=epilog,
        formatter_class=argparse.RawTextHelpFormatter,
    )

    parser.add_argument(
        "--env-file",
        dest="env_file",
        help="Path to a .env file to load before processing flags",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"Zone Forge Server {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command")

    # server subcommand
    server_parser = subparsers.add_parser(
        "server",
        help="Run the Socket.IO web server",
        formatter_class=argparse.RawTextHelpFormatter,
        description="Run the real-time Flask/Socket.IO server",
    )
    server_parser.add_argument(
        "--host",
        default=None,
        help="Host interface to bind (default: env HOST or 0.0.0.0)",
    )
    server_parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port to listen on (default: env PORT or 5000)",
    )
    server_parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable Flask debug mode with verbose error pages",
    )
    server_parser.set_defaults(command="server")

    # generate subcommand
    gen_parser = subparsers.add_parser(
        "generate",
        help="Generate a zone from a template and print its map",
        formatter_class=argparse.RawTextHelpFormatter,
        description=dedent(
            """
            Generate one zone and print the fully revealed map.

            Legend: # wall  . floor  E exit  W waypoint  B boss  C chest  N npc
                    with --spawns: M pack  R rare pack  U unique pack
            """
        ),
    )
    gen_parser.add_argument("template_id", help="Template id (see `templates`)")
    gen_parser.add_argument("--seed", type=int, default=None, help="Generation seed (default: random)")
    gen_parser.add_argument("--spawns", action="store_true", help="Overlay monster packs and list them")
    gen_parser.add_argument("--metrics", action="store_true", help="Print generation metrics as JSON")
    gen_parser.set_defaults(command="generate")

    # templates subcommand
    tpl_parser = subparsers.add_parser(
        "templates",
        help="List the authored zone templates",
        formatter_class=argparse.RawTextHelpFormatter,
    )
    tpl_parser.add_argument("--act", type=int, default=None, help="Only list zones of this act")
    tpl_parser.set_defaults(command="templates")

    # If no subcommand provided, default to server
    if len(argv) == 0:
        argv = ["server"]

    args = parser.parse_args(argv)
    return args


def _paint(color: str, text) -> str:
    return f"{color}{text}{Style.RESET_ALL}" if _COLOR_ENABLED else str(text)


def _cmd_generate(args) -> int:
    from zoneforge.zones.config import GenerationConfig
    from zoneforge.zones.generator import ZoneGenerator
    from zoneforge.zones.render import render_debug_map
    from zoneforge.zones.template_data import get_zone_template

    template = get_zone_template(args.template_id)
    if template is None:
        print(_paint(Fore.RED, f"[ERROR] Unknown zone template: {args.template_id}"))
        return 1
    zone = ZoneGenerator().generate_zone(template, GenerationConfig(seed=args.seed, enable_metrics=args.metrics))
    grid = zone.grid
    print(_paint(Fore.CYAN + Style.BRIGHT, f"{template.name} ({template.generator}, {grid.width}x{grid.height}) seed={zone.seed}"))
    print(render_debug_map(grid, zone.spawns if args.spawns else ()))
    if args.spawns:
        print()
        for spawn in zone.spawns:
            print(f"  ({spawn.position.x:>2},{spawn.position.y:>2}) {_paint(Fore.YELLOW, spawn.rarity):<8} {spawn.description}")
        print(f"  {len(zone.spawns)} packs")
    if args.metrics:
        print(json.dumps(zone.metrics, indent=2, sort_keys=True))
    return 0


def _cmd_templates(args) -> int:
    from zoneforge.zones.template_data import ZONE_TEMPLATES

    for t in ZONE_TEMPLATES:
        if args.act is not None and t.act != args.act:
            continue
        flags = []
        if t.is_safe_zone:
            flags.append("safe")
        if t.has_waypoint:
            flags.append("waypoint")
        if t.has_boss:
            flags.append(f"boss:{t.boss_type or 'zone_boss'}")
        print(f"{_paint(Fore.GREEN, t.id):<24} act {t.act} lvl {t.level:<3} {t.generator:<8} {t.size:<7} {' '.join(flags)}")
    return 0


def main(argv: list[str]) -> int:
    args = parse_args(argv)
    if getattr(args, "env_file", None):
        load_dotenv(args.env_file)
    else:
        # Load default .env if present (no error if missing)
        load_dotenv()

    mode = (getattr(args, "command", None) or "server").lower()
    if mode == "generate":
        return _cmd_generate(args)
    if mode == "templates":
        return _cmd_templates(args)

    # Resolve configuration from CLI flags or env vars
    host = getattr(args, "host", None) or os.getenv("HOST", "0.0.0.0")
    port = int(getattr(args, "port", None) or os.getenv("PORT", "5000"))
    debug = bool(getattr(args, "debug", False) or os.getenv("FLASK_DEBUG") == "1")

    def handle_sigint(sig, frame):
        print("\n[INFO] Shutting down server...")
        sys.exit(0)

    signal.signal(signal.SIGINT, handle_sigint)

    # Import server entrypoints only after environment is ready
    from zoneforge.logging_utils import log
    from zoneforge.server import start_server

    def label(text: str) -> str:
        return _paint(Fore.YELLOW, text)

    def value(val) -> str:
        return _paint(Fore.GREEN, val)

    divider = _paint(Fore.MAGENTA, "=" * 40)
    lines = [
        divider,
        f"  {_paint(Fore.CYAN + Style.BRIGHT, 'Zone Forge Server Bootup')}",
        divider,
        f"  {label('Mode:'):12} {value(mode.upper())}",
        f"  {label('Host:'):12} {value(host)}",
        f"  {label('Port:'):12} {value(port)}",
        f"  {label('WebSockets:'):12} {value('enabled')}",
        f"  {label('Max age:'):12} {value(os.getenv('ZONEFORGE_INSTANCE_MAX_AGE_MS', '900000') + ' ms')}",
        divider,
        "",
    ]
    print("\n".join(lines))
    log.info(event="startup", mode=mode, host=host, port=port, debug=debug)

    print(f"{_paint(Fore.CYAN, '[INFO]')} Listening for connections... Press Ctrl+C to stop.")
    start_server(host=host, port=port, debug=debug)
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
