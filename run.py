"""Delve CLI entry point.

Provides subcommands for running a seeded, autopiloted simulation and for
generating a single level. Accepts configuration via flags and environment
variables; a .env file is read first when present.

Run `python run.py --help` for details.
"""

import argparse
import json
import os
import sys
from collections import deque
from dataclasses import asdict
from textwrap import dedent

from colorama import Fore, Style
from colorama import init as _color_init
from dotenv import load_dotenv

from delve import __version__
from delve.config import SimConfig
from delve.dungeon import DungeonConfig, DungeonGenerationError, generate_level
from delve.dungeon.tiles import kind_to_char
from delve.logging_utils import configure_file_logging, log
from delve.models import GameState
from delve.services.autopilot import Autopilot
from delve.services.spawn_service import get_item_template, get_template
from delve.services.turn_service import TurnScheduler

_color_init()

# Plain text when piped or captured
_COLOR_ENABLED = sys.stdout.isatty()


def parse_args(argv: list[str]) -> argparse.Namespace:
    description = """
    Delve dungeon simulator

    Generate dungeon levels or run a turn-based simulation driven by the
    built-in autopilot. Configuration can be provided via CLI flags or
    environment variables. If both are present, CLI flags take precedence.
    """

    epilog = dedent(
        """
        Environment variables:
          DELVE_LOG_LEVEL          debug | info | warn | error (default: warn)
          DELVE_LOG_JSON           1 to emit JSON log lines
          DELVE_<FIELD>            SimConfig override, e.g. DELVE_FOV_RADIUS=8
          DELVE_DUNGEON_<FIELD>    DungeonConfig override, e.g. DELVE_DUNGEON_WIDTH=60

        Examples:
          # Print a generated level and its metrics
          python run.py generate --seed 42

          # Simulate 300 turns on seed 7 and log to a file
          python run.py simulate --seed 7 --turns 300 --log-file delve.log

          # Load variables from .env then simulate
          python run.py --env-file .env simulate
        """
    )

    parser = argparse.ArgumentParser(
        prog="Delve",
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
        "--log-file",
        dest="log_file",
        default=None,
        help="Also write log lines to this rotating log file",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"Delve {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command")

    # simulate subcommand
    sim_parser = subparsers.add_parser(
        "simulate",
        help="Run an autopiloted simulation",
        formatter_class=argparse.RawTextHelpFormatter,
        description="Run a seeded game for a number of turns and print the final frame and a summary.",
    )
    sim_parser.add_argument("--seed", type=int, default=None, help="Base seed (default: env or random)")
    sim_parser.add_argument("--turns", type=int, default=200, help="Turns to simulate (default: 200)")
    sim_parser.add_argument("--fov-radius", dest="fov_radius", type=int, default=None, help="Player and monster sight radius")
    sim_parser.add_argument("--wander", action="store_true", help="Let idle monsters wander")
    sim_parser.add_argument("--no-descend", dest="descend", action="store_false", help="Never take the stairs")
    sim_parser.add_argument("--reveal", action="store_true", help="Render unexplored cells in the final frame")
    sim_parser.set_defaults(command="simulate")

    # generate subcommand
    gen_parser = subparsers.add_parser(
        "generate",
        help="Generate one level and print it",
        formatter_class=argparse.RawTextHelpFormatter,
        description="Generate a dungeon level and print it as ASCII plus generation metrics.",
    )
    gen_parser.add_argument("--seed", type=int, default=None, help="Generation seed")
    gen_parser.add_argument("--width", type=int, default=None)
    gen_parser.add_argument("--height", type=int, default=None)
    gen_parser.add_argument("--max-rooms", dest="max_rooms", type=int, default=None)
    gen_parser.add_argument("--depth", type=int, default=1, help="Dungeon level used for spawn tables")
    gen_parser.set_defaults(command="generate")

    # If no subcommand provided, default to simulate
    if len(argv) == 0:
        argv = ["simulate"]

    return parser.parse_args(argv)


def _banner(mode: str, rows: list) -> str:
    def label(text: str) -> str:
        return f"{Fore.YELLOW}{text}{Style.RESET_ALL}" if _COLOR_ENABLED else text

    def value(val) -> str:
        return f"{Fore.GREEN}{val}{Style.RESET_ALL}" if _COLOR_ENABLED else str(val)

    title = f"{Fore.CYAN}{Style.BRIGHT}Delve {mode}{Style.RESET_ALL}" if _COLOR_ENABLED else f"Delve {mode}"
    divider = (Fore.MAGENTA + "=" * 40 + Style.RESET_ALL) if _COLOR_ENABLED else "=" * 40
    lines = [divider, f"  {title}", divider]
    lines += [f"  {label(k + ':'):12} {value(v)}" for k, v in rows]
    lines += [divider, ""]
    return "\n".join(lines)


def run_generate(args) -> int:
    cfg = DungeonConfig.from_env(seed=args.seed, width=args.width, height=args.height, max_rooms=args.max_rooms)
    try:
        level = generate_level(cfg, dungeon_level=args.depth)
    except DungeonGenerationError as exc:
        log.error(event="generate_failed", error=str(exc))
        print(f"[ERROR] {exc}")
        return 1
    print(_banner("generate", [("Seed", level.seed), ("Size", f"{cfg.width}x{cfg.height}"), ("Depth", args.depth)]))
    grid = level.grid
    marks = _marks_for(level)
    rows = []
    for y in range(grid.height):
        rows.append("".join(marks.get((x, y)) or kind_to_char(grid.cells[x][y].kind) for x in range(grid.width)))
    print("\n".join(rows))
    print(json.dumps({"seed": level.seed, "metrics": level.metrics}, indent=2, default=str))
    return 0


def _marks_for(level) -> dict:
    """Glyphs drawn over terrain: items, then monsters, stairs and the player start on top."""
    marks = {(i.x, i.y): get_item_template(i.template).glyph for i in level.items}
    marks.update({(s.x, s.y): get_template(s.template).glyph for s in level.spawns})
    if level.stairs is not None:
        marks[level.stairs] = ">"
    marks[level.player_start] = "@"
    return marks


def run_simulate(args) -> int:
    sim_cfg = SimConfig.from_env(fov_radius=args.fov_radius, wander_enabled=True if args.wander else None)
    dungeon_cfg = DungeonConfig.from_env()
    try:
        state = GameState.new(seed=args.seed, dungeon_config=dungeon_cfg, sim_config=sim_cfg)
    except DungeonGenerationError as exc:
        log.error(event="simulate_failed", error=str(exc))
        print(f"[ERROR] {exc}")
        return 1
    print(_banner("simulate", [("Seed", state.seed), ("Turns", args.turns), ("FOV", sim_cfg.fov_radius)]))
    frames = deque(maxlen=1)
    scheduler = TurnScheduler(state, render_sink=frames.append)
    result = scheduler.run(Autopilot(state, max_turns=args.turns, descend=args.descend))
    final = frames[-1]
    print(final.to_ascii(reveal=args.reveal))
    print()
    for line in final.messages:
        print(f"  {line}")
    player = state.player
    summary = {
        "seed": state.seed,
        "turns": state.turn,
        "dungeon_level": state.dungeon_level,
        "game_over": result.game_over,
        "player": player.to_dict() | {"xp": player.xp, "level": player.level},
        "monsters_alive": len(state.entities.alive_monsters()),
        "monsters_dead": sum(1 for e in state.entities.remains() if not e.is_player),
        "explored": len(state.grid.explored_coords()),
        "inventory": [item.to_dict() for item in state.items.inventory],
        "sim_config": asdict(sim_cfg),
    }
    print(json.dumps(summary, indent=2, default=str))
    log.info(event="simulation_done", seed=state.seed, turns=state.turn, game_over=result.game_over)
    return 0


def main(argv: list[str]) -> int:
    args = parse_args(argv)
    # Load .env if requested; default .env is optional
    if getattr(args, "env_file", None):
        load_dotenv(args.env_file)
    else:
        load_dotenv()

    if args.log_file:
        configure_file_logging(args.log_file)

    mode = (getattr(args, "command", None) or "simulate").lower()
    log.info(event="startup", mode=mode, version=__version__, pid=os.getpid())
    if mode == "generate":
        return run_generate(args)
    return run_simulate(args)


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
