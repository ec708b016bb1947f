from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Callable, List, Optional, TextIO

from . import __version__
from .engine import GameEngine, GameOutcome, GameState
from .errors import SettingsError
from .logging_config import configure_logging
from .settings import Settings
from .stats import CorruptStatsError, StatsManager
from .utils.events import EventBus
from .utils.random_provider import RandomProvider

logger = logging.getLogger(__name__)

HELP_TEXT = """Commands:
  f        flee the room
  s        stay and face the room
  1-4      pick a card
  w / b    fight the selected monster with your weapon / barehanded
  n        go on to the next room
  l        show the game log
  h        this help
  q        quit"""


class TerminalGame:
    """Plays a GameEngine through text input and output.

    Input and output are injectable so the loop can be driven from tests.
    """

    def __init__(
        self,
        engine: GameEngine,
        input_fn: Callable[[str], str] = input,
        out: Optional[TextIO] = None,
        recent_events: int = 5,
    ) -> None:
        self.engine = engine
        self.input_fn = input_fn
        self.out = out or sys.stdout
        self.recent_events = recent_events

    def write(self, text: str = "") -> None:
        self.out.write(text + "\n")

    def render(self) -> None:
        status = self.engine.player_status()
        if status is None:
            return
        ceiling = "unused" if status.weapon_ceiling is None else f"< {status.weapon_ceiling}"
        self.write("")
        self.write(
            f"Room {status.room_number} | HP {status.hp}/{status.max_hp} | "
            f"Weapon: {status.weapon_name} ({ceiling}) | "
            f"Deck: {status.deck_remaining} | Discard: {status.discard_count}"
        )
        if status.weapon_history:
            self.write("Slain with weapon: " + ", ".join(str(c) for c in status.weapon_history))
        for view in self.engine.room_cards():
            if view.resolved:
                marker = "x"
            elif view.pending:
                marker = ">"
            else:
                marker = " "
            extra = " (carried)" if view.carried else ""
            self.write(f"  [{marker}] {view.index + 1}: {view.card.label:<5} {view.card.name}{extra}")
        if self.recent_events:
            self.show_log()
        self.write(self._prompt_hint())

    def _prompt_hint(self) -> str:
        state = self.engine.state
        if state is GameState.ROOM_DECISION:
            return "(f)lee or (s)tay?" if self.engine.can_flee else "You cannot flee: (s)tay."
        if state is GameState.CARD_INTERACTION:
            size = len(self.engine.room_cards())
            return "Pick card 1." if size == 1 else f"Pick a card (1-{size})."
        if state is GameState.COMBAT_CHOICE:
            options = self.engine.combat_options()
            if options is not None and options.can_use_weapon:
                return f"(w)eapon for {options.weapon_damage} or (b)arehanded for {options.barehanded_damage}?"
            return f"(b)arehanded for {options.barehanded_damage if options else '?'} damage."
        if state is GameState.ROOM_COMPLETE:
            return "(n)ext room."
        return ""

    def show_log(self, count: Optional[int] = None) -> None:
        for event in self.engine.log.recent(count or self.recent_events):
            self.write(f"  [{event.seq}] {event.message}")

    def handle(self, line: str) -> bool:
        """Apply one input line. Returns False when the player quits."""
        cmd = line.strip().lower()
        if not cmd:
            return True
        if cmd in ("q", "quit", "exit"):
            return False
        if cmd in ("h", "help", "?"):
            self.write(HELP_TEXT)
            return True
        if cmd in ("l", "log"):
            self.show_log(count=20)
            return True

        engine = self.engine
        if cmd in ("f", "flee"):
            result = engine.flee()
        elif cmd in ("s", "stay"):
            result = engine.stay()
        elif cmd in ("w", "weapon"):
            result = engine.choose_combat(True)
        elif cmd in ("b", "barehanded"):
            result = engine.choose_combat(False)
        elif cmd in ("n", "next"):
            result = engine.advance_to_next_room()
        elif cmd.isdigit():
            result = engine.select_card(int(cmd) - 1)
        else:
            self.write(f"Unknown command {cmd!r}. Type h for help.")
            return True
        self.write(result.message)
        return True

    def run(self) -> Optional[GameOutcome]:
        """Play one game to the end. Returns None if the player quit early."""
        result = self.engine.start_game()
        self.write(result.message)
        while not self.engine.is_over:
            self.render()
            try:
                line = self.input_fn("> ")
            except EOFError:
                return None
            if not self.handle(line):
                return None
        outcome = self.engine.outcome()
        self.write("")
        for text in outcome.format_lines():
            self.write(text)
        return outcome


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="scoundrel",
        description="Scoundrel - a solo dungeon crawl with a 44-card deck",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--settings",
        dest="settings_path",
        type=Path,
        default=None,
        help="Path to a user settings YAML file to load/override defaults.",
    )
    parser.add_argument("--stats-file", type=Path, default=None, help="Override where stats are stored.")
    parser.add_argument("--debug", action="store_true", help="Enable verbose debug logging.")

    sub = parser.add_subparsers(dest="command")
    play = sub.add_parser("play", help="Play a game (default).")
    play.add_argument("--seed", type=int, default=None, help="Shuffle seed for a reproducible game.")
    play.add_argument("--no-stats", action="store_true", help="Do not record this session in the stats.")
    stats = sub.add_parser("stats", help="Show lifetime statistics.")
    stats.add_argument("--reset", action="store_true", help="Reset all statistics.")
    return parser


def _stats_manager(args, settings: Settings) -> StatsManager:
    return StatsManager(args.stats_file or settings.stats_path)


def _load_stats(manager: StatsManager, out: TextIO) -> None:
    try:
        manager.load()
    except CorruptStatsError as exc:
        logger.error("%s", exc)
        out.write("Stats file is corrupt; starting from fresh statistics.\n")
        manager.reset()


def cmd_play(args, settings: Settings, input_fn: Callable[[str], str], out: TextIO) -> int:
    seed = args.seed if getattr(args, "seed", None) is not None else settings.game.seed
    bus = EventBus()
    if settings.stats.enabled and not getattr(args, "no_stats", False):
        manager = _stats_manager(args, settings)
        _load_stats(manager, out)
        manager.attach(bus)
    engine = GameEngine(rng=RandomProvider(seed), events=bus)
    game = TerminalGame(engine, input_fn=input_fn, out=out, recent_events=settings.cli.recent_events)
    while True:
        outcome = game.run()
        if outcome is None:
            out.write("Goodbye.\n")
            return 0
        try:
            again = input_fn("Play again? (y/n) ")
        except EOFError:
            return 0
        if again.strip().lower() not in ("y", "yes"):
            return 0


def cmd_stats(args, settings: Settings, out: TextIO) -> int:
    manager = _stats_manager(args, settings)
    if args.reset:
        manager.reset()
        out.write("Statistics have been reset.\n")
        return 0
    _load_stats(manager, out)
    for line in manager.record.format_lines():
        out.write(line + "\n")
    return 0


def main(
    argv: Optional[List[str]] = None,
    input_fn: Callable[[str], str] = input,
    out: Optional[TextIO] = None,
) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    out = out or sys.stdout
    try:
        settings = Settings.load(user_path=args.settings_path)
    except SettingsError as exc:
        parser.error(str(exc))
    configure_logging(level_name="DEBUG" if args.debug else settings.logging.level)

    if args.command == "stats":
        return cmd_stats(args, settings, out)
    return cmd_play(args, settings, input_fn, out)
