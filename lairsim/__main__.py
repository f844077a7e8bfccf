"""Entry point: ``python -m lairsim``.

Supports two modes:
  - ``python -m lairsim``            → Launch the FastAPI inspection/control server
  - ``python -m lairsim cli``        → Headless simulation with a JSON replay
"""

from __future__ import annotations

import argparse
import logging

logger = logging.getLogger(__name__)


def _add_common(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--seed", type=int, default=42)
    parser.add_argument("--agents", type=int, default=2)
    parser.add_argument("--hatchlings", type=int, default=1, help="Agents born next to an existing lair")
    parser.add_argument("--hunt-range", type=float, default=1.0, help="Hunt range multiplier (0.5 to 2.0)")
    parser.add_argument("--captivity-days", type=float, default=1.0, help="Days before brood onset (0.5 to 2.0)")
    parser.add_argument("--log-level", type=str, default="INFO", choices=["DEBUG", "INFO", "WARNING"])


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Territorial predator simulation")
    sub = parser.add_subparsers(dest="command")

    # --- Server mode (default) ---
    srv = sub.add_parser("serve", help="Start the FastAPI server (default)")
    srv.add_argument("--host", type=str, default="127.0.0.1")
    srv.add_argument("--port", type=int, default=8000)
    _add_common(srv)

    # --- Headless CLI mode ---
    cli = sub.add_parser("cli", help="Run a headless simulation")
    cli.add_argument("--ticks", type=int, default=240000)
    cli.add_argument("--replay", type=str, default="replay.json")
    _add_common(cli)

    return parser


def _config_from_args(args: argparse.Namespace, **overrides):
    from lairsim.config import SimulationConfig

    return SimulationConfig(
        world_seed=args.seed,
        num_agents=args.agents,
        num_hatchlings=args.hatchlings,
        hunt_range_multiplier=args.hunt_range,
        captivity_threshold_days=args.captivity_days,
        log_level=args.log_level,
        **overrides,
    ).sanitized()


def _run_server(args: argparse.Namespace) -> None:
    import uvicorn

    from lairsim.api.app import create_app

    config = _config_from_args(args)
    app = create_app(config)
    uvicorn.run(app, host=args.host, port=args.port, log_level=args.log_level.lower())


def _run_cli(args: argparse.Namespace) -> None:
    from lairsim.ai.brain import AIBrain
    from lairsim.ai.controller import TerritoryController
    from lairsim.captivity.progression import CaptivityProgressionEngine, DefaultBroodCollaborator
    from lairsim.core.faction import FactionRegistry
    from lairsim.engine.world_loop import WorldLoop
    from lairsim.systems.rng import DeterministicRNG
    from lairsim.systems.world_builder import build_world
    from lairsim.utils.logging import setup_logging
    from lairsim.utils.replay import ReplayRecorder

    config = _config_from_args(args, max_ticks=args.ticks, replay_file=args.replay)
    setup_logging(config.log_level)

    rng = DeterministicRNG(config.world_seed)
    faction_reg = FactionRegistry.default()
    world = build_world(config, rng)

    controller = TerritoryController(config, rng, faction_reg)
    progression = CaptivityProgressionEngine(config, DefaultBroodCollaborator())
    brain = AIBrain(config, rng, controller, world, faction_reg)
    recorder = ReplayRecorder(config.replay_file, config.world_seed)

    loop = WorldLoop(
        config=config, world=world, brain=brain,
        controller=controller, progression=progression, recorder=recorder,
    )
    loop.run()

    logger.info("Done. Replay written to %s", config.replay_file)


def main() -> None:
    parser = _build_parser()
    args = parser.parse_args()

    # Default to serve mode if no subcommand given
    if args.command is None or args.command == "serve":
        if args.command is None:
            # Re-parse with serve defaults
            args = parser.parse_args(["serve"])
        _run_server(args)
    elif args.command == "cli":
        _run_cli(args)


if __name__ == "__main__":
    main()
