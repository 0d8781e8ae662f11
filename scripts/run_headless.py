# scripts/run_headless.py
from __future__ import annotations

import argparse
import asyncio
import logging
import tempfile
from pathlib import Path

from src.config import settings
from src.core import display as slots
from src.core.batches import BatchWriter
from src.core.controller import QueryWorkflowController
from src.core.display import MemoryDisplay
from src.core.engine import SimulationEngine
from src.core.local_store import LocalStore


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="run_headless")
    parser.add_argument("query", help="Question to send through the workflow")
    parser.add_argument(
        "--variant",
        choices=["hashes", "shares"],
        default=settings.MINING_VARIANT,
    )
    parser.add_argument(
        "--delay-scale",
        type=float,
        default=0.2,
        help="Multiplier on the simulated processing time (default: 0.2)",
    )
    parser.add_argument(
        "--with-providers",
        action="store_true",
        help="Try the external text-generation providers first",
    )
    return parser


async def run(args: argparse.Namespace, workdir: Path) -> None:
    display = MemoryDisplay()
    engine = SimulationEngine(
        display=display,
        variant=args.variant,
        store=LocalStore(workdir / "storage.json"),
        batch_writer=BatchWriter(workdir / "downloads"),
    )
    controller = QueryWorkflowController(
        engine,
        providers=None if args.with_providers else [],
        delay_scale=args.delay_scale,
    )

    result = await controller.submit(args.query)
    await engine.wait_until_idle()

    print("=== Headless mining workflow ===")
    print(f"Session: {engine.session_id}")
    print(f"Status: {result.status} (provider: {result.provider or 'template'})")
    print(f"Max hash rate: {engine.state.max_hash_rate:,.1f} H/s")
    print(f"Fast ticks: {engine.fast_ticks}, slow ticks: {engine.slow_ticks}")
    print(f"Discoveries: {engine.state.discovery_count}")
    print(f"Final hash rate: {display.get(slots.HASH_RATE_TEXT)}")
    print(f"Engine status: {engine.status}")
    print("-" * 60)
    print(result.text or result.errors)


def main() -> None:
    logging.basicConfig(level=settings.LOG_LEVEL)
    args = build_parser().parse_args()
    with tempfile.TemporaryDirectory() as tmp:
        asyncio.run(run(args, Path(tmp)))


if __name__ == "__main__":
    main()
