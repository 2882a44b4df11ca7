#!/usr/bin/env python3
"""Initialize the database and generate the world."""

import argparse
import sys

from ..api.log_config import configure_logging
from ..config.config import settings
from ..core.world_generator import WorldConfig
from .connection import db
from .world import initialize_world


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Create tables and generate the world")
    parser.add_argument("--width", type=int, default=settings.world_width, help="World width in tiles")
    parser.add_argument("--height", type=int, default=settings.world_height, help="World height in tiles")
    parser.add_argument("--seed", type=int, default=settings.world_seed, help="Generation seed")
    parser.add_argument("--batch-size", type=int, default=settings.batch_size, help="Rows per bulk insert")
    parser.add_argument("--database-url", default=None, help="Override the configured database URL")
    return parser.parse_args(argv)


def main(argv=None):
    """Initialize the database."""
    args = parse_args(argv)
    configure_logging(settings.log_level, settings.log_format)
    try:
        print("Initializing database...")
        db.initialize(args.database_url)
        print("✓ Tables created")

        config = WorldConfig(width=args.width, height=args.height, seed=args.seed)
        with db.get_session() as session:
            result = initialize_world(session, config, batch_size=args.batch_size)

        if result.skipped:
            print("✓ World already exists, skipped generation")
        else:
            print(f"✓ Generated {result.tiles_written} tiles in {result.elapsed_seconds:.2f}s")

    except Exception as e:
        print(f"✗ World initialization failed: {e}")
        import traceback
        traceback.print_exc()
        return False

    return True


def run():
    """Console entry point."""
    sys.exit(0 if main() else 1)


if __name__ == "__main__":
    run()
