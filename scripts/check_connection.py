"""Quick check that the database configured via SQLKIT_* variables is reachable."""

import asyncio
import sys

from sqlkit.config import configure_logging, descriptor_from_env
from sqlkit.engine import Engine
from sqlkit.errors import SqlKitError


async def _check() -> int:
    descriptor = descriptor_from_env()
    print(f"Connecting to {descriptor.to_dsn().redacted()}...")

    try:
        async with Engine.from_descriptor(descriptor) as engine:
            row = await engine.select_row("SELECT 1 AS ok")
    except SqlKitError as e:
        print(f"  {e.kind.value} error: {e.message}")
        return 1

    if row is None:
        print("  Connected, but SELECT 1 returned no row")
        return 1
    print(f"  Connected ({descriptor.driver_kind.value}), SELECT 1 returned {row}")
    return 0


def main() -> None:
    """Open a connection and run a trivial query."""
    configure_logging()
    sys.exit(asyncio.run(_check()))


if __name__ == "__main__":
    main()
