from __future__ import annotations

import sys
from pathlib import Path

from alembic import command
from alembic.config import Config

from volmatch.telemetry.logger import get_logger, setup_logging


log = get_logger("migrations")


def alembic_config() -> Config:
    cfg = Config()
    # env.py and versions/ live next to this module
    cfg.set_main_option("script_location", str(Path(__file__).parent))
    return cfg


def upgrade(revision: str = "head") -> None:
    log.info("migrations.upgrade", target=revision)
    command.upgrade(alembic_config(), revision)


def downgrade(revision: str = "base") -> None:
    log.info("migrations.downgrade", target=revision)
    command.downgrade(alembic_config(), revision)


def main(argv: list[str]) -> int:
    if not argv or argv[0] not in {"upgrade", "downgrade", "current"}:
        print("Usage: python -m volmatch.infra.migrations.run [upgrade|downgrade|current] [revision]")
        return 2
    setup_logging()
    action, target = argv[0], (argv[1] if len(argv) > 1 else None)
    if action == "upgrade":
        upgrade(target or "head")
    elif action == "downgrade":
        downgrade(target or "base")
    else:
        command.current(alembic_config(), verbose=True)
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
