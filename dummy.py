import argparse
import asyncio
import logging

from app.config import close_db, init_db, settings
from app.dummy.registry import SEEDERS
from app.dummy.reset import reset_data

logger = logging.getLogger("dummy")


def confirm(msg: str) -> bool:
    answer = input(f"{msg} (yes/no): ").lower()
    return answer == "yes"


async def seed(apps: list[str], reset: bool):
    if settings.ENV == "production":
        logger.error("Seeding is blocked in production")
        return

    await init_db()
    try:
        if reset:
            logger.warning("Reset enabled")
            await reset_data(apps)

        for app in apps:
            logger.info("Seeding %s...", app)
            await SEEDERS[app]()
            logger.info("%s seeded", app)
    finally:
        await close_db()


def main():
    parser = argparse.ArgumentParser(description="Seed demo data for local development.")
    sub = parser.add_subparsers(dest="command", required=True)
    seed_parser = sub.add_parser("seed")
    seed_parser.add_argument("apps", nargs="*", help=f"any of: {', '.join(SEEDERS)}")
    seed_parser.add_argument("--all", action="store_true", help="seed every app")
    seed_parser.add_argument("--reset", action="store_true", help="delete existing rows first")
    args = parser.parse_args()

    logging.basicConfig(level=settings.LOG_LEVEL.upper(), format="%(levelname)s %(message)s")

    apps = args.apps
    if args.all:
        if not confirm("This will seed ALL data. Continue?"):
            logger.info("Cancelled")
            return
        apps = list(SEEDERS.keys())
    if not apps:
        parser.error(f"no app specified, available: {', '.join(SEEDERS)}")
    unknown = set(apps) - set(SEEDERS)
    if unknown:
        parser.error(f"unknown app: {', '.join(sorted(unknown))}")

    # users before missions
    apps = sorted(set(apps), key=list(SEEDERS).index)
    asyncio.run(seed(apps, args.reset))


if __name__ == "__main__":
    main()
