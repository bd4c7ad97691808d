import logging

from tortoise import Tortoise

logger = logging.getLogger(__name__)

MISSION_TABLES = ["ratings", "payments", "messages", "missions"]

# children before parents; users cannot go while missions point at them
RESET_TABLES = {
    "mission": MISSION_TABLES,
    "user": [*MISSION_TABLES, "notifications", "payouts", "users"],
}


async def reset_data(apps: list[str]):
    conn = Tortoise.get_connection("default")

    done = set()
    for app in apps:
        for table in RESET_TABLES.get(app, []):
            if table in done:
                continue
            logger.warning("Truncating table: %s", table)
            await conn.execute_script(f"DELETE FROM {table};")
            done.add(table)
