"""Report cached social counters that disagree with their live counts.

Run from the project root: ``python -m scripts.check_counters [--fix]``
"""
import argparse
import asyncio

from app.db.session import async_session_maker, engine
from app.services.counters import find_counter_drift, reconcile_counters


async def check_counters(fix: bool = False):
    async with async_session_maker() as db:
        drift = await find_counter_drift(db)
        if not drift:
            print("All counters match their live counts")
        else:
            print(f"Found {len(drift)} drifted counters:")
            for d in drift:
                print(f"  - {d.table}.{d.column} [{d.row_id}]: cached={d.cached} live={d.live}")

        if fix and drift:
            corrected = await reconcile_counters(db)
            await db.commit()
            print(f"\nCorrected {sum(corrected.values())} rows")
    await engine.dispose()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--fix", action="store_true", help="rewrite drifted counters")
    args = parser.parse_args()
    asyncio.run(check_counters(fix=args.fix))
