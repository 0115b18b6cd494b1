#!/usr/bin/env python3
"""
Backfill thumbnails for people whose primary photo has none.

Writes go through the person cache so a running API process sees a
consistent photo set after its next reload.

Run: python -m family_directory.scripts.backfill_thumbnails [--dry-run]
"""

import argparse
import asyncio

from dotenv import load_dotenv
from pydantic import BaseModel

from family_directory.core.logging import setup_logging


class BackfillReport(BaseModel):
    candidates: int = 0
    updated: int = 0
    failed: int = 0


async def backfill_thumbnails(person_cache, thumbnailer, dry_run: bool = False) -> BackfillReport:
    """
    Generate a thumbnail for every person with photo_data but no thumbnail_data.

    Args:
        person_cache: PersonCache to read from and write through
        thumbnailer: ThumbnailGenerator
        dry_run: Only count candidates
    """
    report = BackfillReport()
    snapshot = await person_cache.load()
    candidates = [p for p in snapshot.people if p.photo_data and not p.thumbnail_data]
    report.candidates = len(candidates)
    print(f"Found {report.candidates} people without a thumbnail")

    if dry_run:
        for person in candidates:
            print(f"  [DRY RUN] {person.id} {person.name}")
        return report

    for person in candidates:
        thumbnail = thumbnailer.generate(person.photo_data)
        if thumbnail is None:
            report.failed += 1
            print(f"  ✗ {person.id} {person.name}: thumbnail generation failed")
            continue
        await person_cache.update_person(person.id, {"thumbnail_data": thumbnail})
        report.updated += 1
        print(f"  ✓ {person.id} {person.name}")

    print(f"\nUpdated: {report.updated}, failed: {report.failed}")
    return report


async def main():
    parser = argparse.ArgumentParser(description="Backfill missing person thumbnails")
    parser.add_argument("--dry-run", action="store_true", help="List candidates without writing")
    args = parser.parse_args()

    load_dotenv()
    setup_logging()

    from family_directory.services.container import ServiceContainer

    container = ServiceContainer.from_settings()
    await backfill_thumbnails(
        container.person_cache,
        container.thumbnailer,
        dry_run=args.dry_run,
    )


if __name__ == "__main__":
    asyncio.run(main())
