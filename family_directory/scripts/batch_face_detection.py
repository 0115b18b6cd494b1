#!/usr/bin/env python3
"""
Batch face detection: fill eye_center_y for people that have a photo.

The eye line frames cropped background photos on the home screen. People
that already have a position are skipped; failed or low-confidence
detections store the default position so they are not retried forever.

Run: python -m family_directory.scripts.batch_face_detection [--dry-run] [--family FAMILY_ID]
"""

import argparse
import asyncio
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel

from family_directory.core.logging import setup_logging


class DetectionReport(BaseModel):
    candidates: int = 0
    detected: int = 0
    defaulted: int = 0


async def detect_eye_positions(
    person_cache,
    detector,
    dry_run: bool = False,
    family_id: Optional[str] = None,
) -> DetectionReport:
    """
    Run the detector over every person without eye_center_y.

    Args:
        person_cache: PersonCache to read from and write through
        detector: FacePositionDetector
        dry_run: Detect and print, but do not write
        family_id: Limit to one family
    """
    report = DetectionReport()
    snapshot = await person_cache.load()
    people = snapshot.for_family(family_id) if family_id else list(snapshot.people)
    candidates = [p for p in people if p.eye_center_y is None and p.best_image]
    report.candidates = len(candidates)
    print(f"Found {report.candidates} people without an eye position")

    for person in candidates:
        # Full photo gives the detector more pixels than the thumbnail
        result = detector.detect(person.photo_data or person.best_image)
        position = detector.resolve_position(result)
        trusted = result.detected and result.confidence >= detector.min_confidence

        if trusted:
            report.detected += 1
            print(f"  ✓ {person.id} {person.name}: {position:.3f} (confidence {result.confidence:.2f})")
        else:
            report.defaulted += 1
            print(f"  - {person.id} {person.name}: default {position:.3f}")

        if not dry_run:
            await person_cache.update_person(person.id, {"eye_center_y": position})

    mode = "[DRY RUN] " if dry_run else ""
    print(f"\n{mode}Detected: {report.detected}, defaulted: {report.defaulted}")
    return report


async def main():
    parser = argparse.ArgumentParser(description="Detect eye positions for person photos")
    parser.add_argument("--dry-run", action="store_true", help="Detect without writing")
    parser.add_argument("--family", default=None, help="Only this family ID")
    args = parser.parse_args()

    load_dotenv()
    setup_logging()

    from family_directory.services.container import ServiceContainer
    from family_directory.services.face_detection import FacePositionDetector

    container = ServiceContainer.from_settings()
    await detect_eye_positions(
        container.person_cache,
        FacePositionDetector(),
        dry_run=args.dry_run,
        family_id=args.family,
    )


if __name__ == "__main__":
    asyncio.run(main())
