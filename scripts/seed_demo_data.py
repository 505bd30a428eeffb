#!/usr/bin/env python3
"""
Stoop Politics Demo Data Seeder

Seeds two published demo episodes (with generated audio and linked
transcript nodes) and a few listener inbox messages, so the public page
and the admin UI have something to show without calling the STT service.
All demo episodes use the ``[DEMO]`` title prefix for idempotent management.

Usage:
    python scripts/seed_demo_data.py          # Seed (skip if exists)
    python scripts/seed_demo_data.py --clean  # Delete existing + re-seed
"""

import argparse
import asyncio
import logging
import math
import struct
import sys
from pathlib import Path

# Ensure project root is on sys.path for ``stoop`` imports
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from sqlalchemy import select  # noqa: E402

from stoop.core.config import get_settings  # noqa: E402
from stoop.core.models import TranscriptionSegment, TranscriptionStatus  # noqa: E402
from stoop.services.audio.processor import AudioProcessor  # noqa: E402
from stoop.services.context import build_context  # noqa: E402
from stoop.services.storage.models_db import Episode  # noqa: E402
from stoop.services.storage.repository import EpisodeRepository, InboxRepository  # noqa: E402

logger = logging.getLogger(__name__)

DEMO_PREFIX = "[DEMO]"

# Oldest first, so the last one becomes the primary episode on the public page
SCENARIOS = [
    {
        "title": f"{DEMO_PREFIX} Zoning Board Recap",
        "summary": "What the zoning board decided about the corner lot, and what happens next.",
        "segments": [
            ("Welcome back to the stoop.", None, None),
            ("The board voted four to one on the variance.", "https://example.org/minutes", "Meeting minutes"),
            ("Public comment runs through the end of the month.", None, None),
        ],
    },
    {
        "title": f"{DEMO_PREFIX} Budget Season",
        "summary": "A walk through the proposed city budget and where the money goes.",
        "segments": [
            ("It's budget season, so let's talk numbers.", None, None),
            ("Parks funding is flat for the third year.", "https://example.org/budget", None),
            ("Transit gets a small bump, mostly for maintenance.", None, None),
            ("Hearings start next Tuesday at six.", "https://example.org/hearings", "Hearing schedule"),
        ],
    },
]

INBOX_MESSAGES = [
    "Loved the budget episode. Can you cover school funding next?",
    "The link in the zoning episode was really helpful, thanks.",
]


def _demo_wav(seconds: int) -> bytes:
    """Quiet 220 Hz tone as a WAV object."""
    processor = AudioProcessor()
    samples = (
        struct.pack("<h", int(2000 * math.sin(2 * math.pi * 220 * i / processor.sample_rate)))
        for i in range(processor.sample_rate * seconds)
    )
    return processor.pcm_to_wav_bytes(b"".join(samples))


async def _clean_demo_data(ctx) -> int:
    """Delete all [DEMO] episodes with their nodes and media. Returns count deleted."""
    async with ctx.database.session() as session:
        stmt = select(Episode.id, Episode.title).where(Episode.title.like(f"{DEMO_PREFIX}%"))
        demo = list((await session.execute(stmt)).all())

    if not demo:
        print("  No existing demo data to clean.")
        return 0

    for episode_id, title in demo:
        result = await ctx.episodes.delete_episode(episode_id)
        print(f"  DELETE  {title} (id={episode_id}, nodes={result.nodes_deleted})")
    return len(demo)


async def _seed_scenario(ctx, scenario: dict) -> int:
    segments = scenario["segments"]
    seconds = 5 * len(segments)
    stored = await ctx.media.upload_audio(_demo_wav(seconds), "audio/wav", "demo.wav")

    async with ctx.database.session() as session:
        repo = EpisodeRepository(session)
        episode = await repo.create_episode(
            title=scenario["title"],
            summary=scenario["summary"],
            audio_url=stored.url,
            audio_key=stored.key,
            duration_seconds=seconds,
            audio_format="audio/wav",
        )
        nodes = await repo.replace_nodes(
            episode.id,
            [
                TranscriptionSegment(text=text, start=i * 5.0, end=(i + 1) * 5.0)
                for i, (text, _, _) in enumerate(segments)
            ],
        )
        for node, (_, link, link_title) in zip(nodes, segments, strict=True):
            if link:
                await repo.update_node(node.id, reference_link=link, reference_title=link_title)
        await repo.set_transcription_status(episode.id, TranscriptionStatus.completed)
        await repo.publish_episode(episode.id)

    print(f"  EPISODE  {scenario['title']} (id={episode.id}, nodes={len(nodes)})")
    return episode.id


async def seed(clean: bool = False) -> int:
    """Run the demo data seeding pipeline."""
    print("=" * 60)
    print("Stoop Politics Demo Data Seeder")
    print("=" * 60)

    ctx = build_context(get_settings())
    try:
        print("\n[1/4] Initializing database...")
        await ctx.database.init()

        if clean:
            print("\n[2/4] Cleaning existing demo data...")
            deleted = await _clean_demo_data(ctx)
            print(f"  Deleted {deleted} demo episode(s).")
        else:
            print("\n[2/4] Checking for existing demo data...")
            async with ctx.database.session() as session:
                stmt = select(Episode.title).where(Episode.title.like(f"{DEMO_PREFIX}%"))
                titles = list((await session.execute(stmt)).scalars().all())
            if titles:
                print(f"  Demo data already exists ({len(titles)} episode(s)):")
                for t in titles:
                    print(f"    - {t}")
                print("  Use --clean to delete and re-seed.")
                return 0

        print(f"\n[3/4] Seeding {len(SCENARIOS)} episodes...")
        for scenario in SCENARIOS:
            await _seed_scenario(ctx, scenario)
            # distinct published_at values
            await asyncio.sleep(0.01)

        print("\n[4/4] Adding inbox messages...")
        async with ctx.database.session() as session:
            repo = InboxRepository(session)
            for text in INBOX_MESSAGES:
                await repo.create_message(text)
        print(f"  Inbox messages:  {len(INBOX_MESSAGES)}")
    finally:
        await ctx.close()

    print("\nSeed complete.")
    return 0


def main() -> int:
    """Entry point with CLI argument parsing."""
    parser = argparse.ArgumentParser(description="Seed Stoop Politics demo episodes")
    parser.add_argument(
        "--clean",
        action="store_true",
        help="Delete existing [DEMO] episodes before seeding",
    )
    args = parser.parse_args()

    logging.basicConfig(level=logging.WARNING)
    return asyncio.run(seed(clean=args.clean))


if __name__ == "__main__":
    sys.exit(main())
