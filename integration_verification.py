#!/usr/bin/env python3
"""
Cross-Device Sync Verification Script

Runs against a live backend (``python bootloader.py backend``) and checks that
content written by one client is visible to another: collections, editor
content and regenerated song slides.
"""

import asyncio
import os
import sys
from pathlib import Path

backend_path = Path(__file__).parent / "backend"
sys.path.insert(0, str(backend_path))

from services.slide_sync.service import SlideSyncService  # noqa: E402
from services.slide_sync.storage import RemoteStorage  # noqa: E402
from shared.enums import CollectionKind, TextField  # noqa: E402
from shared.models import CollectionRef  # noqa: E402

API_BASE_URL = os.getenv("STORAGE_API_URL", "http://localhost:5001/api")

LYRICS = "Amazing grace how sweet the sound\nThat saved a wretch like me\n\nI once was lost but now am found\nWas blind but now I see"


async def verify() -> list[tuple[str, bool]]:
    results: list[tuple[str, bool]] = []

    async with RemoteStorage(base_url=API_BASE_URL) as laptop_store, RemoteStorage(base_url=API_BASE_URL) as tablet_store:
        results.append(("Storage health probe", await laptop_store.health()))

        laptop = SlideSyncService(laptop_store)
        await laptop.load()
        song = await laptop.create_collection(CollectionKind.SONG, "Cross-Device Verification Song")
        sermon = await laptop.create_collection(CollectionKind.SERMON, "Cross-Device Verification Sermon")
        await laptop.save_text(song.ref, TextField.LYRICS, LYRICS)
        await laptop.save_text(sermon.ref, TextField.NOTES, "Welcome to our Sunday service. [laptop]")

        tablet = SlideSyncService(tablet_store)
        await tablet.load()
        tablet_song = tablet.library.find(song.ref)
        results.append(("Song visible on second device", tablet_song is not None))
        results.append((
            "Slides visible on second device",
            tablet_song is not None and len(tablet.slides_for(song.ref)) == 2,
        ))
        notes = await tablet.load_text(sermon.ref, TextField.NOTES)
        results.append(("Sermon notes visible on second device", notes.endswith("[laptop]")))

        await tablet.save_text(sermon.ref, TextField.NOTES, "Welcome to our Sunday service. [tablet]")
        edited = await laptop.load_text(sermon.ref, TextField.NOTES)
        results.append(("Last write wins across devices", edited.endswith("[tablet]")))

        song_slide_ids = set(laptop.library.find(song.ref).slide_ids)
        for ref in (CollectionRef.song(song.id), CollectionRef.sermon(sermon.id)):
            await laptop.delete_collection(ref)
        leftover = {s.id for s in await laptop_store.list_slides()} & song_slide_ids
        results.append(("Cleanup removed verification data", not leftover))

    return results


def main() -> int:
    print("Cross-Device Sync Verification")
    print("=" * 50)
    print(f"Storage API: {API_BASE_URL}\n")

    results = asyncio.run(verify())
    for name, passed in results:
        print(f"{'PASS' if passed else 'FAIL'}  {name}")

    passed = sum(1 for _, ok in results if ok)
    print(f"\nResults: {passed}/{len(results)} checks passed")
    return 0 if passed == len(results) else 1


if __name__ == "__main__":
    sys.exit(main())
