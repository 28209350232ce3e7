#!/usr/bin/env python3
"""Check connectivity to the footprint registry and geocoding configuration."""

import sys
from pathlib import Path

project_root = Path(__file__).parent
sys.path.insert(0, str(project_root / "src"))

from territory.config import settings
from territory.models.domain import BoundingBox
from territory.services.detection.footprints import OverpassFootprintClient, check_health


def main():
    print("=" * 60)
    print("Territory service check")
    print("=" * 60)
    print()

    print("1. Checking Overpass endpoint...")
    print(f"   URL: {settings.overpass_url}")
    if not check_health():
        print("   [ERROR] Overpass is not responding; detection will fall back to simulated buildings")
        return 1
    print("   [OK] Overpass answered a status query")
    print()

    print("2. Fetching buildings around Philadelphia City Hall...")
    try:
        box = BoundingBox(min_lat=39.9520, max_lat=39.9535, min_lng=-75.1650, max_lng=-75.1625)
        features = OverpassFootprintClient().fetch(box)
        print(f"   [OK] Received {len(features)} building candidates")
    except Exception as e:
        print(f"   [ERROR] Footprint query failed: {e}")
        return 1
    print()

    print("3. Checking geocoding configuration...")
    if settings.google_maps_api_key:
        print("   [OK] TERRITORY_GOOGLE_MAPS_API_KEY is set")
    else:
        print("   [WARN] TERRITORY_GOOGLE_MAPS_API_KEY is not set; addresses will be coordinates")
    print()

    print("=" * 60)
    print("[SUCCESS] Service checks finished")
    print("=" * 60)
    return 0


if __name__ == "__main__":
    sys.exit(main())
