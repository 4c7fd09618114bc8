#!/usr/bin/env python3
# =============================================================================
# scripts/render_local.py - Render an Image Without Storage
# =============================================================================
# Runs the full render pipeline on a local file and writes the outputs
# (prod/ and hotfolder/) below an output directory. Useful to check crops
# and bleed on a proof before touching the real bucket.
#
# Usage:
#   python scripts/render_local.py photo.jpg 100 150 --out ./proof
#   python scripts/render_local.py photo.jpg 100 150 \
#       --crop '{"x":100,"y":100,"width":400,"height":300}' \
#       --image-info '{"naturalWidth":4000,"naturalHeight":3000,"displayedWidth":800,"displayedHeight":600}'
# =============================================================================

import argparse
import json
import os
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv
load_dotenv()

from core.errors import SourceNotFoundError
from core.models.render import OutputFormat, RenderRequest
from core.services.render_service import RenderService


class DirectoryStorage:
    """Storage stand-in: bucket = directory, key = relative path."""

    def __init__(self, root: Path):
        self.root = root

    def download(self, bucket: str, key: str) -> bytes:
        path = self.root / bucket / key
        if not path.is_file():
            raise SourceNotFoundError(bucket, key)
        return path.read_bytes()

    def upload(self, bucket: str, key: str, data: bytes, content_type: str) -> str:
        path = self.root / bucket / key
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        return key


def main():
    parser = argparse.ArgumentParser(description="Render print files from a local image")
    parser.add_argument("image", type=Path)
    parser.add_argument("width_mm", type=float)
    parser.add_argument("height_mm", type=float)
    parser.add_argument("--crop", default="", help="cropArea JSON")
    parser.add_argument("--image-info", default="", help="imageInfo JSON")
    parser.add_argument("--format", choices=[f.value for f in OutputFormat], default="jpg")
    parser.add_argument("--bleed", type=float, default=3.0)
    parser.add_argument("--out", type=Path, default=Path("render_out"))
    args = parser.parse_args()

    source = args.image.resolve()
    storage = DirectoryStorage(source.parent)

    request = RenderRequest.from_checkout_metadata(
        {
            "objectKey": source.name,
            "wmm": args.width_mm,
            "hmm": args.height_mm,
            "cropArea": args.crop,
            "imageInfo": args.image_info,
        },
        bucket=".",
        output_format=OutputFormat(args.format),
        bleed_mm=args.bleed,
    )

    outcome = RenderService(storage=storage).run(request)
    print(json.dumps(outcome.model_dump(mode="json"), indent=2))
    if not outcome.succeeded:
        sys.exit(1)

    args.out.mkdir(parents=True, exist_ok=True)
    for key in (outcome.result.raster_key, outcome.result.page_document_key, outcome.result.hotfolder_key):
        written = source.parent / key
        target = args.out / key
        target.parent.mkdir(parents=True, exist_ok=True)
        written.replace(target)
        print(f"  {target}")


if __name__ == "__main__":
    main()
