import argparse
import json
import os
import sys
import time

import httpx

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from edulog.audio_utils import guess_media_type
from edulog.client import DEFAULT_URL


def main() -> int:
    parser = argparse.ArgumentParser()
    parser.add_argument("audio_path", help="Path to audio file to submit.")
    parser.add_argument("--url", default=DEFAULT_URL, help="Analysis service URL.")
    parser.add_argument("--field", default="file", help="Multipart field name.")
    parser.add_argument("--timeout", type=float, default=60.0, help="Seconds.")
    args = parser.parse_args()

    with open(args.audio_path, "rb") as handle:
        data = handle.read()
    files = {
        args.field: (
            os.path.basename(args.audio_path),
            data,
            guess_media_type(args.audio_path),
        )
    }

    started = time.time()
    try:
        with httpx.Client(timeout=args.timeout) as client:
            r = client.post(args.url, files=files)
    except httpx.HTTPError as exc:
        print(f"Request failed: {exc}")
        return 1
    elapsed = time.time() - started

    print(f"Status: {r.status_code}")
    print(f"Elapsed: {elapsed:.2f}s")
    try:
        body = r.json()
    except ValueError:
        print(r.text)
        return 1
    print(json.dumps(body, indent=2, ensure_ascii=False))
    return 0 if r.is_success else 1


if __name__ == "__main__":
    raise SystemExit(main())
