import argparse
import io
import os
import sys
import time
import wave

import numpy as np

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from edulog.errors import CaptureUnavailable
from edulog.recorder import Recorder


def main() -> int:
    parser = argparse.ArgumentParser()
    parser.add_argument("--device", help="Device name substring.")
    parser.add_argument("--seconds", type=float, default=5.0, help="Test duration.")
    parser.add_argument("--rate", type=int, default=44100, help="Sample rate.")
    parser.add_argument("--channels", type=int, default=1, help="Channels.")
    parser.add_argument("--out", help="Keep the captured WAV at this path.")
    args = parser.parse_args()

    recorder = Recorder(
        sample_rate_hz=args.rate, channels=args.channels, device_name=args.device
    )
    try:
        handle = recorder.acquire()
        recorder.begin(handle)
    except CaptureUnavailable as exc:
        print(f"Capture unavailable: {exc}")
        return 1
    print(f"Input device: {handle.device_name}")
    print("Recording... press Ctrl+C to stop early.")

    try:
        time.sleep(args.seconds)
    except KeyboardInterrupt:
        pass
    finally:
        blob = recorder.finalize(handle)

    if blob is None:
        print("No audio captured.")
        return 1

    with wave.open(io.BytesIO(blob.data), "rb") as reader:
        raw = reader.readframes(reader.getnframes())
    data = np.frombuffer(raw, dtype=np.int16).astype("float32")
    if data.size == 0:
        print("No samples captured.")
        return 1

    rms = float(np.sqrt(np.mean(data**2)))
    peak = float(np.max(np.abs(data)))
    rms_db = 20.0 * np.log10(max(rms, 1.0) / 32768.0)
    peak_db = 20.0 * np.log10(max(peak, 1.0) / 32768.0)
    print(f"Duration: {blob.duration_seconds:.2f}s ({len(blob.data)} bytes)")
    print(f"RMS {rms_db:.1f} dBFS, Peak {peak_db:.1f} dBFS")

    if args.out:
        with open(args.out, "wb") as handle_out:
            handle_out.write(blob.data)
        print(f"Wrote {args.out}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
