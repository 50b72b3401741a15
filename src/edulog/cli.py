"""CLI entry point."""

from __future__ import annotations

import argparse
import logging
import os
import sys
import threading

from .audio_utils import guess_media_type
from .client import AnalysisClient
from .config import Config, load_config, save_config
from .errors import PayloadMalformed, SubmissionFailed, describe_error
from .logging_utils import setup_logging
from .models import AudioBlob, Phase, SessionState
from .payload_io import load_payload
from .recorder import Recorder, list_input_devices
from .renderer import render_report
from .report import build_report, format_time
from .scheduler import EventLoop
from .session import SessionController
from .storage import ensure_structure

DEFAULT_CONFIG = "edulog_config.yml"


def _load(args) -> Config:
    path = getattr(args, "config", DEFAULT_CONFIG)
    cfg = load_config(path) if os.path.exists(path) else Config()
    if getattr(args, "url", None):
        cfg.service.url = args.url
    if getattr(args, "device", None):
        cfg.device_name = args.device
    if getattr(args, "base_dir", None):
        cfg.base_dir = args.base_dir
    return cfg


def _client(cfg: Config) -> AnalysisClient:
    return AnalysisClient(
        url=cfg.service.url,
        timeout_seconds=cfg.service.timeout_seconds,
        field_name=cfg.service.field_name,
    )


def _write_or_print(text: str, out: str | None) -> None:
    if out:
        with open(out, "w", encoding="utf-8") as handle:
            handle.write(text)
        print(f"Report saved: {out}")
    else:
        print(text)


def _record(args) -> int:
    cfg = _load(args)
    paths = ensure_structure(cfg.base_dir)
    logger, _log_path = setup_logging(
        log_dir=paths["logs"],
        level=logging.DEBUG if cfg.debug_logging else logging.INFO,
        console=bool(args.verbose),
    )
    recorder = Recorder(
        sample_rate_hz=cfg.audio.sample_rate_hz,
        channels=cfg.audio.channels,
        device_name=cfg.device_name,
    )
    loop = EventLoop()
    controller = SessionController(
        recorder,
        _client(cfg).submit,
        loop,
        playback_dir=paths["recordings"],
        tick_interval_ms=cfg.session.tick_interval_ms,
    )

    def _on_change(state: SessionState) -> None:
        if state.phase is Phase.RECORDING:
            sys.stdout.write(f"\r녹음 중 {format_time(state.elapsed_seconds)}")
            sys.stdout.flush()
        elif state.phase is Phase.SUBMITTING:
            print("\n서버에서 음성을 분석하고 있습니다...")

    controller.subscribe(_on_change)
    if not controller.start():
        print(controller.state.error_message)
        return 1

    if args.duration:
        loop.after(args.duration * 1000, controller.stop)
    else:
        print("Press Enter to stop and analyze.")

        def _wait_for_enter() -> None:
            try:
                input()
            except EOFError:
                pass
            loop.after(0, controller.stop)

        threading.Thread(target=_wait_for_enter, daemon=True).start()

    try:
        loop.run_until(
            lambda: controller.state.phase in (Phase.IDLE, Phase.REPORTING)
        )
    except KeyboardInterrupt:
        logger.info("Recording interrupted")
        controller.go_home()
        print("\nCancelled.")
        return 1

    state = controller.state
    if state.phase is Phase.REPORTING and state.report is not None:
        _write_or_print(render_report(state.report, state.playback_path), args.out)
        return 0
    print(state.error_message or "Recording failed.")
    return 1


def _analyze(args) -> int:
    cfg = _load(args)
    with open(args.audio_path, "rb") as handle:
        data = handle.read()
    blob = AudioBlob(
        data=data,
        media_type=guess_media_type(args.audio_path),
        filename=os.path.basename(args.audio_path),
    )
    try:
        payload = _client(cfg).submit(blob)
    except (SubmissionFailed, PayloadMalformed) as exc:
        print(describe_error(exc))
        return 1
    _write_or_print(render_report(build_report(payload), args.audio_path), args.out)
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(prog="edulog")
    sub = parser.add_subparsers(dest="command")

    devices_cmd = sub.add_parser("devices")
    devices_cmd.add_argument("--match", help="Filter device names by substring.")

    record_cmd = sub.add_parser("record")
    record_cmd.add_argument("--config", default=DEFAULT_CONFIG, help="Config.")
    record_cmd.add_argument("--base-dir", help="Base output directory.")
    record_cmd.add_argument(
        "--duration", type=int, help="Seconds. Omit for manual stop."
    )
    record_cmd.add_argument("--device", help="Preferred device name substring.")
    record_cmd.add_argument("--url", help="Analysis service URL.")
    record_cmd.add_argument("--out", help="Write the report to a Markdown file.")
    record_cmd.add_argument(
        "--verbose", action="store_true", help="Also log to stderr."
    )

    analyze_cmd = sub.add_parser("analyze")
    analyze_cmd.add_argument("audio_path", help="Path to audio file.")
    analyze_cmd.add_argument("--config", default=DEFAULT_CONFIG, help="Config.")
    analyze_cmd.add_argument("--url", help="Analysis service URL.")
    analyze_cmd.add_argument("--out", help="Write the report to a Markdown file.")

    report_cmd = sub.add_parser("report")
    report_cmd.add_argument("payload_path", help="Path to an analysis JSON payload.")
    report_cmd.add_argument("--out", help="Write the report to a Markdown file.")

    config_cmd = sub.add_parser("config")
    config_cmd.add_argument("--path", default=DEFAULT_CONFIG, help="Config path.")
    sub.add_parser("gui")

    args = parser.parse_args()
    if args.command == "devices":
        devices = list_input_devices()
        if args.match:
            devices = [
                d for d in devices if args.match.lower() in d.get("name", "").lower()
            ]
        for device in devices:
            name = device.get("name", "Unknown")
            index = device.get("index", "?")
            channels = device.get("max_input_channels", 0)
            print(f"[{index}] {name} (inputs: {channels})")
        return 0

    if args.command == "record":
        return _record(args)

    if args.command == "analyze":
        return _analyze(args)

    if args.command == "report":
        try:
            payload = load_payload(args.payload_path)
        except PayloadMalformed as exc:
            print(describe_error(exc))
            return 1
        _write_or_print(render_report(build_report(payload)), args.out)
        return 0

    if args.command == "config":
        if os.path.exists(args.path):
            print(f"Config already exists: {args.path}")
            return 1
        save_config(args.path, Config())
        print(f"Wrote {args.path}")
        return 0

    if args.command == "gui":
        from .gui import launch_gui

        launch_gui()
        return 0

    parser.print_help()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
