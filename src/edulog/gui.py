"""Tkinter GUI for recording and reviewing a single talk."""

from __future__ import annotations

import logging
import os
import threading

from .client import AnalysisClient
from .config import Config, load_config
from .logging_utils import setup_logging
from .models import Phase, SessionState
from .recorder import Recorder, play_recording
from .renderer import render_report
from .report import format_time
from .session import SessionController
from .storage import ensure_structure

PHASE_TEXT = {
    Phase.IDLE: "준비",
    Phase.RECORDING: "녹음 중",
    Phase.SUBMITTING: "분석 중",
    Phase.REPORTING: "분석 결과",
}


def launch_gui() -> None:
    import tkinter as tk
    from tkinter import ttk

    config_path = "edulog_config.yml"
    if os.path.exists(config_path):
        try:
            config = load_config(config_path)
        except Exception:
            config = Config()
    else:
        config = Config()

    base_paths = ensure_structure(config.base_dir)
    logger, log_path = setup_logging(
        log_dir=base_paths["logs"],
        level=logging.DEBUG if config.debug_logging else logging.INFO,
    )

    def _thread_excepthook(args) -> None:
        logger.exception(
            "Thread exception",
            exc_info=(args.exc_type, args.exc_value, args.exc_traceback),
        )

    threading.excepthook = _thread_excepthook

    root = tk.Tk()
    root.title("Edulog")
    root.configure(bg="#f1f5f9")

    style = ttk.Style(root)
    try:
        style.theme_use("clam")
    except tk.TclError:
        pass
    style.configure("TFrame", background="#f1f5f9")
    style.configure("TLabel", background="#f1f5f9", foreground="#111827")
    style.configure("Error.TLabel", background="#f1f5f9", foreground="#dc2626")
    style.configure("Timer.TLabel", font=("Menlo", 16, "bold"))

    client = AnalysisClient(
        url=config.service.url,
        timeout_seconds=config.service.timeout_seconds,
        field_name=config.service.field_name,
    )
    recorder = Recorder(
        sample_rate_hz=config.audio.sample_rate_hz,
        channels=config.audio.channels,
        device_name=config.device_name,
    )
    controller = SessionController(
        recorder,
        client.submit,
        root,
        playback_dir=base_paths["recordings"],
        tick_interval_ms=config.session.tick_interval_ms,
        keep_audio_on_failure=config.session.keep_audio_on_failure,
    )

    phase_var = tk.StringVar(value=f"현재 단계: {PHASE_TEXT[Phase.IDLE]}")
    timer_var = tk.StringVar(value=format_time(0))
    error_var = tk.StringVar(value="")
    status_var = tk.StringVar(value="")

    frame = ttk.Frame(root, padding=16)
    frame.grid(row=0, column=0, sticky="nsew")
    ttk.Label(frame, text="Edulog", font=("Segoe UI", 14, "bold")).grid(
        row=0, column=0, sticky="w"
    )
    ttk.Label(frame, textvariable=phase_var).grid(row=0, column=1, sticky="e")
    ttk.Label(frame, textvariable=timer_var, style="Timer.TLabel").grid(
        row=1, column=0, sticky="w", pady=(12, 0)
    )

    buttons = ttk.Frame(frame)
    buttons.grid(row=1, column=1, sticky="e", pady=(12, 0))
    start_btn = ttk.Button(buttons, text="🎙️ 녹음 시작하기", command=controller.start)
    stop_btn = ttk.Button(buttons, text="⏹ 녹음 종료 & 분석", command=controller.stop)
    retry_btn = ttk.Button(buttons, text="다시 분석", command=controller.retry)
    home_btn = ttk.Button(buttons, text="🏠 홈으로", command=controller.go_home)
    for idx, btn in enumerate((start_btn, stop_btn, retry_btn, home_btn)):
        btn.grid(row=0, column=idx, padx=(6, 0))

    ttk.Label(frame, textvariable=status_var).grid(
        row=2, column=0, columnspan=2, sticky="w", pady=(8, 0)
    )
    ttk.Label(frame, textvariable=error_var, style="Error.TLabel").grid(
        row=3, column=0, columnspan=2, sticky="w"
    )

    report_text = tk.Text(frame, width=90, height=32, wrap="word", relief="flat")
    report_text.grid(row=4, column=0, columnspan=2, sticky="nsew", pady=(8, 0))
    report_text.configure(state="disabled")

    def _play() -> None:
        path = controller.state.playback_path
        if not path:
            return
        try:
            play_recording(path)
        except Exception as exc:
            logger.warning("Playback failed: %s", exc)
            error_var.set(f"재생 실패: {exc}")

    play_btn = ttk.Button(frame, text="▶ 녹음 다시 듣기", command=_play)
    play_btn.grid(row=5, column=0, sticky="w", pady=(8, 0))

    def _set_report(text: str) -> None:
        report_text.configure(state="normal")
        report_text.delete("1.0", "end")
        report_text.insert("1.0", text)
        report_text.configure(state="disabled")

    def _render(state: SessionState) -> None:
        phase_var.set(f"현재 단계: {PHASE_TEXT[state.phase]}")
        timer_var.set(format_time(state.elapsed_seconds))
        error_var.set(state.error_message or "")
        status_var.set(
            "서버에서 음성을 분석하고 있습니다..."
            if state.phase is Phase.SUBMITTING
            else ""
        )
        busy = state.phase in (Phase.RECORDING, Phase.SUBMITTING)
        start_btn.configure(state="disabled" if busy else "normal")
        stop_btn.configure(
            state="normal" if state.phase is Phase.RECORDING else "disabled"
        )
        retry_btn.configure(state="normal" if controller.can_retry else "disabled")
        home_btn.configure(
            state="disabled" if state.phase is Phase.SUBMITTING else "normal"
        )
        play_btn.configure(
            state="normal"
            if state.playback_path and state.phase is Phase.REPORTING
            else "disabled"
        )
        if state.phase is Phase.REPORTING and state.report is not None:
            _set_report(render_report(state.report, state.playback_path))
        elif state.phase is not Phase.REPORTING:
            _set_report("")

    controller.subscribe(_render)
    _render(controller.state)

    def _on_close() -> None:
        logger.info("GUI closing")
        if controller.state.phase is not Phase.SUBMITTING:
            controller.go_home()
        root.destroy()

    logger.info("GUI started, log at %s", log_path)
    root.protocol("WM_DELETE_WINDOW", _on_close)
    root.mainloop()
