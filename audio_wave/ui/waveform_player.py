"""Tkinter view rendering the envelope and forwarding input to the controller."""

from __future__ import annotations

import tkinter as tk
from dataclasses import dataclass
from tkinter import ttk
from typing import Any, Sequence

from ..config import MAX_PLAYBACK_RATE, MIN_PLAYBACK_RATE, PlayerSettings
from ..playback.controller import PlaybackController
from ..playback.state import PlaybackState
from ..utils import coerce_float

_BACKGROUND = "#10141c"
_RATE_CHOICES = ("0.25", "0.5", "0.75", "1.0", "1.25", "1.5", "2.0", "3.0", "4.0")


@dataclass(frozen=True)
class Bar:
    x: float
    top: float
    bottom: float
    played: bool


def dim_color(color: str, factor: float = 0.35, background: str = _BACKGROUND) -> str:
    """Blend ``color`` towards ``background``; non-hex colors pass through."""
    if not color.startswith("#") or len(color) != 7:
        return color
    try:
        fg = [int(color[i : i + 2], 16) for i in (1, 3, 5)]
        bg = [int(background[i : i + 2], 16) for i in (1, 3, 5)]
    except ValueError:
        return color
    mix = max(0.0, min(1.0, float(factor)))
    blended = [int(round(b + (f - b) * mix)) for f, b in zip(fg, bg)]
    return "#" + "".join(f"{channel:02x}" for channel in blended)


def layout_bars(
    envelope: Sequence[float],
    settings: PlayerSettings,
    played_percent: float,
) -> list[Bar]:
    """One vertical bar per bucket, centred in its ``gap``-wide slot."""
    gap = float(settings.gap)
    height = float(settings.height)
    midpoint = height / 2.0
    amplitude = max(1.0, midpoint - 1.0)
    played_limit = settings.width * max(0.0, min(100.0, played_percent)) / 100.0
    bars = []
    for index, value in enumerate(envelope):
        x = index * gap + gap / 2.0
        half = max(0.5, amplitude * float(value))
        bars.append(Bar(x=x, top=midpoint - half, bottom=midpoint + half, played=x <= played_limit))
    return bars


class WaveformPlayer:
    def __init__(self, master, controller: PlaybackController, *, hide_button: bool = False) -> None:
        self.controller = controller
        self.settings = controller.settings
        self.frame = ttk.Frame(master, padding=8)
        self.frame.grid_columnconfigure(1, weight=1)

        self.play_btn: ttk.Button | None = None
        if not hide_button:
            self.play_btn = ttk.Button(
                self.frame, text="Play", width=6, command=controller.toggle_play
            )
            self.play_btn.grid(row=0, column=0, padx=(0, 8))

        self.canvas = tk.Canvas(
            self.frame,
            width=self.settings.width,
            height=self.settings.height,
            background=_BACKGROUND,
            borderwidth=0,
            highlightthickness=0,
            relief="flat",
            takefocus=1,
        )
        self.canvas.grid(row=0, column=1, sticky="w")
        self.canvas.bind("<Button-1>", self._on_canvas_click)
        self.canvas.bind("<KeyPress>", self._on_key)
        if self.play_btn is not None:
            self.play_btn.bind("<KeyPress>", self._on_key)

        self.progress_var = tk.StringVar(value="Audio not loaded")
        self.status_var = tk.StringVar(value="Loading audio")
        ttk.Label(self.frame, textvariable=self.progress_var, anchor="w").grid(
            row=1, column=0, columnspan=2, sticky="ew", pady=(6, 0)
        )
        ttk.Label(self.frame, textvariable=self.status_var, anchor="w").grid(
            row=2, column=0, columnspan=2, sticky="ew"
        )

        controls = ttk.Frame(self.frame)
        controls.grid(row=3, column=0, columnspan=2, sticky="ew", pady=(6, 0))
        self.volume_var = tk.DoubleVar(value=controller.state.volume)
        ttk.Label(controls, text="Volume").grid(row=0, column=0, padx=(0, 4))
        ttk.Scale(
            controls,
            from_=0.0,
            to=1.0,
            variable=self.volume_var,
            command=self._on_volume_scale,
        ).grid(row=0, column=1, padx=(0, 8))
        ttk.Button(controls, text="Mute", width=6, command=controller.toggle_mute).grid(
            row=0, column=2, padx=(0, 8)
        )
        self.rate_var = tk.StringVar(value=f"{controller.state.playback_rate:g}")
        ttk.Label(controls, text="Speed").grid(row=0, column=3, padx=(0, 4))
        rate_box = ttk.Combobox(
            controls, textvariable=self.rate_var, values=_RATE_CHOICES, width=5
        )
        rate_box.grid(row=0, column=4, padx=(0, 8))
        rate_box.bind("<<ComboboxSelected>>", self._on_rate_selected)
        rate_box.bind("<Return>", self._on_rate_selected)
        self.loop_var = tk.BooleanVar(value=controller.state.looping)
        ttk.Checkbutton(
            controls,
            text="Loop",
            variable=self.loop_var,
            command=lambda: controller.set_loop(self.loop_var.get()),
        ).grid(row=0, column=5)

        self._unsubscribe = controller.subscribe(self._on_state)
        self._on_state(controller.state)

    def grid(self, **kwargs: Any) -> None:
        self.frame.grid(**kwargs)

    def pack(self, **kwargs: Any) -> None:
        self.frame.pack(**kwargs)

    def _on_canvas_click(self, event: tk.Event[Any]) -> None:
        self.canvas.focus_set()
        self.controller.seek_by_click(event.x)

    def _on_key(self, event: tk.Event[Any]) -> str | None:
        if self.controller.handle_key(event.keysym):
            return "break"
        return None

    def _on_volume_scale(self, value: str) -> None:
        self.controller.set_volume(coerce_float(value, default=self.controller.state.volume))

    def _on_rate_selected(self, _event: tk.Event[Any] | None = None) -> None:
        rate = coerce_float(
            self.rate_var.get(),
            default=self.controller.state.playback_rate,
            min_value=MIN_PLAYBACK_RATE,
            max_value=MAX_PLAYBACK_RATE,
        )
        self.controller.set_playback_rate(rate)

    def _on_state(self, state: PlaybackState) -> None:
        self.progress_var.set(state.progress_text)
        self.status_var.set(state.status_text)
        if self.play_btn is not None:
            self.play_btn.configure(text="Play" if state.is_paused else "Pause")
            self.play_btn.state(["disabled"] if state.is_loading or state.has_error else ["!disabled"])
        if abs(self.volume_var.get() - state.volume) > 1e-6:
            self.volume_var.set(state.volume)
        self.redraw()

    def redraw(self) -> None:
        canvas = self.canvas
        if not canvas.winfo_exists():
            return
        canvas.delete("all")
        state = self.controller.state
        envelope = self.controller.envelope
        if envelope.size == 0:
            canvas.create_text(
                self.settings.width // 2,
                self.settings.height // 2,
                text=state.status_text if state.is_loading or state.has_error else "No waveform",
                fill="#6f7888",
                font=("Segoe UI", 8),
            )
            return
        played_color = self.settings.color
        pending_color = dim_color(played_color)
        line_width = max(1, int(self.settings.gap) - 2)
        capstyle = tk.ROUND if self.settings.rounded else tk.BUTT
        for bar in layout_bars(envelope, self.settings, state.played_percent):
            canvas.create_line(
                bar.x,
                bar.top,
                bar.x,
                bar.bottom,
                fill=played_color if bar.played else pending_color,
                width=line_width,
                capstyle=capstyle,
            )

    def destroy(self) -> None:
        self._unsubscribe()
        self.frame.destroy()
