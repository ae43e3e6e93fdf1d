from __future__ import annotations

"""Tk shell for PSYCHE-7, driven from the asyncio event loop.

The window is pumped by ``TerminalApp.run`` so controller coroutines and Tk
callbacks share one thread. Closing the window cancels every outstanding
task, which also stops any running progress ticker.
"""

import asyncio
import logging
import tkinter as tk
from tkinter import ttk
from typing import Any, Coroutine, Dict, Optional, Set

from .controller import AppState, ViewController
from .views import BaseView, LoadingView, build_views

logger = logging.getLogger(__name__)

GREEN = "#33ff66"
GREEN_DIM = "#1f8f3f"
CYAN = "#33e0ff"
RED = "#ff3344"
BLACK = "#000000"


def _configure_style(root: tk.Tk) -> None:
    style = ttk.Style(root)
    style.theme_use("clam")
    mono = ("Courier", 11)
    style.configure("Terminal.TFrame", background=BLACK)
    style.configure("Terminal.TLabel", background=BLACK, foreground=GREEN, font=mono)
    style.configure("Dim.TLabel", background=BLACK, foreground=GREEN_DIM, font=("Courier", 9))
    style.configure("Title.TLabel", background=BLACK, foreground=GREEN, font=("Courier", 24, "bold"))
    style.configure("Question.TLabel", background=BLACK, foreground=CYAN, font=("Courier", 15))
    style.configure("Danger.TLabel", background=BLACK, foreground=RED, font=mono)
    style.configure("DangerTitle.TLabel", background=BLACK, foreground=RED, font=("Courier", 24, "bold"))
    style.configure("Terminal.TButton", background=BLACK, foreground=GREEN, font=mono, bordercolor=GREEN)
    style.map("Terminal.TButton", background=[("active", "#0b2a14")], foreground=[("disabled", GREEN_DIM)])
    style.configure("Terminal.TEntry", fieldbackground=BLACK, foreground=GREEN, insertcolor=GREEN)
    style.configure("Terminal.Treeview", background=BLACK, fieldbackground=BLACK, foreground=GREEN, font=mono)
    style.configure("Terminal.Horizontal.TProgressbar", background=GREEN, troughcolor="#0b2a14")


class TerminalApp(tk.Tk):
    def __init__(self, controller: ViewController, *, title: str = "PSYCHE-7", geometry: str = "1000x720", frame_rate: int = 60) -> None:
        super().__init__()
        self.title(title)
        self.geometry(geometry)
        self.configure(background=BLACK)
        _configure_style(self)

        self.controller = controller
        self.frame_interval = 1.0 / max(int(frame_rate), 1)
        self._tasks: Set[asyncio.Task] = set()
        self._alive = True
        self._current: Optional[BaseView] = None

        self.views: Dict[str, BaseView] = build_views(self, controller)
        controller.bus.subscribe("state", self.show_state)
        controller.bus.subscribe("progress", self._on_progress)
        self.protocol("WM_DELETE_WINDOW", self._on_close)

    # ------------------------------------------------------------------
    def spawn(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task:
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)
        task.add_done_callback(self._task_done)
        return task

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error("Background task failed", exc_info=task.exception())

    def show_state(self, state: AppState) -> None:
        view = self.views[state.value]
        if self._current is not view:
            if self._current is not None:
                self._current.pack_forget()
            view.pack(fill=tk.BOTH, expand=True)
            self._current = view
        view.refresh()

    def _on_progress(self, value: float) -> None:
        if isinstance(self._current, LoadingView):
            self._current.set_progress(value)

    def _on_close(self) -> None:
        self._alive = False
        for task in list(self._tasks):
            task.cancel()
        self.destroy()

    async def run(self) -> None:
        self.show_state(self.controller.state)
        self.spawn(self.controller.boot())
        try:
            while self._alive:
                self.update()
                await asyncio.sleep(self.frame_interval)
        finally:
            pending = list(self._tasks)
            for task in pending:
                task.cancel()
            if pending:
                await asyncio.gather(*pending, return_exceptions=True)
