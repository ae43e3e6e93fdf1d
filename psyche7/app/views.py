from __future__ import annotations

"""Tk views, one per controller state.

Every view exposes ``refresh()`` which re-reads the controller when the view
becomes visible. Actions that run coroutines go through ``app.spawn``.
"""

import tkinter as tk
from tkinter import ttk
from typing import TYPE_CHECKING, Dict, List

from ..util.randomness import random_token
from .controller import PROTOCOLS, ViewController
from .dossier import DISCLAIMER, format_dossier, ranking_rows

if TYPE_CHECKING:  # pragma: no cover
    from .gui import TerminalApp

BOOT_LINES = [
    "> MOUNTING KERNEL...",
    "> ESTABLISHING SECURE HANDSHAKE...",
    "> CALIBRATING NEURAL WEIGHTS...",
]
WARNING_TEXT = (
    "WARNING: UNAUTHORIZED DISSEMINATION OF PSYCHOMETRIC DATA IS PUNISHABLE BY "
    "TERMINATION OF CONTRACT AND IMMEDIATE MEMORY WIPING."
)
TYPE_SPEED_MS = 30


class BaseView(ttk.Frame):
    def __init__(self, master: "TerminalApp", controller: ViewController) -> None:
        super().__init__(master, style="Terminal.TFrame")
        self.app = master
        self.controller = controller

    def refresh(self) -> None:
        pass


class BootView(BaseView):
    def __init__(self, master: "TerminalApp", controller: ViewController) -> None:
        super().__init__(master, controller)
        ttk.Label(self, text="PSYCHE-7", style="Title.TLabel").pack(pady=(160, 20))
        self.line_vars = [tk.StringVar(value="") for _ in BOOT_LINES]
        for var in self.line_vars:
            ttk.Label(self, textvariable=var, style="Terminal.TLabel").pack(anchor=tk.CENTER)

    def refresh(self) -> None:
        for var in self.line_vars:
            var.set("")
        self._type(0, 0)

    def _type(self, line: int, pos: int) -> None:
        if line >= len(BOOT_LINES):
            return
        text = BOOT_LINES[line]
        self.line_vars[line].set(text[:pos])
        if pos < len(text):
            self.after(TYPE_SPEED_MS, self._type, line, pos + 1)
        else:
            self.after(TYPE_SPEED_MS, self._type, line + 1, 0)


class AuthView(BaseView):
    def __init__(self, master: "TerminalApp", controller: ViewController) -> None:
        super().__init__(master, controller)
        pad = {"padx": 10, "pady": 6}
        ttk.Label(self, text="IDENTIFICATION", style="Title.TLabel").pack(pady=(140, 4))
        ttk.Label(self, text="ENTER CREDENTIALS TO PROCEED", style="Dim.TLabel").pack(**pad)
        ttk.Label(self, text="CODENAME", style="Terminal.TLabel").pack(**pad)

        self.name_var = tk.StringVar(value="")
        self.entry = ttk.Entry(self, textvariable=self.name_var, width=28, style="Terminal.TEntry")
        self.entry.pack(**pad)
        self.entry.bind("<Return>", lambda _e: self.submit())
        self.name_var.trace_add("write", lambda *_: self._on_change())

        self.button = ttk.Button(self, text="ACCESS TERMINAL", command=self.submit, style="Terminal.TButton")
        self.button.pack(**pad)
        self._sync_button()

    def _on_change(self) -> None:
        raw = self.name_var.get()
        normalized = self.controller.set_username(raw)
        if normalized != raw:
            self.name_var.set(normalized)
            return
        self._sync_button()

    def _sync_button(self) -> None:
        self.button.state(["!disabled"] if self.controller.can_login else ["disabled"])

    def submit(self) -> None:
        self.controller.login()

    def refresh(self) -> None:
        self.name_var.set(self.controller.username)
        self._sync_button()
        self.entry.focus_set()


class RankingTable(ttk.Treeview):
    COLUMNS = (("rank", "RANK", 60), ("agent", "AGENT", 200), ("score", "STABILITY", 100), ("date", "DATE", 120))

    def __init__(self, master: tk.Misc, *, height: int = 10, show_date: bool = True) -> None:
        columns = [c for c in self.COLUMNS if show_date or c[0] != "date"]
        super().__init__(master, columns=[c[0] for c in columns], show="headings", height=height, style="Terminal.Treeview")
        for col_id, heading, width in columns:
            self.heading(col_id, text=heading)
            self.column(col_id, width=width, anchor=tk.E if col_id == "score" else tk.W)
        self._show_date = show_date

    def load(self, controller: ViewController) -> None:
        self.delete(*self.get_children())
        for row in ranking_rows(controller.rankings):
            self.insert("", tk.END, values=row if self._show_date else row[:3])


class MenuView(BaseView):
    def __init__(self, master: "TerminalApp", controller: ViewController) -> None:
        super().__init__(master, controller)
        pad = {"padx": 10, "pady": 6}

        left = ttk.Frame(self, style="Terminal.TFrame")
        left.pack(side=tk.LEFT, fill=tk.BOTH, expand=True, padx=24, pady=60)
        ttk.Label(left, text="EVALUATION PROTOCOLS", style="Title.TLabel").pack(anchor=tk.W, **pad)
        ttk.Label(
            left,
            text="Select scan depth. Deeper scans yield higher confidence metrics "
            "but require increased cognitive load.",
            style="Dim.TLabel",
            wraplength=420,
            justify=tk.LEFT,
        ).pack(anchor=tk.W, **pad)
        for protocol in PROTOCOLS:
            ttk.Button(
                left,
                text=f"{protocol.label} ({protocol.count} Q)   {protocol.estimate}",
                command=lambda c=protocol.count: self.app.spawn(self.controller.start_assessment(c)),
                style="Terminal.TButton",
            ).pack(fill=tk.X, **pad)

        right = ttk.Frame(self, style="Terminal.TFrame")
        right.pack(side=tk.RIGHT, fill=tk.BOTH, expand=True, padx=24, pady=60)
        self.agent_var = tk.StringVar(value="")
        ttk.Label(right, textvariable=self.agent_var, style="Dim.TLabel").pack(anchor=tk.W, **pad)
        ttk.Label(right, text="GLOBAL RANKINGS", style="Terminal.TLabel").pack(anchor=tk.W, **pad)
        self.table = RankingTable(right, height=10, show_date=False)
        self.table.pack(fill=tk.X, **pad)
        ttk.Button(right, text="VIEW FULL RANKINGS", command=controller.show_leaderboard, style="Terminal.TButton").pack(
            fill=tk.X, **pad
        )
        ttk.Label(right, text=WARNING_TEXT, style="Danger.TLabel", wraplength=380, justify=tk.LEFT).pack(
            anchor=tk.W, **pad
        )

    def refresh(self) -> None:
        self.agent_var.set(f"AGENT: {self.controller.username}")
        self.table.load(self.controller)


class LeaderboardView(BaseView):
    def __init__(self, master: "TerminalApp", controller: ViewController) -> None:
        super().__init__(master, controller)
        pad = {"padx": 10, "pady": 6}
        ttk.Label(self, text="GLOBAL RANKINGS", style="Title.TLabel").pack(pady=(80, 10))
        self.table = RankingTable(self, height=12)
        self.table.pack(**pad)
        ttk.Button(self, text="RETURN TO MENU", command=controller.close_leaderboard, style="Terminal.TButton").pack(**pad)

    def refresh(self) -> None:
        self.table.load(self.controller)


class LoadingView(BaseView):
    def __init__(self, master: "TerminalApp", controller: ViewController, label: str) -> None:
        super().__init__(master, controller)
        pad = {"padx": 10, "pady": 6}
        ttk.Label(self, text=label, style="Terminal.TLabel").pack(pady=(200, 6))
        self.bar = ttk.Progressbar(self, length=520, maximum=100, mode="determinate", style="Terminal.Horizontal.TProgressbar")
        self.bar.pack(**pad)
        self.log_vars = [tk.StringVar(value="") for _ in range(4)]
        for var in self.log_vars:
            ttk.Label(self, textvariable=var, style="Dim.TLabel").pack(anchor=tk.CENTER)

    def refresh(self) -> None:
        self.log_vars[0].set(f"> access_node: {random_token()}")
        self.log_vars[1].set("> encrypting_packet_stream...")
        self.log_vars[2].set("> querying_subconscious_constructs...")
        self.set_progress(self.controller.progress_value)

    def set_progress(self, value: float) -> None:
        self.bar["value"] = value
        self.log_vars[3].set(f"> correlating_vectors [{value:.0f}%]")


class AssessmentView(BaseView):
    def __init__(self, master: "TerminalApp", controller: ViewController) -> None:
        super().__init__(master, controller)
        pad = {"padx": 10, "pady": 6}
        ttk.Label(self, text="EVALUATION PROGRESS", style="Dim.TLabel").pack(pady=(60, 2))
        self.bar = ttk.Progressbar(self, length=640, maximum=100, mode="determinate", style="Terminal.Horizontal.TProgressbar")
        self.bar.pack(**pad)
        self.header_var = tk.StringVar(value="")
        self.question_var = tk.StringVar(value="")
        ttk.Label(self, textvariable=self.header_var, style="Terminal.TLabel").pack(**pad)
        ttk.Label(self, textvariable=self.question_var, style="Question.TLabel", wraplength=700, justify=tk.LEFT).pack(
            pady=24, padx=40
        )
        self.option_buttons: List[ttk.Button] = []
        for _ in range(4):
            btn = ttk.Button(self, text="", style="Terminal.TButton")
            btn.pack(fill=tk.X, padx=120, pady=4)
            self.option_buttons.append(btn)

    def refresh(self) -> None:
        session = self.controller.session
        question = session.current_question()
        if question is None:
            return
        self.bar["value"] = session.progress_percent
        self.header_var.set(f"QUERY {session.index + 1}/{session.total}  //  {question.dimension.upper()}")
        self.question_var.set(question.text)
        for idx, (btn, option) in enumerate(zip(self.option_buttons, question.options)):
            btn.configure(
                text=f"{chr(65 + idx)} //  {option}",
                command=lambda q=question.id, o=option: self.app.spawn(self.controller.answer(q, o)),
            )


class ReportView(BaseView):
    def __init__(self, master: "TerminalApp", controller: ViewController) -> None:
        super().__init__(master, controller)
        self.text = tk.Text(self, height=30, width=96, state=tk.DISABLED, wrap=tk.WORD, bg="black", fg="#33ff66")
        self.text.pack(padx=16, pady=(24, 8), fill=tk.BOTH, expand=True)
        ttk.Button(self, text="CLOSE DOSSIER", command=controller.dismiss_report, style="Terminal.TButton").pack(pady=6)
        ttk.Label(self, text=DISCLAIMER, style="Dim.TLabel").pack(pady=(0, 12))

    def refresh(self) -> None:
        report = self.controller.report
        self.text.configure(state=tk.NORMAL)
        self.text.delete("1.0", tk.END)
        if report is not None:
            self.text.insert(tk.END, format_dossier(report, random_token(5)))
        self.text.configure(state=tk.DISABLED)


class ErrorView(BaseView):
    def __init__(self, master: "TerminalApp", controller: ViewController) -> None:
        super().__init__(master, controller)
        ttk.Label(self, text="SYSTEM FAILURE", style="DangerTitle.TLabel").pack(pady=(200, 10))
        self.message_var = tk.StringVar(value="")
        ttk.Label(self, textvariable=self.message_var, style="Danger.TLabel", wraplength=700).pack(pady=10)
        ttk.Button(self, text="REBOOT SYSTEM", command=controller.acknowledge_error, style="Terminal.TButton").pack(pady=20)

    def refresh(self) -> None:
        self.message_var.set(self.controller.error_message)


def build_views(app: "TerminalApp", controller: ViewController) -> Dict[str, BaseView]:
    return {
        "BOOTING": BootView(app, controller),
        "AUTH": AuthView(app, controller),
        "MENU": MenuView(app, controller),
        "LEADERBOARD": LeaderboardView(app, controller),
        "GENERATING": LoadingView(app, controller, "GENERATING NEURAL PATHWAYS..."),
        "ASSESSMENT": AssessmentView(app, controller),
        "ANALYZING": LoadingView(app, controller, "COMPILING PSYCHOMETRIC DATA..."),
        "RESULT": ReportView(app, controller),
        "ERROR": ErrorView(app, controller),
    }
