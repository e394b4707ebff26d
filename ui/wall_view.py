"""Wall view -- a tkinter preview of what the wall is showing.

One panel per active module. During a transition both the outgoing and
incoming modules are listed side by side. A bottom bar shows the machine
state and lets an operator skip to any module in the library.
"""

import tkinter as tk
import logging
from typing import Dict, List

from config import THEME
from core.running_module import RunningModule

logger = logging.getLogger(__name__)

# Layout constants
PAD = 8
TOP_H = 36
BOT_H = 36
STATUS_REFRESH_MS = 500


class WallView:
    """Renders the ticker's active modules into a Tk window."""

    def __init__(self, root, wall):
        self.root = root
        self.wall = wall
        self.root.title("Wall Switcher")
        self.root.configure(bg=THEME["bg"])
        self.root.geometry("800x480")

        self._panels: Dict[int, tk.Label] = {}

        self._build_top_bar()
        self._body = tk.Frame(self.root, bg=THEME["bg"])
        self._body.pack(fill="both", expand=True, padx=PAD, pady=PAD)
        self._build_bottom_bar()

        wall.ticker.subscribe(self._render)
        self._update_status()

    # ------------------------------------------------------------------
    # UI construction
    # ------------------------------------------------------------------

    def _build_top_bar(self):
        bar = tk.Frame(self.root, bg=THEME["bg"], height=TOP_H)
        bar.pack(fill="x", padx=PAD)
        bar.pack_propagate(False)

        tk.Label(
            bar, text="WALL", font=("Arial", 16, "bold"),
            bg=THEME["bg"], fg=THEME["text"],
        ).pack(side="left", padx=(4, 0))

        btn_kw = {
            "font": ("Arial", 11, "bold"), "relief": "flat",
            "cursor": "hand2", "fg": "white",
        }
        tk.Button(
            bar, text="EXIT", bg="#444", command=self.root.quit, **btn_kw,
        ).pack(side="right", padx=2)

        for name in reversed(self.wall.library.names()):
            tk.Button(
                bar, text=name.upper(), bg=THEME["accent"],
                command=lambda n=name: self.wall.request_switch(n), **btn_kw,
            ).pack(side="right", padx=2)

    def _build_bottom_bar(self):
        bar = tk.Frame(self.root, bg=THEME["bg"], height=BOT_H)
        bar.pack(fill="x", padx=PAD, pady=(0, 4))
        bar.pack_propagate(False)

        self._status_lbl = tk.Label(
            bar, text="Starting...", font=("Arial", 10),
            bg=THEME["bg"], fg=THEME["text_dim"],
        )
        self._status_lbl.pack(side="left", padx=4)

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def _render(self, active: List[RunningModule]):
        live = {id(m) for m in active}
        for key in [k for k in self._panels if k not in live]:
            self._panels.pop(key).destroy()

        for module in active:
            panel = self._panels.get(id(module))
            if panel is None:
                panel = tk.Label(
                    self._body, font=("Arial", 28, "bold"),
                    bg=THEME["card_bg"], fg=THEME["text"],
                    highlightbackground=THEME["border"], highlightthickness=1,
                )
                panel.pack(side="left", fill="both", expand=True, padx=PAD // 2)
                self._panels[id(module)] = panel
            panel.config(text=module.render() or module.definition.title)

    def _update_status(self):
        status = self.wall.status()
        text = f"{status.get('state', '?')}  |  on screen: {status.get('on_screen', '?')}"
        if len(status.get("active", [])) > 1:
            text += "  |  transitioning"
        self._status_lbl.config(text=text)
        self.root.after(STATUS_REFRESH_MS, self._update_status)
