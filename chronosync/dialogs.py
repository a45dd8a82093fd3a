from __future__ import annotations

import tkinter as tk
from tkinter import ttk
from typing import List, Optional, Tuple


def _center_over(win: tk.Toplevel, parent: tk.Misc) -> None:
    win.update_idletasks()
    try:
        px, py = parent.winfo_rootx(), parent.winfo_rooty()
        pw, ph = parent.winfo_width(), parent.winfo_height()
    except tk.TclError:
        px = py = 100
        pw = ph = 400
    x = px + max(0, (pw - win.winfo_width()) // 2)
    y = py + max(0, (ph - win.winfo_height()) // 2)
    win.geometry(f"+{x}+{y}")


class _Modal(tk.Toplevel):
    def __init__(self, parent: tk.Misc, title: str):
        super().__init__(parent)
        self.withdraw()  # show after layout
        self.transient(parent)
        self.title(title)
        self.resizable(False, False)
        self.grab_set()
        self.result: Optional[str] = None
        self.protocol("WM_DELETE_WINDOW", self._close)
        self.bind("<Escape>", lambda e: self._close())
        self.body = ttk.Frame(self)
        self.body.pack(fill=tk.BOTH, expand=True, padx=16, pady=12)

    def _close(self, result: Optional[str] = None) -> None:
        self.result = result
        self.destroy()

    def _show(self, parent: tk.Misc) -> Optional[str]:
        self.deiconify()
        _center_over(self, parent)
        parent.wait_window(self)
        return self.result


class _MessageModal(_Modal):
    def __init__(self, parent: tk.Misc, title: str, message: str, buttons: List[Tuple[str, str]], default: str):
        super().__init__(parent, title)
        ttk.Label(self.body, text=message, anchor="w", justify="left", wraplength=420).pack(fill=tk.X)
        row = ttk.Frame(self.body)
        row.pack(fill=tk.X, pady=(12, 0))
        for text, value in buttons:
            b = ttk.Button(row, text=text, command=lambda v=value: self._close(v))
            b.pack(side=tk.RIGHT, padx=4)
            if value == default:
                self.bind("<Return>", lambda e, v=value: self._close(v))
                b.focus_set()


class _TextModal(_Modal):
    def __init__(self, parent: tk.Misc, title: str, prompt: str):
        super().__init__(parent, title)
        ttk.Label(self.body, text=prompt, anchor="w").pack(fill=tk.X)
        var = tk.StringVar()
        entry = ttk.Entry(self.body, textvariable=var)
        entry.pack(fill=tk.X, pady=(6, 0))
        entry.focus_set()
        row = ttk.Frame(self.body)
        row.pack(fill=tk.X, pady=(12, 0))
        ttk.Button(row, text="Cancel", command=self._close).pack(side=tk.RIGHT, padx=4)
        ttk.Button(row, text="OK", command=lambda: self._close(var.get())).pack(side=tk.RIGHT, padx=4)
        self.bind("<Return>", lambda e: self._close(var.get()))


def confirm(parent: tk.Misc, title: str, message: str) -> bool:
    dlg = _MessageModal(parent, title, message, [("Cancel", "no"), ("Continue", "yes")], default="yes")
    return dlg._show(parent) == "yes"


def notify(parent: tk.Misc, title: str, message: str) -> None:
    _MessageModal(parent, title, message, [("OK", "ok")], default="ok")._show(parent)


def ask_name(parent: tk.Misc, title: str, prompt: str) -> Optional[str]:
    return _TextModal(parent, title, prompt)._show(parent)
