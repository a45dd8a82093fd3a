from __future__ import annotations

import logging
import tkinter as tk
from tkinter import ttk

from .dialogs import ask_name, confirm, notify
from .errors import DecodeError, StoreError, SyncError
from .storage import LocalStore
from .sync import USER_MESSAGE, export_code, import_code

logger = logging.getLogger(__name__)

COPIED_RESET_MS = 3000


class SyncWindow(ttk.Frame):
    """Secure Sync: export this device's data as a code, or import one."""

    def __init__(self, master: tk.Misc, store: LocalStore):
        super().__init__(master)
        self._store = store
        self.master.title("ChronoSync - Secure Sync")
        self.pack(fill=tk.BOTH, expand=True)
        self._build_ui()
        self._set_status()

    def _build_ui(self) -> None:
        self.master.protocol("WM_DELETE_WINDOW", self.master.destroy)
        self.master.bind("<Escape>", lambda e: self.master.destroy())

        style = ttk.Style()
        bg = "#111827"
        surface = "#1f2937"
        fg = "#e5e7eb"
        muted = "#9ca3af"
        accent = "#0284c7"

        if "chronodark" not in style.theme_names():
            style.theme_create(
                "chronodark",
                parent="clam",
                settings={
                    "TFrame": {"configure": {"background": bg}},
                    "TLabel": {"configure": {"background": bg, "foreground": fg}},
                    "Muted.TLabel": {"configure": {"background": bg, "foreground": muted}},
                    "Heading.TLabel": {"configure": {"background": bg, "foreground": fg, "font": ("TkDefaultFont", 12, "bold")}},
                    "Status.TLabel": {"configure": {"background": surface, "foreground": fg, "padding": (6, 3)}},
                    "TButton": {
                        "configure": {"background": accent, "foreground": "#ffffff", "padding": (8, 6)},
                        "map": {"foreground": [("disabled", muted)]},
                    },
                    "TEntry": {"configure": {"fieldbackground": surface, "foreground": fg, "insertcolor": fg}},
                },
            )
        style.theme_use("chronodark")

        body = ttk.Frame(self)
        body.pack(fill=tk.BOTH, expand=True, padx=16, pady=12)
        ttk.Label(body, text="Your data is encrypted with a password. Use the same password to import on another device.",
                  style="Muted.TLabel", wraplength=460, justify="left").pack(fill=tk.X, pady=(0, 12))

        # Export
        ttk.Label(body, text="Export Data", style="Heading.TLabel").pack(anchor="w")
        self._export_pw = tk.StringVar()
        ttk.Entry(body, textvariable=self._export_pw, show="*").pack(fill=tk.X, pady=(6, 6))
        self._export_label = tk.StringVar(value="Copy Secure Sync Code")
        ttk.Button(body, textvariable=self._export_label, command=self.export).pack(fill=tk.X)

        ttk.Separator(body).pack(fill=tk.X, pady=12)

        # Import
        ttk.Label(body, text="Import Data", style="Heading.TLabel").pack(anchor="w")
        self._code = tk.Text(body, height=5, wrap="char", background=surface, foreground=fg,
                             insertbackground=fg, relief=tk.FLAT)
        self._code.pack(fill=tk.X, pady=(6, 6))
        self._import_pw = tk.StringVar()
        ttk.Entry(body, textvariable=self._import_pw, show="*").pack(fill=tk.X, pady=(0, 6))
        ttk.Button(body, text="Import Data", command=self.import_).pack(fill=tk.X)

        self._status_var = tk.StringVar()
        ttk.Label(self, textvariable=self._status_var, anchor="w",
                  style="Status.TLabel").pack(fill=tk.X, side=tk.BOTTOM)

    def _set_status(self, text: str | None = None) -> None:
        if text is None:
            try:
                user = self._store.current_user()
            except StoreError as ex:
                user = None
                logger.warning("%s", ex)
            text = f"Logged in as {user}" if user else "Not logged in"
        self._status_var.set(text)

    def _ensure_user(self) -> bool:
        if self._store.current_user():
            return True
        name = ask_name(self, "Welcome", "What should we call you?")
        if not name or not name.strip():
            return False
        self._store.login(name)
        self._set_status()
        return True

    def export(self) -> None:
        password = self._export_pw.get()
        if not password:
            notify(self, "Export", "Please enter a password to encrypt your data.")
            return
        try:
            if not self._ensure_user():
                return
            self._set_status("Encrypting...")
            self.update_idletasks()
            code = export_code(self._store, password)
        except (StoreError, SyncError) as ex:
            logger.error("Export failed: %s", ex)
            notify(self, "Export", "Could not export data.")
            self._set_status()
            return
        self.clipboard_clear()
        self.clipboard_append(code)
        self._export_label.set("Copied to Clipboard!")
        self.after(COPIED_RESET_MS, lambda: self._export_label.set("Copy Secure Sync Code"))
        self._set_status()

    def import_(self) -> None:
        code = self._code.get("1.0", tk.END).strip()
        password = self._import_pw.get()
        if not code or not password:
            notify(self, "Import", "Please paste your sync code and enter the password.")
            return
        if not confirm(self, "Import", "This will overwrite all current data on this device for the imported user. Are you sure?"):
            return
        self._set_status("Decrypting & Importing...")
        self.update_idletasks()
        try:
            snapshot = import_code(self._store, code, password)
        except DecodeError as ex:
            logger.warning("Import rejected: %s", type(ex).__name__)
            notify(self, "Import", USER_MESSAGE)
            self._set_status()
            return
        except (StoreError, SyncError) as ex:
            logger.error("Import could not be saved: %s", ex)
            notify(self, "Import", f"Could not save imported data: {ex}")
            self._set_status()
            return
        self._code.delete("1.0", tk.END)
        self._import_pw.set("")
        self._set_status()
        notify(self, "Import", f"Imported {len(snapshot.tasks)} tasks and {len(snapshot.tags)} tags for {snapshot.owner}.")


def run_app(store: LocalStore) -> None:
    root = tk.Tk()
    root.minsize(520, 480)
    app = SyncWindow(root, store)
    app.mainloop()
