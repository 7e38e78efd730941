"""Terminal editor application with smart keys."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from textual.app import App, ComposeResult
from textual.widgets import Header, Static

from smartkeys.config import SmartKeysConfig, load_config
from smartkeys.widget import SmartKeysEditor

logger = logging.getLogger(__name__)

# file suffix -> language id
LANGUAGE_BY_SUFFIX = {
    ".json": "json",
    ".jsonc": "jsonc",
    ".code-workspace": "jsonc",
}


def language_for_path(file_path: str) -> str:
    return LANGUAGE_BY_SUFFIX.get(Path(file_path).suffix.lower(), "plaintext")


class SmartKeysApp(App):
    """TUI app that wraps the SmartKeysEditor widget."""

    CSS = """
    Screen {
        layout: vertical;
    }
    #editor {
        height: 1fr;
        border: solid $accent;
    }
    #help-bar {
        height: auto;
        padding: 0 1;
        color: $text-muted;
        background: $surface;
    }
    """

    TITLE = "Smart Keys"
    BINDINGS = []
    ENABLE_COMMAND_PALETTE = False

    def __init__(
        self,
        file_path: str = "",
        initial_content: str = "",
        config: SmartKeysConfig | None = None,
        tab_size: int = 4,
        insert_spaces: bool = True,
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        self.file_path = file_path
        self.initial_content = initial_content
        self.smart_config = config or SmartKeysConfig()
        self.tab_size = tab_size
        self.insert_spaces = insert_spaces

    def compose(self) -> ComposeResult:
        yield Header()
        yield SmartKeysEditor(
            self.initial_content,
            uri=Path(self.file_path).resolve().as_uri() if self.file_path else "untitled:1",
            language_id=language_for_path(self.file_path) if self.file_path else "plaintext",
            config=self.smart_config,
            tab_size=self.tab_size,
            insert_spaces=self.insert_spaces,
            id="editor",
        )
        yield Static(
            "[b]Cursors:[/b] alt+up/down add  esc single   "
            "[b]Edit:[/b] ctrl+z undo  ctrl+y redo   "
            "[b]File:[/b] ctrl+s save  ctrl+q quit",
            id="help-bar",
        )

    def on_mount(self) -> None:
        self._update_title()
        self.query_one("#editor").focus()

    def _update_title(self) -> None:
        self.sub_title = self.file_path or "[new]"

    def on_smart_keys_editor_quit(self, event: SmartKeysEditor.Quit) -> None:
        self.exit()

    def on_smart_keys_editor_save_requested(
        self, event: SmartKeysEditor.SaveRequested
    ) -> None:
        if not self.file_path:
            self.notify("No file name: start with smartkeys <file>", severity="warning")
            return
        try:
            path = Path(self.file_path)
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(event.content, encoding="utf-8")
            self.notify(f"Saved: {self.file_path}", severity="information")
        except OSError as exc:
            logger.warning("Save to %s failed: %s", self.file_path, exc)
            self.notify(f"Save failed: {exc}", severity="error", timeout=6)


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="smartkeys",
        description="Text editor with smart End, Backspace and Enter",
    )
    parser.add_argument("file", nargs="?", default="", help="file to open")
    parser.add_argument(
        "--config",
        default=None,
        help="settings JSON file (default: user config directory)",
    )
    parser.add_argument(
        "--tab-size", type=int, default=4, help="indent width in spaces (default: 4)"
    )
    parser.add_argument(
        "--tabs",
        action="store_true",
        default=False,
        help="indent with tab characters instead of spaces",
    )
    parser.add_argument(
        "--log-level",
        default="warning",
        choices=["debug", "info", "warning", "error"],
    )
    parser.add_argument("--log-file", default=None, help="write log records to this file")
    args = parser.parse_args()

    if args.log_file:
        logging.basicConfig(
            filename=args.log_file,
            level=getattr(logging, args.log_level.upper()),
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        )
    if args.tab_size < 1:
        parser.error("--tab-size must be at least 1")

    file_path: str = args.file
    initial_content = ""
    if file_path:
        path = Path(file_path)
        try:
            if path.exists():
                initial_content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            print(f"smartkeys: {exc}", file=sys.stderr)
            sys.exit(1)

    app = SmartKeysApp(
        file_path=file_path,
        initial_content=initial_content,
        config=load_config(args.config),
        tab_size=args.tab_size,
        insert_spaces=not args.tabs,
    )
    app.run()


if __name__ == "__main__":
    main()
