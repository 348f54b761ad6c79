"""revu Textual application shell."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from textual.app import App, ComposeResult
from textual.widgets import Footer, Header, Input, Static

from revu.config.models import AppSettings
from revu.config.store import SettingsStore
from revu.diff.cache import RowCache
from revu.messages import FoldToggled, ViewStateChanged
from revu.runtime_logging import configure_runtime_logging
from revu.sources.bundle import ReviewDocument
from revu.widgets.diff_view import DiffView

PromptMode = Literal["search", "goto"]


class RevuApp(App[None]):
    TITLE = "revu"
    SUB_TITLE = "terminal code review"

    BINDINGS = [
        ("slash", "open_prompt('search')", "Search"),
        ("colon", "open_prompt('goto')", "Go to line"),
        ("escape", "close_prompt", "Close"),
        ("q", "quit", "Quit"),
    ]

    CSS = """
    Screen {
        layout: vertical;
    }

    #prompt {
        height: 3;
    }

    #status {
        height: 1;
        color: $text-muted;
        padding: 0 1;
    }

    .hidden {
        display: none;
    }
    """

    def __init__(
        self,
        *,
        document: ReviewDocument,
        settings: AppSettings | None = None,
        settings_store: SettingsStore | None = None,
        layout: Literal["auto", "unified", "split"] | None = None,
        show_blame: bool | None = None,
        log_level: str | None = None,
        log_file: str | Path | None = None,
    ) -> None:
        if settings is None:
            settings = (settings_store or SettingsStore()).load()
        self.settings = settings
        self.logger = configure_runtime_logging(
            level=log_level,
            log_file=log_file,
            default_level=settings.logging.level,
        )
        diff_settings = settings.diff
        overrides: dict[str, object] = {}
        if layout is not None:
            overrides["mode"] = layout
        if show_blame is not None:
            overrides["show_blame"] = show_blame
        if overrides:
            diff_settings = diff_settings.model_copy(update=overrides)
        self.diff_settings = diff_settings
        self.document = document
        self.row_cache = RowCache()
        self.prompt_mode: PromptMode | None = None

        self.logger.info(
            "app.initialized",
            document=document.key,
            mode=diff_settings.mode,
            show_blame=diff_settings.show_blame,
        )
        super().__init__()

    def compose(self) -> ComposeResult:
        yield Header(show_clock=False)
        yield DiffView(self.document, self.diff_settings, row_cache=self.row_cache, id="diff")
        yield Input(id="prompt", classes="hidden")
        yield Static("", id="status")
        yield Footer()

    def on_mount(self) -> None:
        self.theme = self.settings.appearance.theme
        self.sub_title = self.document.path
        self.query_one(DiffView).focus()
        if not self.document.hunks:
            self.notify("No diff available", severity="information")

    def action_open_prompt(self, mode: PromptMode) -> None:
        self.prompt_mode = mode
        prompt = self.query_one("#prompt", Input)
        prompt.placeholder = "Search" if mode == "search" else "Line number"
        prompt.value = ""
        prompt.remove_class("hidden")
        prompt.focus()

    def action_close_prompt(self) -> None:
        self.prompt_mode = None
        self.query_one("#prompt", Input).add_class("hidden")
        self.query_one(DiffView).focus()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id != "prompt":
            return
        view = self.query_one(DiffView)
        value = event.value.strip()
        mode = self.prompt_mode
        self.action_close_prompt()

        if mode == "search":
            if view.search(value) == 0 and value:
                self.notify(f"No matches for {value!r}", severity="warning")
        elif mode == "goto":
            try:
                line_number = int(value)
            except ValueError:
                self.notify(f"Not a line number: {value!r}", severity="error")
                return
            if not view.go_to_line(line_number):
                self.notify(f"Line {line_number} is not in this diff", severity="warning")

    def on_view_state_changed(self, message: ViewStateChanged) -> None:
        parts = [f"{message.layout}", f"row {message.cursor + 1 if message.total else 0}/{message.total}"]
        if message.line_number is not None:
            parts.append(f"line {message.line_number}")
        if message.match_count:
            position = "-" if message.match_position is None else str(message.match_position + 1)
            parts.append(f"match {position}/{message.match_count}")
        self.query_one("#status", Static).update("  ".join(parts))

    def on_fold_toggled(self, message: FoldToggled) -> None:
        self.logger.debug("app.fold_toggled", hunk_index=message.hunk_index, folded=message.folded)
