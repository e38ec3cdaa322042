"""Main Textual application for the rasterkit preview TUI."""

from __future__ import annotations

from pathlib import Path

from textual import work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import (
    Button,
    Footer,
    Header,
    Input,
    Label,
    Static,
)
from textual.worker import get_current_worker

from rasterkit.core.image import Image, ImageLoadError
from rasterkit.core.pipeline import (
    DitherResult,
    Settings,
    Stage,
    run_dither,
    save_dither_outputs,
)
from rasterkit.tui.controls import ControlPanel
from rasterkit.tui.preview import ImagePreview
from rasterkit.tui.stages import StageBar, next_stage
from rasterkit.utils.cache import ResultCache
from rasterkit.utils.terminal import fit_to_terminal


class PathScreen(ModalScreen[str | None]):
    """Modal asking for a single path."""

    BINDINGS = [Binding("escape", "cancel", "Cancel", priority=True)]

    DEFAULT_CSS = """
    PathScreen {
        align: center middle;
    }

    PathScreen #path-dialog {
        width: 60;
        height: 11;
        background: $surface;
        border: thick $accent;
        padding: 1 2;
    }

    PathScreen #path-title {
        text-style: bold;
        margin-bottom: 1;
    }

    PathScreen .button-row {
        margin-top: 1;
        align: center middle;
        height: 3;
    }

    PathScreen Button {
        margin: 0 1;
    }
    """

    def __init__(
        self,
        title: str,
        action_label: str,
        default_path: str = "",
        placeholder: str = "",
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        self._title = title
        self._action_label = action_label
        self._default_path = default_path
        self._placeholder = placeholder

    def action_cancel(self) -> None:
        self.dismiss(None)

    def compose(self) -> ComposeResult:
        with Vertical(id="path-dialog"):
            yield Static(self._title, id="path-title")
            yield Input(
                value=self._default_path,
                placeholder=self._placeholder,
                id="path-input",
            )
            with Horizontal(classes="button-row"):
                yield Button(self._action_label, variant="primary", id="btn-ok")
                yield Button("Cancel", variant="default", id="btn-cancel")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "btn-ok":
            inp = self.query_one("#path-input", Input)
            self.dismiss(inp.value or None)
        elif event.button.id == "btn-cancel":
            self.dismiss(None)

    def on_input_submitted(self, event: Input.Submitted) -> None:
        self.dismiss(event.value or None)


class RasterkitApp(App):
    """Interactive preview of the dither pipeline."""

    TITLE = "rasterkit"
    CSS = """
    #main-area {
        height: 1fr;
        width: 1fr;
    }

    #preview-container {
        width: 1fr;
        height: 1fr;
    }

    #status-bar {
        height: 1;
        background: $panel;
        padding: 0 1;
        color: $text-muted;
    }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit", priority=True),
        Binding("s", "save", "Save", priority=True),
        Binding("o", "open_file", "Open", priority=True),
        Binding("left", "prev_stage", "Prev Stage", priority=True),
        Binding("right", "next_stage", "Next Stage", priority=True),
        Binding("tab", "toggle_panel", "Toggle Panel"),
    ]

    def __init__(self, input_path: str | None = None, **kwargs) -> None:
        super().__init__(**kwargs)
        self._input_path = input_path
        self._image: Image | None = None
        self._result: DitherResult | None = None
        self._cache = ResultCache(max_size=16)
        self._settings = Settings()
        self._stage = Stage.DITHERED
        self._panel_visible = True

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal(id="main-area"):
            with Vertical(id="preview-container"):
                yield ImagePreview()
            yield ControlPanel(self._settings, id="control-panel")
        yield StageBar(self._stage, id="stage-bar")
        yield Static("Ready", id="status-bar")
        yield Footer()

    def on_mount(self) -> None:
        if self._input_path:
            self._load_file(self._input_path)

    def _load_file(self, path: str) -> None:
        """Load an image and run the pipeline on it."""
        file = Path(path)
        if not file.exists():
            self._unload(f'File not found: "{file}"')
            return
        try:
            self._image = Image.open(file)
        except ImageLoadError as e:
            self._unload(f"Error: {e}")
            return

        self.title = f"rasterkit - {file.name}"
        self._result = None
        self._cache.evict(self._cache_key())
        self._update_status(
            f"Loaded {file.name} ({self._image.width}x{self._image.height}, "
            f"{self._image.channels} channels)"
        )
        self._process()

    def _unload(self, status: str) -> None:
        """Forget the current image and blank the preview."""
        self._image = None
        self._result = None
        self.title = "rasterkit"
        self.query_one(ImagePreview).clear()
        self._update_status(status)

    def _update_status(self, text: str) -> None:
        self.query_one("#status-bar", Static).update(text)

    def _cache_key(self) -> str:
        if self._image is None or self._image.path is None:
            return ""
        return str(self._image.path)

    @work(thread=True, exclusive=True, group="pipeline")
    def _process(self) -> None:
        """Run the dither pipeline in a background thread."""
        if self._image is None:
            return

        worker = get_current_worker()
        image = self._image
        settings = self._settings
        key = self._cache_key()

        cached = self._cache.lookup(key, settings)
        if cached is None:
            self.call_from_thread(self._update_status, "Processing...")
            try:
                cached = run_dither(image, settings)
            except ValueError as e:
                if not worker.is_cancelled:
                    self.call_from_thread(self._update_status, f"Error: {e}")
                return
            self._cache.store(key, settings, cached)

        if not worker.is_cancelled:
            self.call_from_thread(self._display_result, cached)

    def _display_result(self, result: DitherResult) -> None:
        """Show the current stage of a result (called on main thread)."""
        self._result = result
        self._show_stage()
        self._update_status(
            f"{self._stage.value} | kernel {self._settings.kernel.value}, "
            f"threshold {self._settings.threshold:.2f}, levels {self._settings.levels}"
        )

    def _show_stage(self) -> None:
        if self._result is None:
            return
        preview = self.query_one(ImagePreview)
        img = self._result.stage(self._stage)
        width, height = fit_to_terminal(
            img.width,
            img.height,
            max_width=(preview.size.width or 80) - 2,
            max_height=(preview.size.height or 24) - 2,
        )
        preview.show(img, width, height)

    def _select_stage(self, stage: Stage) -> None:
        self._stage = stage
        self.query_one(StageBar).set_stage(stage)
        self._show_stage()

    # --- Actions ---

    def action_prev_stage(self) -> None:
        self._select_stage(next_stage(self._stage, -1))

    def action_next_stage(self) -> None:
        self._select_stage(next_stage(self._stage, +1))

    def action_save(self) -> None:
        if self._result is None:
            self._update_status("Nothing to save")
            return
        self.push_screen(
            PathScreen("Save Outputs", "Save", default_path=".", placeholder="output directory"),
            self._on_save_result,
        )

    def _on_save_result(self, path: str | None) -> None:
        if path is None or self._result is None:
            return
        try:
            written = save_dither_outputs(self._result, Path(path))
        except (OSError, ValueError) as e:
            self._update_status(f"Save error: {e}")
            return
        self._update_status(f"Saved {', '.join(p.name for p in written)} to {path}")

    def action_open_file(self) -> None:
        self.push_screen(
            PathScreen("Open File", "Open", placeholder="Path to an image file..."),
            self._on_file_selected,
        )

    def _on_file_selected(self, path: str | None) -> None:
        if path:
            self._load_file(path)

    def action_toggle_panel(self) -> None:
        panel = self.query_one("#control-panel", ControlPanel)
        self._panel_visible = not self._panel_visible
        panel.display = self._panel_visible

    # --- Message handlers ---

    def on_control_panel_settings_changed(
        self, event: ControlPanel.SettingsChanged
    ) -> None:
        self._settings = event.settings
        self._process()

    def on_stage_bar_stage_selected(self, event: StageBar.StageSelected) -> None:
        self._stage = event.stage
        self._show_stage()


def run_app(input_path: str | None = None) -> None:
    """Launch the TUI application."""
    app = RasterkitApp(input_path=input_path)
    app.run()
