"""Settings control panel for the TUI."""

from __future__ import annotations

from dataclasses import replace

from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.message import Message
from textual.widget import Widget
from textual.widgets import (
    Button,
    Input,
    Label,
    Select,
    Static,
)

from rasterkit.core.pipeline import KernelName, Settings

MAX_LEVELS = 16


class ControlPanel(Widget):
    """Settings panel with controls for the dither pipeline."""

    DEFAULT_CSS = """
    ControlPanel {
        width: 32;
        height: 1fr;
        background: $panel;
        padding: 1;
        border-left: solid $accent;
    }

    ControlPanel Label {
        margin-top: 1;
        color: $text-muted;
    }

    ControlPanel Select {
        width: 100%;
        margin-bottom: 0;
    }

    ControlPanel #panel-title {
        text-style: bold;
        color: $text;
        margin-bottom: 1;
    }

    ControlPanel .num-row {
        height: 3;
        margin-top: 1;
    }

    ControlPanel .num-row Label {
        width: 11;
        margin-top: 0;
        padding-top: 1;
    }

    ControlPanel .num-row Button {
        min-width: 3;
        margin: 0;
    }

    ControlPanel .num-row Input {
        width: 1fr;
        margin: 0;
    }
    """

    class SettingsChanged(Message):
        """Posted when any setting changes."""
        def __init__(self, settings: Settings) -> None:
            super().__init__()
            self.settings = settings

    def __init__(self, settings: Settings | None = None, **kwargs) -> None:
        super().__init__(**kwargs)
        self._settings = settings or Settings()

    def compose(self) -> ComposeResult:
        with Vertical():
            yield Static("Settings", id="panel-title")

            yield Label("Kernel")
            yield Select(
                [(k.value, k.value) for k in KernelName],
                value=self._settings.kernel.value,
                allow_blank=False,
                id="kernel-select",
            )

            with Horizontal(classes="num-row"):
                yield Label("Threshold")
                yield Button("-", id="threshold-dec")
                yield Input(
                    value=f"{self._settings.threshold:.2f}",
                    id="threshold-input",
                    type="number",
                )
                yield Button("+", id="threshold-inc")

            with Horizontal(classes="num-row"):
                yield Label("Levels")
                yield Button("-", id="levels-dec")
                yield Input(
                    value=str(self._settings.levels),
                    id="levels-input",
                    type="integer",
                )
                yield Button("+", id="levels-inc")

    @property
    def settings(self) -> Settings:
        return self._settings

    def _update_settings(self, **overrides) -> None:
        """Create new settings with overrides and emit change."""
        self._settings = replace(self._settings, **overrides)
        self.post_message(self.SettingsChanged(self._settings))

    def on_select_changed(self, event: Select.Changed) -> None:
        if event.select.id == "kernel-select" and isinstance(event.value, str):
            kernel = KernelName(event.value)
            if kernel != self._settings.kernel:
                self._update_settings(kernel=kernel)

    def _set_threshold(self, value: float) -> None:
        value = round(max(0.0, min(1.0, value)), 2)
        self.query_one("#threshold-input", Input).value = f"{value:.2f}"
        self._update_settings(threshold=value)

    def _set_levels(self, value: int) -> None:
        value = max(2, min(MAX_LEVELS, value))
        self.query_one("#levels-input", Input).value = str(value)
        self._update_settings(levels=value)

    def on_button_pressed(self, event: Button.Pressed) -> None:
        btn = event.button.id
        if btn == "threshold-dec":
            self._set_threshold(self._settings.threshold - 0.05)
        elif btn == "threshold-inc":
            self._set_threshold(self._settings.threshold + 0.05)
        elif btn == "levels-dec":
            self._set_levels(self._settings.levels - 1)
        elif btn == "levels-inc":
            self._set_levels(self._settings.levels + 1)

    def on_input_submitted(self, event: Input.Submitted) -> None:
        try:
            if event.input.id == "threshold-input":
                self._set_threshold(float(event.value))
            elif event.input.id == "levels-input":
                self._set_levels(int(event.value))
        except ValueError:
            return
