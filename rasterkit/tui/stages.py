"""Stage selector bar: step through source, greyscale, quantise and dithered."""

from __future__ import annotations

from textual.app import ComposeResult
from textual.message import Message
from textual.widget import Widget
from textual.widgets import Button, Label

from rasterkit.core.pipeline import Stage

STAGES: list[Stage] = list(Stage)


def next_stage(stage: Stage, step: int) -> Stage:
    """Stage ``step`` positions away, wrapping around."""
    idx = STAGES.index(stage)
    return STAGES[(idx + step) % len(STAGES)]


class StageBar(Widget):
    """Buttons for each pipeline stage plus prev/next."""

    DEFAULT_CSS = """
    StageBar {
        height: 3;
        width: 1fr;
        background: $panel;
        border-top: solid $accent;
        layout: horizontal;
        padding: 0 1;
        align: center middle;
    }

    StageBar Button {
        min-width: 5;
        margin: 0 0;
    }

    StageBar #stage-label {
        width: 16;
        text-align: center;
        margin: 0 1;
    }
    """

    class StageSelected(Message):
        """User picked a stage."""
        def __init__(self, stage: Stage) -> None:
            super().__init__()
            self.stage = stage

    def __init__(self, stage: Stage = Stage.DITHERED, **kwargs) -> None:
        super().__init__(**kwargs)
        self._stage = stage

    def compose(self) -> ComposeResult:
        yield Button("<", id="btn-prev", variant="default")
        for stage in STAGES:
            yield Button(
                stage.value,
                id=f"btn-{stage.value}",
                variant="primary" if stage == self._stage else "default",
            )
        yield Button(">", id="btn-next", variant="default")
        yield Label(self._stage.value, id="stage-label")

    @property
    def stage(self) -> Stage:
        return self._stage

    def on_button_pressed(self, event: Button.Pressed) -> None:
        btn_id = event.button.id or ""
        if btn_id == "btn-prev":
            stage = next_stage(self._stage, -1)
        elif btn_id == "btn-next":
            stage = next_stage(self._stage, +1)
        else:
            stage = Stage(btn_id.removeprefix("btn-"))
        self.set_stage(stage)
        self.post_message(self.StageSelected(stage))

    def set_stage(self, stage: Stage) -> None:
        """Highlight ``stage`` without posting a message."""
        self._stage = stage
        for s in STAGES:
            btn = self.query_one(f"#btn-{s.value}", Button)
            btn.variant = "primary" if s == stage else "default"
        self.query_one("#stage-label", Label).update(stage.value)
