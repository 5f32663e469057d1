"""Pygame UI shell for the Shapeville geometry tutor.

Screens:
- Home (score, progress bar, six activities, End Session)
- Activity screen (one per activity engine)
- Confirmation modal (leaving mid-problem, ending the session)
- Session summary

Deterministic timing/scoring/RNG/state lives in shapeville_tutor/* (core
modules). Screens only call engine commands and draw engine snapshots.
"""

from __future__ import annotations

import logging
import math
import os
import random
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

import pygame

from .activity_engine import ActivityEngine
from .angle_types import AngleTypesEngine, AngleTypesPayload
from .assets import split_key
from .circle_measure import CircleMeasurePayload
from .clock import Clock, RealClock, SecondTicker
from .composite_area import CompositeAreaPayload
from .geometry_core import ActivityId, Outcome, TaskSnapshot, TaskState
from .polygon_area import PolygonAreaPayload
from .results import SessionReport
from .sector_area import SectorAreaPayload
from .session import TutorSession, build_tutor_session
from .shape_recognition import ShapeRecognitionPayload

logger = logging.getLogger(__name__)

WINDOW_SIZE = (960, 600)
TARGET_FPS = 60
SEED_ENV = "SHAPEVILLE_SEED"

BG = (250, 243, 224)
PANEL_BG = (255, 252, 240)
BORDER = (210, 180, 140)
TEXT_MAIN = (70, 130, 180)
TEXT_MUTED = (120, 120, 140)
ACCENT = (255, 182, 193)
GOOD = (46, 139, 87)
BAD = (200, 60, 60)
DISABLED = (185, 185, 190)

ACTIVITY_LABELS: dict[ActivityId, str] = {
    ActivityId.SHAPE_RECOGNITION: "KS1 - Shape Recognition",
    ActivityId.POLYGON_AREA: "KS2 - Area Calculation",
    ActivityId.ANGLE_TYPES: "KS1 - Angle Type Identification",
    ActivityId.CIRCLE_MEASURE: "KS2 - Circle Calculation",
    ActivityId.COMPOSITE_AREA: "Bonus Task - Composite Figures",
    ActivityId.SECTOR_AREA: "Bonus Task - Sector Calculation",
}


class Screen(Protocol):
    def handle_event(self, event: pygame.event.Event) -> None: ...
    def render(self, surface: pygame.Surface) -> None: ...


@dataclass(frozen=True, slots=True)
class MenuItem:
    label: str
    action: Callable[[], None]


class App:
    def __init__(self, surface: pygame.Surface, font: pygame.font.Font) -> None:
        self._surface = surface
        self._font = font
        self._screens: list[Screen] = []
        self._running = True

    @property
    def running(self) -> bool:
        return self._running

    @property
    def font(self) -> pygame.font.Font:
        return self._font

    def push(self, screen: Screen) -> None:
        self._screens.append(screen)

    def pop(self) -> None:
        # Never pop the last/root screen; root handles its own quit/back behavior.
        if len(self._screens) > 1:
            self._screens.pop()

    def quit(self) -> None:
        self._running = False

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.QUIT:
            self.quit()
            return
        if not self._screens:
            return
        self._screens[-1].handle_event(event)

    def render(self) -> None:
        if not self._screens:
            return
        self._screens[-1].render(self._surface)


def _fit_label(font: pygame.font.Font, label: str, max_width: int) -> str:
    if max_width <= 0:
        return ""
    if font.size(label)[0] <= max_width:
        return label
    clipped = label
    while clipped and font.size(f"{clipped}...")[0] > max_width:
        clipped = clipped[:-1]
    return f"{clipped}..." if clipped else "..."


def _wrap(font: pygame.font.Font, text: str, max_width: int) -> list[str]:
    lines: list[str] = []
    for para in text.split("\n"):
        words = para.split()
        line = ""
        for word in words:
            candidate = word if line == "" else f"{line} {word}"
            if font.size(candidate)[0] <= max_width or line == "":
                line = candidate
            else:
                lines.append(line)
                line = word
        lines.append(line)
    return lines


def _draw_frame(surface: pygame.Surface, title_font: pygame.font.Font, title: str) -> pygame.Rect:
    w, h = surface.get_size()
    surface.fill(BG)
    margin = max(10, min(24, w // 36))
    frame = pygame.Rect(margin, margin, w - margin * 2, h - margin * 2)
    pygame.draw.rect(surface, PANEL_BG, frame, border_radius=14)
    pygame.draw.rect(surface, BORDER, frame, 3, border_radius=14)
    text = title_font.render(title, True, TEXT_MAIN)
    surface.blit(text, text.get_rect(midtop=(frame.centerx, frame.y + 14)))
    return frame


class ConfirmScreen:
    """Modal yes/no question. Exactly one of the callbacks runs, then it closes."""

    def __init__(
        self,
        app: App,
        *,
        title: str,
        message: str,
        on_confirm: Callable[[], None],
        on_cancel: Callable[[], None] | None = None,
    ) -> None:
        self._app = app
        self._title = title
        self._message = message
        self._on_confirm = on_confirm
        self._on_cancel = on_cancel
        self._title_font = pygame.font.Font(None, 42)
        self._body_font = pygame.font.Font(None, 30)

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type != pygame.KEYDOWN:
            return
        if event.key in (pygame.K_y, pygame.K_RETURN, pygame.K_KP_ENTER):
            self._app.pop()
            self._on_confirm()
        elif event.key in (pygame.K_n, pygame.K_ESCAPE, pygame.K_BACKSPACE):
            self._app.pop()
            if self._on_cancel is not None:
                self._on_cancel()

    def render(self, surface: pygame.Surface) -> None:
        frame = _draw_frame(surface, self._title_font, self._title)
        y = frame.y + 90
        for line in _wrap(self._body_font, self._message, frame.w - 80):
            text = self._body_font.render(line, True, TEXT_MAIN)
            surface.blit(text, text.get_rect(midtop=(frame.centerx, y)))
            y += text.get_height() + 6
        hint = self._body_font.render("Y / Enter: Yes    N / Esc: No", True, TEXT_MUTED)
        surface.blit(hint, hint.get_rect(midbottom=(frame.centerx, frame.bottom - 20)))


class HomeScreen:
    def __init__(self, app: App, *, session: TutorSession, items: list[MenuItem]) -> None:
        self._app = app
        self._session = session
        self._items = items
        self._selected = 0
        self._title_font = pygame.font.Font(None, 48)
        self._item_font = pygame.font.Font(None, 30)
        self._hint_font = pygame.font.Font(None, 22)

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type != pygame.KEYDOWN:
            return
        if event.key in (pygame.K_UP, pygame.K_w):
            self._selected = (self._selected - 1) % len(self._items)
        elif event.key in (pygame.K_DOWN, pygame.K_s):
            self._selected = (self._selected + 1) % len(self._items)
        elif event.key in (pygame.K_RETURN, pygame.K_KP_ENTER, pygame.K_SPACE):
            self._items[self._selected].action()
        elif event.key == pygame.K_ESCAPE:
            self._items[-1].action()

    def render(self, surface: pygame.Surface) -> None:
        frame = _draw_frame(surface, self._title_font, "Welcome to Shapeville!")
        snap = self._session.snapshot()

        score = self._item_font.render(f"Current Score: {snap.score}", True, TEXT_MAIN)
        surface.blit(score, score.get_rect(midtop=(frame.centerx, frame.y + 62)))

        bar = pygame.Rect(0, 0, min(420, frame.w - 80), 26)
        bar.midtop = (frame.centerx, frame.y + 96)
        pygame.draw.rect(surface, (255, 255, 255), bar, border_radius=8)
        filled = bar.copy()
        filled.w = int(bar.w * snap.progress_percent / 100)
        if filled.w > 0:
            pygame.draw.rect(surface, ACCENT, filled, border_radius=8)
        pygame.draw.rect(surface, BORDER, bar, 2, border_radius=8)
        pct = self._hint_font.render(f"Learning Progress {snap.progress_percent}%", True, TEXT_MAIN)
        surface.blit(pct, pct.get_rect(center=bar.center))

        y = bar.bottom + 24
        row_h = max(30, min(42, (frame.bottom - 50 - y) // max(1, len(self._items)) - 6))
        for idx, item in enumerate(self._items):
            row = pygame.Rect(frame.x + 60, y, frame.w - 120, row_h)
            selected = idx == self._selected
            pygame.draw.rect(surface, ACCENT if selected else (255, 255, 255), row, border_radius=10)
            pygame.draw.rect(surface, BORDER, row, 2, border_radius=10)
            label = item.label
            for activity, text in ACTIVITY_LABELS.items():
                if text == label and activity in snap.completed_activities:
                    label = f"{label}  [done]"
            rendered = self._item_font.render(_fit_label(self._item_font, label, row.w - 20), True, TEXT_MAIN)
            surface.blit(rendered, (row.x + 12, row.y + (row.h - rendered.get_height()) // 2))
            y += row_h + 6

        foot = self._hint_font.render("Up/Down: Move  |  Enter: Select  |  Esc: End Session", True, TEXT_MUTED)
        surface.blit(foot, foot.get_rect(midbottom=(frame.centerx, frame.bottom - 10)))


class ActivityScreen:
    """Renders one activity engine and turns key presses into engine commands."""

    def __init__(self, app: App, *, engine: ActivityEngine, clock: Clock) -> None:
        self._app = app
        self._engine = engine
        self._ticker = SecondTicker(clock=clock, on_tick=engine.tick)
        self._input = ""
        self._mode_index = 0

        self._title_font = pygame.font.Font(None, 44)
        self._body_font = pygame.font.Font(None, 30)
        self._small_font = pygame.font.Font(None, 24)
        self._input_font = pygame.font.Font(None, 44)

        if engine.state is TaskState.IDLE:
            engine.start_activity()
        self._ticker.restart()

    @property
    def engine(self) -> ActivityEngine:
        return self._engine

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type != pygame.KEYDOWN:
            return
        # Ticks are always delivered before the key that arrived with them.
        self._ticker.pump()

        state = self._engine.state
        if event.key == pygame.K_ESCAPE:
            self._leave()
            return
        if state is TaskState.IDLE:
            if event.key in (pygame.K_RETURN, pygame.K_KP_ENTER):
                self._start()
        elif state is TaskState.SELECTING:
            self._handle_selecting(event.key)
        elif state is TaskState.IN_PROGRESS:
            self._handle_typing(event)
        elif state is TaskState.SETTLED:
            self._handle_settled(event.key)

    def _start(self) -> None:
        self._engine.start_activity()
        self._ticker.restart()

    def _handle_selecting(self, key: int) -> None:
        modes = self._engine.config.modes
        if key in (pygame.K_UP, pygame.K_LEFT):
            self._mode_index = (self._mode_index - 1) % len(modes)
        elif key in (pygame.K_DOWN, pygame.K_RIGHT):
            self._mode_index = (self._mode_index + 1) % len(modes)
        elif key in (pygame.K_RETURN, pygame.K_KP_ENTER, pygame.K_SPACE):
            if self._engine.select_mode(modes[self._mode_index]) is Outcome.ACCEPTED:
                self._input = ""
                self._ticker.restart()

    def _handle_typing(self, event: pygame.event.Event) -> None:
        key = event.key
        if key in (pygame.K_RETURN, pygame.K_KP_ENTER):
            self._engine.submit_answer(self._input)
            self._input = ""
            return
        if key == pygame.K_TAB and isinstance(self._engine, AngleTypesEngine):
            if self._engine.choose_angle(self._input) in (Outcome.ACCEPTED, Outcome.ALREADY_COMPLETED):
                self._ticker.restart()
            self._input = ""
            return
        if key == pygame.K_BACKSPACE:
            self._input = self._input[:-1]
            return
        ch = event.unicode
        if ch and ch.isprintable() and len(self._input) < 32:
            self._input += ch

    def _handle_settled(self, key: int) -> None:
        if key == pygame.K_r:
            self._engine.request_reveal()
        elif key in (pygame.K_RETURN, pygame.K_KP_ENTER, pygame.K_n):
            self._engine.next_problem()
            self._ticker.restart()
            if self._engine.state is TaskState.IDLE:
                # Activity finished; back to the home surface.
                self._app.pop()

    def _leave(self) -> None:
        if self._engine.can_exit():
            self._engine.exit_activity()
            self._app.pop()
            return

        def confirm() -> None:
            self._engine.reset_activity()
            self._app.pop()

        self._app.push(
            ConfirmScreen(
                self._app,
                title="Confirm Return",
                message="Are you sure you want to leave? Your current progress will be lost.",
                on_confirm=confirm,
                on_cancel=self._ticker.pump,
            )
        )

    def render(self, surface: pygame.Surface) -> None:
        self._ticker.pump()
        snap = self._engine.snapshot()
        frame = _draw_frame(surface, self._title_font, snap.title)

        status = f"Progress: {snap.completed_count}/{snap.required_count}"
        if snap.state in (TaskState.IN_PROGRESS, TaskState.SETTLED):
            status += f"    Attempts left: {snap.attempts_remaining}"
        if snap.time_remaining_s is not None:
            status += f"    Remaining time: {snap.time_remaining_s} seconds"
        text = self._small_font.render(status, True, TEXT_MUTED)
        surface.blit(text, text.get_rect(midtop=(frame.centerx, frame.y + 52)))

        body = pygame.Rect(frame.x + 30, frame.y + 84, frame.w - 60, frame.h - 150)
        if snap.state is TaskState.SELECTING:
            self._render_selection(surface, body, snap)
        elif snap.state is TaskState.IDLE:
            self._render_lines(surface, body, list(self._engine.config.instructions) + ["", snap.prompt])
        else:
            self._render_problem(surface, body, snap)

        if snap.feedback:
            color = GOOD if snap.last_outcome is Outcome.CORRECT else BAD
            y = frame.bottom - 62
            for line in _wrap(self._small_font, snap.feedback, frame.w - 60)[:2]:
                fb = self._small_font.render(line, True, color)
                surface.blit(fb, fb.get_rect(midtop=(frame.centerx, y)))
                y += fb.get_height() + 2

        hint = self._small_font.render(self._hint(snap), True, TEXT_MUTED)
        surface.blit(hint, hint.get_rect(midbottom=(frame.centerx, frame.bottom - 8)))

    def _hint(self, snap: TaskSnapshot) -> str:
        c = snap.controls
        parts: list[str] = []
        if snap.state is TaskState.IDLE:
            parts.append("Enter: Begin")
        if c.modes:
            parts.append("Arrows: Choose  Enter: Select")
        if c.submit:
            parts.append(snap.input_hint)
        if c.choose_angle:
            parts.append("Tab: Use typed angle")
        if c.reveal:
            parts.append("R: Show answer")
        if c.next:
            parts.append("Enter: Next")
        parts.append("Esc: Back")
        return "  |  ".join(parts)

    def _render_lines(self, surface: pygame.Surface, rect: pygame.Rect, lines: list[str]) -> None:
        y = rect.y
        for line in lines:
            text = self._body_font.render(line, True, TEXT_MAIN)
            surface.blit(text, text.get_rect(midtop=(rect.centerx, y)))
            y += text.get_height() + 6

    def _render_selection(self, surface: pygame.Surface, rect: pygame.Rect, snap: TaskSnapshot) -> None:
        prompt = self._body_font.render(snap.prompt, True, TEXT_MAIN)
        surface.blit(prompt, prompt.get_rect(midtop=(rect.centerx, rect.y)))
        modes = self._engine.config.modes
        cols = 3 if len(modes) > 4 else len(modes)
        cell_w = min(220, (rect.w - 20 * (cols - 1)) // max(1, cols))
        cell_h = 48
        grid_w = cols * cell_w + (cols - 1) * 20
        x0 = rect.centerx - grid_w // 2
        y0 = rect.y + 60
        for idx, mode in enumerate(modes):
            r, c = divmod(idx, cols)
            cell = pygame.Rect(x0 + c * (cell_w + 20), y0 + r * (cell_h + 16), cell_w, cell_h)
            enabled = mode in snap.controls.modes
            selected = idx == self._mode_index
            fill = ACCENT if selected and enabled else (255, 255, 255)
            pygame.draw.rect(surface, fill, cell, border_radius=10)
            pygame.draw.rect(surface, BORDER, cell, 2, border_radius=10)
            label = _mode_label(self._engine.activity, mode)
            text = self._body_font.render(label, True, TEXT_MAIN if enabled else DISABLED)
            surface.blit(text, text.get_rect(center=cell.center))

    def _render_problem(self, surface: pygame.Surface, rect: pygame.Rect, snap: TaskSnapshot) -> None:
        y = rect.y
        for line in _wrap(self._body_font, snap.prompt, rect.w)[:3]:
            text = self._body_font.render(line, True, TEXT_MAIN)
            surface.blit(text, text.get_rect(midtop=(rect.centerx, y)))
            y += text.get_height() + 4

        art = pygame.Rect(0, 0, min(320, rect.w), max(80, rect.bottom - y - 90))
        art.midtop = (rect.centerx, y + 8)
        draw_asset(surface, art, snap.asset_key or "", snap.payload, self._small_font)

        box = pygame.Rect(0, 0, min(360, rect.w), 50)
        box.midtop = (rect.centerx, art.bottom + 14)
        active = snap.controls.answer_entry
        pygame.draw.rect(surface, (255, 255, 255), box, border_radius=8)
        pygame.draw.rect(surface, BORDER if active else DISABLED, box, 2, border_radius=8)
        if active:
            caret = "|" if (pygame.time.get_ticks() // 500) % 2 == 0 else ""
            entry = self._input_font.render(self._input + caret, True, TEXT_MAIN)
            surface.blit(entry, (box.x + 10, box.y + (box.h - entry.get_height()) // 2))


def _mode_label(activity: ActivityId, mode: str) -> str:
    if activity is ActivityId.COMPOSITE_AREA:
        return f"Figure {mode}"
    if activity is ActivityId.SECTOR_AREA:
        return f"Sector {mode}"
    if activity is ActivityId.CIRCLE_MEASURE:
        return "Calculate Area" if mode == "area" else "Calculate Arc Length"
    return mode


def draw_asset(
    surface: pygame.Surface,
    rect: pygame.Rect,
    key: str,
    payload: object | None,
    font: pygame.font.Font,
) -> None:
    """Draw the picture for a display key; unknown keys fall back to a label."""

    family, name = split_key(key)
    cx, cy = rect.center
    size = min(rect.w, rect.h) // 2 - 6
    line = TEXT_MAIN

    if family == "angle" and isinstance(payload, AngleTypesPayload):
        radius = size
        pygame.draw.line(surface, line, (cx, cy), (cx + radius, cy), 3)
        rad = math.radians(payload.degrees)
        end = (cx + int(radius * math.cos(rad)), cy - int(radius * math.sin(rad)))
        pygame.draw.line(surface, BAD, (cx, cy), end, 3)
        arc = pygame.Rect(0, 0, radius // 2, radius // 2)
        arc.center = (cx, cy)
        if payload.degrees > 0:
            pygame.draw.arc(surface, ACCENT, arc, 0.0, rad, 3)
        return

    if family == "circle" and isinstance(payload, CircleMeasurePayload):
        radius = max(8, min(size, payload.display_radius))
        pygame.draw.circle(surface, line, (cx, cy), radius, 3)
        pygame.draw.line(surface, BAD, (cx, cy), (cx + radius, cy), 2)
        label = font.render(f"Radius: {payload.radius_cm}cm", True, TEXT_MUTED)
        surface.blit(label, label.get_rect(midbottom=(cx + radius // 2, cy - 4)))
        return

    if family == "sector" and isinstance(payload, SectorAreaPayload):
        radius = size
        steps = max(2, int(payload.angle_deg // 5))
        points = [(cx, cy)]
        for i in range(steps + 1):
            a = math.radians(payload.angle_deg * i / steps)
            points.append((cx + int(radius * math.cos(a)), cy - int(radius * math.sin(a))))
        pygame.draw.polygon(surface, ACCENT, points)
        pygame.draw.polygon(surface, line, points, 2)
        return

    if family == "polygon" and isinstance(payload, PolygonAreaPayload):
        w, h = int(size * 1.6), size
        left, top = cx - w // 2, cy - h // 2
        if name == "rectangle":
            pts = [(left, top), (left + w, top), (left + w, top + h), (left, top + h)]
        elif name == "parallelogram":
            s = w // 5
            pts = [(left + s, top), (left + w, top), (left + w - s, top + h), (left, top + h)]
        elif name == "triangle":
            pts = [(cx, top), (left + w, top + h), (left, top + h)]
        else:
            s = w // 4
            pts = [(left + s, top), (left + w - s, top), (left + w, top + h), (left, top + h)]
        pygame.draw.polygon(surface, line, pts, 3)
        return

    if family == "composite" and isinstance(payload, CompositeAreaPayload):
        # Parts side by side on a shared baseline, scaled to the widest figure.
        total_w = sum(p.width for p in payload.parts)
        max_h = max(p.height for p in payload.parts)
        scale = min((rect.w - 20) / total_w, (rect.h - 20) / max_h)
        x = rect.centerx - int(total_w * scale) // 2
        base = rect.centery + int(max_h * scale) // 2
        for part in payload.parts:
            w, h = int(part.width * scale), int(part.height * scale)
            if part.shape == "triangle":
                pts = [(x, base), (x + w, base), (x, base - h)]
            else:
                pts = [(x, base), (x + w, base), (x + w, base - h), (x, base - h)]
            pygame.draw.polygon(surface, ACCENT, pts)
            pygame.draw.polygon(surface, line, pts, 2)
            x += w
        return

    if family in ("shape2D", "shape3D") and isinstance(payload, ShapeRecognitionPayload):
        # Recognition pictures come from an image pack the core does not ship.
        pygame.draw.rect(surface, BORDER, rect, 2, border_radius=10)
        label = font.render(
            f"{payload.dimension.value} shape {payload.position} of {payload.lineup_size}",
            True,
            TEXT_MUTED,
        )
        surface.blit(label, label.get_rect(center=rect.center))
        return

    logger.debug("no drawing for asset key %r", key)
    pygame.draw.rect(surface, DISABLED, rect, 1)
    fallback = font.render("Image unavailable", True, TEXT_MUTED)
    surface.blit(fallback, fallback.get_rect(center=rect.center))


class SummaryScreen:
    def __init__(self, app: App, *, report: SessionReport) -> None:
        self._app = app
        self._report = report
        self._title_font = pygame.font.Font(None, 44)
        self._body_font = pygame.font.Font(None, 28)

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.KEYDOWN and event.key in (
            pygame.K_RETURN,
            pygame.K_KP_ENTER,
            pygame.K_ESCAPE,
        ):
            self._app.quit()

    def render(self, surface: pygame.Surface) -> None:
        frame = _draw_frame(surface, self._title_font, "Session Ended")
        y = frame.y + 70
        for line in self._report.lines() + ["", "Press Enter to exit. Goodbye!"]:
            text = self._body_font.render(line, True, TEXT_MAIN)
            surface.blit(text, text.get_rect(midtop=(frame.centerx, y)))
            y += text.get_height() + 6


def _session_seed() -> int:
    raw = os.environ.get(SEED_ENV, "").strip()
    if raw:
        try:
            return int(raw)
        except ValueError:
            logger.warning("ignoring non-integer %s=%r", SEED_ENV, raw)
    return random.SystemRandom().randint(1, 2**31 - 1)


def run(*, max_frames: int | None = None, event_injector: Callable[[int], None] | None = None) -> int:
    pygame.init()

    pygame.display.set_caption("Shapeville - Geometry Learning")
    surface = pygame.display.set_mode(WINDOW_SIZE, pygame.RESIZABLE)

    font = pygame.font.Font(None, 36)
    clock = pygame.time.Clock()

    app = App(surface=surface, font=font)
    real_clock = RealClock()
    seed = _session_seed()
    session = build_tutor_session(seed=seed)
    logger.info("session started with seed %d", seed)

    def open_activity(activity: ActivityId) -> Callable[[], None]:
        def _open() -> None:
            app.push(ActivityScreen(app, engine=session.engine(activity), clock=real_clock))

        return _open

    def end_session() -> None:
        def confirm() -> None:
            app.push(SummaryScreen(app, report=session.end_session()))

        app.push(
            ConfirmScreen(
                app,
                title="Confirm End",
                message="Are you sure you want to end the current session?",
                on_confirm=confirm,
            )
        )

    items = [MenuItem(label, open_activity(activity)) for activity, label in ACTIVITY_LABELS.items()]
    items.append(MenuItem("End Session", end_session))
    app.push(HomeScreen(app, session=session, items=items))

    frame = 0
    try:
        while app.running:
            if event_injector is not None:
                event_injector(frame)

            for event in pygame.event.get():
                app.handle_event(event)

            app.render()

            pygame.display.flip()

            frame += 1
            if max_frames is not None and frame >= max_frames:
                break

            clock.tick(TARGET_FPS)
    finally:
        pygame.quit()

    return 0
