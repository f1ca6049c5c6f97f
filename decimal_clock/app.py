"""Pygame UI shell for the decimal clock.

Screens:
- Clock (digital or analog face, real-time readout for comparison)
- Stopwatch (custom-unit elapsed time with laps)
- Timer (countdown entered in custom hours/minutes/seconds)

Time conversion, scheduling and controller state live in decimal_clock/*
(core modules); this module only renders what they return.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

import pygame

from .clock import RealClock, WallClock
from .conversion import (
    HOURS_PER_DAY,
    MINUTES_PER_HOUR,
    ZERO_DURATION,
    CustomDuration,
    CustomInstant,
    hand_angles,
    instant_from_real_time,
)
from .countdown import CountdownTimer, sanitize_field
from .formatting import format_duration, format_instant, format_real_time
from .scheduler import DriftFreeScheduler, FrameTimerHost, Ticker
from .settings import SettingsStore
from .stopwatch import Stopwatch

logger = logging.getLogger(__name__)

WINDOW_SIZE = (960, 540)
TARGET_FPS = 60

BG = (10, 12, 24)
PANEL_BG = (18, 22, 44)
BORDER = (90, 104, 150)
TEXT_MAIN = (236, 240, 252)
TEXT_MUTED = (150, 160, 190)
ACCENT = (120, 200, 255)
ALERT = (255, 120, 110)


class Screen(Protocol):
    def on_enter(self) -> None: ...
    def on_exit(self) -> None: ...
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
        screen.on_enter()

    def pop(self) -> None:
        # Never pop the last/root screen; root handles its own quit/back behavior.
        if len(self._screens) > 1:
            self._screens.pop().on_exit()

    def quit(self) -> None:
        self._running = False

    def close(self) -> None:
        while self._screens:
            self._screens.pop().on_exit()

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


def _draw_frame(surface: pygame.Surface, title: str, title_font: pygame.font.Font) -> pygame.Rect:
    """Fill the background and draw the shared panel; returns the content rect."""

    w, h = surface.get_size()
    surface.fill(BG)
    margin = max(10, min(24, w // 36))
    frame = pygame.Rect(margin, margin, max(260, w - margin * 2), max(220, h - margin * 2))
    pygame.draw.rect(surface, PANEL_BG, frame)
    pygame.draw.rect(surface, BORDER, frame, 2)

    header_h = max(34, min(52, h // 9))
    header = pygame.Rect(frame.x + 2, frame.y + 2, frame.w - 4, header_h)
    pygame.draw.line(surface, BORDER, (header.x, header.bottom), (header.right, header.bottom), 1)
    text = title_font.render(title, True, TEXT_MAIN)
    surface.blit(text, text.get_rect(center=header.center))

    return pygame.Rect(frame.x + 12, header.bottom + 12, frame.w - 24, frame.bottom - header.bottom - 24)


def _draw_footer(surface: pygame.Surface, content: pygame.Rect, text: str, font: pygame.font.Font) -> None:
    foot = font.render(text, True, TEXT_MUTED)
    surface.blit(foot, foot.get_rect(midbottom=(content.centerx, content.bottom)))


def _dial_point(cx: int, cy: int, length: float, angle_deg: float) -> tuple[int, int]:
    # 0 degrees points straight up; angles grow clockwise.
    rad = math.radians(angle_deg - 90.0)
    return int(round(cx + math.cos(rad) * length)), int(round(cy + math.sin(rad) * length))


class MenuScreen:
    def __init__(self, app: App, title: str, items: list[MenuItem], *, is_root: bool = False) -> None:
        self._app = app
        self._title = title
        self._items = items
        self._selected = 0
        self._is_root = is_root
        self._title_font = pygame.font.Font(None, 42)
        self._item_font = pygame.font.Font(None, 34)
        self._hint_font = pygame.font.Font(None, 22)

    def on_enter(self) -> None:
        return

    def on_exit(self) -> None:
        return

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type != pygame.KEYDOWN:
            return
        key = event.key
        if key in (pygame.K_UP, pygame.K_w):
            self._move(-1)
        elif key in (pygame.K_DOWN, pygame.K_s):
            self._move(1)
        elif key in (pygame.K_RETURN, pygame.K_KP_ENTER, pygame.K_SPACE):
            if self._items:
                self._items[self._selected].action()
        elif key in (pygame.K_ESCAPE, pygame.K_BACKSPACE):
            if self._is_root:
                self._app.quit()
            else:
                self._app.pop()

    def _move(self, delta: int) -> None:
        if not self._items:
            return
        self._selected = (self._selected + delta) % len(self._items)

    def render(self, surface: pygame.Surface) -> None:
        content = _draw_frame(surface, self._title, self._title_font)

        row_h = 46
        gap = 10
        total_h = row_h * len(self._items) + gap * max(0, len(self._items) - 1)
        y = content.y + max(8, (content.h - total_h) // 2 - 10)
        row_w = min(420, content.w - 40)
        for idx, item in enumerate(self._items):
            row = pygame.Rect(content.centerx - row_w // 2, y, row_w, row_h)
            selected = idx == self._selected
            pygame.draw.rect(surface, TEXT_MAIN if selected else PANEL_BG, row)
            pygame.draw.rect(surface, BORDER, row, 1)
            text = self._item_font.render(item.label, True, BG if selected else TEXT_MAIN)
            surface.blit(text, text.get_rect(center=row.center))
            y += row_h + gap

        _draw_footer(surface, content, "Up/Down: Move  |  Enter: Select  |  Esc: Back", self._hint_font)


class ClockScreen:
    """Decimal time of day, redrawn once per custom second by the scheduler."""

    def __init__(
        self,
        app: App,
        *,
        scheduler: DriftFreeScheduler,
        wall_clock: WallClock,
        settings: SettingsStore,
    ) -> None:
        self._app = app
        self._scheduler = scheduler
        self._wall_clock = wall_clock
        self._settings = settings
        self._analog = settings.settings.analog
        self._instant: CustomInstant = instant_from_real_time(wall_clock.wall_now())
        self._real_text = format_real_time(wall_clock.wall_now())
        self._title_font = pygame.font.Font(None, 42)
        self._digits_font = pygame.font.Font(None, 160)
        self._label_font = pygame.font.Font(None, 30)
        self._hint_font = pygame.font.Font(None, 22)
        self._face_cache: dict[int, pygame.Surface] = {}

    @property
    def instant(self) -> CustomInstant:
        return self._instant

    @property
    def analog(self) -> bool:
        return self._analog

    def on_enter(self) -> None:
        self._update(instant_from_real_time(self._wall_clock.wall_now()))
        self._scheduler.start(self._update)

    def on_exit(self) -> None:
        self._scheduler.stop()

    def _update(self, instant: CustomInstant) -> None:
        self._instant = instant
        self._real_text = format_real_time(self._wall_clock.wall_now())

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type != pygame.KEYDOWN:
            return
        if event.key in (pygame.K_ESCAPE, pygame.K_BACKSPACE):
            self._app.pop()
        elif event.key in (pygame.K_TAB, pygame.K_a):
            self._analog = not self._analog
            self._settings.set_analog(self._analog)

    def render(self, surface: pygame.Surface) -> None:
        content = _draw_frame(surface, "Decimal Clock", self._title_font)
        if self._analog:
            self._draw_analog(surface, content)
        else:
            digits = self._digits_font.render(format_instant(self._instant), True, TEXT_MAIN)
            surface.blit(digits, digits.get_rect(center=(content.centerx, content.centery - 30)))

        real = self._label_font.render(f"Real time  {self._real_text}", True, TEXT_MUTED)
        surface.blit(real, (content.x + 8, content.bottom - 60))

        mode = "Switch to Digital" if self._analog else "Switch to Analog"
        _draw_footer(surface, content, f"Tab/A: {mode}  |  Esc: Back", self._hint_font)

    def _face(self, size: int) -> pygame.Surface:
        cached = self._face_cache.get(size)
        if cached is not None:
            return cached

        face = pygame.Surface((size, size), pygame.SRCALPHA)
        c = size // 2
        radius = c - 2
        pygame.draw.circle(face, (26, 30, 58), (c, c), radius)
        pygame.draw.circle(face, BORDER, (c, c), radius, 2)

        number_font = pygame.font.Font(None, max(18, size // 14))
        for hour in range(HOURS_PER_DAY):
            angle = hour / HOURS_PER_DAY * 360.0
            pygame.draw.line(face, TEXT_MAIN, _dial_point(c, c, radius - 15, angle), _dial_point(c, c, radius, angle), 3)
            label = number_font.render(str(hour), True, TEXT_MAIN)
            face.blit(label, label.get_rect(center=_dial_point(c, c, radius - 35, angle)))

        for minute in range(MINUTES_PER_HOUR):
            if minute % 10 == 0:
                continue
            angle = minute / MINUTES_PER_HOUR * 360.0
            pygame.draw.line(face, TEXT_MUTED, _dial_point(c, c, radius - 5, angle), _dial_point(c, c, radius, angle), 1)

        self._face_cache[size] = face
        return face

    def _draw_analog(self, surface: pygame.Surface, content: pygame.Rect) -> None:
        size = max(120, min(content.w, content.h - 70))
        face_rect = pygame.Rect(0, 0, size, size)
        face_rect.center = (content.centerx, content.y + size // 2)
        surface.blit(self._face(size), face_rect.topleft)

        cx, cy = face_rect.center
        radius = size // 2 - 2
        angles = hand_angles(self._instant)
        pygame.draw.line(surface, TEXT_MAIN, (cx, cy), _dial_point(cx, cy, radius * 0.5, angles.hour), 6)
        pygame.draw.line(surface, TEXT_MAIN, (cx, cy), _dial_point(cx, cy, radius * 0.75, angles.minute), 4)
        pygame.draw.line(surface, ALERT, (cx, cy), _dial_point(cx, cy, radius * 0.9, angles.second), 2)
        pygame.draw.circle(surface, TEXT_MAIN, (cx, cy), 6)


class StopwatchScreen:
    def __init__(self, app: App, *, stopwatch: Stopwatch, ticker: Ticker) -> None:
        self._app = app
        self._stopwatch = stopwatch
        self._ticker = ticker
        self._display: CustomDuration = stopwatch.elapsed()
        self._title_font = pygame.font.Font(None, 42)
        self._digits_font = pygame.font.Font(None, 130)
        self._lap_font = pygame.font.Font(None, 28)
        self._hint_font = pygame.font.Font(None, 22)

    @property
    def display(self) -> CustomDuration:
        return self._display

    def on_enter(self) -> None:
        self._refresh()
        if self._stopwatch.is_running:
            self._ticker.start(self._refresh)

    def on_exit(self) -> None:
        self._ticker.stop()

    def _refresh(self) -> None:
        self._display = self._stopwatch.elapsed()

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type != pygame.KEYDOWN:
            return
        key = event.key
        if key in (pygame.K_ESCAPE, pygame.K_BACKSPACE):
            self._app.pop()
            return
        if key == pygame.K_SPACE:
            self._stopwatch.toggle()
            if self._stopwatch.is_running:
                self._ticker.start(self._refresh)
            else:
                self._ticker.stop()
        elif key == pygame.K_l:
            self._stopwatch.lap()
        elif key == pygame.K_r:
            self._stopwatch.reset()
            self._ticker.stop()
        self._refresh()

    def render(self, surface: pygame.Surface) -> None:
        content = _draw_frame(surface, "Stopwatch", self._title_font)
        digits = self._digits_font.render(format_duration(self._display), True, TEXT_MAIN)
        surface.blit(digits, digits.get_rect(center=(content.centerx, content.y + content.h // 3)))

        laps = self._stopwatch.laps
        y = content.y + content.h // 3 + 80
        for number, split in list(enumerate(laps, start=1))[-5:]:
            row = self._lap_font.render(f"Lap {number:>2}   {format_duration(split)}", True, TEXT_MUTED)
            surface.blit(row, row.get_rect(midtop=(content.centerx, y)))
            y += row.get_height() + 4

        action = "Pause" if self._stopwatch.is_running else "Start"
        _draw_footer(surface, content, f"Space: {action}  |  L: Lap  |  R: Reset  |  Esc: Back", self._hint_font)


_FIELD_LABELS = ("Hours", "Minutes", "Seconds")
_FIELD_WIDTHS = (3, 2, 2)


class TimerScreen:
    def __init__(self, app: App, *, timer: CountdownTimer, ticker: Ticker) -> None:
        self._app = app
        self._timer = timer
        self._ticker = ticker
        self._fields = ["", "", ""]
        self._active = 0
        self._message = ""
        self._display: CustomDuration = ZERO_DURATION
        self._timer.set_on_finished(self._on_finished)
        self._title_font = pygame.font.Font(None, 42)
        self._digits_font = pygame.font.Font(None, 130)
        self._field_font = pygame.font.Font(None, 40)
        self._hint_font = pygame.font.Font(None, 22)

    @property
    def display(self) -> CustomDuration:
        return self._display

    @property
    def message(self) -> str:
        return self._message

    def on_enter(self) -> None:
        self._refresh()
        if self._timer.is_running:
            self._ticker.start(self._refresh)

    def on_exit(self) -> None:
        # A running countdown keeps ticking so it finishes on time off-screen.
        if not self._timer.is_running:
            self._ticker.stop()

    def _refresh(self) -> None:
        self._display = self._timer.tick()

    def _on_finished(self) -> None:
        self._ticker.stop()
        self._display = ZERO_DURATION
        self._message = "Time is up"

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type != pygame.KEYDOWN:
            return
        key = event.key
        if key == pygame.K_ESCAPE:
            self._app.pop()
            return
        if key in (pygame.K_TAB, pygame.K_RIGHT):
            self._active = (self._active + 1) % len(self._fields)
        elif key == pygame.K_LEFT:
            self._active = (self._active - 1) % len(self._fields)
        elif key == pygame.K_BACKSPACE:
            self._fields[self._active] = self._fields[self._active][:-1]
        elif key in (pygame.K_RETURN, pygame.K_KP_ENTER):
            self._start()
        elif key == pygame.K_SPACE:
            if self._timer.is_running:
                self._timer.pause()
                self._ticker.stop()
            elif self._timer.is_paused:
                self._timer.resume()
                self._ticker.start(self._refresh)
        elif key == pygame.K_r:
            self._timer.reset()
            self._ticker.stop()
            self._message = ""
        else:
            ch = getattr(event, "unicode", "")
            if ch.isdigit() and len(self._fields[self._active]) < _FIELD_WIDTHS[self._active]:
                self._fields[self._active] += ch
        self._refresh()

    def _start(self) -> None:
        h, m, s = (sanitize_field(value) for value in self._fields)
        if self._timer.start(h, m, s):
            self._message = ""
            self._ticker.start(self._refresh)
        else:
            self._message = "Enter a duration greater than zero"

    def render(self, surface: pygame.Surface) -> None:
        content = _draw_frame(surface, "Timer", self._title_font)

        field_w = 150
        total_w = field_w * 3 + 40
        x = content.centerx - total_w // 2
        for idx, (label, value) in enumerate(zip(_FIELD_LABELS, self._fields)):
            box = pygame.Rect(x, content.y + 30, field_w, 56)
            pygame.draw.rect(surface, BG, box)
            pygame.draw.rect(surface, ACCENT if idx == self._active else BORDER, box, 2)
            text = self._field_font.render(value or "0", True, TEXT_MAIN)
            surface.blit(text, text.get_rect(center=box.center))
            cap = self._hint_font.render(label, True, TEXT_MUTED)
            surface.blit(cap, cap.get_rect(midtop=(box.centerx, box.bottom + 4)))
            x += field_w + 20

        digits = self._digits_font.render(format_duration(self._display), True, TEXT_MAIN)
        surface.blit(digits, digits.get_rect(center=(content.centerx, content.centery + 30)))

        if self._message:
            msg = self._field_font.render(self._message, True, ALERT)
            surface.blit(msg, msg.get_rect(center=(content.centerx, content.bottom - 60)))

        _draw_footer(
            surface,
            content,
            "Digits/Tab: Edit  |  Enter: Start  |  Space: Pause/Resume  |  R: Reset  |  Esc: Back",
            self._hint_font,
        )


def run(
    *,
    max_frames: int | None = None,
    event_injector: Callable[[int], None] | None = None,
    settings_store: SettingsStore | None = None,
) -> int:
    pygame.init()

    pygame.display.set_caption("Decimal Clock")
    surface = pygame.display.set_mode(WINDOW_SIZE, pygame.RESIZABLE)

    font = pygame.font.Font(None, 36)
    frame_clock = pygame.time.Clock()

    app = App(surface=surface, font=font)

    store = settings_store if settings_store is not None else SettingsStore(SettingsStore.default_path())
    settings = store.settings
    real_clock = RealClock()
    host = FrameTimerHost(real_clock)

    # Clock, stopwatch and timer each own an independent tick source.
    clock_scheduler = DriftFreeScheduler(
        host,
        real_clock,
        lead_ms=settings.lead_ms,
        min_delay_ms=settings.min_delay_ms,
    )
    stopwatch_ticker = Ticker(host, settings.tick_ms, name="stopwatch ticker")
    timer_ticker = Ticker(host, settings.tick_ms, name="timer ticker")

    clock_screen = ClockScreen(app, scheduler=clock_scheduler, wall_clock=real_clock, settings=store)
    stopwatch_screen = StopwatchScreen(app, stopwatch=Stopwatch(clock=real_clock), ticker=stopwatch_ticker)
    timer_screen = TimerScreen(app, timer=CountdownTimer(clock=real_clock), ticker=timer_ticker)

    main_items = [
        MenuItem("Clock", lambda: app.push(clock_screen)),
        MenuItem("Stopwatch", lambda: app.push(stopwatch_screen)),
        MenuItem("Timer", lambda: app.push(timer_screen)),
        MenuItem("Quit", app.quit),
    ]

    app.push(MenuScreen(app, "Main Menu", main_items, is_root=True))
    logger.info("Decimal clock UI started")

    frame = 0
    try:
        while app.running:
            if event_injector is not None:
                event_injector(frame)

            for event in pygame.event.get():
                app.handle_event(event)

            host.poll()
            app.render()

            pygame.display.flip()

            frame += 1
            if max_frames is not None and frame >= max_frames:
                break

            frame_clock.tick(TARGET_FPS)
    finally:
        app.close()
        pygame.quit()

    return 0
