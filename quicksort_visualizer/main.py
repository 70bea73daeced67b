import argparse
import logging
import sys
import threading

import pygame

from quicksort_visualizer.array_model import ArrayModel
from quicksort_visualizer.controller import (
    CANCELLED, FAILED, FINISHED, RenderSink, SortController, StepState,
)
from quicksort_visualizer.logging_config import setup_logging
from quicksort_visualizer.playback import MAX_SPEED, MIN_SPEED, PlaybackClock
from quicksort_visualizer.settings import load_settings

logger = logging.getLogger(__name__)

# ============================================================
# ========================= UI THEME =========================
# ============================================================

UI_PANEL   = (225, 225, 230)
UI_BTN     = (245, 245, 250)
UI_HOVER   = (210, 220, 240)
UI_BORDER  = (150, 150, 165)
UI_ACCENT  = (60, 110, 220)
UI_TEXT    = (20, 20, 30)
UI_SUBTEXT = (90, 90, 110)
UI_DIM     = (170, 170, 185)

BTN_W = 110
BTN_H = 34
PAD   = 14

# ============================================================
# ======================= RENDER SINK ========================
# ============================================================

class PygameSink(RenderSink):
    """
    Keeps the latest StepState for the render loop.

    Hooks run on the sort worker; the main loop reads under the same lock
    and only ever draws the most recent state.
    """

    def __init__(self, values=()):
        self._lock   = threading.Lock()
        self._state  = StepState(values=tuple(values))
        self.message = "Ready"

    def on_step(self, state):
        with self._lock:
            self._state = state

    def on_run_finished(self):
        with self._lock:
            self.message = "Sorted"

    def on_run_aborted(self, reason):
        with self._lock:
            self.message = "Reset" if reason == "cancelled" else f"Aborted ({reason})"

    def latest(self):
        with self._lock:
            return self._state, self.message

# ============================================================
# ======================= COLOR / DRAW =======================
# ============================================================

def bar_color(i, state, colors):
    if i == state.pivot:      return colors["pivot"]
    if i == state.low_cursor: return colors["low"]
    if i == state.scan:       return colors["scan"]
    return colors["bar"]


def bar_rects(values, settings, top_value):
    """(x, y, w, h) for every bar, bottom-aligned above the control bar."""
    bw     = settings.bar_width
    base_y = settings.height - settings.value_floor
    scale  = min(1.0, (base_y - PAD) / top_value) if top_value > 0 else 1.0
    rects  = []
    for i, v in enumerate(values):
        h = int(v * scale)
        rects.append((i * bw, base_y - h, max(1, bw - settings.bar_spacing), h))
    return rects


def draw_bars(screen, state, settings, top_value):
    colors = settings.colors
    screen.fill(colors["background"], (0, 0, settings.width, settings.height))
    for i, r in enumerate(bar_rects(state.values, settings, top_value)):
        pygame.draw.rect(screen, bar_color(i, state, colors), r)

# ============================================================
# ========================= UI WIDGETS =======================
# ============================================================

class Slider:
    """Integer slider with tick marks."""
    KNOB_RADIUS = 7

    def __init__(self, x, y, w, lo, hi, val, label, major=20, minor=5):
        self.x, self.y, self.w = x, y, w
        self.lo, self.hi = lo, hi
        self.value = val
        self.label = label
        self.major, self.minor = major, minor
        self.drag = False
        self.track = pygame.Rect(x, y+20, w, 4)
        self.hit = pygame.Rect(x-5, y+8, w+10, 26)

    def _r(self, v=None):
        v = self.value if v is None else v
        return (v - self.lo) / (self.hi - self.lo)

    def _kx(self):
        return int(self.x + self._r() * self.w)

    def major_ticks(self):
        """(value, x) for each labelled tick; ticks count up from the minimum like a JSlider."""
        return [(t, int(self.x + self._r(t) * self.w)) for t in range(self.lo, self.hi + 1, self.major)]

    def handle(self, ev):
        """Returns True when the value changed."""
        old = self.value
        if ev.type == pygame.MOUSEBUTTONDOWN and ev.button == 1:
            if self.hit.collidepoint(ev.pos):
                self.drag = True; self._set(ev.pos[0])
        elif ev.type == pygame.MOUSEBUTTONUP:
            self.drag = False
        elif ev.type == pygame.MOUSEMOTION and self.drag:
            self._set(ev.pos[0])
        return self.value != old

    def _set(self, mx):
        r = max(0.0, min(1.0, (mx - self.x) / self.w))
        self.value = int(round(self.lo + r * (self.hi - self.lo)))

    def draw(self, s, fonts):
        s.blit(fonts['small'].render(f"{self.label}:  {self.value}", True, UI_SUBTEXT), (self.x, self.y))
        pygame.draw.rect(s, UI_BORDER, self.track, border_radius=2)
        fw = int(self._r() * self.w)
        if fw > 0: pygame.draw.rect(s, UI_ACCENT, (self.x, self.track.y, fw, 4), border_radius=2)
        for t in range(self.lo, self.hi + 1, self.minor):
            tx = int(self.x + self._r(t) * self.w)
            th = 7 if (t - self.lo) % self.major == 0 else 4
            pygame.draw.line(s, UI_DIM, (tx, self.track.bottom + 2), (tx, self.track.bottom + 2 + th))
        for t, tx in self.major_ticks():
            lbl = fonts['mono_sm'].render(str(t), True, UI_SUBTEXT)
            s.blit(lbl, lbl.get_rect(midtop=(tx, self.track.bottom + 11)))
        kx, ky = self._kx(), self.track.centery
        pygame.draw.circle(s, UI_BTN, (kx, ky), self.KNOB_RADIUS)
        pygame.draw.circle(s, UI_ACCENT, (kx, ky), self.KNOB_RADIUS, 2)


class SmBtn:
    def __init__(self, x, y, w, h, lbl):
        self.rect = pygame.Rect(x, y, w, h); self.label = lbl
    def hit(self, ev):
        return (ev.type == pygame.MOUSEBUTTONDOWN and ev.button == 1
                and self.rect.collidepoint(ev.pos))
    def draw(self, s, fonts, hov=False):
        bg = UI_HOVER if hov else UI_BTN
        fc = UI_TEXT
        pygame.draw.rect(s, bg,        self.rect, border_radius=5)
        pygame.draw.rect(s, UI_BORDER, self.rect, 1, border_radius=5)
        t = fonts['small'].render(self.label, True, fc)
        s.blit(t, t.get_rect(center=self.rect.center))


class ControlBar:
    """Start/Pause/Resume, Reset and the speed slider, below the bars."""

    def __init__(self, settings, controller):
        self.settings   = settings
        self.controller = controller
        top = settings.height
        y   = top + (settings.controls_height - BTN_H) // 2
        self.rect      = pygame.Rect(0, top, settings.width, settings.controls_height)
        self.start_btn = SmBtn(PAD, y, BTN_W, BTN_H, "Start")
        self.reset_btn = SmBtn(PAD + BTN_W + 8, y, BTN_W, BTN_H, "Reset")
        sx = PAD + 2 * (BTN_W + 8) + 10
        self.speed = Slider(sx, top + 8, min(260, settings.width - sx - 180),
                            MIN_SPEED, MAX_SPEED, controller.clock.speed, "Speed")
        self.status_x = self.speed.x + self.speed.w + 24

    def start_label(self):
        if not self.controller.sorting: return "Start"
        return "Resume" if self.controller.paused else "Pause"

    def handle(self, ev):
        if self.speed.handle(ev):
            self.controller.set_speed(self.speed.value)
        if self.start_btn.hit(ev):
            self.primary()
        if self.reset_btn.hit(ev):
            self.controller.reset()

    def primary(self):
        if not self.controller.sorting:
            self.controller.start()
        else:
            self.controller.pause_toggle()

    def draw(self, s, fonts, message):
        mp = pygame.mouse.get_pos()
        pygame.draw.rect(s, UI_PANEL, self.rect)
        pygame.draw.line(s, UI_BORDER, self.rect.topleft, self.rect.topright, 1)
        self.start_btn.label = self.start_label()
        for b in (self.start_btn, self.reset_btn):
            b.draw(s, fonts, b.rect.collidepoint(mp))
        self.speed.draw(s, fonts)
        stats = self.controller.stats
        s.blit(fonts['small'].render(message, True, UI_TEXT), (self.status_x, self.rect.y + 12))
        s.blit(fonts['mono_sm'].render(f"cmp {stats.comparisons}  swp {stats.exchanges}", True, UI_SUBTEXT),
               (self.status_x, self.rect.y + 32))

# ============================================================
# ========================= MAIN =============================
# ============================================================

def build_fonts():
    def tf(names, sz):
        return pygame.font.SysFont(",".join(names), sz)
    mono = ["Consolas", "Courier New", "Lucida Console"]
    sans = ["Segoe UI", "Tahoma", "Arial"]
    return dict(small=tf(sans, 15), mono_sm=tf(mono, 13))


def parse_args(argv=None):
    p = argparse.ArgumentParser(prog="quicksort-visualizer",
                                description="Animated Lomuto quicksort with pause, reset and speed control.")
    p.add_argument("--config", help="JSON settings file")
    p.add_argument("--seed", type=int, help="seed for the random bar heights")
    p.add_argument("--speed", type=int, help=f"initial speed ({MIN_SPEED}-{MAX_SPEED})")
    p.add_argument("--debug", action="store_true", help="verbose logging")
    p.add_argument("--log-file", help="also write the log to this file")
    return p.parse_args(argv)


def build_controller(settings, sink=None):
    """Wire model, clock and controller from settings and fill the first array."""
    model = ArrayModel(seed=settings.seed)
    clock = PlaybackClock(speed=settings.speed, minimum_delay=settings.minimum_delay)
    controller = SortController(model, clock, sink,
                                bar_count=settings.bar_count(),
                                value_range=settings.value_range())
    model.initialize(controller.bar_count, controller.value_range)
    return controller


def main(argv=None):
    args = parse_args(argv)
    setup_logging(logging.DEBUG if args.debug else logging.INFO, args.log_file)
    settings = load_settings(args.config, seed=args.seed, speed=args.speed)

    sink = PygameSink()
    controller = build_controller(settings, sink)
    sink.on_step(StepState(values=controller.model.snapshot()))
    top_value = settings.value_range()[1]

    pygame.init()
    screen = pygame.display.set_mode(settings.window_size())
    pygame.display.set_caption("Quick Sort Visualizer")
    fonts = build_fonts(); clock = pygame.time.Clock()
    bar = ControlBar(settings, controller)

    running = True
    while running:
        clock.tick(settings.fps)
        for ev in pygame.event.get():
            if ev.type == pygame.QUIT:
                running = False
            elif ev.type == pygame.KEYDOWN:
                if ev.key == pygame.K_ESCAPE: running = False
                elif ev.key == pygame.K_SPACE: bar.primary()
                elif ev.key == pygame.K_r: controller.reset()
            else:
                bar.handle(ev)

        state, message = sink.latest()
        if controller.sorting:
            message = "Paused" if controller.paused else "Sorting..."
        elif controller.outcome not in (FINISHED, CANCELLED, FAILED):
            message = "Ready"
        draw_bars(screen, state, settings, top_value)
        bar.draw(screen, fonts, message)
        pygame.display.flip()

    logger.info("Window closed, stopping sort worker")
    controller.shutdown()
    pygame.quit()
    return 0


if __name__ == "__main__":
    sys.exit(main())
