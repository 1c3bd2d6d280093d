#!/usr/bin/env python3
"""
Doppler Simulator application entry point and UI/renderer coordination.

What this module does
- Starts two event loops: a Pygame rendering thread (viewport) and the Dear PyGui UI
  (running on the main thread).
- Maintains a shared SimulationController that owns the SimulationEngine; all access
  is guarded by a re-entrant lock because the engine itself is single-threaded.
- Draws wavefronts, source/observer markers, trails, velocity vectors, the
  microphone probe, and the emitted/observed waveform graphs.

Threading model
- PygameRenderer runs in a background thread and performs: input handling (for the
  viewport), stepping the engine, and drawing. It locks the controller around short
  critical sections to read/update shared state.
- The UI class runs in the main thread via Dear PyGui. It refreshes readouts on a
  periodic frame callback and invokes controller methods as needed.

Units and conventions
- SI units throughout: meters [m], seconds [s], Hertz [Hz]. Camera stores meters-per-pixel.
- Colors are RGB tuples in 0..255.

Running
1) Install the project: `pip install -e .`
2) Run this module: `python doppler_sim.py`

Keyboard (viewport)
- s / o: select source / observer; arrows or W/A/D: velocity impulse for the selection
- Space: play/pause; r: reset; 0-6: scenarios; m: microphone; t: trails
- + / -: emitted frequency; , / .: sound speed; mouse wheel: zoom
"""

import math
import threading
import time
from typing import List, Optional, Tuple

# GUI and Rendering libs
import pygame
from pygame import gfxdraw
import dearpygui.dearpygui as dpg
from loguru import logger as log

from doppler.camera import Camera2D
from doppler.constants import (
    BACKGROUND_COLOR,
    DETECTION_COLOR,
    DRAG_GAIN,
    DRAG_MAX_SPEED,
    FREQUENCY_RANGE,
    GRAPH_BACKGROUND,
    GRID_COLOR,
    GRID_FINE_COLOR,
    KEY_VELOCITY,
    LINE_OF_SIGHT_COLOR,
    MICROPHONE_COLOR,
    OBSERVER_COLOR,
    SAFE_COORD_LIMIT,
    SELECTION_COLOR,
    SOUND_SPEED_RANGE,
    SOURCE_COLOR,
    TEXT_COLOR,
    VELOCITY_VECTOR_COLOR,
    VIEW_HEIGHT,
    VIEW_WIDTH,
    WAVE_COLOR,
)
from doppler.data_models import WaveformSample
from doppler.engine import SimulationEngine
from doppler.scenarios import Scenario, list_scenario_files, load_scenario_file
from doppler.settings import TimeSpeed
from doppler.utils import try_vector
from doppler.vector_utils import Vector2, vec_dist, vec_len, vec_scale, vec_sub

PICK_RADIUS_PX = 18
DETECTION_FLASH_SECONDS = 0.1

TIME_SPEED_LABELS = {
    "Normal": TimeSpeed.NORMAL,
    "Slow": TimeSpeed.SLOW,
    "Reverse": TimeSpeed.REVERSE,
    "Reverse (slow)": TimeSpeed.REVERSE_SLOW,
}

SCENARIO_KEYS = {
    pygame.K_0: Scenario.FREE_PLAY,
    pygame.K_1: Scenario.SOURCE_APPROACHING,
    pygame.K_2: Scenario.SOURCE_RECEDING,
    pygame.K_3: Scenario.OBSERVER_APPROACHING,
    pygame.K_4: Scenario.OBSERVER_RECEDING,
    pygame.K_5: Scenario.SAME_DIRECTION,
    pygame.K_6: Scenario.PERPENDICULAR,
}

# ============================================================
# Simulation Controller (Shared State)
# ============================================================


class SimulationController:
    """
    Shared state between UI thread (DearPyGui) and rendering thread (Pygame).
    Every engine call is guarded by the lock.
    """
    def __init__(self):
        self.lock = threading.RLock()
        self.engine = SimulationEngine()
        self.running = True  # app running
        self.selected = "source"  # "source" | "observer"
        self.show_trails = True
        self.show_velocity_vectors = True
        self.show_line_of_sight = True
        self.last_status_msg: Optional[str] = None

    def _body(self, name: str):
        return self.engine.source if name == "source" else self.engine.observer

    def step(self, dt_real_seconds: float, force: bool = False):
        with self.lock:
            self.engine.step(dt_real_seconds, force=force)

    def toggle_play(self) -> bool:
        with self.lock:
            return self.engine.toggle_playing()

    def reset(self):
        with self.lock:
            self.engine.reset()
            self.last_status_msg = "Simulation reset."

    def apply_scenario(self, scenario):
        with self.lock:
            preset = self.engine.apply_scenario(scenario)
            self.last_status_msg = f"Loaded scenario: {preset.name}"

    def select(self, name: str):
        with self.lock:
            self.selected = name

    def pick_at(self, world_pos: Vector2, pick_radius_m: float) -> Optional[str]:
        """Return which handle ("source", "observer", "microphone") is under world_pos."""
        with self.lock:
            candidates = [
                ("source", self.engine.source.position),
                ("observer", self.engine.observer.position),
            ]
            if self.engine.microphone_enabled:
                candidates.append(("microphone", self.engine.microphone_position))
            best, best_d = None, float("inf")
            for name, pos in candidates:
                d = vec_dist(pos, world_pos)
                if d < pick_radius_m and d < best_d:
                    best, best_d = name, d
            if best in ("source", "observer"):
                self.selected = best
            return best

    def drag_toward(self, name: str, target: Vector2):
        """Steer a body toward the pointer; the microphone is placed directly."""
        with self.lock:
            if name == "microphone":
                self.engine.set_microphone_position(target)
                return
            body = self._body(name)
            velocity = vec_scale(vec_sub(target, body.position), DRAG_GAIN)
            speed = vec_len(velocity)
            if speed > DRAG_MAX_SPEED:
                velocity = vec_scale(velocity, DRAG_MAX_SPEED / speed)
            if name == "source":
                self.engine.set_source_velocity(velocity)
            else:
                self.engine.set_observer_velocity(velocity)

    def release(self, name: str):
        with self.lock:
            if name == "source":
                self.engine.release_source()
            elif name == "observer":
                self.engine.release_observer()

    def impulse(self, direction: Tuple[float, float]):
        """Keyboard velocity impulse for the selected body (only while playing)."""
        with self.lock:
            if not self.engine.playing:
                return
            velocity = vec_scale(direction, KEY_VELOCITY)
            if self.selected == "source":
                self.engine.set_source_velocity(velocity)
            else:
                self.engine.set_observer_velocity(velocity)

    def set_selected_velocity(self, velocity: Vector2):
        with self.lock:
            if self.selected == "source":
                self.engine.set_source_velocity(velocity)
            else:
                self.engine.set_observer_velocity(velocity)

    def nudge_frequency(self, delta: float):
        with self.lock:
            value = self.engine.set_emitted_frequency(
                min(max(self.engine.emitted_frequency + delta, FREQUENCY_RANGE[0]), FREQUENCY_RANGE[1])
            )
            self.last_status_msg = f"Emitted frequency: {value:.1f} Hz"

    def nudge_sound_speed(self, delta: float):
        with self.lock:
            value = self.engine.set_sound_speed(
                min(max(self.engine.sound_speed + delta, SOUND_SPEED_RANGE[0]), SOUND_SPEED_RANGE[1])
            )
            self.last_status_msg = f"Sound speed: {value:.0f} m/s"

    def toggle_microphone(self) -> bool:
        with self.lock:
            enabled = not self.engine.microphone_enabled
            self.engine.set_microphone_enabled(enabled)
            return enabled


# ============================================================
# Pygame Renderer Thread
# ============================================================


class PygameRenderer(threading.Thread):
    """
    Pygame loop: steps the engine and draws wavefronts, bodies, trails, vectors,
    the microphone, and the waveform graphs. Handles dragging and zoom.
    """
    def __init__(self, sim: SimulationController):
        super().__init__(daemon=True)
        self.sim = sim
        self.camera = Camera2D()
        self.surface = None
        self.clock = None
        self.dragging: Optional[str] = None
        self.dragging_background = False
        self.drag_start_screen = (0, 0)
        self.flash_until = 0.0
        self._seen_detections = 0
        self.running = True

    def auto_frame_camera(self):
        """Fit source, observer, and microphone into view."""
        with self.sim.lock:
            engine = self.sim.engine
            points = [engine.source.position, engine.observer.position]
            if engine.microphone_enabled:
                points.append(engine.microphone_position)
        self.camera.frame(points, margin=2.0)

    def run(self):
        pygame.init()
        pygame.display.set_caption("Doppler Simulator - Viewport")
        self.surface = pygame.display.set_mode((VIEW_WIDTH, VIEW_HEIGHT), pygame.RESIZABLE)
        self.camera.set_viewport_size(VIEW_WIDTH, VIEW_HEIGHT)
        self.clock = pygame.time.Clock()
        self.auto_frame_camera()
        log.info("Viewport started")

        last_time = time.perf_counter()
        while self.running and self.sim.running:
            now = time.perf_counter()
            real_dt = now - last_time
            last_time = now

            self.handle_events()
            self.sim.step(real_dt)
            self.draw(now)

            # Limit FPS
            self.clock.tick(60)

        pygame.quit()
        log.info("Viewport stopped")

    def handle_events(self):
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.sim.running = False
                self.running = False

            elif event.type == pygame.VIDEORESIZE:
                self.surface = pygame.display.set_mode((event.w, event.h), pygame.RESIZABLE)
                self.camera.set_viewport_size(event.w, event.h)

            elif event.type == pygame.MOUSEWHEEL:
                factor = 1.1 if event.y > 0 else 1.0 / 1.1
                self.camera.zoom(factor, pygame.mouse.get_pos())

            elif event.type == pygame.MOUSEBUTTONDOWN:
                if event.button == 1:
                    mouse = pygame.mouse.get_pos()
                    world = self.camera.screen_to_world(mouse)
                    self.dragging = self.sim.pick_at(world, self.camera.mpp * PICK_RADIUS_PX)
                    if self.dragging is None:
                        self.dragging_background = True
                        self.drag_start_screen = mouse
                elif event.button in (2, 3):
                    self.dragging_background = True
                    self.drag_start_screen = pygame.mouse.get_pos()

            elif event.type == pygame.MOUSEBUTTONUP:
                if event.button == 1 and self.dragging is not None:
                    self.sim.release(self.dragging)
                    self.dragging = None
                if event.button in (1, 2, 3):
                    self.dragging_background = False

            elif event.type == pygame.MOUSEMOTION:
                mouse = pygame.mouse.get_pos()
                if self.dragging is not None:
                    self.sim.drag_toward(self.dragging, self.camera.screen_to_world(mouse))
                elif self.dragging_background:
                    dx = mouse[0] - self.drag_start_screen[0]
                    dy = mouse[1] - self.drag_start_screen[1]
                    self.camera.pan_pixels(dx, dy)
                    self.drag_start_screen = mouse

            elif event.type == pygame.KEYDOWN:
                self.handle_key(event.key)

        # Keep steering while the pointer is held still
        if self.dragging in ("source", "observer"):
            self.sim.drag_toward(self.dragging, self.camera.screen_to_world(pygame.mouse.get_pos()))

    def handle_key(self, key):
        directions = {
            pygame.K_LEFT: (-1.0, 0.0), pygame.K_a: (-1.0, 0.0),
            pygame.K_RIGHT: (1.0, 0.0), pygame.K_d: (1.0, 0.0),
            pygame.K_UP: (0.0, 1.0), pygame.K_w: (0.0, 1.0),
            pygame.K_DOWN: (0.0, -1.0),
        }
        if key == pygame.K_s:
            self.sim.select("source")
        elif key == pygame.K_o:
            self.sim.select("observer")
        elif key in directions:
            self.sim.impulse(directions[key])
        elif key == pygame.K_SPACE:
            self.sim.toggle_play()
        elif key == pygame.K_r:
            self.sim.reset()
            self.auto_frame_camera()
        elif key in SCENARIO_KEYS:
            self.sim.apply_scenario(SCENARIO_KEYS[key])
        elif key == pygame.K_m:
            self.sim.toggle_microphone()
        elif key == pygame.K_t:
            with self.sim.lock:
                self.sim.show_trails = not self.sim.show_trails
        elif key in (pygame.K_PLUS, pygame.K_EQUALS, pygame.K_KP_PLUS):
            self.sim.nudge_frequency(0.1)
        elif key in (pygame.K_MINUS, pygame.K_KP_MINUS):
            self.sim.nudge_frequency(-0.1)
        elif key == pygame.K_PERIOD:
            self.sim.nudge_sound_speed(1.0)
        elif key == pygame.K_COMMA:
            self.sim.nudge_sound_speed(-1.0)

    def draw_grid(self, surf):
        w, h = self.camera.viewport_size
        spacing_m = self.camera.mpp * 100
        # Round spacing to 1-2-5 sequence
        pow10 = 10 ** math.floor(math.log10(spacing_m)) if spacing_m > 0 else 1
        mant = spacing_m / pow10
        spacing = (1 if mant < 2 else 2 if mant < 5 else 5) * pow10
        fine = spacing / 5

        left, top = self.camera.screen_to_world((0, 0))
        right, bottom = self.camera.screen_to_world((w, h))
        for step, color in ((fine, GRID_FINE_COLOR), (spacing, GRID_COLOR)):
            x = math.floor(left / step) * step
            while x <= right:
                sx, _ = self.camera.world_to_screen((x, 0))
                pygame.draw.line(surf, color, (sx, 0), (sx, h), 1)
                x += step
            y = math.floor(bottom / step) * step
            while y <= top:
                _, sy = self.camera.world_to_screen((0, y))
                pygame.draw.line(surf, color, (0, sy), (w, sy), 1)
                y += step

    def draw(self, now: float):
        surf = self.surface
        surf.fill(BACKGROUND_COLOR)
        self.draw_grid(surf)

        # Copy engine outputs for consistency during draw
        with self.sim.lock:
            engine = self.sim.engine
            sim_time = engine.time
            waves = [(w.origin, w.radius, w.age(sim_time)) for w in engine.waves]
            max_age = engine.emitter.max_age
            source = (engine.source.position, engine.source.velocity)
            observer = (engine.observer.position, engine.observer.velocity)
            trails = [(engine.source_trail, SOURCE_COLOR), (engine.observer_trail, OBSERVER_COLOR)]
            mic_enabled = engine.microphone_enabled
            mic_pos = engine.microphone_position
            detections = engine.detection_count
            emitted = engine.emitted_waveform
            observed = engine.observed_waveform
            f_emit = engine.emitted_frequency
            f_obs = engine.observed_frequency
            sound_speed = engine.sound_speed
            playing = engine.playing
            time_speed = engine.time_speed
            selected = self.sim.selected
            show_trails = self.sim.show_trails
            show_vel = self.sim.show_velocity_vectors
            show_los = self.sim.show_line_of_sight

        if detections != self._seen_detections:
            self._seen_detections = detections
            self.flash_until = now + DETECTION_FLASH_SECONDS

        # Wavefronts fade with age
        for origin, radius, age in waves:
            r_px = self.camera.length_to_pixels(radius)
            center = _safe_point(self.camera.world_to_screen(origin))
            if center is None or r_px < 1 or r_px > SAFE_COORD_LIMIT:
                continue
            fade = max(0.15, 1.0 - age / max_age)
            color = tuple(int(c * fade) for c in WAVE_COLOR)
            try:
                gfxdraw.aacircle(surf, center[0], center[1], r_px, color)
            except (OverflowError, ValueError):
                pass

        if show_trails:
            for points, color in trails:
                pts = [p for p in (_safe_point(self.camera.world_to_screen(pt.position)) for pt in points) if p]
                if len(pts) > 1:
                    pygame.draw.aalines(surf, color, False, pts)

        if show_los:
            a = _safe_point(self.camera.world_to_screen(source[0]))
            b = _safe_point(self.camera.world_to_screen(observer[0]))
            if a and b:
                pygame.draw.line(surf, LINE_OF_SIGHT_COLOR, a, b, 1)

        for name, (pos, vel), color in (("source", source, SOURCE_COLOR), ("observer", observer, OBSERVER_COLOR)):
            sp = _safe_point(self.camera.world_to_screen(pos))
            if sp is None:
                continue
            gfxdraw.filled_circle(surf, sp[0], sp[1], 10, color)
            gfxdraw.aacircle(surf, sp[0], sp[1], 10, (0, 0, 0))
            if name == selected:
                gfxdraw.aacircle(surf, sp[0], sp[1], 14, SELECTION_COLOR)
            if show_vel and vec_len(vel) > 0:
                # 1 s of motion, drawn at screen scale
                end = _safe_point(self.camera.world_to_screen((pos[0] + vel[0], pos[1] + vel[1])))
                if end:
                    pygame.draw.line(surf, VELOCITY_VECTOR_COLOR, sp, end, 2)
                    draw_arrow_head(surf, end, sp, VELOCITY_VECTOR_COLOR)

        if mic_enabled:
            mp = _safe_point(self.camera.world_to_screen(mic_pos))
            if mp:
                gfxdraw.filled_circle(surf, mp[0], mp[1], 7, MICROPHONE_COLOR)
                pygame.draw.rect(surf, MICROPHONE_COLOR, (mp[0] - 2, mp[1] + 6, 4, 12))
                if now < self.flash_until:
                    gfxdraw.aacircle(surf, mp[0], mp[1], 20, DETECTION_COLOR)

        w, _ = self.camera.viewport_size
        draw_graph(surf, emitted, (w - 330, 40, 310, 90), SOURCE_COLOR, f"Emitted  {f_emit:.2f} Hz")
        draw_graph(surf, observed, (w - 330, 150, 310, 90), OBSERVER_COLOR, f"Observed  {f_obs:.2f} Hz")

        # HUD text
        draw_text(surf, "Drag: move | s/o: select | Arrows: push | Space: play/pause | 0-6: scenarios | m: mic | r: reset", 10, 10, TEXT_COLOR)
        draw_text(surf, f"t = {sim_time:6.2f} s   c = {sound_speed:.0f} m/s   Speed: {time_speed.factor:+.2f}x  [{'Playing' if playing else 'Paused'}]", 10, 30, TEXT_COLOR)

        pygame.display.flip()


_cached_font = None


def draw_text(surface, text, x, y, color):
    global _cached_font
    if not pygame.font.get_init():
        pygame.font.init()
    if _cached_font is None:
        try:
            _cached_font = pygame.font.SysFont("consolas", 16)
        except (OSError, RuntimeError):
            _cached_font = pygame.font.Font(None, 16)
    img = _cached_font.render(text, True, color)
    surface.blit(img, (x, y))


def draw_graph(surface, samples: List[WaveformSample], rect, color, title: str):
    """Plot a waveform ring inside rect = (x, y, w, h)."""
    gx, gy, gw, gh = rect
    pygame.draw.rect(surface, GRAPH_BACKGROUND, rect)
    pygame.draw.rect(surface, GRID_COLOR, rect, 1)
    mid = gy + gh // 2
    pygame.draw.line(surface, GRID_COLOR, (gx, mid), (gx + gw, mid), 1)
    if len(samples) > 1:
        span = max(abs(s.t) for s in samples) or 1.0
        half = gh * 0.42
        pts = [(gx + int(abs(s.t) / span * gw), int(mid - s.y * half)) for s in samples]
        pygame.draw.aalines(surface, color, False, pts)
    draw_text(surface, title, gx + 5, gy + 3, TEXT_COLOR)


def _safe_point(pt):
    try:
        x, y = int(pt[0]), int(pt[1])
    except (OverflowError, ValueError, TypeError):
        return None
    if -SAFE_COORD_LIMIT <= x <= SAFE_COORD_LIMIT and -SAFE_COORD_LIMIT <= y <= SAFE_COORD_LIMIT:
        return (x, y)
    return None


def draw_arrow_head(surface, tip, tail, color):
    # Small triangle for arrow head
    dx = tip[0] - tail[0]
    dy = tip[1] - tail[1]
    if dx == 0 and dy == 0:
        return
    ang = math.atan2(dy, dx)
    size = 8
    left = _safe_point((tip[0] - size * math.cos(ang - math.pi / 6), tip[1] - size * math.sin(ang - math.pi / 6)))
    right = _safe_point((tip[0] - size * math.cos(ang + math.pi / 6), tip[1] - size * math.sin(ang + math.pi / 6)))
    if left and right:
        pygame.draw.polygon(surface, color, [tip, left, right])

# ============================================================
# Dear PyGui UI
# ============================================================


class UI:
    """
    Dear PyGui interface: scenarios, physics settings, time controls, microphone,
    velocity entry for the selected body, and live readouts.
    """
    def __init__(self, sim: SimulationController, renderer: PygameRenderer):
        self.sim = sim
        self.renderer = renderer

        self.status_msg_id = None
        self.readout_id = None
        self.vel_x_id = None
        self.vel_y_id = None
        self._scenario_files = {}

        self._build_ui()

        # Periodic UI sync without timers (for wider DPG version support)
        self._schedule_sync()

    def _schedule_sync(self):
        """Reschedule the periodic sync callback using frame callbacks (~10Hz)."""
        dpg.set_frame_callback(dpg.get_frame_count() + 6, self._sync_ui_with_sim)

    # -----------------------
    # UI Construction
    # -----------------------

    def _build_ui(self):
        dpg.create_context()
        dpg.create_viewport(title='Doppler Simulator - Controls', width=460, height=640)

        with dpg.window(label="Controls", width=440, height=620, pos=(10, 10), tag="main_window"):
            dpg.add_text("Scenario")
            for fn, display in list_scenario_files():
                self._scenario_files[display] = fn
            items = [s.label for s in Scenario] + list(self._scenario_files.keys())
            with dpg.group(horizontal=True):
                dpg.add_combo(items, default_value=Scenario.FREE_PLAY.label, width=260, tag="scenario_combo",
                              callback=lambda s, a, u: self.load_scenario(a))
                dpg.add_button(label="Apply", callback=lambda: self.load_scenario(dpg.get_value("scenario_combo")))
                dpg.add_button(label="Fit View", callback=self.renderer.auto_frame_camera)

            dpg.add_separator()

            dpg.add_text("Physics")
            dpg.add_slider_float(label="Sound speed (m/s)", min_value=SOUND_SPEED_RANGE[0],
                                 max_value=SOUND_SPEED_RANGE[1], default_value=self.sim.engine.sound_speed,
                                 width=240, tag="sound_speed_slider",
                                 callback=lambda s, a, u: self._set_sound_speed(a))
            dpg.add_slider_float(label="Frequency (Hz)", min_value=FREQUENCY_RANGE[0],
                                 max_value=FREQUENCY_RANGE[1], default_value=self.sim.engine.emitted_frequency,
                                 width=240, tag="frequency_slider",
                                 callback=lambda s, a, u: self._set_frequency(a))

            dpg.add_separator()

            dpg.add_text("Simulation Controls")
            with dpg.group(horizontal=True):
                dpg.add_button(label="Play/Pause", callback=self._toggle_play)
                dpg.add_button(label="Step ▶", callback=self._step_once)
                dpg.add_button(label="Reset", callback=self._reset)
            dpg.add_combo(list(TIME_SPEED_LABELS.keys()), label="Time speed", default_value="Normal",
                          width=160, tag="time_speed_combo",
                          callback=lambda s, a, u: self._set_time_speed(a))
            with dpg.group(horizontal=True):
                dpg.add_checkbox(label="Microphone", default_value=False, tag="mic_checkbox",
                                 callback=lambda s, a, u: self._toggle_microphone(a))
                dpg.add_checkbox(label="Trails", default_value=True,
                                 callback=lambda s, a, u: self._set_flag("show_trails", a))
                dpg.add_checkbox(label="Vectors", default_value=True,
                                 callback=lambda s, a, u: self._set_flag("show_velocity_vectors", a))
                dpg.add_checkbox(label="Line of sight", default_value=True,
                                 callback=lambda s, a, u: self._set_flag("show_line_of_sight", a))

            dpg.add_separator()

            dpg.add_text("Selected Body")
            dpg.add_radio_button(["source", "observer"], default_value="source", horizontal=True,
                                 tag="selected_radio", callback=lambda s, a, u: self.sim.select(a))
            with dpg.group(horizontal=True):
                self.vel_x_id = dpg.add_input_text(label="Vx (m/s)", default_value="0.0", width=100)
                self.vel_y_id = dpg.add_input_text(label="Vy (m/s)", default_value="0.0", width=100)
            dpg.add_button(label="Apply Velocity", callback=self._apply_selected_velocity)

            dpg.add_separator()
            self.readout_id = dpg.add_text("")
            self.status_msg_id = dpg.add_text("")

        dpg.setup_dearpygui()
        dpg.show_viewport()
        dpg.set_primary_window("main_window", True)

    # -----------------------
    # UI Callbacks
    # -----------------------

    def _set_status(self, msg: str, color=(180, 220, 180)):
        dpg.set_value(self.status_msg_id, msg)
        dpg.configure_item(self.status_msg_id, color=color)

    def _set_error(self, msg: str):
        dpg.set_value(self.status_msg_id, msg)
        dpg.configure_item(self.status_msg_id, color=(255, 120, 120))

    def load_scenario(self, name: str):
        name = name.strip()
        if name in self._scenario_files:
            scenario = load_scenario_file(self._scenario_files[name])
            if scenario is None:
                self._set_error(f"Failed to load scenario '{name}'.")
                return
        else:
            scenario = name
        try:
            self.sim.apply_scenario(scenario)
        except ValueError as exc:
            self._set_error(str(exc))
            return
        self._sync_sliders()
        self._set_status(f"Loaded scenario: {name}")
        self.renderer.auto_frame_camera()

    def _sync_sliders(self):
        with self.sim.lock:
            dpg.set_value("sound_speed_slider", self.sim.engine.sound_speed)
            dpg.set_value("frequency_slider", self.sim.engine.emitted_frequency)

    def _set_sound_speed(self, value):
        try:
            with self.sim.lock:
                self.sim.engine.set_sound_speed(value)
        except ValueError as exc:
            self._set_error(str(exc))

    def _set_frequency(self, value):
        try:
            with self.sim.lock:
                self.sim.engine.set_emitted_frequency(value)
        except ValueError as exc:
            self._set_error(str(exc))

    def _set_time_speed(self, label):
        with self.sim.lock:
            self.sim.engine.set_time_speed(TIME_SPEED_LABELS.get(label, TimeSpeed.NORMAL))
        self._set_status(f"Time speed: {label}")

    def _toggle_play(self):
        playing = self.sim.toggle_play()
        self._set_status(f"Simulation {'Playing' if playing else 'Paused'}.")

    def _step_once(self):
        # Forced single frame; honoured while paused
        self.sim.step(1 / 60.0, force=True)
        self._set_status("Stepped one frame.")

    def _reset(self):
        self.sim.reset()
        self._sync_sliders()
        dpg.set_value("scenario_combo", Scenario.FREE_PLAY.label)
        dpg.set_value("time_speed_combo", "Normal")
        dpg.set_value("mic_checkbox", False)
        self.renderer.auto_frame_camera()

    def _toggle_microphone(self, value):
        with self.sim.lock:
            self.sim.engine.set_microphone_enabled(bool(value))
        self._set_status(f"Microphone {'ON' if value else 'OFF'}.")

    def _set_flag(self, attr: str, value):
        with self.sim.lock:
            setattr(self.sim, attr, bool(value))

    def _apply_selected_velocity(self):
        velocity = try_vector(dpg.get_value(self.vel_x_id), dpg.get_value(self.vel_y_id))
        if velocity is None:
            self._set_error("Invalid velocity input for selected body.")
            return
        self.sim.set_selected_velocity(velocity)
        self._set_status("Updated selected body's velocity.")

    def _sync_ui_with_sim(self):
        """Periodic refresh of readouts and any status raised from the viewport."""
        with self.sim.lock:
            engine = self.sim.engine
            src, obs = engine.source, engine.observer
            lines = [
                f"Scenario: {engine.scenario_name}",
                f"t = {engine.time:.2f} s   waves: {len(engine.waves)}   snapshots: {engine.snapshot_count}",
                f"Observed frequency: {engine.observed_frequency:.3f} Hz (emitted {engine.emitted_frequency:.2f} Hz)",
                f"Source   pos ({src.position[0]:7.1f}, {src.position[1]:7.1f})  vel ({src.velocity[0]:6.1f}, {src.velocity[1]:6.1f})",
                f"Observer pos ({obs.position[0]:7.1f}, {obs.position[1]:7.1f})  vel ({obs.velocity[0]:6.1f}, {obs.velocity[1]:6.1f})",
                f"Microphone detections: {engine.detection_count}",
            ]
            selected = self.sim.selected
            msg = self.sim.last_status_msg
            self.sim.last_status_msg = None
        dpg.set_value(self.readout_id, "\n".join(lines))
        dpg.set_value("selected_radio", selected)
        if msg:
            self._set_status(msg)
            self._sync_sliders()
        self._schedule_sync()

# ============================================================
# Application Entry
# ============================================================


def main():
    sim = SimulationController()
    renderer = PygameRenderer(sim)

    # Start Pygame renderer thread
    renderer.start()

    ui = UI(sim, renderer)

    # Space in the controls window toggles play/pause too
    with dpg.handler_registry():
        def key_down(sender, app_data):
            if app_data == dpg.mvKey_Spacebar:
                ui._toggle_play()
        dpg.add_key_press_handler(callback=key_down)
    log.info("Controls started")

    # Run Dear PyGui event loop
    try:
        dpg.start_dearpygui()
    finally:
        # Stop simulation and renderer
        sim.running = False
        renderer.running = False
        renderer.join(timeout=2.0)
        dpg.destroy_context()
        log.info("Doppler Simulator closed")


if __name__ == "__main__":
    main()
