"""
RouletteController: Game Logic layer

Owns the wheel, the ball and the spin lifecycle.
Communicates with the presentation layer (main.py console driver) via two queues:
  - pending_events  : rendering commands (spin_started, show_result, …)
  - physics_events  : ball events (drop_started, collision, stopped)

The driver calls:
  ctrl.step(dt)              : advance wheel + ball each frame
  ctrl.pending_events        : list of dicts to consume and act on
  ctrl.physics_events        : list of ball event dicts from the last step
  ctrl.<state properties>    : read-only references to mode, result, etc.
"""

import csv
import importlib.util
import json
import os
import random

from physics import Ball, ConfigurationError
import physics as _phys
from vector import wrap_degrees
from roulette_wheel import RouletteWheel


# ── Fast ball copy (used by simulate_spin) ─────────────────────────────────────
def _copy_ball(b: Ball, wheel: RouletteWheel) -> Ball:
    nb = Ball(wheel,
              position=b.position,
              decay_coefficient=b.decay_coefficient,
              stopping_threshold=b.stopping_threshold,
              drop_threshold=b.drop_threshold,
              mass=b.mass,
              radius=b.radius,
              path_radius=b.path_radius)
    return nb


# Ball fields that make up a saved configuration
_BALL_TUNABLES = (
    "decay_coefficient", "stopping_threshold", "drop_threshold",
    "mass", "radius", "path_radius",
)
_WHEEL_TUNABLES = ("fret_inner_radius", "fret_outer_radius")


# ── Spin script files ──────────────────────────────────────────────────────────
def _read_spin_script(path: str) -> dict | None:
    """Import a spin script file and return its ``SCRIPT`` dict (None if absent).

    Raises FileNotFoundError for a missing file; anything the module raises
    while importing propagates.
    """
    if not os.path.isfile(path):
        raise FileNotFoundError(path)
    stem = os.path.splitext(os.path.basename(path))[0]
    spec = importlib.util.spec_from_file_location(f"roulette_spin_{stem}", path)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    script = getattr(module, "SCRIPT", None)
    return script if isinstance(script, dict) else None


class RouletteController:
    """Spin lifecycle + physics orchestration."""

    # ── Class-level constants ─────────────────────────────────────────────────
    SIM_DT              = 0.01
    SIM_SUBSTEPS        = 4
    SPIN_VELOCITY_RANGE = (600.0, 900.0)   # deg/s, ball launch
    WHEEL_VELOCITY_RANGE = (20.0, 40.0)    # deg/s, wheel head (opposite sense not modelled)

    _PARAMS_ALLOWED = {
        "FRET_RESTITUTION", "FRET_FRICTION", "ROLLING_RESISTANCE", "GRAVITY",
    }

    # ── Constructor ───────────────────────────────────────────────────────────

    def __init__(self, seed=None):
        self.rng = random.Random(seed)

        self.wheel = RouletteWheel()
        self.ball = Ball(self.wheel)

        # "idle" | "running"
        self.mode = "idle"
        self.result: dict | None = None
        self.history: list[dict] = []

        # Session recording
        self._session_recording = False
        self._session_rows: list = []
        self._session_file = ""

        # Status message (driver prints it)
        self.status_msg = ""

        # Event queues
        self.pending_events: list[dict] = []
        self.physics_events: list[dict] = []

        self._last_script: dict = {}
        self._last_script_path = ""

    # ──────────────────────────────────────────────────────────────────────────
    # Main loop
    # ──────────────────────────────────────────────────────────────────────────

    def step(self, dt_frame: float = 0.0) -> None:
        """Advance wheel + ball by SIM_SUBSTEPS fixed steps. Called every frame."""
        if self.mode != "running":
            return

        self.physics_events.clear()

        for _ in range(self.SIM_SUBSTEPS):
            self.wheel.update(self.SIM_DT)
            self.ball.update(self.SIM_DT)
            self.physics_events.extend(self.ball.events)
            if self._session_recording:
                self._session_record_frame()
            if self.ball.is_stopped:
                break

        if self.ball.is_stopped:
            self.mode = "idle"
            self._on_spin_finished()

    def _on_spin_finished(self) -> None:
        number, color = self.wheel.pocket_at(self.ball.position)
        self.result = {
            "pocket": number,
            "color": color,
            "position": self.ball.position,
            "sim_time": self.ball.elapsed_time,
            "collisions": self.ball.collision_count,
        }
        self.history.append(self.result)
        self.pending_events.append({"type": "show_result", **self.result})
        self.status_msg = f"Result: {number} {color}"

        if self._session_recording:
            saved = self._session_file
            if self._session_write_csv():
                self.pending_events.append({"type": "session_saved", "file": saved})

    # ──────────────────────────────────────────────────────────────────────────
    # Spinning
    # ──────────────────────────────────────────────────────────────────────────

    def spin(self, initial_velocity: float | None = None,
             wheel_velocity: float | None = None,
             position: float | None = None) -> None:
        """Launch the ball (and wheel head). Random velocities come from ``self.rng``."""
        if self.mode == "running":
            return
        if initial_velocity is None:
            initial_velocity = self.rng.uniform(*self.SPIN_VELOCITY_RANGE)
        if wheel_velocity is None:
            wheel_velocity = self.rng.uniform(*self.WHEEL_VELOCITY_RANGE)
        if position is None:
            position = self.rng.uniform(0.0, 360.0)

        self.ball.launch(initial_velocity, position=position)
        self.wheel.angular_velocity = float(wheel_velocity)
        self.result = None
        self.physics_events.clear()
        self.mode = "running"
        self.pending_events.append({
            "type": "spin_started",
            "velocity": float(initial_velocity),
            "wheel_velocity": float(wheel_velocity),
        })
        self.status_msg = f"Spinning at {initial_velocity:.1f}°/s"

    def run_until_stopped(self, max_frames: int = 100_000) -> dict | None:
        """Drive ``step`` until the current spin finishes."""
        for _ in range(max_frames):
            if self.mode != "running":
                break
            self.step()
        return self.result

    # ──────────────────────────────────────────────────────────────────────────
    # Headless API
    # ──────────────────────────────────────────────────────────────────────────

    def simulate_spin(
        self,
        initial_velocity: float,
        *,
        position: float = 0.0,
        wheel_velocity: float = 0.0,
        wheel_rotation: float | None = None,
        sim_dt: float | None = None,
        max_t: float = 120.0,
    ) -> dict:
        """Headless spin simulation.

        Non-destructive: runs on a copy of the wheel and ball, it does NOT
        change ``self.wheel``, ``self.ball`` or any controller state.

        Args:
            initial_velocity: Ball launch speed in deg/s.
            position:         Ball start angle in degrees.
            wheel_velocity:   Wheel head speed in deg/s.
            wheel_rotation:   Wheel start angle; defaults to the live wheel's.
            sim_dt:           Physics timestep (default ``SIM_DT``).
            max_t:            Give up after this many simulated seconds.

        Returns:
            ``dict`` with keys ``pocket``, ``color``, ``position``,
            ``sim_time``, ``collisions``, ``stopped`` and ``events`` (every
            ball event in order).
        """
        dt = self.SIM_DT if sim_dt is None else sim_dt
        wheel = RouletteWheel(
            pockets=self.wheel.pockets,
            rotation_angle=self.wheel.rotation_angle if wheel_rotation is None else wheel_rotation,
            angular_velocity=wheel_velocity,
            fret_inner_radius=self.wheel.fret_inner_radius,
            fret_outer_radius=self.wheel.fret_outer_radius,
        )
        ball = _copy_ball(self.ball, wheel)
        ball.launch(initial_velocity, position=position)

        events: list[dict] = []
        ball.subscribe(events.append)

        t = 0.0
        while t < max_t and not ball.is_stopped:
            wheel.update(dt)
            ball.update(dt)
            t += dt

        number, color = wheel.pocket_at(ball.position)
        return {
            "pocket": number,
            "color": color,
            "position": ball.position,
            "sim_time": ball.elapsed_time,
            "collisions": ball.collision_count,
            "stopped": ball.is_stopped,
            "events": events,
        }

    def get_state(self) -> dict:
        return {
            "mode": self.mode,
            "ball": {
                "position": self.ball.position,
                "angular_velocity": self.ball.angular_velocity,
                "phase": self.ball.phase.name,
                "elapsed": self.ball.elapsed_time,
            },
            "wheel": {
                "rotation": self.wheel.rotation_angle,
                "angular_velocity": self.wheel.angular_velocity,
            },
            "result": self.result,
        }

    def get_state_json(self) -> str:
        return json.dumps(self.get_state(), separators=(',', ':'))

    # ──────────────────────────────────────────────────────────────────────────
    # Parameters / configuration
    # ──────────────────────────────────────────────────────────────────────────

    def set_params(self, params: dict) -> list:
        """Update physics module constants by name. Returns the names updated."""
        updated, unknown, rejected = [], [], []
        for k, v in params.items():
            if k not in self._PARAMS_ALLOWED or not hasattr(_phys, k):
                unknown.append(k)
                continue
            try:
                setattr(_phys, k, float(v))
            except (TypeError, ValueError) as e:
                print(f"[CFG] setattr {k} failed: {e}")
                rejected.append(k)
                continue
            updated.append(k)

        msg = f"params: set {updated}"
        if unknown:
            msg += f"  (unknown: {unknown})"
        if rejected:
            msg += f"  (bad value: {rejected})"
        print(f"[CFG] {msg}")
        self.status_msg = msg
        return updated

    def configure(self, ball: dict | None = None, wheel: dict | None = None) -> None:
        """Rebuild wheel and ball with the given tunables.

        Both are built before either is swapped in, so a rejected call
        leaves the controller on its previous wheel and ball.

        Raises:
            ConfigurationError: unknown key or invalid value.
        """
        if self.mode == "running":
            return
        ball = ball or {}
        wheel = wheel or {}
        unknown = (set(ball) - set(_BALL_TUNABLES)) | (set(wheel) - set(_WHEEL_TUNABLES) - {"pockets"})
        if unknown:
            raise ConfigurationError(f"unknown config keys: {sorted(unknown)}")

        wheel_kwargs = {k: getattr(self.wheel, k) for k in _WHEEL_TUNABLES}
        wheel_kwargs["pockets"] = self.wheel.pockets
        wheel_kwargs.update(wheel)
        ball_kwargs = {k: getattr(self.ball, k) for k in _BALL_TUNABLES}
        try:
            ball_kwargs.update({k: float(v) for k, v in ball.items()})
            new_wheel = RouletteWheel(**wheel_kwargs)
            new_ball = Ball(new_wheel, **ball_kwargs)
        except ConfigurationError:
            raise
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(str(exc)) from exc

        self.wheel, self.ball = new_wheel, new_ball
        self.result = None

    def config_dict(self) -> dict:
        return {
            "ball": {k: getattr(self.ball, k) for k in _BALL_TUNABLES},
            "wheel": {
                **{k: getattr(self.wheel, k) for k in _WHEEL_TUNABLES},
                "pockets": list(self.wheel.pockets),
            },
            "params": {k: getattr(_phys, k) for k in sorted(self._PARAMS_ALLOWED)},
        }

    def save_config(self, path: str) -> bool:
        """Write ball / wheel tunables and physics params to a JSON file."""
        fname = path if path.endswith(".json") else path + ".json"
        try:
            with open(fname, "w", encoding="utf-8") as f:
                json.dump(self.config_dict(), f, indent=2)
        except OSError as e:
            self.status_msg = f"Save error: {e}"
            return False
        print(f"[CFG] save → {fname}")
        self.status_msg = f"Saved → {fname}"
        return True

    def load_config(self, path: str) -> bool:
        """Restore a configuration written by ``save_config``.

        File and validation failures are reported in ``status_msg``; the
        controller keeps its current wheel, ball and params.
        """
        fname = path if path.endswith(".json") else path + ".json"
        try:
            with open(fname, "r", encoding="utf-8") as f:
                loaded = json.load(f)
        except FileNotFoundError:
            self.status_msg = f"load: not found: {fname}"
            return False
        except (OSError, json.JSONDecodeError) as e:
            self.status_msg = f"Load error: {e}"
            return False
        if not isinstance(loaded, dict):
            self.status_msg = f"Load error: {fname} does not hold a JSON object"
            return False
        try:
            self.apply_config(loaded)
        except ConfigurationError as e:
            self.status_msg = f"Config rejected ({os.path.basename(fname)}): {e}"
            return False
        print(f"[CFG] load ← {fname}")
        return True

    def apply_config(self, config: dict) -> None:
        """Apply ``ball`` / ``wheel`` sections, then ``params`` once those are accepted."""
        self.configure(ball=config.get("ball"), wheel=config.get("wheel"))
        if config.get("params"):
            self.set_params(config["params"])

    # ──────────────────────────────────────────────────────────────────────────
    # Scripts
    # ──────────────────────────────────────────────────────────────────────────

    def execute_script(self, script: dict) -> None:
        """Apply a spin script dict (config + optional spin).

        Raises:
            ConfigurationError: a section holds an invalid value.
        """
        if self.mode == "running":
            return
        self._last_script = script
        self.apply_config(script)

        spin = script.get("spin")
        if spin is None:
            self.status_msg = "Script: configured."
            return

        try:
            rotation = float(spin.get("wheel_rotation", 0.0))
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(f"bad wheel_rotation: {exc}") from exc
        self.wheel.rotation_angle = wrap_degrees(rotation)
        self.spin(
            initial_velocity=spin.get("velocity"),
            wheel_velocity=spin.get("wheel_velocity"),
            position=spin.get("position"),
        )

    def _run_script(self, script: dict, name: str) -> bool:
        try:
            self.execute_script(script)
        except (TypeError, ValueError) as exc:
            self.status_msg = f"Spin script {name} rejected: {exc}"
            return False
        return True

    def load_script_file(self, path: str) -> bool:
        """Import a spin script (.py exposing ``SCRIPT``) and run it.

        Returns False with the reason in ``status_msg`` when the file is
        missing, fails to import, has no ``SCRIPT`` dict, or holds values
        the wheel or ball reject.
        """
        abs_path = os.path.abspath(path)
        name = os.path.basename(abs_path)
        try:
            script = _read_spin_script(abs_path)
        except FileNotFoundError:
            self.status_msg = f"Script not found: {abs_path}"
            return False
        except Exception as exc:
            self.status_msg = f"Spin script {name} failed to import: {exc}"
            return False
        if script is None:
            self.status_msg = f"No SCRIPT dict in {name}"
            return False
        self._last_script_path = abs_path
        return self._run_script(script, name)

    def reload_script(self) -> bool:
        """Run the last spin script again, re-reading it when it came from a file."""
        if self._last_script_path:
            return self.load_script_file(self._last_script_path)
        if not self._last_script:
            self.status_msg = "No spin script to reload."
            return False
        return self._run_script(self._last_script, "(in-memory)")

    # ──────────────────────────────────────────────────────────────────────────
    # Session recording
    # ──────────────────────────────────────────────────────────────────────────

    _SESSION_HEADER = [
        "t", "ball_pos", "ball_angvel", "ball_phase",
        "wheel_rot", "wheel_angvel", "collision",
    ]

    def start_recording(self, path: str) -> None:
        """Record every substep of the next spin to a CSV file."""
        self._session_recording = True
        self._session_rows = []
        self._session_file = path
        print(f"[REC] Recording started → {path}")

    def _session_record_frame(self) -> None:
        b, w = self.ball, self.wheel
        hit = next((ev["fret_angle"] for ev in b.events if ev["type"] == "collision"), "")
        self._session_rows.append([
            f"{b.elapsed_time:.4f}",
            f"{b.position:.6f}",
            f"{b.angular_velocity:.6f}",
            b.phase.name,
            f"{w.rotation_angle:.6f}",
            f"{w.angular_velocity:.6f}",
            f"{hit:.2f}" if hit != "" else "",
        ])

    def _session_write_csv(self) -> bool:
        """Flush the recorded substeps to the spin log and stop recording."""
        path, rows = self._session_file, self._session_rows
        self._session_recording = False
        self._session_rows = []
        self._session_file = ""
        try:
            with open(path, "w", newline="", encoding="utf-8") as f:
                csv.writer(f).writerows([self._SESSION_HEADER, *rows])
        except OSError as e:
            print(f"[REC] Spin log not written ({path}): {e}")
            return False
        print(f"[REC] Spin log written: {len(rows)} substeps → {path}")
        return True
