"""Fixed-rate transition controller that animates camera moves and turns.

A request to move or turn is turned into a target pose; a background clock
thread then advances the camera one small step per tick until the target is
reached, at which point the camera is snapped exactly onto the target.
"""

import enum
import logging
import threading
import time
from typing import Optional, Tuple

from . import config
from .game_state import Camera, Vec3


class TransitionKind(enum.IntEnum):
    TRANSLATE_FORWARD = 0
    TRANSLATE_BACKWARD = 1
    ROTATE_RIGHT = 2
    ROTATE_LEFT = 3

    @property
    def is_translation(self) -> bool:
        return self in (TransitionKind.TRANSLATE_FORWARD, TransitionKind.TRANSLATE_BACKWARD)


class TransitionController:
    """
    Drives at most one camera transition at a time from a periodic clock.

    The clock runs on a daemon thread so callers (input handlers, a render
    loop) never wait on an animation. ``tick()`` can also be called directly,
    which is how tests step the controller deterministically.

    Lifecycle:
        start_clock() -> [pause() / resume()]* -> shutdown()
    """

    def __init__(
        self,
        camera: Camera,
        period_s: float = config.CLOCK_PERIOD_S,
        delay_s: float = config.CLOCK_DELAY_S,
        logger: Optional[logging.Logger] = None,
    ):
        self.camera = camera
        self.period_s = float(period_s)
        self.delay_s = float(delay_s)
        self._log = logger if logger is not None else logging.getLogger(__name__)

        # Guards the transition state; shared by tick() and start_transition()
        self._lock = threading.Lock()
        self._kind: Optional[TransitionKind] = None
        self._step = 0.0
        self._current: Vec3 = (0.0, 0.0, 0.0)
        self._target: Vec3 = (0.0, 0.0, 0.0)
        self._active = False

        # Suspend/resume signalling for the clock thread
        self._wake = threading.Condition()
        self._suspended = False
        self._cancelled = threading.Event()

        self.thread: Optional[threading.Thread] = None
        self.ticks = 0

    # ------------------------------------------------------------------
    # Transition state
    # ------------------------------------------------------------------

    def start_transition(self, kind, step: float) -> bool:
        """Begin a transition of ``kind`` advancing ``step`` per tick.

        Returns False (and changes nothing) for an unknown kind or while
        another transition is still running.
        """
        try:
            kind = TransitionKind(kind)
        except ValueError:
            self._log.warning("Invalid transition kind: %r", kind)
            return False

        step = abs(float(step))
        if step == 0.0:
            self._log.warning("Transition step must be non-zero")
            return False

        with self._lock:
            if self._active:
                return False

            camera = self.camera
            if kind == TransitionKind.TRANSLATE_FORWARD:
                current = camera.position()
                target = camera.position_along_look(config.MOVE_DISTANCE)
            elif kind == TransitionKind.TRANSLATE_BACKWARD:
                step = -step
                current = camera.position()
                target = camera.position_along_look(-config.MOVE_DISTANCE)
            elif kind == TransitionKind.ROTATE_LEFT:
                current = (0.0, camera.rotation_y(), 0.0)
                target = (0.0, camera.rotation_with_offset(config.TURN_ANGLE), 0.0)
            else:
                step = -step
                current = (0.0, camera.rotation_y(), 0.0)
                target = (0.0, camera.rotation_with_offset(-config.TURN_ANGLE), 0.0)

            self._kind = kind
            self._step = step
            self._current = current
            self._target = target
            self._active = True

        self._log.debug("Start %s: %s -> %s (step %s)", kind.name, current, target, step)
        return True

    def tick(self) -> bool:
        """Advance the active transition by one step.

        Returns True if work was done. Does nothing while idle or suspended.
        """
        with self._lock:
            if self._suspended or not self._active:
                return False

            self.ticks += 1
            if self._kind.is_translation:
                self._current = self.camera.translate_along_look(self._step)
            else:
                self._current = (0.0, self.camera.rotate_by(self._step), 0.0)

            self._check_transition()
            return True

    def _check_transition(self) -> None:
        """End the transition once every component is within one step of the target."""
        val = abs(self._step)
        if not all(abs(c - t) < val for c, t in zip(self._current, self._target)):
            return

        # Snap onto the target so accumulated float error never survives
        if self._kind.is_translation:
            self.camera.set_position(self._target)
        else:
            self.camera.set_rotation_y(self._target[1])
        self._current = self._target
        self._active = False

        if self._log.isEnabledFor(logging.DEBUG):
            pose = self.camera.pose()
            self._log.debug(
                "End transition %s: position=(%s, %s, %s) yaw=%s look=%s",
                self._kind.name, pose.x, pose.y, pose.z, pose.yaw,
                self.camera.look_direction(),
            )

    def is_active(self) -> bool:
        with self._lock:
            return self._active

    @property
    def kind(self) -> Optional[TransitionKind]:
        with self._lock:
            return self._kind

    @property
    def step(self) -> float:
        with self._lock:
            return self._step

    @property
    def current(self) -> Vec3:
        with self._lock:
            return self._current

    @property
    def target(self) -> Vec3:
        with self._lock:
            return self._target

    def snapshot(self) -> Tuple[Optional[TransitionKind], float, Vec3, Vec3, bool]:
        """(kind, step, current, target, active) read under one lock."""
        with self._lock:
            return self._kind, self._step, self._current, self._target, self._active

    # ------------------------------------------------------------------
    # Clock lifecycle
    # ------------------------------------------------------------------

    def start_clock(self) -> None:
        """Start the periodic clock thread."""
        if self._cancelled.is_set():
            raise RuntimeError("Transition clock was shut down and cannot be restarted")
        if self.thread is not None:
            return

        self.thread = threading.Thread(
            target=self._clock_loop, name="transition-clock", daemon=True
        )
        self.thread.start()

    def pause(self) -> None:
        """Suspend ticking. An in-flight transition resumes where it left off."""
        # Taking the state lock means no tick is mid-way when we return
        with self._lock, self._wake:
            self._suspended = True

    def resume(self) -> None:
        """Wake a suspended clock."""
        with self._lock, self._wake:
            self._suspended = False
            self._wake.notify_all()

    def is_suspended(self) -> bool:
        with self._wake:
            return self._suspended

    @property
    def is_running(self) -> bool:
        return self.thread is not None and self.thread.is_alive()

    def shutdown(self, timeout: float = config.SHUTDOWN_TIMEOUT_S) -> None:
        """Stop the clock for good and wait for its thread to exit."""
        self._cancelled.set()
        with self._wake:
            self._wake.notify_all()

        if self.thread is not None:
            self.thread.join(timeout=timeout)
            if self.thread.is_alive():
                self._log.warning("Transition clock did not stop within %.2fs", timeout)

    def _wait_while_suspended(self) -> bool:
        """Block until resumed or shut down. Returns True if it had to wait."""
        with self._wake:
            if not self._suspended:
                return False
            self._log.debug("Sleep")
            while self._suspended and not self._cancelled.is_set():
                self._wake.wait()
        self._log.debug("Awake")
        return True

    def _clock_loop(self) -> None:
        """Background thread ticking at a fixed rate."""
        if self._cancelled.wait(self.delay_s):
            return

        next_tick = time.monotonic()
        while not self._cancelled.is_set():
            if self._wait_while_suspended():
                # Restart the schedule instead of bursting through missed ticks
                next_tick = time.monotonic()
                continue

            try:
                self.tick()
            except Exception:
                self._log.exception("Transition tick failed")

            next_tick += self.period_s
            delay = next_tick - time.monotonic()
            if delay < 0:
                # Fell behind: keep the rate, drop the backlog
                next_tick = time.monotonic()
                delay = 0.0
            self._cancelled.wait(delay)
