"""
Post-purchase success overlay.

The overlay shows a countdown that hides it automatically after
``countdown_seconds`` ticks; the user may dismiss it earlier. Showing it also
starts a particle-burst (confetti) schedule that always runs its full window,
even when the overlay is dismissed early.
"""
from __future__ import annotations

import asyncio
import random
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from app.core.constants import (
    CONFETTI_DURATION_SECONDS,
    CONFETTI_INITIAL_PARTICLES,
    CONFETTI_INTERVAL_SECONDS,
    CONFETTI_LEFT_RANGE,
    CONFETTI_RIGHT_RANGE,
    CONFETTI_SPREAD,
    CONFETTI_START_VELOCITY,
    CONFETTI_TICKS,
    CONFETTI_Z_INDEX,
    SUCCESS_COUNTDOWN_SECONDS,
    SUCCESS_TICK_SECONDS,
)
from app.domain.checkout_fsm import OverlayState
from logging_config import logger


@dataclass(frozen=True, slots=True)
class ParticleBurst:
    """One confetti burst as handed to the renderer."""

    origin_x: float
    origin_y: float
    particle_count: float
    start_velocity: int = CONFETTI_START_VELOCITY
    spread: int = CONFETTI_SPREAD
    ticks: int = CONFETTI_TICKS
    z_index: int = CONFETTI_Z_INDEX


BurstSink = Callable[[ParticleBurst], None]
Sleep = Callable[[float], Awaitable[None]]


def _log_burst(burst: ParticleBurst) -> None:
    logger.debug(
        "Confetti burst at (%.2f, %.2f) with %.1f particles",
        burst.origin_x,
        burst.origin_y,
        burst.particle_count,
    )


def _log_task_failure(task: asyncio.Task) -> None:
    if task.cancelled():
        return
    error = task.exception()
    if error is not None:
        logger.error("Success overlay task %s failed: %s", task.get_name(), error, exc_info=error)


class ConfettiScheduler:
    """Emits two symmetric bursts per interval with a linearly decaying particle count."""

    def __init__(
        self,
        sink: BurstSink | None = None,
        *,
        duration: float = CONFETTI_DURATION_SECONDS,
        interval: float = CONFETTI_INTERVAL_SECONDS,
        initial_particles: int = CONFETTI_INITIAL_PARTICLES,
        rng: random.Random | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Sleep = asyncio.sleep,
    ):
        self._sink = sink or _log_burst
        self._duration = duration
        self._interval = interval
        self._initial_particles = initial_particles
        self._rng = rng or random.Random()
        self._clock = clock
        self._sleep = sleep
        self._task: asyncio.Task | None = None
        self.bursts_emitted = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start a fresh window; a window already running is replaced."""
        if self.running:
            self._task.cancel()
        self._task = asyncio.create_task(self._run(), name="confetti")
        self._task.add_done_callback(_log_task_failure)

    def _burst(self, x_range: tuple[float, float], particle_count: float) -> ParticleBurst:
        return ParticleBurst(
            origin_x=self._rng.uniform(*x_range),
            origin_y=self._rng.random() - 0.2,
            particle_count=particle_count,
        )

    async def _run(self) -> None:
        animation_end = self._clock() + self._duration
        while True:
            await self._sleep(self._interval)
            time_left = animation_end - self._clock()
            if time_left <= 0:
                break
            particle_count = self._initial_particles * (time_left / self._duration)
            for x_range in (CONFETTI_LEFT_RANGE, CONFETTI_RIGHT_RANGE):
                self._sink(self._burst(x_range, particle_count))
                self.bursts_emitted += 1

    async def wait(self) -> None:
        if self._task is not None:
            await self._task

    async def stop(self) -> None:
        task, self._task = self._task, None
        # a finished task already reported its outcome through _log_task_failure
        if task is None or task.done():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass


class SuccessFlowController:
    """Hidden -> Visible(countdown) -> Hidden."""

    def __init__(
        self,
        *,
        countdown_seconds: int = SUCCESS_COUNTDOWN_SECONDS,
        tick_interval: float = SUCCESS_TICK_SECONDS,
        confetti: ConfettiScheduler | None = None,
        sleep: Sleep = asyncio.sleep,
    ):
        self._countdown_seconds = countdown_seconds
        self._tick_interval = tick_interval
        self._confetti = confetti
        self._sleep = sleep
        self._countdown_task: asyncio.Task | None = None
        self.visible = False
        self.countdown = countdown_seconds

    @property
    def state(self) -> str:
        return OverlayState.VISIBLE if self.visible else OverlayState.HIDDEN

    @property
    def confetti(self) -> ConfettiScheduler | None:
        return self._confetti

    def show(self) -> None:
        """Show the overlay with a fresh countdown and start the confetti."""
        self._cancel_countdown()
        self.visible = True
        self.countdown = self._countdown_seconds
        self._countdown_task = asyncio.create_task(self._run_countdown(), name="success-countdown")
        self._countdown_task.add_done_callback(_log_task_failure)
        if self._confetti is not None:
            self._confetti.start()
        logger.info("Order success overlay shown")

    async def _run_countdown(self) -> None:
        while self.visible and self.countdown > 0:
            await self._sleep(self._tick_interval)
            self.countdown -= 1
        if self.visible:
            self.visible = False
            logger.info("Order success overlay closed by countdown")

    def _cancel_countdown(self) -> None:
        if self._countdown_task is not None and not self._countdown_task.done():
            self._countdown_task.cancel()
        self._countdown_task = None

    def dismiss(self) -> None:
        """User closed the overlay; the confetti keeps going."""
        self._cancel_countdown()
        if self.visible:
            self.visible = False
            logger.info("Order success overlay dismissed at %s", self.countdown)

    async def wait_hidden(self) -> None:
        if self._countdown_task is not None:
            await self._countdown_task

    async def close(self) -> None:
        """Teardown: stop both timers."""
        task = self._countdown_task
        self._cancel_countdown()
        if task is not None:
            try:
                await task
            except asyncio.CancelledError:
                pass
        self.visible = False
        if self._confetti is not None:
            await self._confetti.stop()
