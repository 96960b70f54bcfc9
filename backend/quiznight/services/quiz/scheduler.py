import logging
import time
from typing import Callable


class QuestionTimer:
    """Deferred auto-end for timed questions.

    Armed timers are never cancelled. When one fires, ``on_fire(code, serial)``
    is called and must re-check that the room still exists, that ``serial``
    is still the room's current question reveal and that answers are still
    accepted.

    - ``spawn(fn, *args)`` starts a background task (``socketio.start_background_task``)
    - ``sleep(seconds)`` is the matching cooperative sleep (``socketio.sleep``)
    - ``enabled=False`` makes ``arm`` a logged no-op (used in TESTING)
    """

    def __init__(self, spawn: Callable, sleep: Callable = time.sleep, logger=None,
                 heartbeat_sec: int = 0, enabled: bool = True):
        self._spawn = spawn
        self._sleep = sleep
        self.logger = logger or logging.getLogger(__name__)
        self.heartbeat_sec = heartbeat_sec
        self.enabled = enabled

    def arm(self, code: str, serial: int, seconds: int, on_fire: Callable[[str, int], None]) -> bool:
        if not self.enabled:
            self.logger.info(f"[timer-skip] room={code} reveal={serial} timers disabled")
            return False
        self.logger.info(f"[timer-set] room={code} reveal={serial} duration={seconds}s")
        self._spawn(self._worker, code, serial, seconds, on_fire)
        return True

    def _worker(self, code: str, serial: int, delay: int, on_fire: Callable[[str, int], None]) -> None:
        hb = self.heartbeat_sec
        if hb and hb > 0:
            slept = 0
            while slept < delay:
                step = min(hb, delay - slept)
                self._sleep(step)
                slept += step
                self.logger.info(f"[timer-heartbeat] room={code} reveal={serial} remaining={max(0, delay - slept)}s")
        else:
            self._sleep(delay)
        self.logger.info(f"[timer-fire] room={code} reveal={serial}")
        try:
            on_fire(code, serial)
        except Exception:
            # faults stay inside this room
            self.logger.exception(f"[timer-error] room={code} reveal={serial}")
