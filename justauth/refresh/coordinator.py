# Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
# All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
# See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
# Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.

"""
Single-flight coordination of credential renewal.

Renewal credentials are frequently single-use: when several requests
fail authorization at the same moment, only one of them may exchange the
renewal credential. The coordinator runs that exchange once and hands its
outcome to everyone who asked while it was running.
"""

import asyncio
import logging
from typing import Awaitable, Callable, List, Optional

from ..core.types import RenewalState
from ..errors import RenewalFailure

logger = logging.getLogger(__name__)

RenewalFunc = Callable[[], Awaitable[str]]


class RenewalCoordinator:
    """
    Ensures at most one renewal is in flight at a time.

    The first caller to arrive while idle starts the renewal; callers
    arriving while it runs are queued as waiters. When the renewal
    settles, every waiter receives the same token or the same error, in
    arrival order, and the coordinator returns to idle so that a later
    authorization failure starts a fresh cycle.

    The renewal runs as its own task: a caller that stops waiting does
    not cancel it for the others.
    """

    def __init__(self):
        self._state = RenewalState.IDLE
        self._waiters: List[asyncio.Future] = []
        self._task: Optional[asyncio.Task] = None
        self._cycles = 0

    @property
    def state(self) -> RenewalState:
        return self._state

    @property
    def is_refreshing(self) -> bool:
        """Check if a renewal is currently in flight."""
        return self._state is RenewalState.IN_FLIGHT

    @property
    def pending(self) -> int:
        """Number of callers waiting on the current renewal."""
        return sum(1 for waiter in self._waiters if not waiter.done())

    @property
    def cycles(self) -> int:
        """Number of renewal cycles started so far."""
        return self._cycles

    async def request(self, perform_renewal: RenewalFunc) -> str:
        """
        Get the next access token.

        Args:
            perform_renewal: Coroutine function performing the actual
                renewal; only called when no renewal is in flight

        Returns:
            The renewed access token

        Raises:
            Exception: Whatever the renewal raised, shared by every caller
                of the same cycle
        """
        loop = asyncio.get_running_loop()

        if self._state is RenewalState.IDLE:
            self._start(loop, perform_renewal)
        else:
            logger.debug(f"Renewal in flight, queueing waiter #{len(self._waiters) + 1}")

        waiter = loop.create_future()
        self._waiters.append(waiter)
        return await waiter

    def _start(self, loop: asyncio.AbstractEventLoop, perform_renewal: RenewalFunc) -> None:
        # Nothing is mutated until the renewal has been scheduled
        task = asyncio.ensure_future(perform_renewal(), loop=loop)

        self._state = RenewalState.IN_FLIGHT
        self._cycles += 1
        self._task = task
        logger.info(f"Starting renewal cycle {self._cycles}")
        task.add_done_callback(self._settle)

    def _settle(self, task: asyncio.Task) -> None:
        # Drain first so the next failure after this point starts a new cycle
        waiters, self._waiters = self._waiters, []
        self._state = RenewalState.IDLE
        self._task = None

        if task.cancelled():
            error: Optional[BaseException] = RenewalFailure("Renewal was cancelled")
        else:
            error = task.exception()

        if error is None:
            token = task.result()
            logger.info(f"Renewal cycle {self._cycles} succeeded, releasing {len(waiters)} waiter(s)")
        else:
            logger.info(f"Renewal cycle {self._cycles} failed, releasing {len(waiters)} waiter(s): {error}")

        for waiter in waiters:
            # Callers that gave up waiting have cancelled their future
            if waiter.done():
                continue
            if error is None:
                waiter.set_result(token)
            else:
                waiter.set_exception(error)

    async def wait_idle(self) -> None:
        """Wait until no renewal is in flight."""
        while self._task is not None:
            await asyncio.wait({self._task})
            # Let the done callback run
            await asyncio.sleep(0)
