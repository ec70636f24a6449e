"""
Live ``disclosureAdded`` subscription.

``DisclosureSubscription`` is an async iterator over decoded
``PublishedTransaction`` records. It polls ``eth_getLogs`` for each new
block range and runs every log through the ``EventCorrelator``. Errors
while polling or decoding are logged and the subscription keeps running;
``stop()`` is the only way to end it.

Example:
    >>> subscription = client.subscribe_disclosure_added(from_block=0)
    >>> async for published in subscription:
    ...     print(published.row_number)
    ...     if published.row_number >= 10:
    ...         subscription.stop()
"""

from __future__ import annotations

import asyncio
import traceback
from typing import Any, AsyncIterator, Awaitable, Callable, Optional, Union

from catena.constants import SUBSCRIPTION_POLL_INTERVAL
from catena.errors import CatenaError
from catena.events import EventCorrelator
from catena.models import PublishedTransaction
from catena.utils.logging import get_logger
from catena.utils.rpc import rpc

_logger = get_logger(__name__)

BlockRef = Union[int, str]
Handler = Callable[[PublishedTransaction], Union[None, Awaitable[None]]]
ErrorHandler = Callable[[Exception], None]


class DisclosureSubscription:
    """Standing watch for one contract event.

    Args:
        w3: Async web3 instance
        contract: Bound contract emitting the event
        correlator: Decoder for each log
        from_block: ``"latest"`` for occurrences mined after the first poll
            only, or a block number to replay past occurrences first
        poll_interval: Seconds between log queries
    """

    def __init__(
        self,
        w3: Any,
        contract: Any,
        correlator: EventCorrelator,
        from_block: BlockRef = "latest",
        poll_interval: float = SUBSCRIPTION_POLL_INTERVAL,
    ) -> None:
        if not (from_block == "latest" or (isinstance(from_block, int) and from_block >= 0)):
            raise ValueError(f"from_block must be 'latest' or a block number, got {from_block!r}")
        self._w3 = w3
        self._contract = contract
        self._correlator = correlator
        self._from_block = from_block
        self._poll_interval = poll_interval
        self._stop_event = asyncio.Event()
        self._next_block: Optional[int] = None
        self.task: Optional[asyncio.Task[None]] = None

    @property
    def stopped(self) -> bool:
        return self._stop_event.is_set()

    def stop(self) -> None:
        """End the subscription. Iteration finishes after the current poll."""
        if not self._stop_event.is_set():
            _logger.info("Stopping subscription", extra={"event": self._correlator.event_name})
        self._stop_event.set()

    async def aclose(self) -> None:
        """Stop and wait for a ``watch`` task to finish."""
        self.stop()
        if self.task is not None:
            await self.task

    def __aiter__(self) -> AsyncIterator[PublishedTransaction]:
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[PublishedTransaction]:
        event_name = self._correlator.event_name
        _logger.debug("Subscription started", extra={"event": event_name, "from_block": self._from_block})
        while not self._stop_event.is_set():
            try:
                events = await self._poll()
            except CatenaError as e:
                _logger.error("Error polling for events", extra={"event": event_name, "error": str(e)})
                events = []

            for event in events:
                if self._stop_event.is_set():
                    break
                try:
                    published = await self._correlator.parse_event(event)
                except CatenaError as e:
                    _logger.error(
                        "Error decoding event",
                        extra={"event": event_name, "error": str(e)},
                    )
                    continue
                yield published

            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=self._poll_interval)
                break
            except asyncio.TimeoutError:
                continue
        _logger.debug("Subscription ended", extra={"event": event_name})

    async def _poll(self) -> list:
        head = await rpc(self._w3.eth.block_number, "eth_blockNumber")
        if self._next_block is None:
            self._next_block = head + 1 if self._from_block == "latest" else int(self._from_block)
        if head < self._next_block:
            return []

        event = getattr(self._contract.events, self._correlator.event_name)()
        logs = await rpc(
            event.get_logs(from_block=self._next_block, to_block=head),
            "eth_getLogs",
        )
        self._next_block = head + 1
        return sorted(logs, key=lambda e: (e["blockNumber"], e.get("logIndex") or 0))

    def watch(self, handler: Handler, on_error: Optional[ErrorHandler] = None) -> "asyncio.Task[None]":
        """Dispatch every occurrence to ``handler`` in a background task.

        ``handler`` may be a plain function or a coroutine function. Handler
        errors are logged (and passed to ``on_error`` if given) without
        ending the subscription.

        Returns:
            The running task; also available as ``self.task``
        """
        if self.task is not None:
            raise RuntimeError("Subscription is already being watched")
        self.task = asyncio.create_task(self._dispatch(handler, on_error))
        return self.task

    async def _dispatch(self, handler: Handler, on_error: Optional[ErrorHandler]) -> None:
        async for published in self:
            try:
                result = handler(published)
                if asyncio.iscoroutine(result):
                    await result
            except Exception as e:
                _logger.error(
                    "Subscription handler failed",
                    extra={
                        "tx_id": published.tx_id,
                        "error": str(e),
                        "traceback": traceback.format_exc(),
                    },
                )
                if on_error is not None:
                    on_error(e)


__all__ = ["DisclosureSubscription"]
