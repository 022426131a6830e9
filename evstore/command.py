"""
Command: retry a handler on optimistic concurrency conflicts.

A command handler reads aggregates, decides, and pushes new events. When a
concurrent writer took the version first, the push raises
EventAlreadyExistsError; rerunning the handler re-reads the fresh history
and retries with the next version.
"""

from typing import Any, Awaitable, Callable, Optional, Sequence

from .core.errors import EventAlreadyExistsError, is_event_already_exists_error
from .logging_config import get_logger
from .storage.adapter import StorageAdapter

Handler = Callable[[Any, Sequence[StorageAdapter]], Awaitable[Any]]
OnEventAlreadyExists = Callable[..., Awaitable[None]]


async def _noop(error: EventAlreadyExistsError, attempt_number: int, retries_left: int) -> None:
    return None


class Command:
    """
    Wraps a handler with conflict retries.

    Fields:
        command_id: Name used in logs
        handler: async (input, required_adapters) -> output
        required_adapters: Adapters passed to the handler
        event_already_exists_retries: Extra attempts after the first one
        on_event_already_exists: async hook called after each conflict,
            with attempt_number and retries_left keywords
    """

    def __init__(
        self,
        command_id: str,
        handler: Handler,
        required_adapters: Sequence[StorageAdapter] = (),
        event_already_exists_retries: int = 2,
        on_event_already_exists: Optional[OnEventAlreadyExists] = None,
    ) -> None:
        if event_already_exists_retries < 0:
            raise ValueError("event_already_exists_retries must not be negative")
        self.command_id = command_id
        self.handler = handler
        self.required_adapters = tuple(required_adapters)
        self.event_already_exists_retries = event_already_exists_retries
        self.on_event_already_exists = on_event_already_exists or _noop

    async def run(self, input_: Any) -> Any:
        """
        Run the handler, retrying on EventAlreadyExistsError.

        Raises:
            EventAlreadyExistsError: When retries are exhausted
            Exception: Any other handler error, immediately
        """
        logger = get_logger(__name__, trace_id=self.command_id)
        retries_left = self.event_already_exists_retries
        attempt_number = 1

        while True:
            try:
                return await self.handler(input_, self.required_adapters)
            except Exception as error:
                if not is_event_already_exists_error(error):
                    raise
                await self.on_event_already_exists(
                    error, attempt_number=attempt_number, retries_left=retries_left
                )
                if retries_left == 0:
                    logger.warning(
                        "Command retries exhausted",
                        extra={"aggregate_id": error.aggregate_id, "attempts": attempt_number},
                    )
                    raise
                logger.info(
                    "Command conflicted, retrying",
                    extra={"aggregate_id": error.aggregate_id, "attempt": attempt_number},
                )
                retries_left -= 1
                attempt_number += 1
