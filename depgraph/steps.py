"""
Step sequencing shared by the blocking and the asyncio graph drivers.

Graph operations are written once, as generators that yield effects:

- ``Call``: invoke a collaborator and send its result back;
- ``Fanout``: run several child step generators and send back their
  results, in order.

``run_sync`` executes the effects in-line, depth first. ``run_async``
awaits collaborator results that are awaitable and runs fan-outs as
concurrent tasks. Exceptions raised by an effect are thrown back into the
generator at the point it yielded, so both drivers share the same error
handling.
"""

import asyncio
import inspect
from typing import Any, Callable, Dict, Generator, List, NamedTuple, Tuple


Steps = Generator[Any, Any, Any]

DEFAULT_PARALLEL = 10


class Call(NamedTuple):
    fn: Callable[..., Any]
    args: Tuple[Any, ...] = ()
    kwargs: Dict[str, Any] = {}


class Fanout(NamedTuple):
    steps: List[Steps]
    limit: int = DEFAULT_PARALLEL


def call(fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Call:
    return Call(fn, args, kwargs)


def run_sync(steps: Steps) -> Any:
    """Run steps to completion, calling every collaborator in-line."""
    value: Any = None
    error = None

    while True:
        try:
            if error is not None:
                effect = steps.throw(error)
            else:
                effect = steps.send(value)
        except StopIteration as stop:
            return stop.value

        value, error = None, None
        try:
            if isinstance(effect, Fanout):
                value = [run_sync(child) for child in effect.steps]
            else:
                value = effect.fn(*effect.args, **effect.kwargs)
        except Exception as exc:
            error = exc


async def run_async(steps: Steps) -> Any:
    """Run steps to completion on the running event loop."""
    value: Any = None
    error = None

    while True:
        try:
            if error is not None:
                effect = steps.throw(error)
            else:
                effect = steps.send(value)
        except StopIteration as stop:
            return stop.value

        value, error = None, None
        try:
            if isinstance(effect, Fanout):
                value = await _fan_out(effect)
            else:
                value = effect.fn(*effect.args, **effect.kwargs)
                if inspect.isawaitable(value):
                    value = await value
        except Exception as exc:
            error = exc


async def _fan_out(fanout: Fanout) -> List[Any]:
    """Run child steps concurrently, at most ``fanout.limit`` at a time."""
    if not fanout.steps:
        return []

    limit = asyncio.Semaphore(max(fanout.limit, 1))

    async def bounded(child: Steps) -> Any:
        async with limit:
            return await run_async(child)

    tasks = [asyncio.ensure_future(bounded(child)) for child in fanout.steps]
    try:
        return await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        # Collect sibling outcomes so none is left unretrieved
        await asyncio.gather(*tasks, return_exceptions=True)
        raise
