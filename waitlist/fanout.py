"""Settle-all fan-out for independent side effects.

Each branch is a zero-argument callable run on its own worker thread. A branch
that returns is recorded as a success, a branch that raises or outlives the
shared deadline is recorded as an error, and a missing branch (``None``) is
recorded as not configured. A failing branch never interrupts its siblings and
``settle_all`` itself never raises because of a branch.
"""

import logging
import time
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Callable, Dict, Mapping, Optional

from sinks.models import SinkOutcome


logger = logging.getLogger("waitlist.fanout")

Branch = Optional[Callable[[], object]]


def settle_all(
    branches: Mapping[str, Branch],
    timeout_seconds: float,
) -> Dict[str, str]:
    outcomes: Dict[str, str] = {}
    runnable = {name: branch for name, branch in branches.items() if branch}

    for name, branch in branches.items():
        if branch is None:
            outcomes[name] = SinkOutcome.NOT_CONFIGURED

    if not runnable:
        return outcomes

    executor = ThreadPoolExecutor(
        max_workers=len(runnable),
        thread_name_prefix="sink",
    )
    try:
        futures: Dict[str, Future] = {
            name: executor.submit(branch) for name, branch in runnable.items()
        }
        deadline = time.monotonic() + timeout_seconds

        for name, future in futures.items():
            remaining = max(0.0, deadline - time.monotonic())
            try:
                future.result(timeout=remaining)
            except FutureTimeoutError:
                logger.error(
                    "Sink %s did not finish within %.1fs", name, timeout_seconds
                )
                future.cancel()
                outcomes[name] = SinkOutcome.ERROR
            except Exception as error:
                logger.error("Sink %s failed: %s", name, error)
                outcomes[name] = SinkOutcome.ERROR
            else:
                outcomes[name] = SinkOutcome.SUCCESS
    finally:
        # Do not wait for branches that overran the deadline
        executor.shutdown(wait=False, cancel_futures=True)

    return {name: outcomes[name] for name in branches}


def any_succeeded(outcomes: Mapping[str, str]) -> bool:
    return any(outcome == SinkOutcome.SUCCESS for outcome in outcomes.values())
