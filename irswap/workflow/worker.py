"""Worker configuration for the trade confirmation workflow.

Starts a Temporal worker with the confirmation workflow and the activities
of one engine registered on the irswap task queue.

Usage::

    import asyncio
    from irswap.workflow.worker import run_worker

    asyncio.run(run_worker(engine))
"""

from __future__ import annotations

from temporalio.client import Client
from temporalio.worker import Worker

from irswap.infra.config import TASK_QUEUE
from irswap.trade.engine import SwapEngine
from irswap.workflow.activities import TradeActivities
from irswap.workflow.converter import IRSWAP_DATA_CONVERTER
from irswap.workflow.trade_workflow import TradeConfirmationWorkflow


def build_worker(client: Client, engine: SwapEngine, task_queue: str = TASK_QUEUE) -> Worker:
    activities = TradeActivities(engine)
    return Worker(
        client,
        task_queue=task_queue,
        workflows=[TradeConfirmationWorkflow],
        activities=activities.all(),
    )


async def run_worker(
    engine: SwapEngine,
    *,
    target_host: str = "localhost:7233",
    namespace: str = "default",
    task_queue: str = TASK_QUEUE,
) -> None:
    """Connect to Temporal and run the worker until interrupted."""
    client = await Client.connect(
        target_host, namespace=namespace,
        data_converter=IRSWAP_DATA_CONVERTER,
    )
    await build_worker(client, engine, task_queue).run()
