import asyncio
import logging

from radical.flowcontext import ContextManager
from radical.flowcontext.logging import init_default_logger

logger = logging.getLogger(__name__)


async def main():
    init_default_logger(logging.INFO)

    settings = {
        "userDir": ".",
        "functionGlobalContext": {"requests": 0},
        "contextStorage": {
            "default": "cache",
            "cache": {"module": "memory"},
        },
    }

    async with await ContextManager.create(settings) as contexts:

        async def node(node_id, flow_id):
            ctx = contexts.get_context(node_id, flow_id)

            # Fallback store: synchronous reads and writes
            ctx.global_.set("requests", ctx.global_.get("requests") + 1)

            # Named store through the awaitable entry points
            seen = await ctx.flow.aget("seen") or []
            await ctx.flow.aset("seen", seen + [node_id])
            await ctx.aset("last_run", asyncio.get_running_loop().time())

        await asyncio.gather(*[node(f"n{i}", "f1") for i in range(8)])

        flow = contexts.get_context("f1")
        logger.info(f"Nodes seen by flow f1: {await flow.aget('seen')}")
        logger.info(f"Global request count: {contexts.global_context.get('requests')}")

        # Redeploy with only the first two nodes left
        await contexts.clean({"all_nodes": {"n0": {}, "n1": {}, "f1": {}}})
        keys = await contexts.get_context("n5", "f1").akeys()
        logger.info(f"Node n5 keys after redeploy: {keys}")


if __name__ == "__main__":
    asyncio.run(main())
