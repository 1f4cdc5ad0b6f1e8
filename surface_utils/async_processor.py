import asyncio
import functools
import logging
from concurrent.futures import ThreadPoolExecutor

from app_config.constants import PerformanceConfig

logger = logging.getLogger("surface_visualizer")

# Global executor
# We use 1 worker to ensure sequential processing of heavy AI tasks
executor = ThreadPoolExecutor(max_workers=PerformanceConfig.INFERENCE_WORKERS,
                              thread_name_prefix="surface-inference")


async def run_blocking(func, *args, **kwargs):
    """
    Run a blocking callable on the shared executor without blocking the event loop.
    Exceptions raised by `func` propagate to the awaiting coroutine.
    """
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(executor, functools.partial(func, *args, **kwargs))
