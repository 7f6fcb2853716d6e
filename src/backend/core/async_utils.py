"""
Thread offloading for the few blocking calls left in the service layer.

smtplib and google-auth's certificate fetch are synchronous; both go
through ``run_blocking`` so a slow mail server or Google endpoint never
stalls MQTT handling or pump requests.
"""

import asyncio
from functools import partial
from typing import Any, Callable, TypeVar

T = TypeVar("T")


async def run_blocking(func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
    """Call ``func(*args, **kwargs)`` on the default executor and await it."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, partial(func, *args, **kwargs))
