"""
Operation helpers shared by the retry executor and the circuit breaker.

A protected operation is a zero-argument callable. It normally returns an
awaitable (an `async def` function or a lambda around one); a plain return
value is accepted too so synchronous callables can be protected unchanged.
"""

import inspect
from typing import Awaitable, Callable, TypeVar, Union

T = TypeVar("T")

Operation = Callable[[], Union[Awaitable[T], T]]


async def invoke(operation: Operation[T]) -> T:
    """Call `operation` and await its result when it is awaitable."""
    result = operation()
    if inspect.isawaitable(result):
        return await result
    return result


def describe(operation: Callable) -> str:
    """Short operation name for logs."""
    return getattr(operation, "__qualname__", None) or type(operation).__name__
