"""
Per-request memo
Repeated identical reads inside one request hit the store once.
"""

from typing import Any, Awaitable, Callable, Dict, Hashable, Tuple


class RequestMemo:
    def __init__(self):
        self._values: Dict[Tuple[Hashable, ...], Any] = {}

    async def load(self, key: Tuple[Hashable, ...], loader: Callable[[], Awaitable[Any]]) -> Any:
        if key in self._values:
            return self._values[key]
        value = await loader()
        self._values[key] = value
        return value

    def __contains__(self, key: Tuple[Hashable, ...]) -> bool:
        return key in self._values

    def __len__(self) -> int:
        return len(self._values)
