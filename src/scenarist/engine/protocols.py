"""Browser capability protocols.

These protocols are the contract between Scenarist's engine (extraction and
scenario replay) and the browser that backs it. The Playwright classes in
:mod:`scenarist.engine.browser` implement them; tests substitute in-memory
fakes.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from scenarist.models import NodeSnapshot


@runtime_checkable
class TreeNode(Protocol):
    """A located element together with the snapshot captured when it was found.

    ``query_one`` and ``query_all`` locate descendants and capture their
    snapshots in the same browser call, so a snapshot always describes the
    element as it was at match time.
    """

    @property
    def snapshot(self) -> NodeSnapshot: ...

    @property
    def parent_snapshot(self) -> NodeSnapshot | None: ...

    @property
    def implicit(self) -> bool:
        """True when the node was located without an explicit selector."""
        ...

    async def query_one(self, selector: str) -> TreeNode | None: ...

    async def query_all(self, selector: str) -> list[TreeNode]: ...


@runtime_checkable
class PageActions(Protocol):
    """Page-mutating primitives used to replay a scenario."""

    async def click(self, selector: str) -> None: ...

    async def select(self, selector: str, *values: str) -> None: ...

    async def type(self, selector: str, text: str) -> None: ...

    async def wait_for(self, ms: int) -> None: ...
