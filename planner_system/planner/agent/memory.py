"""
Manages short-term attention memory.
What it does:
- Appends attention items under a type key
- Trims a type down to a window of items
- Swaps a whole type for a new list in one transaction
- Provides ordered snapshots for later steps

And, the main purpose:
Let the agent keep track of what it is currently working on.
"""


from typing import Iterable

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from planner.core.ids import new_id
from planner.core.logging import get_logger
from planner.db.models import AttentionItem
from planner.db.repo import (
    add_attention_item,
    delete_attention_items,
    list_all_attention_items,
    list_attention_items,
    next_attention_idx,
    prune_attention_items,
    replace_attention_items,
)

log = get_logger("agent.memory")


class MemoryService:
    def __init__(self, sessions: async_sessionmaker[AsyncSession]):
        self.sessions = sessions

    async def push_attention_item(self, type_: str, text: str) -> None:
        async with self.sessions() as db:
            item = AttentionItem(
                id=new_id("att"),
                type=type_,
                idx=await next_attention_idx(db, type_),
                text=text,
            )
            await add_attention_item(db, item)

    async def splice_attention_items(self, type_: str, start: int, keep: int) -> None:
        """
        Keep items before `start` and the `keep` items from `start` on;
        everything after that window is deleted.
        """
        if start < 0 or keep < 0:
            raise ValueError("start and keep must be >= 0")
        async with self.sessions() as db:
            items = await list_attention_items(db, type_)
            kept = items[: start + keep]
            dropped = items[start + keep:]
            if dropped:
                log.info(f"Trimming {len(dropped)} attention item(s) from {type_!r}")
            await prune_attention_items(db, kept, dropped)

    async def replace_attention_items(self, type_: str, texts: Iterable[str], keep: int) -> None:
        """Replace `type_` with the first `keep` of `texts`, in one transaction."""
        if keep < 0:
            raise ValueError("keep must be >= 0")
        async with self.sessions() as db:
            items = [
                AttentionItem(id=new_id("att"), type=type_, idx=idx, text=text)
                for idx, text in enumerate(list(texts)[:keep])
            ]
            await replace_attention_items(db, type_, items)

    async def clear_attention_items(self, type_: str | None = None) -> None:
        async with self.sessions() as db:
            await delete_attention_items(db, type_)

    async def get_attention_items(self, type_: str) -> list[str]:
        async with self.sessions() as db:
            return [i.text for i in await list_attention_items(db, type_)]

    async def attention_snapshot(self) -> dict[str, list[str]]:
        async with self.sessions() as db:
            items = await list_all_attention_items(db)
        snap: dict[str, list[str]] = {}
        for i in items:
            snap.setdefault(i.type, []).append(i.text)
        return snap
