# planner/db/repo.py

from sqlalchemy import select, delete, func
from sqlalchemy.ext.asyncio import AsyncSession

from planner.db.models import AttentionItem


async def list_attention_items(db: AsyncSession, type_: str) -> list[AttentionItem]:
    res = await db.execute(
        select(AttentionItem).where(AttentionItem.type == type_).order_by(AttentionItem.idx)
    )
    return list(res.scalars().all())


async def list_all_attention_items(db: AsyncSession) -> list[AttentionItem]:
    res = await db.execute(
        select(AttentionItem).order_by(AttentionItem.type, AttentionItem.idx)
    )
    return list(res.scalars().all())


async def next_attention_idx(db: AsyncSession, type_: str) -> int:
    res = await db.execute(
        select(func.max(AttentionItem.idx)).where(AttentionItem.type == type_)
    )
    last = res.scalar_one_or_none()
    return 0 if last is None else last + 1


async def add_attention_item(db: AsyncSession, item: AttentionItem) -> AttentionItem:
    db.add(item)
    await db.commit()
    await db.refresh(item)
    return item


async def prune_attention_items(
    db: AsyncSession, keep: list[AttentionItem], drop: list[AttentionItem]
) -> None:
    """Delete `drop`, renumber `keep` from 0 in the given order, one commit."""
    for item in drop:
        await db.delete(item)
    for idx, item in enumerate(keep):
        item.idx = idx
    await db.commit()


async def delete_attention_items(db: AsyncSession, type_: str | None = None) -> None:
    stmt = delete(AttentionItem)
    if type_ is not None:
        stmt = stmt.where(AttentionItem.type == type_)
    await db.execute(stmt)
    await db.commit()


async def replace_attention_items(db: AsyncSession, type_: str, items: list[AttentionItem]) -> None:
    """Swap every row of `type_` for `items`; nothing changes unless the single commit succeeds."""
    await db.execute(delete(AttentionItem).where(AttentionItem.type == type_))
    db.add_all(items)
    await db.commit()
