from ghostfund.database import ensure_indexes


async def test_ensure_indexes_is_repeatable(db):
    await ensure_indexes(db)
    await ensure_indexes(db)
    await db.projects.insert_one({"_id": "p1", "status": "active"})
    assert await db.projects.count_documents({"status": "active"}) == 1
