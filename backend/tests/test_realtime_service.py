import asyncio

import pytest

from yda_portal.services.realtime_service import ChangeKind, RealtimeService, RowChange


def _change(table="kpi", kind=ChangeKind.INSERT, **new):
    return RowChange(table, kind, new=new or {"id": "1"})


@pytest.mark.asyncio
async def test_publish_reaches_only_matching_tables():
    service = RealtimeService(queue_size=10)
    kpis = service.subscribe(["kpi"])
    events = service.subscribe(["event"])

    assert service.publish(_change("kpi")) == 1
    assert (await kpis.get()).table == "kpi"
    assert events._queue.empty()


@pytest.mark.asyncio
async def test_overflow_drops_oldest():
    service = RealtimeService(queue_size=2)
    sub = service.subscribe(["kpi"])
    for n in range(3):
        service.publish(_change(id=str(n)))

    assert sub.dropped == 1
    assert (await sub.get()).new["id"] == "1"
    assert (await sub.get()).new["id"] == "2"


@pytest.mark.asyncio
async def test_close_wakes_reader_and_unsubscribes():
    service = RealtimeService(queue_size=5)
    sub = service.subscribe(["kpi"])
    reader = asyncio.create_task(sub.get())
    await asyncio.sleep(0)

    sub.close()
    sub.close()

    assert await asyncio.wait_for(reader, timeout=1) is None
    assert service.subscriber_count == 0
    assert service.publish(_change()) == 0


@pytest.mark.asyncio
async def test_async_iteration_stops_on_close():
    service = RealtimeService(queue_size=5)
    received = []
    async with service.subscribe(["kpi"]) as sub:
        service.publish(_change(id="a"))
        service.publish(_change(id="b"))
        async for change in sub:
            received.append(change.new["id"])
            if len(received) == 2:
                sub.close()
    assert received == ["a", "b"]


def test_row_change_to_dict():
    data = RowChange("post", ChangeKind.DELETE, old={"id": "x"}).to_dict()
    assert data["kind"] == "DELETE"
    assert data["old"] == {"id": "x"}
    assert data["new"] is None
