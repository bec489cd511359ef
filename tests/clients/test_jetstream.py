import asyncio
import json
from types import SimpleNamespace

import aiohttp

from like_labeler.clients.jetstream import JetstreamClient

LIKE = "app.bsky.feed.like"


def _client(creates, deletes, **kwargs):
    async def on_create(did, rkey, record):
        creates.append((did, rkey, record))

    async def on_delete(did, rkey):
        deletes.append((did, rkey))

    return JetstreamClient(
        "wss://jetstream.test/subscribe", [LIKE], on_create, on_delete, **kwargs
    )


def _commit(operation, rkey="r1", collection=LIKE, record=None, time_us=1):
    commit = {"rev": "x", "operation": operation, "collection": collection, "rkey": rkey}
    if record is not None:
        commit["record"] = record
    return {"did": "did:plc:a", "time_us": time_us, "kind": "commit", "commit": commit}


def test_dispatch_routes_create_and_delete():
    creates, deletes = [], []
    client = _client(creates, deletes)
    record = {"subject": {"uri": "at://x/post/1"}}

    asyncio.run(client.dispatch(_commit("create", record=record, time_us=10)))
    asyncio.run(client.dispatch(_commit("delete", time_us=11)))

    assert creates == [("did:plc:a", "r1", record)]
    assert deletes == [("did:plc:a", "r1")]
    assert client.cursor == 11


def test_dispatch_ignores_irrelevant_events():
    creates, deletes = [], []
    client = _client(creates, deletes)

    asyncio.run(client.dispatch({"did": "did:plc:a", "kind": "identity", "identity": {}}))
    asyncio.run(client.dispatch(_commit("create", collection="app.bsky.feed.post", record={})))
    asyncio.run(client.dispatch(_commit("update", record={})))
    asyncio.run(client.dispatch({"kind": "commit", "commit": {"collection": LIKE, "operation": "delete"}}))

    assert creates == []
    assert deletes == []


def test_dispatch_contains_callback_errors():
    async def exploding(*args):
        raise RuntimeError("boom")

    client = JetstreamClient("wss://jetstream.test/subscribe", [LIKE], exploding, exploding)

    asyncio.run(client.dispatch(_commit("delete")))


def test_build_url_includes_collections_and_cursor():
    client = _client([], [])
    assert client.build_url() == (
        "wss://jetstream.test/subscribe?wantedCollections=app.bsky.feed.like"
    )

    client.cursor = 1725911162329308
    assert client.build_url().endswith("&cursor=1725911162329308")


class FakeWebSocket:
    def __init__(self, frames):
        self.frames = frames
        self.closed = False

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False

    def __aiter__(self):
        async def gen():
            for frame in self.frames:
                if self.closed:
                    return
                yield SimpleNamespace(type=aiohttp.WSMsgType.TEXT, data=frame)

        return gen()

    async def close(self):
        self.closed = True


class FakeSession:
    def __init__(self, ws, urls):
        self.ws = ws
        self.urls = urls

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False

    def ws_connect(self, url, **kwargs):
        self.urls.append(url)
        return self.ws


def test_start_consumes_frames_until_closed():
    creates, deletes, urls = [], [], []
    frames = [
        json.dumps(_commit("create", record={"subject": {"uri": "at://x/post/1"}})),
        "not json",
        json.dumps(_commit("delete", rkey="r2")),
    ]
    ws = FakeWebSocket(frames)
    holder = {}

    async def on_create(did, rkey, record):
        creates.append((did, rkey))

    async def on_delete(did, rkey):
        deletes.append((did, rkey))
        await holder["client"].close()

    client = JetstreamClient(
        "wss://jetstream.test/subscribe",
        [LIKE],
        on_create,
        on_delete,
        session_factory=lambda: FakeSession(ws, urls),
    )
    holder["client"] = client

    asyncio.run(asyncio.wait_for(client.start(), timeout=5))

    assert creates == [("did:plc:a", "r1")]
    assert deletes == [("did:plc:a", "r2")]
    assert ws.closed
    assert client.closed
    assert len(urls) == 1


def test_close_waits_for_running_callback_and_drops_later_events():
    creates, deletes = [], []
    finished = []

    async def on_create(did, rkey, record):
        creates.append((did, rkey))

    async def slow_delete(did, rkey):
        deletes.append((did, rkey))
        await asyncio.sleep(0.05)
        finished.append((did, rkey))

    client = JetstreamClient("wss://jetstream.test/subscribe", [LIKE], on_create, slow_delete)

    async def scenario():
        running = asyncio.create_task(client.dispatch(_commit("delete")))
        await asyncio.sleep(0)
        await client.close()
        assert finished == [("did:plc:a", "r1")]
        await running
        await client.dispatch(_commit("create", rkey="r2", record={}))

    asyncio.run(scenario())

    assert deletes == [("did:plc:a", "r1")]
    assert creates == []
