"""
Helpers for driving the chat gateway from tests.

request() sends an event and returns its ack. Push frames that arrive
before the ack are kept on the communicator so expect_push() can still
find them afterwards.
"""

import asyncio

from rest_framework_simplejwt.tokens import AccessToken

TIMEOUT = 2


def token_for(user) -> str:
    """Encoded access token for a user."""
    return str(AccessToken.for_user(user))


def _pending(communicator) -> list:
    if not hasattr(communicator, "pending_pushes"):
        communicator.pending_pushes = []
    return communicator.pending_pushes


async def request(communicator, event, data=None, frame_id=1) -> dict:
    """Send an event frame and wait for its ack envelope."""
    frame = {"event": event, "id": frame_id}
    if data is not None:
        frame["data"] = data
    await communicator.send_json_to(frame)

    while True:
        reply = await communicator.receive_json_from(timeout=TIMEOUT)
        if "ack" in reply and reply.get("id") == frame_id:
            assert reply["event"] == event
            return reply["ack"]
        _pending(communicator).append(reply)


async def expect_push(communicator, event) -> dict:
    """Return the data of the next push with this event name."""
    pending = _pending(communicator)
    for index, frame in enumerate(pending):
        if frame.get("event") == event:
            return pending.pop(index)["data"]

    while True:
        frame = await communicator.receive_json_from(timeout=TIMEOUT)
        if frame.get("event") == event and "ack" not in frame:
            return frame["data"]
        pending.append(frame)


async def assert_no_push(communicator, event, timeout=0.2):
    """
    Fail if a push with this event name arrives within the timeout.

    Polls with receive_nothing(): a timed-out receive_json_from() would
    cancel the application under test.
    """
    pending = _pending(communicator)
    assert all(frame.get("event") != event for frame in pending)

    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while loop.time() < deadline:
        if await communicator.receive_nothing(timeout=deadline - loop.time()):
            return
        frame = await communicator.receive_json_from(timeout=TIMEOUT)
        assert frame.get("event") != event, f"unexpected {event}: {frame}"
        pending.append(frame)
