import asyncio

import pytest

from fakes import BlockingGateway, FakeGateway
from riyl_chat.core.session import ChatSessionManager
from riyl_chat.ui.terminal import TerminalChat


def _scripted(*lines):
    queue = list(lines)

    async def read_line(prompt):
        await asyncio.sleep(0)
        return queue.pop(0) if queue else None

    return read_line


def _chat(manager, *lines):
    output: list[str] = []
    return TerminalChat(manager, read_line=_scripted(*lines), write=output.append), output


@pytest.mark.asyncio
async def test_send_prints_reply_and_persists(store, id_factory, clock):
    manager = ChatSessionManager(
        store, FakeGateway("1. Thom Yorke..."), id_factory=id_factory, clock=clock
    )
    chat, output = _chat(manager, "Radiohead", "/quit")

    await chat.run()

    assert "bot> 1. Thom Yorke..." in output
    assert manager.conversations[0].title == "Radiohead"


@pytest.mark.asyncio
async def test_list_open_and_delete_by_position(store, id_factory, clock):
    manager = ChatSessionManager(store, FakeGateway("r1", "r2"), id_factory=id_factory, clock=clock)
    await manager.send("Nick Drake")
    manager.new_conversation()
    await manager.send("Elliott Smith")
    chat, output = _chat(manager)

    assert await chat.handle("/list")
    assert output[-2:] == [
        "*  1. Elliott Smith (2024-05-01 12:00)",
        "   2. Nick Drake (2024-05-01 12:00)",
    ]

    await chat.handle("/list drake")
    assert output[-1] == "   2. Nick Drake (2024-05-01 12:00)"

    await chat.handle("/open 2")
    assert manager.active_id == "conv-1"
    assert output[-2:] == ["you> Nick Drake", "bot> r1"]

    await chat.handle("/delete conv-2")
    assert [c.id for c in manager.conversations] == ["conv-1"]

    await chat.handle("/open 9")
    assert output[-1] == "No conversation '9'."
    assert await chat.handle("/quit") is False


@pytest.mark.asyncio
async def test_switching_while_pending_reports_where_reply_landed(store, id_factory, clock):
    gateway = BlockingGateway()
    manager = ChatSessionManager(store, gateway, id_factory=id_factory, clock=clock)
    chat, output = _chat(manager)

    await chat.handle("Grouper")
    await asyncio.sleep(0)
    await chat.handle("Julianna Barwick")
    assert output[-1] == "Still waiting for the previous reply..."

    await chat.handle("/new")
    gateway.release("1. Tim Hecker")
    await chat.drain()

    assert output[-1] == "[reply ready in 'Grouper']"
    assert manager.conversations[0].messages[-1].text == "1. Tim Hecker"


@pytest.mark.asyncio
async def test_unknown_command_and_blank_line(store, id_factory, clock):
    manager = ChatSessionManager(store, FakeGateway(), id_factory=id_factory, clock=clock)
    chat, output = _chat(manager)

    assert await chat.handle("   ")
    assert output == []
    await chat.handle("/dance")
    assert output[-1] == "Unknown command /dance. /help for commands."
    assert manager.conversations == []
