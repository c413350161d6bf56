"""Interactive terminal chat over a ChatSessionManager."""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Optional

from riyl_chat.core.models import ChatItem, Message
from riyl_chat.core.session import ChatSessionManager, PendingSend
from riyl_chat.core.types import Sender


PROMPT = "riyl> "
HELP_TEXT = """\
Type a band or artist to get recommendations.

  /new            start a new conversation
  /list [term]    list conversations, optionally filtered
  /open N|ID      switch to a conversation
  /delete N|ID    delete a conversation
  /help           show this help
  /quit           exit"""


async def _read_stdin(prompt: str) -> Optional[str]:
    try:
        return await asyncio.to_thread(input, prompt)
    except EOFError:
        return None


class TerminalChat:
    """Line-oriented chat loop.

    Sends run as background tasks so conversations can be listed, switched
    or deleted while a reply is outstanding.
    """

    def __init__(
        self,
        manager: ChatSessionManager,
        read_line: Callable[[str], Awaitable[Optional[str]]] = _read_stdin,
        write: Callable[[str], None] = print,
    ):
        self._manager = manager
        self._read_line = read_line
        self._write = write
        self._tasks: set[asyncio.Task[None]] = set()

    async def run(self) -> None:
        self._write("Ai RIYL Music Recommendations. /help for commands.")
        self._show_active()
        try:
            while True:
                line = await self._read_line(PROMPT)
                if line is None or not await self.handle(line):
                    break
        finally:
            await self.drain()

    async def drain(self) -> None:
        """Wait for in-flight sends; replies are never abandoned."""
        if self._tasks:
            await asyncio.gather(*self._tasks)

    async def handle(self, line: str) -> bool:
        """Process one input line. Returns False when the user quits."""
        text = line.strip()
        if not text:
            return True
        if not text.startswith("/"):
            self._send(line)
            return True

        command, _, arg = text.partition(" ")
        arg = arg.strip()
        match command.lower():
            case "/quit" | "/exit":
                return False
            case "/help":
                self._write(HELP_TEXT)
            case "/new":
                self._manager.new_conversation()
                self._write("Started a new conversation.")
            case "/list":
                self._list(arg)
            case "/open":
                conversation = self._resolve_ref(arg)
                if conversation is None:
                    self._write(f"No conversation '{arg}'.")
                else:
                    self._manager.select_conversation(conversation.id)
                    self._show_active()
            case "/delete":
                conversation = self._resolve_ref(arg)
                if conversation is None:
                    self._write(f"No conversation '{arg}'.")
                else:
                    self._manager.delete_conversation(conversation.id)
                    self._write(f"Deleted '{conversation.title}'.")
            case _:
                self._write(f"Unknown command {command}. /help for commands.")
        return True

    def _send(self, text: str) -> None:
        request = self._manager.begin_send(text)
        if request is None:
            self._write("Still waiting for the previous reply...")
            return
        self._write("...")
        task = asyncio.create_task(self._finish(request))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _finish(self, request: PendingSend) -> None:
        reply = await self._manager.finish_send(request)
        if self._manager.active_id == request.conversation_id:
            self._write(_format_message(reply))
            return
        conversation = self._find(request.conversation_id)
        if conversation is not None:
            self._write(f"[reply ready in '{conversation.title}']")

    def _list(self, term: str) -> None:
        results = self._manager.search(term)
        if not results:
            self._write("No conversations found.")
            return
        positions = {c.id: i for i, c in enumerate(self._manager.conversations, 1)}
        for conversation in results:
            marker = "*" if conversation.id == self._manager.active_id else " "
            date = conversation.created_at.strftime("%Y-%m-%d %H:%M")
            self._write(f"{marker}{positions[conversation.id]:>3}. {conversation.title} ({date})")

    def _show_active(self) -> None:
        conversation = self._manager.active_conversation
        if conversation is None:
            return
        self._write(f"== {conversation.title}")
        for message in self._manager.messages:
            self._write(_format_message(message))

    def _resolve_ref(self, ref: str) -> ChatItem | None:
        """Look a conversation up by 1-based list position or by id."""
        conversations = self._manager.conversations
        if ref.isdigit():
            index = int(ref) - 1
            if 0 <= index < len(conversations):
                return conversations[index]
            return None
        return self._find(ref)

    def _find(self, conversation_id: str) -> ChatItem | None:
        for conversation in self._manager.conversations:
            if conversation.id == conversation_id:
                return conversation
        return None


def _format_message(message: Message) -> str:
    if message.sender == Sender.USER:
        return f"you> {message.text}"
    if message.is_placeholder:
        return "bot> ..."
    return f"bot> {message.text}"
