"""Terminal front end for the chat client.

Usage:
    python -m scripts.chat_cli list
    python -m scripts.chat_cli watch
    python -m scripts.chat_cli new "Explain recursion"
    python -m scripts.chat_cli open <session-id>
"""

import argparse
import asyncio
import sys

import httpx

from t3chat.client.api_client import ChatApiClient
from t3chat.client.chat_controller import ChatController, ChatViewState
from t3chat.client.new_chat import start_new_chat
from t3chat.client.notifier import SessionChangeBus
from t3chat.client.session_store import PendingPromptStore, SessionStore
from t3chat.client.sidebar import SidebarEntry, SidebarLister
from t3chat.client.storage import RedisStorage
from t3chat.core.config import settings
from t3chat.core.redis import close_redis, init_redis


class StreamPrinter:
    """Prints only the newly streamed part of the active assistant turn."""

    def __init__(self) -> None:
        self._printed: dict[str, int] = {}

    def __call__(self, view: ChatViewState) -> None:
        if not view.messages:
            return
        last = view.messages[-1]
        if last.role != "assistant":
            return
        shown = self._printed.get(last.id, 0)
        if len(last.content) < shown:
            # Content was replaced, e.g. by the error message.
            sys.stdout.write("\n" + last.content)
        else:
            sys.stdout.write(last.content[shown:])
        self._printed[last.id] = len(last.content)
        if not view.is_loading:
            sys.stdout.write("\n")
        sys.stdout.flush()


def build_stores() -> tuple[RedisStorage, SessionStore, PendingPromptStore]:
    storage = RedisStorage(init_redis(), settings.storage)
    store = SessionStore(storage, settings.storage.sessions_key, SessionChangeBus())
    pending = PendingPromptStore(storage, settings.storage.pending_prompt_key)
    return storage, store, pending


def print_entries(entries: list[SidebarEntry]) -> None:
    for entry in entries:
        print(f"{entry.session_id}  {entry.updated_label:<12}  {entry.title}")


def list_sessions(store: SessionStore) -> None:
    sidebar = SidebarLister(store, on_select=print, on_new_chat=lambda: None)
    sidebar.mount()
    print_entries(sidebar.entries)
    sidebar.unmount()


def watch_sessions(storage: RedisStorage, store: SessionStore) -> None:
    """Print the list again whenever another process changes it."""
    events = storage.events()
    sidebar = SidebarLister(
        store, on_select=print, on_new_chat=lambda: None, storage_events=events
    )
    sidebar.mount()
    shown: list[SidebarEntry] | None = None
    try:
        while True:
            if sidebar.entries != shown:
                shown = sidebar.entries
                print_entries(shown)
                print()
            events.poll(timeout=1.0)
    except KeyboardInterrupt:
        pass
    finally:
        sidebar.unmount()
        events.close()


async def chat(session_id: str, store: SessionStore, pending: PendingPromptStore) -> None:
    """Run an interactive chat view until EOF or an empty line."""
    async with httpx.AsyncClient(timeout=settings.client.timeout_seconds) as http:
        api = ChatApiClient(http, settings.client.stream_url)
        controller = ChatController.open(session_id, store, api, pending)
        printer = StreamPrinter()
        for message in controller.session.messages:
            prefix = "you" if message.role == "user" else "bot"
            print(f"{prefix}> {message.content}")
        controller.subscribe(printer)
        try:
            if controller.consume_pending_prompt() is not None:
                await controller.wait()
            while True:
                text = await asyncio.to_thread(input, "you> ")
                if not text.strip():
                    break
                if controller.submit_user_message(text) is not None:
                    await controller.wait()
        except EOFError:
            pass
        finally:
            await controller.close()


def main() -> None:
    parser = argparse.ArgumentParser(description="Chat with the streaming model")
    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("list", help="List saved chats")
    subparsers.add_parser("watch", help="List saved chats and follow changes")
    new_parser = subparsers.add_parser("new", help="Start a new chat")
    new_parser.add_argument("text", help="First message")
    open_parser = subparsers.add_parser("open", help="Continue a saved chat")
    open_parser.add_argument("session_id", help="Chat session id")
    args = parser.parse_args()

    storage, store, pending = build_stores()
    try:
        if args.command == "list":
            list_sessions(store)
        elif args.command == "watch":
            watch_sessions(storage, store)
        elif args.command == "new":
            session_id = start_new_chat(args.text, store, pending)
            if session_id is None:
                parser.error("message must not be blank")
            print(f"chat {session_id}")
            asyncio.run(chat(session_id, store, pending))
        else:
            asyncio.run(chat(args.session_id, store, pending))
    finally:
        close_redis()


if __name__ == "__main__":
    main()
