# Terminal chat loop: python -m medmentor.client
import asyncio

from medmentor.client.advisor_client import HttpAdvisorClient, HttpConversationStore
from medmentor.client.render import DISCLAIMER, PENDING_INDICATOR, render_message
from medmentor.client.session import ChatSession
from medmentor.core.config import ClientSettings


def _print_latest(session: ChatSession) -> None:
    # Scroll-to-latest: show only the newest message on each change
    if session.is_loading:
        print(PENDING_INDICATOR, flush=True)
    elif session.messages and session.messages[-1].role == "assistant":
        print(render_message(session.messages[-1]) + "\n", flush=True)


async def main() -> None:
    settings = ClientSettings()
    advisor = HttpAdvisorClient(settings.ADVISOR_URL, settings.API_KEY)
    store = HttpConversationStore(settings.ADVISOR_URL, settings.API_KEY)
    session = ChatSession(advisor, store, on_change=_print_latest)

    print(DISCLAIMER + "\n")
    try:
        while True:
            text = (await asyncio.to_thread(input, "You: ")).strip()
            if text in {"exit", "quit"}:
                break
            if not text:
                continue
            await session.send(text)
            for note in list(session.notifications):
                print(f"[{note.title}] {note.description}")
                session.dismiss(note)
    except (EOFError, KeyboardInterrupt):
        pass
    finally:
        await advisor.aclose()
        await store.aclose()


if __name__ == "__main__":
    asyncio.run(main())
