"""Minimal terminal demonstration of the support session."""

import asyncio

from support_core import get_default_session


async def main() -> None:
    session = get_default_session()
    print("Assistant:", session.history[0].content)
    if session.configuration_error:
        print("[config]", session.configuration_error)
        return
    while True:
        text = input("You: ")
        if text.strip().lower() in {"exit", "quit"}:
            break
        if text.strip().lower() == "/clear":
            session.reset()
            print("Assistant:", session.history[0].content)
            continue
        if await session.submit(text):
            print("Assistant:", session.history[-1].content)
        if session.last_error:
            print("[error]", session.last_error)


if __name__ == "__main__":
    asyncio.run(main())
