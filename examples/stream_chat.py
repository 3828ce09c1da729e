"""Interactive chat that prints completion deltas as they stream in.

Demonstrates:
- Building a ChatCompletionStream from a URL or CHATSTREAM_URL
- Subscribing a listener to data/end/error events
- Offering a function built with @function
- Optional OpenTelemetry tracing with --trace

Usage:
    uv run examples/stream_chat.py --url http://localhost:8000/v1/chat/completions --model Qwen/Qwen3-8B
    CHATSTREAM_URL=... uv run examples/stream_chat.py --api-key $OPENAI_API_KEY --trace
"""

import argparse
import asyncio
import os

from chatstream import (
    ChatCompletionStream,
    DataEvent,
    ErrorEvent,
    Message,
    MessageRole,
    StreamConfig,
    function,
)
from chatstream.log import configure_logging


def setup_tracing(service_name: str):
    from opentelemetry import trace
    from opentelemetry.sdk.resources import SERVICE_NAME, Resource
    from opentelemetry.sdk.trace import TracerProvider
    from opentelemetry.sdk.trace.export import (
        SimpleSpanProcessor, ConsoleSpanExporter,
    )
    from chatstream.instrumentation import instrument

    provider = TracerProvider(
        resource=Resource({SERVICE_NAME: service_name})
    )
    provider.add_span_processor(SimpleSpanProcessor(ConsoleSpanExporter()))
    trace.set_tracer_provider(provider)
    instrument()


@function
def get_time(timezone: str):
    """Return the current time in the given IANA timezone."""


class Printer:
    """Listener that echoes deltas and remembers the reply."""

    def __init__(self):
        self.reply = ""

    def __call__(self, event):
        if isinstance(event, DataEvent):
            chunk = event.data if isinstance(event.data, dict) else {}
            choices = chunk.get("choices") or [{}]
            delta = choices[0].get("delta", {})
            if delta.get("function_call"):
                print(f"[function_call] {delta['function_call']}", flush=True)
            text = delta.get("content") or ""
            self.reply += text
            print(text, end="", flush=True)
        elif isinstance(event, ErrorEvent):
            print(f"\n[error] {event.error}")
        else:
            print()


async def main():
    parser = argparse.ArgumentParser(description="Streaming chat")
    parser.add_argument("--url", default=None)
    parser.add_argument("--model", default=None)
    parser.add_argument("--api-key", default=os.getenv("OPENAI_API_KEY"))
    parser.add_argument("--temperature", type=float, default=None)
    parser.add_argument("--trace", action="store_true")
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args()

    configure_logging("DEBUG" if args.verbose else "WARNING")
    if args.trace:
        setup_tracing("stream-chat")

    overrides = {"url": args.url, "model": args.model}
    config = StreamConfig.from_env(
        **{k: v for k, v in overrides.items() if v}
    )
    headers = {"Authorization": f"Bearer {args.api_key}"} if args.api_key else None
    history = [Message(role=MessageRole.SYSTEM, content="You are helpful.")]
    printer = Printer()

    async with ChatCompletionStream(config) as stream:
        stream.subscribe(printer)
        while True:
            try:
                user_input = input("You: ")
            except (KeyboardInterrupt, EOFError):
                print("\nGoodbye!")
                break

            history.append(Message(role=MessageRole.USER, content=user_input))
            printer.reply = ""
            print("Assistant: ", end="", flush=True)
            await stream.fetch(
                messages=history,
                functions=[get_time],
                temperature=args.temperature,
                headers=headers,
            )
            history.append(
                Message(role=MessageRole.ASSISTANT, content=printer.reply)
            )


if __name__ == "__main__":
    asyncio.run(main())
