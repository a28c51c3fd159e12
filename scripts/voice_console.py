#!/usr/bin/env python3
"""Typed console for the CRM voice pipeline.

Runs commands through a VoiceSession with no speech engine attached, so
every command takes the typed-input path. Navigation and theme changes
are printed instead of applied.

Usage:
    python3 scripts/voice_console.py                          # Interactive prompt
    python3 scripts/voice_console.py -c "show me leads"       # One command
    python3 scripts/voice_console.py --parse-only -c "call them"
    python3 scripts/voice_console.py --config config.yaml --threshold 0.4
"""

import argparse
import asyncio
import os
import sys

os.chdir(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
sys.path.insert(0, ".")

from crm_voice.config import load_config
from crm_voice.events import EventType
from crm_voice.handlers import ExecutionContext
from crm_voice.parser import parse_intent
from crm_voice.session import VoiceSession


def print_event(event):
    if event.type is EventType.STATE_CHANGED:
        print(f"  [{event.data.name.lower()}]")


def show_response(response):
    if response is None:
        print("  (no response)")
        return
    print(f"  {response.type.value.upper()}: {response.message}")
    if response.data:
        print(f"  data: {response.data}")
    for action in response.actions:
        print(f"  -> {action.label} ({action.action})")


async def run(session, commands, parse_only):
    for text in commands:
        print(f"> {text}")
        if parse_only:
            intent = parse_intent(text, session.context)
            print(f"  {intent.tag} ({intent.confidence:.1f}) {dict(intent.entities)}")
            continue
        show_response(await session.execute_command(text))


def read_commands():
    while True:
        try:
            line = input("crm> ").strip()
        except (EOFError, KeyboardInterrupt):
            print()
            return
        if line.lower() in ("quit", "exit"):
            return
        if line:
            yield line


def main():
    parser = argparse.ArgumentParser(description="Typed console for CRM voice commands")
    parser.add_argument("-c", "--command", action="append", default=[],
                        help="Command to run (repeatable); omit for a prompt")
    parser.add_argument("--config", default=None, help="Path to config YAML")
    parser.add_argument("--threshold", type=float, default=None,
                        help="Override voice.confidence_threshold")
    parser.add_argument("--parse-only", action="store_true",
                        help="Print parsed intents without executing them")
    parser.add_argument("--states", action="store_true",
                        help="Print session state transitions")
    args = parser.parse_args()

    config = load_config(args.config)
    execution = ExecutionContext(
        navigate=lambda path: print(f"  navigate: {path}"),
        open_terminal=lambda: print("  open terminal"),
        set_theme=lambda mode: print(f"  theme: {mode}"),
    )
    session = VoiceSession(execution=execution, config=config)
    if args.threshold is not None:
        session.update_settings(confidence_threshold=args.threshold)
    if args.states:
        session.add_listener(print_event)

    if args.command:
        asyncio.run(run(session, args.command, args.parse_only))
        return

    print("Type a command, 'help' for examples, 'quit' to exit.")
    print("Try: " + " | ".join(session.suggestions()))
    for text in read_commands():
        asyncio.run(run(session, [text], args.parse_only))


if __name__ == "__main__":
    main()
