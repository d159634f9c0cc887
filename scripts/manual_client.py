#!/usr/bin/env python3
from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from dataclasses import dataclass
from typing import Any, Dict, Optional

import websockets

logging.basicConfig(level=logging.INFO)

# ManualClient drives one participant from the terminal, mostly for poking at
# a running room server by hand.

HELP = """Commands:
  create                 create a room
  join CODE              join a room (becomes the active room)
  sit SEAT [NAME]        take seat N/E/S/W
  draw | deal | undo     draw one card, auto-deal the rest, undo your last draw
  claim                  pick up the bottom pile (starting player)
  discard ID x8          put 8 cards back as the bottom pile
  reshuffle              redeal while holding fewer than 25 points
  play ID [ID...]        lay cards on the table
  clear                  archive the current trick
  state                  ask for a fresh snapshot
  quit
"""

SIMPLE_COMMANDS = {
    "draw": "draw_card",
    "deal": "auto_deal",
    "undo": "undo_draw",
    "claim": "start_bottom_pile",
    "reshuffle": "reshuffle_round",
    "clear": "clear_trick",
    "state": "request_state",
}


class CommandError(ValueError):
    pass


def parse_command(line: str, code: Optional[str]) -> Optional[Dict[str, Any]]:
    """Turn a console line into an inbound message; None for blank lines."""
    parts = line.split()
    if not parts:
        return None
    verb, args = parts[0].lower(), parts[1:]

    if verb == "create":
        return {"type": "create_room"}
    if verb == "join":
        if len(args) != 1:
            raise CommandError("usage: join CODE")
        return {"type": "join_room", "code": args[0].upper()}

    if code is None:
        raise CommandError("join a room first")

    if verb == "sit":
        if not args:
            raise CommandError("usage: sit SEAT [NAME]")
        message: Dict[str, Any] = {"type": "sit", "code": code, "seat": args[0].upper()}
        if len(args) > 1:
            message["name"] = " ".join(args[1:])
        return message
    if verb in SIMPLE_COMMANDS:
        return {"type": SIMPLE_COMMANDS[verb], "code": code}
    if verb == "discard":
        return {"type": "discard_bottom_pile", "code": code, "card_ids": args}
    if verb == "play":
        if not args:
            raise CommandError("usage: play ID [ID...]")
        return {"type": "play_cards", "code": code, "card_ids": args}
    raise CommandError(f"unknown command {verb!r} (try help)")


def format_card(card: Dict[str, Any]) -> str:
    rank = card.get("rank")
    if rank == 15:
        return f"jk[{card['id']}]"
    if rank == 16:
        return f"JK[{card['id']}]"
    face = {11: "J", 12: "Q", 13: "K", 14: "A"}.get(rank, rank)
    return f"{face}{card.get('suit')}[{card['id']}]"


def render_state(msg: Dict[str, Any]) -> str:
    seats = ", ".join(
        f"{seat}:{msg.get('names', {}).get(holder, holder) if holder else '-'}"
        for seat, holder in msg.get("seats", {}).items()
    )
    lines = [
        f"Room {msg.get('code')} v{msg.get('version')} phase={msg.get('phase')} turn={msg.get('current_turn')}",
        f"Seats: {seats} | you={msg.get('your_seat')}",
        f"Trump={msg.get('trump_suit')} starter={msg.get('starting_player')} "
        f"deck={msg.get('deck_count')} bottom={msg.get('bottom_pile_count')} discards={msg.get('discards_count')}",
    ]
    table = msg.get("table", {})
    plays = [f"{holder}: {' '.join(format_card(c) for c in cards)}" for holder, cards in table.items() if cards]
    if plays:
        lines.append("Table: " + " | ".join(plays))
    hand = msg.get("your_hand", [])
    lines.append(f"Hand ({len(hand)} cards, {msg.get('your_points')} pts): " + " ".join(format_card(c) for c in hand))
    if msg.get("can_reshuffle"):
        lines.append("You may reshuffle this round.")
    return "\n".join(lines)


@dataclass
class ClientState:
    code: Optional[str] = None


class ManualClient:
    def __init__(self, url: str) -> None:
        self.url = url
        self.state = ClientState()

    async def run(self) -> None:
        async with websockets.connect(self.url) as ws:
            reader = asyncio.create_task(self._read_loop(ws))
            try:
                await self._input_loop(ws)
            finally:
                reader.cancel()

    async def _read_loop(self, ws) -> None:
        async for raw in ws:
            msg = json.loads(raw)
            self._print_message(msg)

    async def _input_loop(self, ws) -> None:
        print(HELP)
        while True:
            line = await asyncio.to_thread(input, "> ")
            if line.strip().lower() in {"quit", "exit"}:
                return
            if line.strip().lower() == "help":
                print(HELP)
                continue
            try:
                message = parse_command(line, self.state.code)
            except CommandError as exc:
                print(exc)
                continue
            if message is None:
                continue
            if message["type"] == "join_room":
                self.state.code = message["code"]
            await ws.send(json.dumps(message))

    def _print_message(self, msg: Dict[str, Any]) -> None:
        msg_type = msg.get("type")
        print(f"\n>>> {str(msg_type).upper()}")
        if msg_type == "room_created":
            print(f"Room code: {msg['code']} (join {msg['code']})")
        elif msg_type == "joined_room":
            self.state.code = msg["code"]
            print(f"Joined {msg['code']}")
        elif msg_type == "room_state":
            print(render_state(msg))
        elif msg_type == "error_msg":
            print(f"Error {msg.get('code')}: {msg.get('message')}")
        else:
            print(json.dumps(msg, indent=2))


def main() -> None:
    parser = argparse.ArgumentParser(description="Console client for the tractor room server")
    parser.add_argument("--url", default="ws://localhost:8765")
    args = parser.parse_args()
    try:
        asyncio.run(ManualClient(args.url).run())
    except KeyboardInterrupt:
        sys.exit(0)


if __name__ == "__main__":
    main()
