"""
Turing CLI - Command-line interface for the engine.

Usage:
    turing characters              List the cast
    turing serve [--port 8000]     Run the HTTP API
    turing play [--name Ada]       Play a round in the terminal

Settings come from TURING_* environment variables (see turing.config).
"""

import argparse
import asyncio
import sys

from .config import Settings, configure_logging


PLAY_HELP = """Commands:
  ask <npc> <message>   Question a character
  history <npc>         Show the conversation with a character
  clues                 Show discovered clues
  status                Show stress levels
  accuse <npc>          Name the imposter (ends the round)
  quit                  Leave without accusing"""


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Turing Mystery - Interrogation Game Engine",
        prog="turing",
    )
    parser.add_argument("--log-level", help="Override TURING_LOG_LEVEL")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Characters command
    subparsers.add_parser("characters", help="List the cast")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Bind address")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port")

    # Play command
    play_parser = subparsers.add_parser("play", help="Play a round in the terminal")
    play_parser.add_argument("--name", default="Detective", help="Player name")

    args = parser.parse_args()

    settings = Settings.from_env()
    if args.log_level:
        settings.log_level = args.log_level.upper()
    configure_logging(settings.log_level)

    if args.command == "characters":
        cmd_characters(settings)
    elif args.command == "serve":
        cmd_serve(args, settings)
    elif args.command == "play":
        asyncio.run(cmd_play(args, settings))
    else:
        parser.print_help()
        sys.exit(1)


def cmd_characters(settings):
    """List the cast."""
    from .catalog import create_digital_city_catalog

    catalog = create_digital_city_catalog()
    for character in catalog:
        print(f"{character.id:<10} {character.name:<28} {character.role}")
        print(f"{'':<10} {character.location}")


def cmd_serve(args, settings):
    """Run the HTTP API."""
    try:
        import uvicorn
    except ImportError:
        print("Error: uvicorn not installed. Install with: pip install uvicorn")
        sys.exit(1)

    from .api.app import create_app

    app = create_app(settings=settings)
    uvicorn.run(app, host=args.host, port=args.port, log_level=settings.log_level.lower())


async def cmd_play(args, settings):
    """Play a round in the terminal."""
    from .api.service import InterrogationService

    service = InterrogationService.from_settings(settings)
    try:
        started = service.start_round(args.name).data
        print(started.message)
        print()
        for info in started.characters:
            print(f"  {info.id:<10} {info.name} ({info.role})")
        print()
        print(PLAY_HELP)

        while True:
            try:
                line = await asyncio.to_thread(input, "\n> ")
            except EOFError:
                break
            command, _, rest = line.strip().partition(" ")
            command = command.lower()

            if not command:
                continue
            if command in ("quit", "exit"):
                break
            if command == "help":
                print(PLAY_HELP)
            elif command == "ask":
                await _play_ask(service, started.session_id, rest)
            elif command == "history":
                _play_history(service, started.session_id, rest.strip())
            elif command == "clues":
                _play_clues(service, started.session_id)
            elif command == "status":
                _play_status(service, started.session_id)
            elif command == "accuse":
                if await _play_accuse(service, started.session_id, rest.strip()):
                    break
            else:
                print(f"Unknown command: {command}. Type 'help'.")
    finally:
        close = getattr(service.generator, "aclose", None)
        if close is not None:
            await close()


async def _play_ask(service, session_id, rest):
    character_id, _, message = rest.strip().partition(" ")
    if not character_id or not message.strip():
        print("Usage: ask <npc> <message>")
        return

    result = await service.chat(session_id, character_id, message)
    if not result.success:
        print(f"Error: {result.error}")
        return

    reply = result.data
    print(f"{reply.character_name}: {reply.reply}")
    sign = "+" if reply.stress_change >= 0 else ""
    print(f"  [stress {reply.stress_level}/100 ({sign}{reply.stress_change}), {reply.stress_state}]")
    for clue in reply.new_clues:
        print(f"  [clue] {clue}")


def _play_history(service, session_id, character_id):
    result = service.read_history(session_id, character_id)
    if not result.success:
        print(f"Error: {result.error}")
        return
    if not result.data.history:
        print("No conversation yet.")
    for message in result.data.history:
        speaker = "You" if message.role == "player" else character_id
        print(f"{speaker}: {message.content}")


def _play_clues(service, session_id):
    result = service.read_clues(session_id)
    if not result.success:
        print(f"Error: {result.error}")
        return
    if not result.data.clues:
        print("No clues yet.")
    for i, clue in enumerate(result.data.clues, 1):
        print(f"{i}. {clue}")


def _play_status(service, session_id):
    result = service.get_session(session_id)
    if not result.success:
        print(f"Error: {result.error}")
        return
    if not result.data.characters:
        print("Nobody has been questioned yet.")
    for state in result.data.characters:
        print(
            f"{state.character_id:<10} stress {state.stress_level:>3}/100 "
            f"{state.stress_state:<9} messages {state.message_count}"
        )


async def _play_accuse(service, session_id, character_id):
    """Returns True once the round is over."""
    result = await service.accuse(session_id, character_id)
    if not result.success:
        print(f"Error: {result.error}")
        return False

    outcome = result.data
    print()
    print("CASE SOLVED" if outcome.correct else "CASE CLOSED")
    print(outcome.message)
    print()
    print(outcome.revelation)
    return True


if __name__ == "__main__":
    main()
