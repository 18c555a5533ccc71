#!/usr/bin/env python3
"""
Command Line Interface for the EduMagic provider gateway.

Runs the same gateway operations the API exposes, against the keys found in
the current environment / .env file, and shows which provider and key
answered.

COMMANDS:
- keys [--test]              List discovered keys (masked), optionally validate each
- lesson TOPIC [--level ..]  Generate a lesson (Gemini -> OpenAI fallback)
- image PROMPT [--provider]  Resolve an image URL (falls back to the default image)
- explain TEXT               Ask the chat companion
"""
import argparse
import asyncio
import json
import logging
import sys

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from configs import DEFAULT_IMAGE_PROVIDER, KEY_PREFIXES, MAX_KEY_INDEX, ROTATE_ON_FATAL, VERBOSE
from edumagic.gateway import (
    ConversationalAssistant,
    ImageGateway,
    KeyPoolResolver,
    KeyRotationExecutor,
    LessonGenerationError,
    LessonGenerator,
)
from edumagic.gateway.key_check import check_key

console = Console()


# ============================================================
# OUTPUT HELPERS
# ============================================================

def print_header():
    console.print(Panel.fit(
        "[bold cyan]EduMagic[/bold cyan] provider gateway",
        border_style="cyan",
    ))


def print_keys_table(resolver: KeyPoolResolver, results=None):
    table = Table(box=box.SIMPLE, show_header=True)
    table.add_column("Family", style="cyan")
    table.add_column("Variable")
    table.add_column("Key", style="dim")
    if results is not None:
        table.add_column("Check")

    for prefix in KEY_PREFIXES:
        slots = resolver.describe(prefix)
        if not slots:
            row = [prefix, "-", "[red]none configured[/red]"]
            if results is not None:
                row.append("")
            table.add_row(*row)
            continue
        for slot in slots:
            row = [prefix, slot.name, slot.masked_key]
            if results is not None:
                result = results.get(slot.name)
                if result is None:
                    row.append("")
                elif result.success:
                    row.append(f"[green]✓ {result.message}[/green]")
                else:
                    row.append(f"[red]✗ {result.message[:80]}[/red]")
            table.add_row(*row)

    console.print(table)


def _build_executor() -> KeyRotationExecutor:
    return KeyRotationExecutor(KeyPoolResolver(max_index=MAX_KEY_INDEX), rotate_on_fatal=ROTATE_ON_FATAL)


# ============================================================
# COMMANDS
# ============================================================

async def keys_command(test: bool) -> int:
    resolver = KeyPoolResolver(max_index=MAX_KEY_INDEX)
    results = None

    if test:
        results = {}
        for prefix in KEY_PREFIXES:
            for slot, key in zip(resolver.describe(prefix), resolver.resolve(prefix)):
                with console.status(f"Checking {slot.name}..."):
                    results[slot.name] = await check_key(prefix, key)

    print_keys_table(resolver, results)
    if results and not all(r.success for r in results.values()):
        return 1
    return 0


async def lesson_command(topic: str, level: str, language: str) -> int:
    generator = LessonGenerator(_build_executor())
    with console.status(f"Generating lesson on [bold]{topic}[/bold]..."):
        try:
            lesson = await generator.generate_lesson(topic, level, language)
        except LessonGenerationError as e:
            console.print(f"[bold red]Failed to generate lesson:[/bold red] {e}")
            for name, reason in e.reasons.items():
                console.print(f"  [dim]- {name}: {reason}[/dim]")
            return 1

    payload = json.dumps(lesson.to_storage(), indent=2, ensure_ascii=False)
    console.print(Panel(
        Syntax(payload, "json", theme="monokai", word_wrap=True),
        title=f"[bold green]{topic}[/bold green]",
        border_style="green",
    ))
    return 0


async def image_command(prompt: str, provider: str) -> int:
    gateway = ImageGateway(_build_executor())
    with console.status(f"Generating image via {provider}..."):
        result = await gateway.generate_image(prompt, provider)

    style = "yellow" if result.is_fallback else "green"
    console.print(f"[bold {style}]{result.provider}[/bold {style}] {result.image_url}")
    if result.warning:
        console.print(f"[yellow]⚠ {result.warning}[/yellow]")
    return 0


async def explain_command(text: str) -> int:
    assistant = ConversationalAssistant(_build_executor())
    answer = await assistant.explain(text)
    console.print(Panel(answer, border_style="magenta"))
    return 0


# ============================================================
# ENTRY POINT
# ============================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="EduMagic provider gateway - keys, lessons, images, assistant",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  edumagic keys                                 # Masked key inventory
  edumagic keys --test                          # Validate every key
  edumagic lesson "Photosynthesis" --level beginner
  edumagic image "a volcano cross-section" --provider hd-ai-image-gen
  edumagic explain "Chno hiya l-fotosynthese?"
        """
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Show gateway logs (key rotation, probing, polling)"
    )

    sub = parser.add_subparsers(dest="command", required=True)

    keys_parser = sub.add_parser("keys", help="List discovered keys")
    keys_parser.add_argument("--test", action="store_true", help="Validate each key with a minimal call")

    lesson_parser = sub.add_parser("lesson", help="Generate a lesson")
    lesson_parser.add_argument("topic")
    lesson_parser.add_argument("--level", default="beginner")
    lesson_parser.add_argument("--language", default="en")

    image_parser = sub.add_parser("image", help="Generate an image")
    image_parser.add_argument("prompt")
    image_parser.add_argument("--provider", default=DEFAULT_IMAGE_PROVIDER)

    explain_parser = sub.add_parser("explain", help="Ask the chat companion")
    explain_parser.add_argument("text")

    return parser


def main(argv=None):
    """Main entry point for the CLI."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if (args.verbose or VERBOSE) else logging.WARNING,
        format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    print_header()

    try:
        if args.command == "keys":
            code = asyncio.run(keys_command(args.test))
        elif args.command == "lesson":
            code = asyncio.run(lesson_command(args.topic, args.level, args.language))
        elif args.command == "image":
            code = asyncio.run(image_command(args.prompt, args.provider))
        else:
            code = asyncio.run(explain_command(args.text))
    except ValueError as e:
        console.print(f"[bold red]Error: {e}[/bold red]")
        code = 2
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted[/yellow]")
        code = 130

    sys.exit(code)


if __name__ == "__main__":
    main()
