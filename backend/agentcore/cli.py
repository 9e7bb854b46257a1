"""agentcore command line: run the built-in agents over a file or stdin."""

import argparse
import asyncio
import sys

from agentcore.agents.manager import get_agent_manager
from agentcore.exceptions import AgentCoreError
from agentcore.logging_config import setup_logging
from agentcore.models.enums import SummaryFormat, SummaryLength
from agentcore.settings import get_settings


def _read_input(path: str | None) -> str:
    if path and path != "-":
        with open(path, encoding="utf-8") as fh:
            return fh.read()
    return sys.stdin.read()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="agentcore", description="Run LLM agents from the command line.")
    parser.add_argument("--log-level", default=None, help="Logging level (defaults to LOG_LEVEL or INFO).")
    parser.add_argument("--log-file", default=None, help="Also write logs to ./tmp/<log-file>.")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("summarize", help="Summarize text.")
    p.add_argument("input", nargs="?", help="Input file (stdin when omitted or '-').")
    p.add_argument("--length", choices=[v.value for v in SummaryLength], default=SummaryLength.MEDIUM.value)
    p.add_argument("--format", choices=[v.value for v in SummaryFormat], default=SummaryFormat.PARAGRAPH.value)
    p.add_argument("--language", dest="target_language", default=None, help="Language of the summary.")

    p = sub.add_parser("analyze", help="Analyze text.")
    p.add_argument("input", nargs="?")
    p.add_argument("--aspect", dest="aspects", action="append", help="Area to focus on (repeatable).")

    p = sub.add_parser("ask", help="Answer a question, optionally about a context document.")
    p.add_argument("question")
    p.add_argument("--context-file", default=None)

    p = sub.add_parser("translate", help="Translate text.")
    p.add_argument("input", nargs="?")
    p.add_argument("--to", dest="target_language", required=True)
    p.add_argument("--from", dest="source_language", default=None)

    p = sub.add_parser("stream", help="Stream a general-purpose answer to a prompt.")
    p.add_argument("input", nargs="?")
    return parser


async def run(args: argparse.Namespace) -> None:
    manager = get_agent_manager()
    try:
        if args.command == "summarize":
            print(await manager.summarizer.summarize(
                _read_input(args.input),
                length=args.length,
                format=args.format,
                target_language=args.target_language,
            ))
        elif args.command == "analyze":
            print(await manager.analyzer.analyze(_read_input(args.input), args.aspects))
        elif args.command == "ask":
            context = _read_input(args.context_file) if args.context_file else None
            print(await manager.qa.answer(args.question, context))
        elif args.command == "translate":
            print(await manager.translator.translate(
                _read_input(args.input), args.target_language, args.source_language,
            ))
        elif args.command == "stream":
            async for fragment in manager.generator.process_stream(_read_input(args.input)):
                sys.stdout.write(fragment)
                sys.stdout.flush()
            sys.stdout.write("\n")
    finally:
        await manager.close()


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        setup_logging(args.log_level or get_settings().log_level, args.log_file)
        asyncio.run(run(args))
    except AgentCoreError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
