"""CLI entry-point — run a technical mock interview in the terminal.

Usage:
    python -m interview_eval.main --domain DBMS
    # or via pyproject entry-point:  interview
"""

from __future__ import annotations

import argparse
import uuid

from dotenv import load_dotenv
from langgraph.types import Command

from interview_eval.logging_config import setup_logging
from interview_eval.models.initial_state import new_interview_state
from interview_eval.models.session import Difficulty
from interview_eval.questions.bank import LocalQuestionBank
from interview_eval.workflow import ABANDON_SIGNAL, build_graph

load_dotenv()


BANNER = """
╔══════════════════════════════════════════════════════════════╗
║              AI Interview Coach — Mock Interview            ║
║                                                             ║
║  Answer each question as you would in a real interview.     ║
║  Type 'quit' at any time to end the session early.          ║
╚══════════════════════════════════════════════════════════════╝
"""


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    bank = LocalQuestionBank()
    parser = argparse.ArgumentParser(description="Run a mock technical interview.")
    parser.add_argument("--domain", default="DSA", choices=bank.list_domains())
    parser.add_argument(
        "--difficulty",
        default=Difficulty.MEDIUM.value,
        choices=[d.value for d in Difficulty],
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    return parser.parse_args(argv)


def _print_evaluation(evaluation: dict) -> None:
    if not evaluation:
        return
    print(f"\n   Score: {evaluation['score']:.1f}/10 ({evaluation['grade']})")
    summary = evaluation.get("feedback", {}).get("summary")
    if summary:
        print(f"   {summary}")


def main(argv: list[str] | None = None) -> None:
    args = _parse_args(argv)
    setup_logging("DEBUG" if args.verbose else "WARNING")
    print(BANNER)

    graph = build_graph()
    session_id = str(uuid.uuid4())[:8]
    config = {"configurable": {"thread_id": session_id}}

    # First invocation — triggers router → start → interviewer → human_turn (interrupt)
    result = graph.invoke(new_interview_state(session_id, args.domain, args.difficulty), config)

    while True:
        messages = result.get("messages", [])

        if result.get("done"):
            print("\n" + "═" * 60)
            if messages:
                print(messages[-1].content)
            print("═" * 60)
            break

        if messages:
            print(f"\n🎙️  Interviewer: {messages[-1].content}\n")

        try:
            user_input = input("You: ").strip()
        except (EOFError, KeyboardInterrupt):
            user_input = "quit"

        if not user_input:
            continue
        if user_input.lower() == "quit":
            print("\nEnding session early…")
            result = graph.invoke(Command(resume=ABANDON_SIGNAL), config)
            continue

        result = graph.invoke(Command(resume=user_input), config)
        _print_evaluation(result.get("last_evaluation", {}))


if __name__ == "__main__":
    main()
