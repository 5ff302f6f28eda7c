"""
Terminal driver for the GlowMatch skin quiz.
Signs in from env, offers saved progress, runs the quiz, submits, and waits
for the background enrichment before exiting.
"""

import asyncio
import logging
import os
import sys
from typing import Any, Dict, Optional

from glowmatch_quiz.config import load_settings
from glowmatch_quiz.core.models import QuestionDefinition, QuizPhase, StartOutcome
from glowmatch_quiz.core.session import AuthSession, QuizSessionContext
from glowmatch_quiz.core.state_manager import QuizStateMachine
from glowmatch_quiz.infrastructure.draft_store import QUIZ_DATA_KEY
from glowmatch_quiz.infrastructure.logger import setup_logging

logger = logging.getLogger("QuizCLI")

ENRICHMENT_TIMEOUT_S = 60.0


def confirm(prompt: str) -> bool:
    return input(f"{prompt} [y/N] ").strip().lower() in {"y", "yes"}


def navigate(route: str, state: Dict[str, Any]):
    print(f"\n➡️  {route} {state}")


def ask(question: QuestionDefinition, position: int, total: int) -> Optional[str]:
    """Prompt for one question. Returns the raw input, 'b' for back, or None on EOF."""
    print(f"\n[{position}/{total}] {question.title}")
    if question.subtitle:
        print(f"    {question.subtitle}")
    if question.is_slider:
        for value, label in sorted(question.labels.items()):
            print(f"   {value}. {label}")
        hint = f"{question.min}-{question.max}"
    else:
        for i, opt in enumerate(question.options, start=1):
            print(f"   {i}. {opt.label}")
        hint = f"1-{len(question.options)}"
    try:
        return input(f"Your answer ({hint}, b = back): ").strip().lower()
    except EOFError:
        return None


def parse_answer(question: QuestionDefinition, raw: str):
    if not raw.isdigit():
        return None
    choice = int(raw)
    if question.is_slider:
        answer = question.slide(choice)
        return answer if question.accepts(answer) else None
    if 1 <= choice <= len(question.options):
        return question.choose(question.options[choice - 1].id)
    return None


async def run(machine: QuizStateMachine) -> int:
    context = machine.context

    if not await machine.offer_resume(confirm):
        outcome = await machine.start()
        if outcome != StartOutcome.STARTED:
            print(f"\n✗ {machine.last_error.message if machine.last_error else outcome.value}")
            if outcome == StartOutcome.NO_ATTEMPTS:
                await context.tasks.wait_all(timeout=10)
                if context.referrals.link:
                    print(f"   Share your link: {context.referrals.link}")
            return 1

    total = len(machine.questions)
    while machine.phase == QuizPhase.IN_PROGRESS:
        raw = await asyncio.to_thread(
            ask, machine.current_question, machine.current_question_index + 1, total
        )
        if raw is None:
            print("\n💾 Progress saved, come back any time.")
            machine.autosave.stop()
            return 0
        if raw == "b":
            machine.previous()
            continue
        answer = parse_answer(machine.current_question, raw)
        if answer is None:
            print("   Please pick one of the listed options.")
            continue
        machine.answer(answer)
        await machine.next()

    while machine.last_error is not None:
        print(f"\n✗ {machine.last_error.message} (code: {machine.last_error.code})")
        if not await asyncio.to_thread(confirm, "Try saving again?"):
            return 1
        await machine.submit()

    results = machine.record.results
    print("\n✅ Quiz saved!")
    print(f"   Attempt: {machine.attempt_id}")
    print(f"   Skin type: {results.skin_type}")
    print(f"   Concerns: {', '.join(results.concerns) or '-'}")
    print(f"   Sensitivity: {results.sensitivity_level}/5")

    print("\n⏳ Waiting for AI analysis and report...")
    await context.tasks.wait_all(timeout=ENRICHMENT_TIMEOUT_S)
    mirror = context.store.get(QUIZ_DATA_KEY, {})
    print(f"   Analysis: {'✓' if 'analysis' in mirror else '✗'}")
    print(f"   Report: {mirror.get('reportUrl') or '✗'}")
    return 0


def main() -> int:
    print("=" * 60)
    print("🧴 GlowMatch Skin Quiz")
    print("=" * 60)

    try:
        settings = load_settings()
    except Exception as e:
        print(f"   ✗ Failed to load config: {e}")
        return 1

    setup_logging(logging.WARNING, settings.log_dir)

    auth = AuthSession(
        user_id=os.getenv("GLOWMATCH_USER_ID"),
        token=os.getenv("GLOWMATCH_TOKEN"),
    )
    context = QuizSessionContext.build(settings, auth, navigate=navigate)
    machine = QuizStateMachine(context)

    try:
        return asyncio.run(run(machine))
    except KeyboardInterrupt:
        print("\n💾 Progress saved, come back any time.")
        return 0


if __name__ == "__main__":
    sys.exit(main())
