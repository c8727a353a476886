"""Command line entry point for practicing word sets."""
import argparse
import logging
import sys
import time
from typing import List, Optional

from examiner.config import ensure_directories, settings
from examiner.errors import ExaminerError
from examiner.languages import LANGUAGES, get_language_by_code
from examiner.logging_config import setup_logging
from examiner.models.base import SessionLocal, init_db
from examiner.models.practice_models import Difficulty, Direction, PracticeConfig, PracticeMode
from examiner.monitoring import start_monitoring
from examiner.services.generator import WordPairGenerator
from examiner.services.ocr_parser import parse_text, validate_parsed_pairs
from examiner.services.practice_modes import (
    FlashcardMode,
    MultipleChoiceMode,
    QuickMode,
    TypingMode,
    create_mode,
)
from examiner.services.practice_service import PracticeService
from examiner.services.speech_service import SpeechService
from examiner.services.word_set_service import WordSetService

logger = logging.getLogger(__name__)

LANGUAGE_CODES = [lang.code for lang in LANGUAGES]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="examiner", description="Practice vocabulary word sets.")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("sets", help="List word sets")

    import_parser = commands.add_parser("import", help="Create a set from a word list file")
    import_parser.add_argument("name")
    import_parser.add_argument("file")
    import_parser.add_argument("--lang-a", choices=LANGUAGE_CODES, required=True)
    import_parser.add_argument("--lang-b", choices=LANGUAGE_CODES, required=True)

    generate_parser = commands.add_parser("generate", help="Create a set from generated pairs")
    generate_parser.add_argument("name")
    generate_parser.add_argument("theme")
    generate_parser.add_argument("--lang-a", choices=LANGUAGE_CODES, required=True)
    generate_parser.add_argument("--lang-b", choices=LANGUAGE_CODES, required=True)
    generate_parser.add_argument("--count", type=int, default=10)
    generate_parser.add_argument(
        "--difficulty", choices=[d.value for d in Difficulty], default=Difficulty.BEGINNER.value
    )

    practice_parser = commands.add_parser("practice", help="Practice a set")
    practice_parser.add_argument("set_id", type=int)
    practice_parser.add_argument(
        "--mode", choices=[m.value for m in PracticeMode], default=settings.practice.default_mode
    )
    practice_parser.add_argument(
        "--direction", choices=[d.value for d in Direction], default=settings.practice.default_direction
    )
    practice_parser.add_argument("--due-only", action="store_true", help="Only pairs due for review")
    practice_parser.add_argument("--speak", action="store_true", help="Render prompts as audio files")
    practice_parser.add_argument("--no-progress", action="store_true", help="Hide the question counter")

    due_parser = commands.add_parser("due", help="Show pairs due for review")
    due_parser.add_argument("set_id", type=int)

    reset_parser = commands.add_parser("reset", help="Reset the progress of a set")
    reset_parser.add_argument("set_id", type=int)

    history_parser = commands.add_parser("history", help="Show practice sessions of a set")
    history_parser.add_argument("set_id", type=int)
    return parser


def _language_name(code: str) -> str:
    language = get_language_by_code(code)
    return language.name if language else code


def list_sets(word_sets: WordSetService) -> None:
    for word_set in word_sets.list_word_sets():
        summary = word_sets.get_set_summary(word_set.id)
        print(
            f"{word_set.id:>4}  {word_set.name}  "
            f"({_language_name(word_set.language_a)} - {_language_name(word_set.language_b)})  "
            f"{summary['pairs']} pairs, {summary['due']} due, {summary['mastered']} mastered"
        )


def import_set(word_sets: WordSetService, name: str, path: str, lang_a: str, lang_b: str) -> None:
    with open(path, encoding="utf-8") as f:
        valid, _ = validate_parsed_pairs(parse_text(f.read()))
    word_set = word_sets.create_word_set(name, lang_a, lang_b, [(p.term_a, p.term_b) for p in valid])
    print(f"Created set {word_set.id} with {len(valid)} pairs")


def generate_set(word_sets: WordSetService, args: argparse.Namespace) -> None:
    generator = WordPairGenerator()
    pairs = generator.generate(
        args.theme,
        _language_name(args.lang_a),
        _language_name(args.lang_b),
        args.count,
        Difficulty(args.difficulty),
    )
    word_set = word_sets.create_word_set(
        args.name, args.lang_a, args.lang_b, [(p["term_a"], p["term_b"]) for p in pairs]
    )
    print(f"Created set {word_set.id} with {len(pairs)} generated pairs")


def _ask(prompt: str) -> str:
    return input(prompt).strip()


def practice(word_sets: WordSetService, args: argparse.Namespace) -> None:
    word_set = word_sets.get_word_set(args.set_id)
    if not word_set:
        print(f"Set {args.set_id} not found")
        return
    pairs = word_sets.get_due_pairs(word_set.id) if args.due_only else word_sets.get_word_pairs(word_set.id)
    if not pairs:
        print("Nothing to practice")
        return

    config = PracticeConfig(
        mode=PracticeMode(args.mode),
        direction=Direction(args.direction),
        show_progress=not args.no_progress,
        enable_speech=args.speak,
    )
    mode = create_mode(pairs, PracticeService(word_sets), config, set_id=word_set.id)
    speech = SpeechService() if config.enable_speech else None

    while not mode.is_complete:
        question = mode.current_question()
        if speech:
            language = word_set.language_a if question.a_to_b else word_set.language_b
            audio = speech.speak(question.prompt, language)
            if audio:
                print(f"[audio: {audio}]")
        started = time.monotonic()

        if isinstance(mode, QuickMode):
            _ask(f"\n{question.prompt}  (enter to reveal) ")
            print(f"  {question.expected}")
            outcome = mode.submit(_ask("  Did you know it? [y/n] ").lower().startswith("y"))
            print(f"  {mode.completed}/{mode.total} mastered")
        else:
            header = f"\n{question.prompt}"
            if config.show_progress:
                round_label = " (retry)" if mode.run.is_retry_round else ""
                header = f"\n[{mode.run.current_index + 1}/{mode.run.total_questions}{round_label}] {question.prompt}"
            if isinstance(mode, FlashcardMode):
                _ask(f"{header}  (enter to reveal) ")
                print(f"  {mode.reveal()}")
                knew_it = _ask("  Did you know it? [y/n] ").lower().startswith("y")
                outcome = mode.submit(knew_it, int((time.monotonic() - started) * 1000))
            elif isinstance(mode, MultipleChoiceMode):
                print(header)
                options = mode.options()
                for number, option in enumerate(options, start=1):
                    print(f"  {number}. {option}")
                choice = _ask("  > ")
                picked = options[int(choice) - 1] if choice.isdigit() and 0 < int(choice) <= len(options) else choice
                outcome = mode.submit(picked, int((time.monotonic() - started) * 1000))
            elif isinstance(mode, TypingMode):
                outcome = None
                while outcome is None:
                    outcome = mode.submit(_ask(f"{header}\n  > "), int((time.monotonic() - started) * 1000))
                if not outcome.is_correct:
                    print(f"  {outcome.feedback}")
                    while not mode.retype(_ask("  Type it once more: ")):
                        pass
                    outcome.feedback = None
            if outcome.feedback:
                print(f"  {outcome.feedback}")
            elif outcome.is_correct:
                print("  Correct!")
            mode.next()

        if outcome.error:
            print(f"  (progress not saved: {outcome.error})")

    stats = mode.stats
    print(f"\nDone! {stats.correct} of {stats.total} correct ({stats.percentage}%)")


def show_due(word_sets: WordSetService, set_id: int) -> None:
    for pair in word_sets.get_due_pairs(set_id):
        print(f"{pair.term_a} - {pair.term_b}  (ease {pair.ease_factor:.2f}, interval {pair.interval}d)")


def show_history(word_sets: WordSetService, set_id: int) -> None:
    for session in word_sets.get_practice_sessions(set_id):
        total = session.total_questions
        percentage = round(session.correct_answers / total * 100) if total else 0
        print(f"{session.completed_at:%Y-%m-%d %H:%M}  {session.mode:<16} {session.correct_answers}/{total} ({percentage}%)")


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    ensure_directories()
    setup_logging("Starting examiner ...", args.log_level)

    if settings.monitoring.port:
        start_monitoring(settings.monitoring.port)

    init_db()
    db = SessionLocal()
    word_sets = WordSetService(db)
    try:
        if args.command == "sets":
            list_sets(word_sets)
        elif args.command == "import":
            import_set(word_sets, args.name, args.file, args.lang_a, args.lang_b)
        elif args.command == "generate":
            generate_set(word_sets, args)
        elif args.command == "practice":
            practice(word_sets, args)
        elif args.command == "due":
            show_due(word_sets, args.set_id)
        elif args.command == "reset":
            count = word_sets.reset_set_stats(args.set_id)
            print(f"Reset {count} pairs")
        elif args.command == "history":
            show_history(word_sets, args.set_id)
    except ExaminerError as e:
        logger.error(str(e))
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except (KeyboardInterrupt, EOFError):
        logger.info("Interrupted, discarding the current session")
        return 130
    finally:
        db.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
