"""Quiz Runner: Terminal front end that drives a QuizSession from user input."""

import argparse
import logging
import random
import string
from pathlib import Path
from typing import List, Optional

import yaml

from .feedback_generator import FeedbackGenerator, option_letter
from .question_bank import ALL_TOPICS, CatalogError, QuestionBank
from .quiz_session import QuizSession, SessionState, SessionSummary

logger = logging.getLogger(__name__)

QUIT_COMMANDS = {"quit", "exit", "stop"}
RESET_COMMANDS = {"reset", "restart"}
REPEAT_COMMANDS = {"repeat", "again"}
SCORE_COMMANDS = {"score", "status"}


class QuizRunner:
    """
    Text-mode quiz loop. Owns no quiz state itself: it asks the bank for topics,
    issues commands to the session and renders whatever the session reports.
    """

    def __init__(self, bank: QuestionBank, session: QuizSession,
                 feedback_generator: FeedbackGenerator, max_retries: int = 2):
        self.bank = bank
        self.session = session
        self.feedback = feedback_generator
        self.max_retries = max_retries

    def speak(self, text: str):
        print(f"\n[Quiz]: {text}")

    def listen(self, prompt: str = "[You]: ") -> Optional[str]:
        """Read one line of input; None once the input is closed or interrupted."""
        try:
            return input(f"\n{prompt}").strip()
        except (EOFError, KeyboardInterrupt):
            return None

    def handle_special_commands(self, text: str) -> Optional[str]:
        """Map typed commands to 'quit', 'reset', 'repeat' or 'score'."""
        word = text.lower().strip().strip(string.punctuation + " ")
        if word in QUIT_COMMANDS:
            return "quit"
        if word in RESET_COMMANDS:
            return "reset"
        if word in REPEAT_COMMANDS:
            return "repeat"
        if word in SCORE_COMMANDS:
            return "score"
        return None

    @staticmethod
    def parse_choice(text: str, option_count: int) -> Optional[int]:
        """Convert 'B', 'b)' or '2' to a zero-based option index, or None."""
        cleaned = text.strip().rstrip(").").strip()
        if not cleaned:
            return None
        if cleaned.isdigit():
            index = int(cleaned) - 1
        elif len(cleaned) == 1 and cleaned.isalpha():
            index = string.ascii_uppercase.find(cleaned.upper())
        else:
            return None
        if 0 <= index < option_count:
            return index
        return None

    def _resolve_topic(self, text: str, topics: List[str]) -> Optional[str]:
        if not text or text.lower() == ALL_TOPICS:
            return ALL_TOPICS
        if text.isdigit():
            number = int(text)
            if number == 0:
                return ALL_TOPICS
            if 1 <= number <= len(topics):
                return topics[number - 1]
            return None
        for topic in topics:
            if topic == text:
                return topic
        return None

    def choose_topic(self) -> Optional[str]:
        """Ask the player for a topic. Returns None if they quit or give up."""
        topics = self.bank.topics()
        lines = ["Choose a topic (press Enter for all):", "  0) All Topics"]
        lines += [f"  {i}) {topic}" for i, topic in enumerate(topics, start=1)]
        self.speak("\n".join(lines))

        for _ in range(self.max_retries + 1):
            text = self.listen("[Topic]: ")
            if text is None or self.handle_special_commands(text) == "quit":
                return None
            topic = self._resolve_topic(text, topics)
            if topic is not None:
                return topic
            self.speak(f"Unknown topic '{text}'. Pick a number from the list.")
        return None

    def run_question(self) -> str:
        """Ask the current question until it is graded.

        Returns 'answered', 'reset' or 'quit'.
        """
        view = self.session.current_question_view()
        self.speak(self.feedback.generate_intro(view))

        empty_answers = 0
        while True:
            text = self.listen()
            if text is None:
                return "quit"
            if not text:
                empty_answers += 1
                if empty_answers > self.max_retries:
                    self.speak("No answer received. Ending the quiz.")
                    return "quit"
                self.speak("Please type the letter of your answer.")
                continue

            command = self.handle_special_commands(text)
            if command == "quit":
                return "quit"
            if command == "reset":
                return "reset"
            if command == "repeat":
                self.speak(self.feedback.generate_intro(view))
                continue
            if command == "score":
                self.speak(self.feedback.generate_status(
                    self.session.progress(), self.session.score_so_far()))
                continue

            choice = self.parse_choice(text, len(view.options))
            result = self.session.submit_answer(choice) if choice is not None else None
            if result is None:
                if view.options:
                    last = option_letter(len(view.options) - 1)
                    self.speak(f"'{text}' is not one of the options. Answer with A to {last}.")
                else:
                    self.speak("This question has no options. Type 'reset' to pick another topic.")
                continue

            self.speak(self.feedback.generate(result, view.options))
            self.session.advance()
            return "answered"

    def play(self, topic: str) -> str:
        """Play one run on ``topic``. Returns 'finished', 'empty', 'reset' or 'quit'."""
        start = self.session.start(topic)
        self.speak(self.feedback.generate_start_message(start))
        if start.is_empty:
            return "empty"

        while self.session.state is SessionState.AWAITING_ANSWER:
            outcome = self.run_question()
            if outcome in ("quit", "reset"):
                self.session.reset()
                return outcome
            if self.session.state is SessionState.AWAITING_ANSWER:
                self.speak(self.feedback.generate_status(
                    self.session.progress(), self.session.score_so_far()))

        summary = self.session.summary()
        self.speak(self.feedback.generate_session_summary(summary))
        return "finished"

    def run(self, topic: Optional[str] = None) -> Optional[SessionSummary]:
        """Keep playing runs until the player quits. Returns the last finished summary."""
        self.speak(f"Welcome to the quiz! {self.bank.loaded_count} questions loaded. "
                   f"Type 'quit' at any time to leave.")
        last_summary = None
        while True:
            selected = topic or self.choose_topic()
            topic = None
            if selected is None:
                break
            outcome = self.play(selected)
            if outcome == "finished":
                last_summary = self.session.summary()
            elif outcome == "quit":
                break
            elif outcome == "empty" and self.bank.loaded_count == 0:
                break

        self.speak("Goodbye!")
        return last_summary


def load_config(path: str) -> dict:
    """Read the YAML config file; a missing file means defaults."""
    config_path = Path(path)
    if not config_path.exists():
        return {}
    with open(config_path) as f:
        return yaml.safe_load(f) or {}


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Multiple-choice quiz runner")
    parser.add_argument("--config", default="config.yaml", help="Config file path")
    parser.add_argument("--questions", default=None, help="Question catalog path or URL")
    parser.add_argument("--topic", default=None, help="Start directly on this topic ('all' for every question)")
    parser.add_argument("--seed", type=int, default=None, help="Shuffle seed for a reproducible order")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose logging")
    args = parser.parse_args(argv)

    config = load_config(args.config)
    quiz_cfg = config.get("quiz") or {}
    log_cfg = config.get("logging") or {}

    level_name = "DEBUG" if args.verbose else str(log_cfg.get("level", "WARNING")).upper()
    logging.basicConfig(level=getattr(logging, level_name, logging.WARNING),
                        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")

    source = args.questions or quiz_cfg.get("questions", "data/questions.json")
    seed = args.seed if args.seed is not None else quiz_cfg.get("shuffle_seed")
    topic = args.topic or quiz_cfg.get("topic")

    bank = QuestionBank(fetch_timeout=quiz_cfg.get("fetch_timeout", 10.0))
    try:
        result = bank.load_catalog(source)
    except CatalogError as e:
        logger.error(f"Failed to load questions: {e}")
        print(f"Failed to load questions from {source}: {e}")
        return 1
    logger.info(f"Loaded {result.accepted_count} questions from {source}")

    rng = random.Random(seed) if seed is not None else None
    session = QuizSession(bank, rng=rng)
    runner = QuizRunner(bank, session, FeedbackGenerator())
    runner.run(topic=topic)
    return 0
