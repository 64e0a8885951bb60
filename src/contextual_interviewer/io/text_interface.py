"""
Text-based interview interface.

Provides a command-line interface for conducting interviews
via text input/output.
"""

import os
from abc import ABC, abstractmethod

from pydantic import ValidationError

from contextual_interviewer.errors import NoAnswersYet
from contextual_interviewer.orchestrator.interview_orchestrator import SessionOrchestrator
from contextual_interviewer.schemas import (
    CandidateProfile,
    InterviewSummary,
    Question,
    SubmitResponseResult,
)

EXIT_COMMANDS = ("quit", "exit")


class InterviewInterface(ABC):
    """Abstract base class for interview interfaces."""

    @abstractmethod
    async def run(self) -> None:
        """Run the interview interface."""
        ...

    @abstractmethod
    async def send_message(self, message: str) -> None:
        """
        Send a message to the user.

        Args:
            message: Message to display.
        """
        ...

    @abstractmethod
    async def receive_input(self) -> str:
        """
        Receive input from the user.

        Returns:
            User's input string.
        """
        ...


def load_profile(file_path: str) -> CandidateProfile:
    """
    Load a candidate profile from a JSON file.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValidationError: If the file is not a valid profile.
    """
    path = os.path.abspath(os.path.expanduser(file_path))
    with open(path, encoding="utf-8") as f:
        return CandidateProfile.model_validate_json(f.read())


def _split_list(raw: str, separator: str = ",") -> list[str]:
    return [item.strip() for item in raw.split(separator) if item.strip()]


class TextInterface(InterviewInterface):
    """
    Command-line text interface for interviews.

    Provides a simple REPL for conducting interviews via terminal.
    """

    def __init__(
        self,
        orchestrator: SessionOrchestrator,
        profile_path: str | None = None,
        session_id: str | None = None,
    ) -> None:
        """
        Initialize the text interface.

        Args:
            orchestrator: Session orchestrator to use.
            profile_path: JSON profile file; asked interactively if None.
            session_id: Optional identifier for the new session.
        """
        self._orchestrator = orchestrator
        self._profile_path = profile_path
        self._session_id = session_id

    async def run(self) -> None:
        """Run the interactive interview session."""
        print("\n" + "=" * 60)
        print("Welcome to the Contextual Interview System")
        print("=" * 60 + "\n")

        profile = await self._get_profile()

        print("\n" + "-" * 60)
        print("Starting Interview")
        print("-" * 60 + "\n")

        created = await self._orchestrator.create_session(profile, session_id=self._session_id)
        session_id = created.session_id
        print(f"Session {session_id} ({created.planned_question_count} planned questions)")
        await self._ask(created.first_question)

        # Interview loop
        while True:
            candidate_input = await self.receive_input()

            if candidate_input.strip().lower() in EXIT_COMMANDS:
                print("\nEnding interview...")
                await self._orchestrator.complete_session(session_id)
                break

            if not candidate_input.strip():
                continue

            result = await self._orchestrator.submit_response(session_id, candidate_input)
            await self._show_turn(result)

            if result.is_complete:
                await self._show_summary(session_id)
                await self._orchestrator.complete_session(session_id)
                break

    async def send_message(self, message: str) -> None:
        """
        Display a message to the terminal.

        Args:
            message: Message to display.
        """
        print(f"\n{message}\n")

    async def receive_input(self) -> str:
        """
        Get input from the terminal.

        Returns:
            User's input string.
        """
        return await self._get_input("You: ")

    async def _get_input(self, prompt: str) -> str:
        """
        Get input with a specific prompt.

        Args:
            prompt: Prompt to display.

        Returns:
            User's input.
        """
        # Using input() for simplicity; in production, could use aioconsole
        try:
            return input(prompt)
        except EOFError:
            return "exit"

    async def _ask(self, question: Question, acknowledgment: str | None = None) -> None:
        text = f"{acknowledgment} {question.text}" if acknowledgment else question.text
        await self.send_message(f"Interviewer: {text}")

    async def _show_turn(self, result: SubmitResponseResult) -> None:
        if result.next_question is not None:
            await self._ask(result.next_question, result.acknowledgment)
        elif result.acknowledgment:
            await self.send_message(f"Interviewer: {result.acknowledgment}")
        else:
            await self.send_message("Interviewer: That concludes our interview. Thank you!")

    async def _get_profile(self) -> CandidateProfile:
        """Load the profile from file, or collect it interactively."""
        if self._profile_path:
            try:
                return load_profile(self._profile_path)
            except (OSError, ValidationError) as e:
                print(f"Failed to load profile from {self._profile_path}: {e}")
                print("Falling back to interactive setup.")

        print("Please enter candidate information:")
        skills = _split_list(await self._get_input("Skills (comma-separated): "))
        projects = _split_list(await self._get_input("Projects (comma-separated): "))
        work = _split_list(await self._get_input("Work experience (semicolon-separated): "), ";")
        achievements = _split_list(await self._get_input("Achievements (semicolon-separated): "), ";")
        level = (await self._get_input("Experience level [entry/mid/senior]: ")).strip().lower()
        domain = (await self._get_input("Domain [Software Engineering]: ")).strip()

        return CandidateProfile(
            skills=skills,
            projects=projects,
            work_experience=work,
            achievements=achievements,
            experience_level=level if level in ("entry", "mid", "senior") else "mid",
            domain=domain or "Software Engineering",
        )

    async def _show_summary(self, session_id: str) -> None:
        try:
            summary = await self._orchestrator.summarize_session(session_id)
        except NoAnswersYet:
            return
        self._display_summary(summary)

    def _display_summary(self, summary: InterviewSummary) -> None:
        """
        Display the interview summary.

        Args:
            summary: Interview summary to display.
        """
        print("\n" + "=" * 60)
        print("Interview Summary")
        print("=" * 60)
        print(f"\nDomain: {summary.domain}")
        print(f"Duration: {summary.duration_seconds:.0f}s")
        print(f"Questions asked: {summary.questions_asked}")
        print(f"Questions answered: {summary.questions_answered}")
        print(f"Average answer length: {summary.average_response_length} chars")

        if summary.topics_covered:
            print(f"Topics covered: {', '.join(summary.topics_covered)}")

        quality = summary.quality
        print(f"\nConversation quality: {quality.score}/100")
        print(f"  - Responsiveness: {quality.responsiveness}")
        print(f"  - Depth: {quality.depth}")
        print(f"  - Engagement: {quality.engagement}")

        print("\n" + "=" * 60)
