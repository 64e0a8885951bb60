"""
Main entry point for the Contextual Interviewer application.
"""

import argparse
import asyncio
import logging
import sys

from contextual_interviewer.config import get_settings
from contextual_interviewer.io.text_interface import TextInterface
from contextual_interviewer.models.generation_client import GenerationClient
from contextual_interviewer.models.llm_client import BackendUnavailable
from contextual_interviewer.orchestrator.interview_orchestrator import SessionOrchestrator


def setup_logging() -> None:
    """Configure application logging."""
    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="contextual-interviewer")
    parser.add_argument(
        "--profile",
        default=None,
        help="Path to a candidate profile JSON file (asked interactively if omitted)",
    )
    parser.add_argument(
        "--session-id",
        default=None,
        help="Identifier for the new interview session",
    )
    return parser


async def run_interview(argv: list[str] | None = None) -> None:
    """
    Run an interactive interview session.

    This is the main async entry point that initializes all components
    and runs the interview loop.
    """
    args = build_parser().parse_args(argv)
    settings = get_settings()
    logger = logging.getLogger(__name__)

    logger.info("Initializing Contextual Interviewer...")
    logger.debug(f"Using Ollama model {settings.ollama_model} at {settings.ollama_url}")

    orchestrator = SessionOrchestrator(
        generation_client=GenerationClient(settings=settings),
        settings=settings,
    )
    interface = TextInterface(
        orchestrator,
        profile_path=args.profile,
        session_id=args.session_id,
    )

    logger.info("Starting interview session...")
    try:
        await interface.run()
    finally:
        await orchestrator.close()


def main() -> None:
    """Main entry point for the application."""
    setup_logging()

    try:
        asyncio.run(run_interview(sys.argv[1:]))
    except KeyboardInterrupt:
        print("\nInterview session terminated by user.")
        sys.exit(0)
    except BackendUnavailable as e:
        print(f"\nThe interview backend is unavailable: {e}")
        sys.exit(2)
    except Exception as e:
        logging.error(f"Application error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
