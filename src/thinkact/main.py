"""
thinkact entry point.

This file handles startup concerns (arg-parsing, logging) and launches the appropriate interface:
a single prompt printed to the console, the session API, or the API plus the terminal client.
"""

import argparse
import logging
import sys

from thinkact.config import settings
from thinkact.core.errors import AgentError

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def _init_logging(level: str) -> None:
    numeric = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=numeric,
        format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
        stream=sys.stderr,
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("openai").setLevel(logging.WARNING)


def run_print(prompt: str) -> int:
    """Run one prompt in-process, printing every step.  Returns the exit status."""
    # pylint: disable=import-outside-toplevel
    from thinkact.agent.agent_loop import build_default_agent
    from thinkact.agent.events import ConsoleEventSink

    agent = build_default_agent()
    try:
        agent.run(prompt, ConsoleEventSink())
    except AgentError as exc:
        logger.error("Run failed: %s", exc)
        return 1
    return 0


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------
def main(argv: list[str] | None = None) -> None:
    """
    Main entry point for the thinkact application.

    This function sets up the command-line interface, initializes logging, and runs the agent in
    print, API, or CLI mode.
    """
    if argv is None:
        argv = sys.argv[1:]

    parser = argparse.ArgumentParser(description="Run the thinkact ReAct agent")
    parser.add_argument(
        "--mode",
        choices=["print", "api", "cli"],
        type=str.lower,
        default="print",
        help="Run one prompt and print the steps, serve the session API, or run the API with "
        "an interactive client (default: print)",
    )
    parser.add_argument(
        "--log-level",
        choices=["debug", "info", "warning", "error", "critical"],
        type=str.lower,
        default=settings.LOG_LEVEL,
        help="Logging level (default from env: %(default)s)",
    )
    parser.add_argument("prompt", nargs="*", help="Prompt for print mode")
    args = parser.parse_args(argv)

    # Override log level setting with command-line argument
    settings.LOG_LEVEL = args.log_level

    _init_logging(settings.LOG_LEVEL)

    logger.info("Starting thinkact [%s mode]", args.mode)
    logger.debug("Settings: %s", settings.model_dump(exclude={"OPENAI_API_KEY"}))

    if args.mode == "print":
        prompt = " ".join(args.prompt).strip()
        if not prompt:
            parser.error("print mode needs a prompt")
        sys.exit(run_print(prompt))

    # pylint: disable=import-outside-toplevel
    from thinkact.api.app import run_api

    if args.mode == "api":
        run_api(host="0.0.0.0", port=settings.API_PORT, reload=settings.DEBUG)
        return

    import threading

    from thinkact.client.cli import run_cli

    # Start API server in a separate thread
    api_thread = threading.Thread(
        target=run_api,
        kwargs={
            "host": "127.0.0.1",
            "port": settings.API_PORT,
            "reload": False,  # Reload doesn't work well with threading
            "log_level": "warning",
        },
        daemon=True,
    )
    api_thread.start()

    # Run CLI in main thread
    run_cli()


if __name__ == "__main__":
    main()
