"""
Shared CLI utilities for common command-line patterns.
"""

import argparse
import logging


def configure_logging(verbose=False):
    """Configure root logging the way every entry point does."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s %(message)s",
    )


def add_region_args(parser: argparse.ArgumentParser, help_text: str) -> argparse.ArgumentParser:
    """Add a repeatable --region argument collected into args.regions."""
    parser.add_argument("--region", action="append", dest="regions", help=help_text)
    return parser


def confirm_action(message, skip_prompt=False, exact_match=None):
    """
    Prompt user to confirm an action with flexible confirmation patterns.

    Args:
        message: Prompt message to display to the user
        skip_prompt: If True, skip confirmation and return True
        exact_match: If provided, user must type this exact string to confirm
                    If None, accepts 'y' or 'yes' (case-insensitive)

    Returns:
        bool: True if user confirmed or prompt was skipped, False otherwise
    """
    if skip_prompt:
        return True

    try:
        response = input(message).strip()
    except EOFError:
        print("\nConfirmation not received.")
        return False

    if exact_match is not None:
        return response == exact_match

    return response.lower() in {"y", "yes"}
