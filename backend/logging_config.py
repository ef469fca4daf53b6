"""
Roger Logging Configuration - Color-Coded Logs

Provides:
- ColorFormatter: ANSI color-coded log output
- Helper functions: log_message_in, log_message_out, log_concern, log_handler
- setup_logging(): Configure application logging

Usage:
    from logging_config import setup_logging, log_message_in, log_concern
    setup_logging()
    logger = logging.getLogger(__name__)
    log_message_in(logger, "I can't sleep", session="ab12", turn=3)
"""

import logging
import sys

# ANSI color codes
COLORS = {
    "RESET": "\033[0m",
    "BOLD": "\033[1m",
    "DIM": "\033[2m",
    # Event colors
    "MSG_IN": "\033[96m",  # Cyan - incoming utterance
    "MSG_OUT": "\033[92m",  # Green - outgoing reply
    "CONCERN": "\033[95m",  # Magenta - concern detection/alerts
    "HANDLER": "\033[93m",  # Yellow - handler routing
    "ERROR": "\033[91m",  # Red - errors
    "WARN": "\033[33m",  # Orange/Yellow - warnings
    "DEBUG": "\033[90m",  # Gray - debug info
}


class ColorFormatter(logging.Formatter):
    """Custom formatter with colors for different log levels."""

    LEVEL_COLORS = {
        logging.DEBUG: COLORS["DEBUG"],
        logging.INFO: COLORS["RESET"],
        logging.WARNING: COLORS["WARN"],
        logging.ERROR: COLORS["ERROR"],
        logging.CRITICAL: COLORS["ERROR"] + COLORS["BOLD"],
    }

    def format(self, record: logging.LogRecord) -> str:
        color = self.LEVEL_COLORS.get(record.levelno, COLORS["RESET"])

        # Format: timestamp [LEVEL] message
        timestamp = self.formatTime(record, "%H:%M:%S")
        level = record.levelname[:4]

        formatted = (
            f"{COLORS['DIM']}{timestamp}{COLORS['RESET']} "
            f"[{color}{level}{COLORS['RESET']}] "
            f"{record.getMessage()}"
        )

        if record.exc_info:
            formatted += "\n" + self.formatException(record.exc_info)

        return formatted


def setup_logging(level: int = logging.INFO) -> None:
    """Configure colored logging for the application."""
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(ColorFormatter())

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers = [handler]

    # Quiet noisy libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


# =============================================================================
# COLORED LOG HELPER FUNCTIONS
# =============================================================================


def log_message_in(logger: logging.Logger, message: str, **context) -> None:
    """Log incoming user utterance.

    Args:
        logger: Logger instance
        message: Utterance text
        **context: Additional context (session, turn, stage, etc.)
    """
    preview = message[:80] + "..." if len(message) > 80 else message
    ctx = " ".join(f"{k}={v}" for k, v in context.items())
    logger.info(f"{COLORS['MSG_IN']}>>> UTTERANCE{COLORS['RESET']} {preview} [{ctx}]")


def log_message_out(
    logger: logging.Logger,
    handler: str,
    concern: str = None,
    delay_ms: int = 0,
) -> None:
    """Log outgoing reply.

    Args:
        logger: Logger instance
        handler: Name of the handler that produced the reply
        concern: Active concern tag value, if any
        delay_ms: Pacing delay attached to the reply
    """
    logger.info(
        f"{COLORS['MSG_OUT']}<<< REPLY{COLORS['RESET']} "
        f"handler={handler} concern={concern or 'none'} delay={delay_ms}ms"
    )


def log_concern(logger: logging.Logger, tag: str, state: str, **context) -> None:
    """Log a concern event.

    Args:
        logger: Logger instance
        tag: Concern tag value
        state: 'detected', 'alerted' or 'suppressed'
        **context: Additional context (severity, etc.)
    """
    ctx = " ".join(f"{k}={v}" for k, v in context.items()) if context else ""
    if state == "alerted":
        logger.warning(f"{COLORS['CONCERN']}!!! CONCERN{COLORS['RESET']} {tag} alerted {ctx}")
    else:
        logger.info(f"{COLORS['CONCERN']}... CONCERN{COLORS['RESET']} {tag} {state} {ctx}")


def log_handler(logger: logging.Logger, name: str, outcome: str) -> None:
    """Log a handler routing decision.

    Args:
        logger: Logger instance
        name: Handler name
        outcome: 'matched', 'no-match' or 'failed'
    """
    logger.debug(f"{COLORS['HANDLER']}--> HANDLER{COLORS['RESET']} {name} {outcome}")
