"""
PULSEBOARD TEXT REFINEMENT
Best-effort cleanup of status update text before it is submitted

Refinement never blocks a user: when Claude is not configured or the call
fails, the original text comes back unchanged with a note explaining why.
"""

import logging
from dataclasses import dataclass, asdict
from typing import Optional

from .generation import TextGenerator
from .shared.resilience import ServiceNotConfiguredError, ResilienceError

logger = logging.getLogger(__name__)


REFINE_SYSTEM_PROMPT = """Fix spelling and grammar errors in the user's text. Reword unclear sentences to be clearer.
Do not add any new information, ideas, or structure.
Do not make it more professional or formal.
Just fix what the user wrote and make it readable.
Reply with the corrected text only."""

NOT_CONFIGURED_MESSAGE = "AI refinement is not configured. Returning original text."
FAILED_MESSAGE = "AI refinement failed. Returning original text."


@dataclass
class RefinementResult:
    refined: str
    message: Optional[str] = None
    fell_back: bool = False

    def to_dict(self) -> dict:
        return asdict(self)


def refine_status_text(generator: TextGenerator, text: str) -> RefinementResult:
    """Refine text with Claude, falling back to the original on any failure"""
    try:
        refined = generator.generate(REFINE_SYSTEM_PROMPT, text, max_tokens=1000)
    except ServiceNotConfiguredError:
        logger.info("Refinement requested but no generator is configured")
        return RefinementResult(refined=text, message=NOT_CONFIGURED_MESSAGE, fell_back=True)
    except ResilienceError as e:
        logger.warning(f"Refinement failed, returning original text: {e}")
        return RefinementResult(refined=text, message=FAILED_MESSAGE, fell_back=True)
    except Exception as e:
        logger.exception(f"Unexpected refinement error, returning original text: {e}")
        return RefinementResult(refined=text, message=FAILED_MESSAGE, fell_back=True)

    if not refined:
        logger.warning("Refinement returned empty text, keeping original")
        return RefinementResult(refined=text, message=FAILED_MESSAGE, fell_back=True)

    return RefinementResult(refined=refined)
