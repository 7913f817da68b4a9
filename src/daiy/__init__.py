"""
DAIY: a Socratic tutor that reasons in visible passes.

Extended turns decompose the student's problem, critique that analysis and
then answer with a guiding question, streaming the reasoning alongside the
reply.
"""

__version__ = "0.1.0"

from .config import PacingConfig, Settings
from .errors import BadRequest, DaiyError, MissingCredential, StreamCancelled, UnknownProvider, UpstreamFailure
from .turns import TurnOutcome, finalize_turn

__all__ = [
    "BadRequest",
    "DaiyError",
    "MissingCredential",
    "PacingConfig",
    "Settings",
    "StreamCancelled",
    "TurnOutcome",
    "UnknownProvider",
    "UpstreamFailure",
    "finalize_turn",
]
