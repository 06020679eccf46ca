"""Terminal-independent chat session engine.

Module structure (each module hides one design decision):
- editor.py: how the input line is stored and measured
- conversation.py: how chat messages are held and rewritten
- commands.py: which slash commands exist and what they do
- context.py: what session-wide state is shared and how tokens are counted
- streaming.py: how a reply is fetched and merged while it arrives
"""

from .commands import (
    HELP_TEXT,
    Clear,
    CommandResult,
    Message,
    NotACommand,
    Quit,
    RunSetupWizard,
    dispatch,
    parse,
)
from .context import ProviderFactory, SessionContext, SessionStatus, estimate_tokens
from .conversation import ChatMessage, Conversation, Role
from .editor import InputBuffer, char_width, display_width, head_fitting, tail_fitting
from .streaming import (
    RequestOutcome,
    StreamingCoordinator,
    StreamingState,
    StreamPhase,
    StreamSnapshot,
)

__all__ = [
    "HELP_TEXT",
    "ChatMessage",
    "Clear",
    "CommandResult",
    "Conversation",
    "InputBuffer",
    "Message",
    "NotACommand",
    "ProviderFactory",
    "Quit",
    "RequestOutcome",
    "Role",
    "RunSetupWizard",
    "SessionContext",
    "SessionStatus",
    "StreamPhase",
    "StreamSnapshot",
    "StreamingCoordinator",
    "StreamingState",
    "char_width",
    "dispatch",
    "display_width",
    "estimate_tokens",
    "head_fitting",
    "parse",
    "tail_fitting",
]
