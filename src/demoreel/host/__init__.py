"""
Host collaborators for demoreel.

    - Host / Operator: the protocols the sequencer consumes
    - TmuxHost: presents inside a tmux session (demoreel.host.tmux)
    - RichOperator: prompts on the presenter's terminal (demoreel.host.console)
"""

from demoreel.host.base import FileRegion, Host, Operator

__all__ = [
    "FileRegion",
    "Host",
    "Operator",
]
