"""sessionizer - tmux sessions derived from your file system

Philosophy:
- Ruthless simplicity
- Brick architecture (self-contained modules)
- Pure core, thin I/O edges (tmux and fzf are injected collaborators)
- Fail fast with helpful guidance

sessionizer scans configured directories, merges them with the sessions you
used recently, lets you pick one through fzf and creates or switches to the
matching tmux session.
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
