"""docsync - incremental documentation synchronization

Philosophy:
- Ruthless simplicity
- Brick architecture (self-contained modules)
- Never block the tool that triggered us
- Fail soft on expected outcomes, loudly on real errors

docsync keeps index.md and session overview documents current by invoking an
external generator (the claude CLI by default) after commits and after every
few tool uses inside a session.
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
