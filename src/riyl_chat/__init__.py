"""riyl-chat: music recommendation chat over an LLM completion gateway."""

__version__ = "0.1.0"
