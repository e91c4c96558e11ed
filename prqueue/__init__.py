"""PR review queue: open pull requests classified by the viewer's review obligation."""

__version__ = "0.1.0"
