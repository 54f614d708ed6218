"""wrash: a restricted interactive wrapper shell around a single base command."""

__version__ = "0.1.0"
