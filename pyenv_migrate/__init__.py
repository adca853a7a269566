"""pyenv-migrate — move Homebrew Python installations under pyenv."""

__version__ = "0.1.0"
