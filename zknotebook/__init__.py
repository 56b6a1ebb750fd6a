"""Core model of a plain-text Zettelkasten notebook: configuration, notes, links and notebook discovery."""

__version__ = "0.1.0"