"""SuperCLI - desktop shell for AI/dev CLI tools."""

__version__ = "0.3.0"
