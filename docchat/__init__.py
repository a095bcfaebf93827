"""DocChat: chat with the text of uploaded PDF documents."""

__version__ = "0.1.0"

__all__ = ["__version__"]
