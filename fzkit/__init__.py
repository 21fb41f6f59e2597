"""Building blocks for an interactive fuzzy finder: tokenizer, shell quoting, utilities and an inline terminal renderer."""

__version__ = "0.1.0"