"""styledshift: lower styled-components templates into static-first style objects."""

__version__ = "0.1.0"
