"""Deck document model and parser."""

from .models import CodeCell, Deck, DeckMetadata, MarkdownCell, Slide
from .parser import load_deck, parse_cell_options, parse_deck, split_front_matter

__all__ = [
    "CodeCell",
    "Deck",
    "DeckMetadata",
    "MarkdownCell",
    "Slide",
    "load_deck",
    "parse_cell_options",
    "parse_deck",
    "split_front_matter",
]
