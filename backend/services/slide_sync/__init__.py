"""Slide synchronisation for text-driven collections.

This package turns lyrics and sermon notes into slides:
- Normalising pasted rich text into canonical plain text
- Segmenting text into slide-sized blocks on blank lines
- Synthesising styled slide records (with background carry-over)
- Reconciling a collection's slide list against storage
- Sweeping slides no collection references any more
"""

__version__ = "1.0.0"
