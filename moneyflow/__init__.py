"""
MoneyFlow - Source Package

A personal finance tracker: log income and expenses, spread large
expenses over several days, and see how much is safe to spend today.

DESIGN PRINCIPLES:
1. The transaction list is the only source of truth
2. Every figure is recomputed from it for an explicit reference day
3. Bad stored data degrades to defaults, never to a crash
4. The AI only comments; it never touches the numbers
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "MoneyFlow Team"
