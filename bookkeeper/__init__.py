"""
Bookkeeper - Ledger Core Package

The data service layer of a personal-finance record keeper.
Each user owns a private document of categories, bills, reminders
and social posts, plus a friend graph that gates post visibility.

DESIGN PRINCIPLES:
1. One document per user, loaded and rewritten as a whole
2. Referential integrity is enforced on every write
3. No exception crosses the service boundary
4. Every mutation is audited
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Bookkeeper Team"
