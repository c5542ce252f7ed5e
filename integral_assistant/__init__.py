"""
Integral Assistant - Source Package

The conversational engine behind a personal productivity app's chat
widget: it turns free text into tasks, notes, journal entries, ledger
entries, budgets and goals, and answers questions from the user's own
records.

DESIGN PRINCIPLES:
1. Ask for what is missing, one field at a time
2. Money moves atomically or not at all
3. Answers come ONLY from retrieved records
4. Every step must be auditable
5. Storage, search and model providers are swappable
"""

__version__ = "1.0.0"
__author__ = "Integral Assistant Team"
