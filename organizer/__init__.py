"""
Personal Organizer - Source Package

A small personal organizer that keeps four independent record
collections: tasks, notes, financial transactions and trader balances.

DESIGN PRINCIPLES:
1. Validate first, mutate second
2. Persist first, commit to memory second
3. No silent corrections
4. Every mutation is auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Personal Organizer Team"
