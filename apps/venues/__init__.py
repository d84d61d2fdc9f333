"""Venues app package.

Holds football pitches (venues) and their bookable time-slots (sessions).
The session store in ``store.py`` is the only place where slots change
status, and it claims them with a single all-or-nothing update so two
concurrent reservations can never book the same slot.
"""
