"""Reservations app package.

This app owns the reservation lifecycle: claiming sessions, inviting
players, splitting the bill and flipping a reservation to ``confirmed``
once every required payer has paid. State changes go through the command
handlers in ``application/`` so that domain events are only published
after the database transaction commits.
"""
