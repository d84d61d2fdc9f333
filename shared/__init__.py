"""
Shared kernel of the GoalTime backend

Domain base classes, value objects (Money, TimeSlot), the domain error
taxonomy, the unit of work and the message bus used by every app.
"""
