"""Notifications app package.

Delivers reservation e-mails asynchronously: event handlers queue Celery
tasks, tasks render and send through the notification dispatcher.
"""
