"""
Scheduling Domain

Outbound automation for the clinic scheduling platform: appointment
reminders, no-show detection, delivery retries and human-handoff timeouts.
"""
