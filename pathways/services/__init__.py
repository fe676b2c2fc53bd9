"""Business logic: analytics, risk triage, progress and recommendations."""
