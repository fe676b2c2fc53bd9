"""Smart Learning Pathways backend.

Student assessment storage, class analytics, risk triage and
AI-sourced learning recommendations for teachers.
"""
