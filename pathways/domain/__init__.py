"""Domain layer - Business entities and value objects.

Pydantic models for students, test results, progress tracking and the
derived class analytics. Nothing in here touches storage or the network.
"""
