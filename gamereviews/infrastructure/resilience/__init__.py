"""API Resilience Implementations.

Contains the process-wide rate limiter shared by every remote call.
Bounded Context: API Resilience
"""
