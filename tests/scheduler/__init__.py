"""
Job Scheduler Test Suite.

- Executor handler registry
- JobRun recording
- Cancellation forwarding
"""
