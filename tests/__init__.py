"""
Test suite for the Cloud Foundry task scheduler.
"""
