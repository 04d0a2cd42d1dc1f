"""
Cloud Foundry task job test suite.
"""
