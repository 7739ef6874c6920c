"""Core reconciliation, protection and configuration logic."""
