"""Stratguard command-line interface."""
