"""Stratguard CLI subcommands."""
