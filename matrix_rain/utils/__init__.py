"""Shared utilities for Matrix Rain."""
