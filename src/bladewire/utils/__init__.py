"""Shared utilities for bladewire."""
