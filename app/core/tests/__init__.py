"""Tests for core base classes."""
