"""Test factories for pushbot models."""
