"""Test suite for the nutrition dashboard."""
