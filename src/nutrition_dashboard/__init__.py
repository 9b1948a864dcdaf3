"""Nutrition dashboard service."""
