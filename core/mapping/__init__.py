"""Mapping provider interfaces and implementations."""
