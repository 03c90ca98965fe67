"""Exam builder API package."""
