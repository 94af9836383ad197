"""Hosted-model parsing adapter."""
