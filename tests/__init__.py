"""Tests for agent-loop."""
