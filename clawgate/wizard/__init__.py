"""Onboarding wizard stages: defaults, auth, gateway, channels, hooks, metadata."""
