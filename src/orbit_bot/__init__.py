"""Orbit: Slack assistant routing gh> commands to GitHub and conversations to AnythingLLM."""
