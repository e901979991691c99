"""Session orchestrator: register, login, refresh and logout flows."""
