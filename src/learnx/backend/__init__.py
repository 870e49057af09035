"""Web API exposing the LearnX request handlers."""
