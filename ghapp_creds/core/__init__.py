"""Configuration, logging and the shared error base."""
