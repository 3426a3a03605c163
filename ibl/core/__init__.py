"""Configuration, caching and errors shared by the iBL client."""
