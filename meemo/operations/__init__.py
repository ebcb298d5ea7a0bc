"""Business operations built on top of the models and external services."""
