"""schema-gate - publish checks for federated GraphQL schemas."""

__version__ = "0.1.0"
