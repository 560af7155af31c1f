"""Record validation and pets-field normalization.

Raw policy dicts are validated into `Policy` models, then each policy's pets
field (a list or a JSON string) is resolved once into typed `Pet` models so
the aggregates never branch on its shape.
"""
