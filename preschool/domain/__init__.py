"""Domain layer: entities, value objects, enums and exceptions.

No dependencies on application or infrastructure.
"""
