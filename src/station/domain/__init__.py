"""
Domain layer.

Value objects, entities and exceptions of the environmental station,
free of transport and framework dependencies.
"""
