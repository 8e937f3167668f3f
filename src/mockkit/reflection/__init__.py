"""Reflection over mockable types: passing modes, overloads and descriptors."""
