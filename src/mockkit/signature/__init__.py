"""Signature keys identifying method overloads."""
