"""Laptop sales assistant: retrieval-augmented chat over an in-stock catalog."""
