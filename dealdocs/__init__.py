"""Dealership deal paperwork: rules, document filling and storage services."""
