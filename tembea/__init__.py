"""Tembea pricing: commission, fee split and vendor tier engine."""
