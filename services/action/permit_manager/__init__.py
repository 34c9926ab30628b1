"""Permit Manager Service: construction permits and their fees."""
