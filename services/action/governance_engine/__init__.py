"""Governance Engine Service: time-boxed votes on zone ceilings."""
