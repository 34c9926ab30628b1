"""Noise Monitor Service: reported decibel readings and zone usage."""
